import log_retransform as lrt
import numpy as np
import pandas as pd
import statsmodels.formula.api as smf


# House-price style data: price = exp(2 + 0.5*x1 - 0.3*x2 + u), u ~ N(0, 0.8^2)
data = lrt.generate_log_linear_data(
    n_samples=300,
    coef=(0.5, -0.3),
    intercept=2.0,
    sigma=0.8,            # Strong skew -> large retransformation bias
    missing_frac=0.05,    # Some rows dropped by the fit
    response_name='price',
    random_state=42
)

res = smf.ols('np.log(price) ~ x1 + x2', data=data).fit()

# In-sample: both correction factors, corrected predictions and the console report
result = lrt.predict_level(res, data, 'price', full=True, verbose=True)
print(result.predictions.head())

print(f"\nTheoretical factor exp(sigma^2/2): {lrt.lognormal_correction(0.8):.4f}")
print(f"Mean price:          {data['price'].mean():.2f}")
print(f"Mean naive forecast: {result.predictions['Prev_Ingenua'].mean():.2f}")
print(f"Mean corrected:      {result.predictions['Previsto_Wooldridge'].mean():.2f}")

# New data: the factor still comes from the estimation sample
new_data = pd.DataFrame({'x1': [0.0, 1.0], 'x2': [0.0, -0.5]})
rt = lrt.LogRetransformer(confidence_level=0.99).fit(res, data, 'price')
print(rt.predict(new_data))

result.plot_predictions(save_path="scripts/demo/simple_usage_predictions.png")
