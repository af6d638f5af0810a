"""
Test suite for fitted-model adapters and row alignment.
"""
import numpy as np
import pandas as pd
import pytest
import statsmodels.api as sm
import statsmodels.formula.api as smf

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from log_retransform import (
    LogRetransformer,
    StatsmodelsAdapter,
    ArrayAdapter,
    as_log_model,
    predict_level,
    generate_log_linear_data,
    AlignmentError,
)


class TestStatsmodelsAdapter:
    """Tests for statsmodels regression results."""

    @pytest.fixture
    def data_with_missing(self):
        data = generate_log_linear_data(n_samples=60, missing_frac=0.1, random_state=7)
        # Non-default labels so positional and label alignment differ
        data.index = data.index * 10 + 3
        return data

    def test_capabilities(self):
        data = generate_log_linear_data(n_samples=40, random_state=1)
        res = smf.ols('np.log(y) ~ x1 + x2', data=data).fit()
        adapter = StatsmodelsAdapter(res)

        np.testing.assert_allclose(adapter.fitted_log, res.fittedvalues)
        np.testing.assert_allclose(adapter.residual, res.resid)
        assert adapter.residual_df == 37
        assert (adapter.se_log > 0).all()
        assert adapter.used_index.equals(data.index)

    def test_dropped_rows_aligned_by_label(self, data_with_missing):
        """Rows dropped for missing covariates are excluded from Real."""
        data = data_with_missing
        res = smf.ols('np.log(y) ~ x1 + x2', data=data).fit()
        table = predict_level(res, data, 'y').predictions

        kept = data.dropna().index
        assert len(table) == len(kept) < len(data)
        assert table.index.equals(kept)
        np.testing.assert_array_equal(table['Real'], data.loc[kept, 'y'])

    def test_missing_response_column(self):
        data = generate_log_linear_data(n_samples=30, random_state=2)
        res = smf.ols('np.log(y) ~ x1 + x2', data=data).fit()
        with pytest.raises(AlignmentError, match="price"):
            LogRetransformer().fit(res, data, 'price')

    def test_new_data_missing_covariate(self):
        data = generate_log_linear_data(n_samples=30, random_state=3)
        res = smf.ols('np.log(y) ~ x1 + x2', data=data).fit()
        rt = LogRetransformer().fit(res, data, 'y')
        with pytest.raises(AlignmentError, match="x2"):
            rt.predict(pd.DataFrame({'x1': [0.5]}))

    def test_formula_required_columns(self):
        data = generate_log_linear_data(n_samples=30, random_state=4)
        res = smf.ols('np.log(y) ~ np.log(np.abs(x1)) + x2', data=data).fit()
        adapter = StatsmodelsAdapter(res)
        assert adapter.required_columns(data, 'y') == ['x1', 'x2']

    def test_array_api_matches_formula(self):
        """sm.OLS with add_constant gives the same table as the formula API."""
        data = generate_log_linear_data(n_samples=50, random_state=5)
        res_formula = smf.ols('np.log(y) ~ x1 + x2', data=data).fit()
        res_array = sm.OLS(np.log(data['y']), sm.add_constant(data[['x1', 'x2']])).fit()

        new_data = pd.DataFrame({'x1': [0.0, 1.0], 'x2': [-1.0, 0.5]})
        from_formula = predict_level(res_formula, data, 'y', new_data=new_data).predictions
        from_array = predict_level(res_array, data, 'y', new_data=new_data).predictions

        pd.testing.assert_frame_equal(from_formula, from_array, check_exact=False)

    def test_array_api_missing_covariate(self):
        data = generate_log_linear_data(n_samples=50, random_state=6)
        res = sm.OLS(np.log(data['y']), sm.add_constant(data[['x1', 'x2']])).fit()
        rt = LogRetransformer().fit(res, data, 'y')
        with pytest.raises(AlignmentError, match="x1"):
            rt.predict(pd.DataFrame({'x2': [0.1]}))

    def test_new_data_index_kept(self):
        data = generate_log_linear_data(n_samples=30, random_state=8)
        res = smf.ols('np.log(y) ~ x1 + x2', data=data).fit()
        new_data = pd.DataFrame({'x1': [0.1, 0.2], 'x2': [0.3, 0.4]}, index=['a', 'b'])
        table = predict_level(res, data, 'y', new_data=new_data).predictions
        assert list(table.index) == ['a', 'b']

    def test_formula_helpers_not_required(self):
        """Function and module names in the formula are not data columns."""
        data = generate_log_linear_data(n_samples=30, random_state=9)
        data['log'] = 1.0
        data['abs'] = 2.0
        res = smf.ols('np.log(y) ~ np.log(np.abs(x1)) + x2', data=data).fit()
        adapter = StatsmodelsAdapter(res)
        assert adapter.required_columns(data, 'y') == ['x1', 'x2']

        rt = LogRetransformer().fit(res, data, 'y')
        table = rt.predict(pd.DataFrame({'x1': [0.5], 'x2': [0.1]}))
        assert np.isfinite(table['Previsto_Wooldridge']).all()

    def test_quoted_column_required(self):
        data = generate_log_linear_data(n_samples=40, random_state=10)
        data['floor area'] = np.linspace(1.0, 2.0, len(data))
        res = smf.ols('np.log(y) ~ x1 + Q("floor area")', data=data).fit()
        adapter = StatsmodelsAdapter(res)
        assert 'floor area' in adapter.required_columns(data, 'y')
        assert 'x2' not in adapter.required_columns(data, 'y')

        rt = LogRetransformer().fit(res, data, 'y')
        with pytest.raises(AlignmentError, match="floor area"):
            rt.predict(pd.DataFrame({'x1': [0.1]}))

    def test_unseen_category_level(self):
        data = generate_log_linear_data(n_samples=40, random_state=11)
        data['g'] = ['a', 'b'] * (len(data) // 2)
        res = smf.ols('np.log(y) ~ x1 + C(g)', data=data).fit()
        rt = LogRetransformer().fit(res, data, 'y')

        table = rt.predict(pd.DataFrame({'x1': [0.1], 'g': ['b']}))
        assert np.isfinite(table['Previsto_Wooldridge']).all()
        with pytest.raises(AlignmentError, match="reconciled"):
            rt.predict(pd.DataFrame({'x1': [0.1], 'g': ['z']}))

    def test_wls_in_sample(self):
        data = generate_log_linear_data(n_samples=50, random_state=12)
        weights = 1.0 + data['x1'] ** 2
        res = smf.wls('np.log(y) ~ x1 + x2', data=data, weights=weights).fit()
        result = predict_level(res, data, 'y')

        np.testing.assert_allclose(result.predictions['Log_Ajustado'], res.fittedvalues)
        np.testing.assert_array_equal(result.predictions['Real'], data['y'])
        assert 0.0 <= result.diagnostics.r2_original <= 1.0

    def test_wls_new_data(self):
        data = generate_log_linear_data(n_samples=50, random_state=13)
        weights = 1.0 + data['x1'] ** 2
        res = smf.wls('np.log(y) ~ x1 + x2', data=data, weights=weights).fit()
        new_data = pd.DataFrame({'x1': [0.0, 1.0], 'x2': [0.5, -0.5]})
        table = predict_level(res, data, 'y', new_data=new_data).predictions

        assert len(table) == 2
        assert table['Real'].isna().all()
        for col in ['Previsto_Wooldridge', 'IC_Inferior', 'IC_Superior', 'Erro_Padrao_Log']:
            assert np.isfinite(table[col]).all()
        assert (table['IC_Inferior'] < table['IC_Superior']).all()


class TestArrayAdapter:
    """Tests for the capability-set adapter."""

    @pytest.fixture
    def arrays(self):
        fitted_log = np.log(np.array([2.0, 3.0, 5.0, 7.0, 11.0]))
        y = np.array([2.2, 2.9, 5.6, 7.1, 12.0])
        residual = np.log(y) - fitted_log
        se_log = np.array([0.1, 0.0, 0.2, 0.1, 0.3])
        return fitted_log, se_log, residual, y

    def test_zero_se_row_degenerate(self, arrays):
        """A row with zero standard error has lower == upper == prediction."""
        fitted_log, se_log, residual, y = arrays
        adapter = ArrayAdapter(fitted_log, se_log, residual, residual_df=3)
        table = predict_level(adapter, pd.DataFrame({'y': y}), 'y').predictions

        row = table.iloc[1]
        assert row['IC_Inferior'] == row['Previsto_Wooldridge']
        assert row['IC_Superior'] == row['Previsto_Wooldridge']
        assert (table['IC_Inferior'].drop(table.index[1]) < table['Previsto_Wooldridge'].drop(table.index[1])).all()

    def test_used_index_alignment(self, arrays):
        fitted_log, se_log, residual, y = arrays
        data = pd.DataFrame({'y': np.r_[y, 99.0]}, index=[10, 11, 12, 13, 14, 15])
        used = [10, 11, 12, 13, 14]
        adapter = ArrayAdapter(fitted_log, se_log, residual, residual_df=3, used_index=used)

        table = predict_level(adapter, data, 'y').predictions
        assert list(table.index) == used
        np.testing.assert_array_equal(table['Real'], y)

    def test_used_index_label_absent(self, arrays):
        fitted_log, se_log, residual, y = arrays
        adapter = ArrayAdapter(fitted_log, se_log, residual, residual_df=3,
                               used_index=[0, 1, 2, 3, 99])
        with pytest.raises(AlignmentError, match="not found"):
            predict_level(adapter, pd.DataFrame({'y': y}), 'y')

    def test_length_mismatch_without_index(self, arrays):
        fitted_log, se_log, residual, y = arrays
        adapter = ArrayAdapter(fitted_log, se_log, residual, residual_df=3)
        with pytest.raises(AlignmentError, match="rows"):
            predict_level(adapter, pd.DataFrame({'y': y[:4]}), 'y')

    def test_inconsistent_arrays(self, arrays):
        fitted_log, se_log, residual, _ = arrays
        with pytest.raises(AlignmentError):
            ArrayAdapter(fitted_log, se_log[:3], residual, residual_df=3)

    def test_predict_fn(self, arrays):
        fitted_log, se_log, residual, y = arrays

        def predict_fn(new_data):
            fit = np.log(new_data['size'].to_numpy())
            return fit, np.full(len(fit), 0.1)

        adapter = ArrayAdapter(fitted_log, se_log, residual, residual_df=3,
                               predict_fn=predict_fn, required_columns=['size'])
        rt = LogRetransformer().fit(adapter, pd.DataFrame({'y': y}), 'y')
        table = rt.predict(pd.DataFrame({'size': [4.0, 6.0]}))

        np.testing.assert_allclose(table['Previsto_Wooldridge'], rt.alpha_tilde_ * np.array([4.0, 6.0]))
        assert table['Real'].isna().all()

    def test_predict_fn_missing_column(self, arrays):
        fitted_log, se_log, residual, y = arrays
        adapter = ArrayAdapter(fitted_log, se_log, residual, residual_df=3,
                               predict_fn=lambda d: (np.zeros(len(d)), np.zeros(len(d))),
                               required_columns=['size'])
        rt = LogRetransformer().fit(adapter, pd.DataFrame({'y': y}), 'y')
        with pytest.raises(AlignmentError, match="size"):
            rt.predict(pd.DataFrame({'weight': [1.0]}))

    def test_no_predict_fn(self, arrays):
        fitted_log, se_log, residual, y = arrays
        adapter = ArrayAdapter(fitted_log, se_log, residual, residual_df=3)
        rt = LogRetransformer().fit(adapter, pd.DataFrame({'y': y}), 'y')
        with pytest.raises(AlignmentError, match="predict_fn"):
            rt.predict(pd.DataFrame({'size': [1.0]}))


class TestAsLogModel:
    """Tests for adapter dispatch."""

    def test_adapter_passthrough(self):
        adapter = ArrayAdapter([0.0, 1.0], [0.1, 0.1], [0.0, 0.0], residual_df=1)
        assert as_log_model(adapter) is adapter

    def test_statsmodels_wrapped(self):
        data = generate_log_linear_data(n_samples=20, random_state=9)
        res = smf.ols('np.log(y) ~ x1', data=data).fit()
        assert isinstance(as_log_model(res), StatsmodelsAdapter)

    def test_unsupported(self):
        with pytest.raises(TypeError, match="Unsupported model"):
            as_log_model(object())
