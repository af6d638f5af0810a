"""
Column labels of the prediction table.

Labels follow the naming of the original R tool so downstream scripts
reading its output keep working.
"""

REAL = 'Real'
CORRECTED = 'Previsto_Wooldridge'
CI_LOWER = 'IC_Inferior'
CI_UPPER = 'IC_Superior'
LOG_FITTED = 'Log_Ajustado'
LOG_SE = 'Erro_Padrao_Log'
NAIVE = 'Prev_Ingenua'

# Full mode only
RESIDUAL = 'Residuos'
SMEARING = 'Prev_Metodo_A'

COLUMNS = [REAL, CORRECTED, CI_LOWER, CI_UPPER, LOG_FITTED, LOG_SE, NAIVE]
FULL_COLUMNS = COLUMNS + [RESIDUAL, SMEARING]
