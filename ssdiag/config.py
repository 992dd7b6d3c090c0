"""
Centralized configuration for state-space residual diagnostics.

All test parameters, significance levels, search settings and report
formatting choices are defined here with citations justifying each choice.
Functions take these as defaults whenever the matching argument is None.
"""

# ─── INDEPENDENCE TESTS ──────────────────────────────────────────────────
# Following Commandeur & Koopman (2007), Section 2.4:
# "The Box-Ljung statistic Q(k) is evaluated against a chi-square
# distribution with k - w + 1 degrees of freedom, where w is the number
# of estimated disturbance variances."
# Citation: Commandeur, J.J.F. & Koopman, S.J. (2007). An Introduction to
#           State Space Time Series Analysis. Oxford University Press.
# Citation: Ljung, G.M. & Box, G.E.P. (1978). On a measure of lack of fit
#           in time series models. Biometrika, 65(2), 297-303.
Q_SIGNIFICANCE = 0.05
DEFAULT_Q_LAGS = 15

# 95% confidence band for a single autocorrelation: +/- 2 / sqrt(n).
R_CONFIDENCE_Z = 2.0
DEFAULT_R_LAG = 12

# Default lag cap for the empirical ACF: 10 * log10(n) for one series.
ACF_LAG_CAP_FACTOR = 10.0

# ─── HOMOSCEDASTICITY TEST ───────────────────────────────────────────────
# Two-tailed F-test at 5%: H (or 1/H) compared with the upper 2.5%
# quantile of F(h, h).
# Citation: Harvey, A.C. (1989). Forecasting, Structural Time Series
#           Models and the Kalman Filter. Cambridge University Press.
H_TAIL = 0.025

# ─── NORMALITY TEST ──────────────────────────────────────────────────────
# Jarque-Bera statistic compared with chi-square(2) at 5%.
# Citation: Jarque, C.M. & Bera, A.K. (1987). A test for normality of
#           observations and regression residuals. Int. Stat. Review,
#           55(2), 163-172.
N_SIGNIFICANCE = 0.05
N_DEGREES_OF_FREEDOM = 2
# Skewness and kurtosis are unreliable below this many residuals.
N_MIN_SAMPLE = 7

# ─── INITIAL-VALUE SEARCH ────────────────────────────────────────────────
# Candidate starting values are drawn uniformly from (low, high].
INIT_SEARCH_BOUNDS = (0.0, 2.0)
INIT_SEARCH_MAX_LOOP = 100
INIT_SEARCH_SEED = None  # None → fresh entropy on every search
INIT_SEARCH_MAX_WORKERS = 1  # >1 opts into threaded trials

# ─── MODEL FITTING (statsmodels adapter) ─────────────────────────────────
FIT_METHOD = "bfgs"
FIT_MAXITER = 500

# ─── REPORT FORMATTING ───────────────────────────────────────────────────
REPORT_VALUE_DECIMALS = 3
REPORT_CRITICAL_DECIMALS = 2
REPORT_PASS_MARKER = "+"
REPORT_FAIL_MARKER = "-"
