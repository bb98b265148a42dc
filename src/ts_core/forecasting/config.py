"""Configuration constants for forecasting models."""

# Forecast horizon (number of steps ahead)
FORECAST_STEPS = 10

# Prediction interval confidence levels (percent)
INTERVAL_LEVELS = (80, 95)

# Seasonal period for series without an explicit one
SEASONAL_PERIOD = 1

# Minimum observations per key in the batch API
MIN_OBSERVATIONS = 10

# Automatic ARIMA order search
MAX_P = 3
MAX_Q = 3
MAX_SEASONAL_P = 1
MAX_SEASONAL_Q = 1
MAX_D = 2
MAX_SEASONAL_D = 1

# KPSS significance level and STL seasonal-strength threshold
KPSS_ALPHA = 0.05
SEASONAL_STRENGTH_THRESHOLD = 0.64

# AICc values closer than this are treated as ties
AICC_TIE_TOLERANCE = 1e-8

# Exponential smoothing optimizer bounds
SMOOTHING_BOUNDS = (1e-4, 0.9999)
DAMPING_BOUNDS = (0.8, 0.98)
