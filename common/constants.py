"""
Application-wide constants for the SafeRoute safety scoring engine.

This module contains the domain policy constants used across the engine.
They are tuned values, not user configuration.
"""

# ========= Risk Factor Defaults =========
# Crime: logistic((incidents_per_1000 - baseline) / scale)
DEFAULT_CRIME_BASELINE = 10.0
DEFAULT_CRIME_SCALE = 15.0

# Daylight window used when TimeData omits sunrise/sunset
DEFAULT_SUNRISE_HOUR = 6
DEFAULT_SUNSET_HOUR = 18

# Location risk starts here before adjustments
LOCATION_BASELINE_RISK = 0.3

# Battery risk only appears below this charge level
LOW_BATTERY_THRESHOLD = 20.0

# ========= Route Blending =========
# Per segment: oracle risk vs rule-based risk of the segment endpoint
SEGMENT_ORACLE_WEIGHT = 0.9
SEGMENT_RULE_WEIGHT = 0.1

# Whole route: base location risk vs averaged segment risk
ROUTE_BASE_WEIGHT = 0.2
ROUTE_SEGMENT_WEIGHT = 0.8

# Transport mode sent to the oracle when the caller's mode was not recognized
DEFAULT_ORACLE_TRANSPORT_MODE = "walking"

# ========= Predictive Oracle =========
# Default per-call timeout; PREDICTION_TIMEOUT_SECONDS in the environment overrides it
PREDICTION_TIMEOUT_SECONDS = 10.0
PREDICTION_MAX_FACTORS = 5
PREDICTION_DEFAULT_CONFIDENCE = 0.85
PREDICTION_DEFAULT_FACTOR = "General safety assessment from route prediction model"

# Oracle riskLevel re-derivation thresholds (score >= LOW -> low, >= MEDIUM -> medium)
ORACLE_LOW_RISK_MIN_SCORE = 70
ORACLE_MEDIUM_RISK_MIN_SCORE = 50

# ========= Safety Levels =========
EXCELLENT_MIN_SCORE = 90
GOOD_MIN_SCORE = 70
MODERATE_MIN_SCORE = 50
POOR_MIN_SCORE = 30
