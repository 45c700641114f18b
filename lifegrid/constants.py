"""
Application constants.
Scoring thresholds, persistence keys and environment-driven defaults.
"""
import os

# === Scoring ===
MAX_DAY_SCORE = 1.0
MIN_DAY_SCORE = 0.0
MAX_GOAL_WEIGHT_TOTAL = 1.0  # Sum of goal weights per sprint (warned, not enforced)

# A day counts toward the streak when its score is strictly above this
STREAK_THRESHOLD = 0.3

# Trend hysteresis band (+/- 5%)
TREND_UP_FACTOR = 1.05
TREND_DOWN_FACTOR = 0.95

TREND_UP = "up"
TREND_DOWN = "down"
TREND_NEUTRAL = "neutral"

# Regression slope descriptions
SLOPE_STRONG = 0.02
SLOPE_MILD = 0.005
MIN_POINTS_FOR_SLOPES = 7
SLOPE_WINDOW_SHORT = 4
SLOPE_WINDOW_WEEK = 7

# Score labels (lower bound in percent -> label), checked top-down
SCORE_LABELS = [
    (90, "Excellent"),
    (75, "Great"),
    (60, "Good"),
    (40, "Fair"),
    (20, "Poor"),
]
SCORE_LABEL_LOWEST = "Very Poor"
SCORE_LABEL_NO_DATA = "No Data"

# === Persistence keys ===
SPRINTS_KEY = "user_sprints"
EFFORTS_KEY = "user_efforts"

# === User settings defaults ===
DEFAULT_USER_NAME = "Guest"
DEFAULT_CURRENT_AGE = 30
DEFAULT_TARGET_AGE = 85
DEFAULT_YEARS_TO_VIEW = 5
GRID_VIEW_SPRINT = "sprint"
GRID_VIEW_LIFETIME = "lifetime"
DEFAULT_GRID_VIEW = GRID_VIEW_SPRINT

# === Stats defaults ===
DEFAULT_STATS_PERIOD_DAYS = 30
DEFAULT_TREND_PERIOD_DAYS = 7

# === Environment ===
DEFAULT_DATABASE_URL = "sqlite:///./lifegrid.db"
DATABASE_URL = os.getenv("LIFEGRID_DB_URL", DEFAULT_DATABASE_URL)

API_KEY = os.getenv("LIFEGRID_API_KEY", "change-me")

DEFAULT_LOG_DIRECTORY_PROD = "/var/log/lifegrid"
DEFAULT_LOG_DIRECTORY_DEV = "./logs"

CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "LIFEGRID_CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
    ).split(",")
    if origin.strip()
]
