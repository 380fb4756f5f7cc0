import os
from dotenv import load_dotenv

load_dotenv()

# --- Database ---
# Default to local SQLite, but prefer environment variable (for Supabase Postgres)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/growth.db")

# Fix for common SQLAlchemy issues with postgres:// vs postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# --- Supabase Configuration ---
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
SUPABASE_TIMEOUT_SECONDS = float(os.getenv("SUPABASE_TIMEOUT_SECONDS", "10"))

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Goal progress ---
# Base weights per category; re-normalized over the categories a goal actually has.
DEFAULT_PROGRESS_WEIGHTS = {
    "criteria_weight": float(os.getenv("PROGRESS_CRITERIA_WEIGHT", "30")),
    "tasks_weight": float(os.getenv("PROGRESS_TASKS_WEIGHT", "30")),
    "metrics_weight": float(os.getenv("PROGRESS_METRICS_WEIGHT", "20")),
    "habits_weight": float(os.getenv("PROGRESS_HABITS_WEIGHT", "20")),
}

HABIT_STREAK_CAP_DAYS = int(os.getenv("HABIT_STREAK_CAP_DAYS", "30"))
HABIT_CONSISTENCY_WINDOW_DAYS = int(os.getenv("HABIT_CONSISTENCY_WINDOW_DAYS", "30"))
METRIC_TARGET_TOLERANCE = float(os.getenv("METRIC_TARGET_TOLERANCE", "0.1"))  # +/-10% for "Target" metrics
DORMANT_AFTER_DAYS = int(os.getenv("DORMANT_AFTER_DAYS", "7"))


def is_supabase_configured() -> bool:
    """True when the PostgREST backend can be used instead of the SQL database."""
    return bool(SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY)
