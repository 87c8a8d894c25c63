"""Centralized constants for the codereps application.

All magic numbers and scheduling defaults live here so every layer
imports from a single source of truth.
"""

# ---------- SM-2 ----------
DEFAULT_EASINESS_FACTOR = 2.5
MIN_EASINESS_FACTOR = 1.3
DEFAULT_INTERVAL = 0
DEFAULT_REPETITION = 0
PASSING_QUALITY = 3
MAX_QUALITY = 5
MIN_QUALITY = 0
FAILED_RECALL_INTERVAL = 1
FIRST_INTERVAL = 1
SECOND_INTERVAL = 6

# ---------- Queue ----------
DUE_THIS_WEEK_DAYS = 7
DEFAULT_DAYS_AHEAD = 7

# ---------- Solve recording ----------
DEFAULT_MAX_RECORD_ATTEMPTS = 3

# ---------- Storage ----------
DATA_FILE_LOCK_TIMEOUT_SECONDS = 10.0
