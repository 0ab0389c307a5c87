"""Application-wide constants for the GymBook platform."""

from __future__ import annotations

BRAND_NAME = "GymBook"

API_TITLE = f"{BRAND_NAME} API"
API_DESCRIPTION = "Workout session booking backend for a single-location gym"
API_VERSION = "1.0.0"

# Scheduling defaults (overridable through Settings)
DEFAULT_GYM_CAPACITY = 8
DEFAULT_MAX_SESSION_DURATION_MINUTES = 180  # 3 hours
DEFAULT_DAILY_SESSION_LIMIT = 1

# Text constraints
MAX_NOTES_LENGTH = 200
DEFAULT_SESSION_NOTES = "Personal workout session"
UNKNOWN_CLIENT_NAME = "Unknown Client"
DEFAULT_ADMIN_CANCELLATION_REASON = "Session cancelled by gym administration"

# Query limits
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
