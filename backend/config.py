"""
Activity tracking configuration.

All values can be overridden through environment variables (or a .env file,
loaded by main.py):
  ACTIVITY_STORE_PATH=./data/store.json
  ACTIVITY_HISTORY_LIMIT=1000
"""

import os

# Storage keys shared with the mobile client
HISTORY_KEY = "activityHistory"
USER_DATA_KEY = "userData"

# Version tag written with every persisted log; bare arrays read as version 0
LOG_SCHEMA_VERSION = 1

STORE_PATH = os.environ.get("ACTIVITY_STORE_PATH") or None
HISTORY_LIMIT = int(os.environ.get("ACTIVITY_HISTORY_LIMIT", "1000"))
STORE_TIMEOUT = float(os.environ.get("ACTIVITY_STORE_TIMEOUT", "5.0"))
MIN_SCREEN_TIME_SECONDS = int(os.environ.get("MIN_SCREEN_TIME_SECONDS", "3"))

CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("CORS_ORIGINS", "http://localhost:8081").split(",")
    if origin.strip()
]
