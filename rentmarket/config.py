import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[1]


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
    # Empty string keeps the store in memory only
    DATA_PATH = os.getenv("RENTMARKET_DATA_PATH", str(BASE_DIR / "data.pkl"))
    # Naive start times from clients are read in this zone
    TIMEZONE = os.getenv("RENTMARKET_TIMEZONE", "Asia/Karachi")
    LOG_LEVEL = os.getenv("RENTMARKET_LOG_LEVEL", "INFO")
    NOTIFICATIONS_ENABLED = os.getenv("RENTMARKET_NOTIFICATIONS", "true").lower() == "true"
    ACTOR_HEADER = "X-Account-Id"


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test"
    DATA_PATH = ""
    TIMEZONE = "UTC"
