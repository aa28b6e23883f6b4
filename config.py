import os

from dotenv import load_dotenv

load_dotenv()


def _flag(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key")  # change in production

    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///database.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Single operator, checked locally
    OPERATOR_USERNAME = os.environ.get("OPERATOR_USERNAME", "owner")
    OPERATOR_PASSWORD = os.environ.get("OPERATOR_PASSWORD", "chauhan123")

    # Session watchdog
    INACTIVITY_LIMIT_SECONDS = int(os.environ.get("INACTIVITY_LIMIT_SECONDS", "3600"))
    INACTIVITY_POLL_SECONDS = int(os.environ.get("INACTIVITY_POLL_SECONDS", "30"))

    # Optimistic writes / change feed
    ROLLBACK_ON_WRITE_FAILURE = _flag("ROLLBACK_ON_WRITE_FAILURE", False)
    FEED_CONSUMER_THREAD = _flag("FEED_CONSUMER_THREAD", True)
    SEED_DEMO_DATA = _flag("SEED_DEMO_DATA", True)

    LOW_STOCK_THRESHOLD = int(os.environ.get("LOW_STOCK_THRESHOLD", "10"))

    # Receipt header
    SHOP_NAME = os.environ.get("SHOP_NAME", "Chauhan Steel")
    SHOP_TAGLINE = os.environ.get("SHOP_TAGLINE", "Furniture & Fabrication")
    SHOP_ADDRESS = os.environ.get("SHOP_ADDRESS", "Main Market Road, City Center")
    SHOP_GSTIN = os.environ.get("SHOP_GSTIN", "29ABCDE1234F1Z5")
    SHOP_PHONE = os.environ.get("SHOP_PHONE", "+91 98765 43210")
    CURRENCY = os.environ.get("CURRENCY", "Rs.")
