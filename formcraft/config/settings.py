"""
Application settings and configuration
"""
import logging
import os
import secrets
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _split_csv(value: str):
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings:
    def __init__(self):
        # Application
        self.APP_NAME = "FormCraft"
        self.VERSION = "1.0.0"
        self.DEBUG = os.getenv("DEBUG", "False") == "True"
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

        # Security
        self.SIGNING_SECRET = os.getenv("SIGNING_SECRET")
        if not self.SIGNING_SECRET:
            # Tokens signed with this key die with the process
            self.SIGNING_SECRET = secrets.token_urlsafe(32)
            logger.warning("⚠️ SIGNING_SECRET not set, using a random per-process secret")
        self.ALGORITHM = "HS256"
        self.ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))  # 24 hours

        # Durable store
        self.STORE_CONNECTION_URI = os.getenv("STORE_CONNECTION_URI") or None
        self.DATABASE_NAME = os.getenv("DATABASE_NAME", "formcraft")
        self.STORE_TIMEOUT_SECONDS = float(os.getenv("STORE_TIMEOUT_SECONDS", 5))
        self.STORE_RECOVERY_INTERVAL_SECONDS = float(os.getenv("STORE_RECOVERY_INTERVAL_SECONDS", 30))

        # CORS
        self.ALLOWED_ORIGINS = _split_csv(os.getenv("ALLOWED_ORIGINS", "*"))

        # File Uploads
        self.UPLOAD_DIR = os.getenv("UPLOAD_DIR", os.path.join(os.getcwd(), "uploads"))


settings = Settings()
