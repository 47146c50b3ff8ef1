import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_ENCRYPTION_SECRET = "change-me"
DEFAULT_SESSION_SECRET = "change-me"


class Settings:
    """Centralised application configuration sourced from environment variables."""

    def __init__(self) -> None:
        load_dotenv()
        self.app_name = os.getenv("APP_NAME", "Matchmaker")
        self.database_path = Path(os.getenv("DATABASE_PATH", "data/matchmaker.db")).resolve()
        self.db_pool_size = self._get_int("DB_POOL_SIZE", default=5)
        self.db_timeout_seconds = self._get_int("DB_TIMEOUT_SECONDS", default=10)
        self.upload_dir = Path(os.getenv("UPLOAD_DIR", "data/uploads")).resolve()
        self.max_upload_size = self._get_int("MAX_UPLOAD_SIZE", default=10 * 1024 * 1024)
        self.encryption_secret = os.getenv("ENCRYPTION_SECRET", DEFAULT_ENCRYPTION_SECRET)
        self.encryption_salt = os.getenv("ENCRYPTION_SALT", "salt")
        self.session_secret = os.getenv("SESSION_SECRET", DEFAULT_SESSION_SECRET)
        self.session_exp_hours = self._get_int("SESSION_EXP_HOURS", default=24 * 7)
        self.bcrypt_rounds = self._get_int("BCRYPT_ROUNDS", default=12)
        self.trust_user_id_header = self._get_bool("TRUST_USER_ID_HEADER", default=True)
        self.expose_debug_codes = self._get_bool("EXPOSE_DEBUG_CODES", default=True)
        self.smtp_host = os.getenv("SMTP_HOST", "")
        self.smtp_port = self._get_int("SMTP_PORT", default=587)
        self.smtp_username = os.getenv("SMTP_USERNAME", "")
        self.smtp_password = os.getenv("SMTP_PASSWORD", "")
        self.smtp_from_email = os.getenv("SMTP_FROM_EMAIL", "")
        self.smtp_from_name = os.getenv("SMTP_FROM_NAME", self.app_name)
        self.smtp_timeout_seconds = self._get_int("SMTP_TIMEOUT_SECONDS", default=15)
        origins = os.getenv("CORS_ALLOW_ORIGINS")
        if origins:
            self.cors_allow_origins = [item.strip() for item in origins.split(",") if item.strip()]
        else:
            self.cors_allow_origins = ["*"]

    @staticmethod
    def _get_int(key: str, default: Optional[int] = None) -> int:
        value = os.getenv(key)
        if value is None:
            if default is None:
                raise RuntimeError(f"Missing required environment variable: {key}")
            return default
        try:
            return int(value)
        except ValueError as exc:
            raise RuntimeError(f"Environment variable {key} must be an integer") from exc

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        value = os.getenv(key)
        if value is None:
            return default
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
        raise RuntimeError(f"Environment variable {key} must be a boolean")
