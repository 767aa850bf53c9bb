"""
Application configuration.

Values come from the environment (a local .env file is loaded first). The
resulting Settings object is passed explicitly to the components that need
it; nothing reads secrets from module globals.
"""
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_SECRET = "your-super-secret-key-change-in-production-min-32-chars"


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_str(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./mediecho.db"
    secret_key: str = DEFAULT_SECRET
    refresh_token_secret: str = DEFAULT_SECRET + "-refresh"
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 7
    upload_dir: str = "./uploads"
    app_timezone: str = "UTC"
    environment: str = "development"
    app_url: str = "http://localhost:3000"
    brief_min_logs: int = 1
    weekly_briefs_enabled: bool = False
    weekly_briefs_hour: int = 6
    debug: bool = False

    stripe_secret_key: Optional[str] = None
    stripe_webhook_secret: Optional[str] = None
    stripe_price_pro_monthly: Optional[str] = None
    stripe_price_pro_yearly: Optional[str] = None
    stripe_price_coach_monthly: Optional[str] = None
    stripe_price_coach_yearly: Optional[str] = None

    brief_plans: frozenset = field(default_factory=lambda: frozenset({"pro", "coach"}))

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def briefs_dir(self) -> str:
        return os.path.join(self.upload_dir, "briefs")

    @property
    def pro_price_ids(self) -> set:
        return {p for p in (self.stripe_price_pro_monthly, self.stripe_price_pro_yearly) if p}

    @property
    def coach_price_ids(self) -> set:
        return {p for p in (self.stripe_price_coach_monthly, self.stripe_price_coach_yearly) if p}


def load_settings() -> Settings:
    """Build Settings from the current environment."""
    secret_key = os.getenv("SECRET_KEY", DEFAULT_SECRET)
    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///./mediecho.db"),
        secret_key=secret_key,
        refresh_token_secret=os.getenv("REFRESH_TOKEN_SECRET", secret_key + "-refresh"),
        access_token_expire_minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15")),
        refresh_token_expire_days=int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7")),
        upload_dir=os.getenv("UPLOAD_DIR", "./uploads"),
        app_timezone=os.getenv("APP_TIMEZONE", "UTC"),
        environment=os.getenv("ENVIRONMENT", "development"),
        app_url=os.getenv("APP_URL", "http://localhost:3000").rstrip("/"),
        brief_min_logs=max(1, int(os.getenv("BRIEF_MIN_LOGS", "1"))),
        weekly_briefs_enabled=_env_bool("WEEKLY_BRIEFS_ENABLED"),
        weekly_briefs_hour=int(os.getenv("WEEKLY_BRIEFS_HOUR", "6")),
        debug=_env_bool("DEBUG"),
        stripe_secret_key=_env_str("STRIPE_SECRET_KEY"),
        stripe_webhook_secret=_env_str("STRIPE_WEBHOOK_SECRET"),
        stripe_price_pro_monthly=_env_str("STRIPE_PRICE_PRO_MONTHLY"),
        stripe_price_pro_yearly=_env_str("STRIPE_PRICE_PRO_YEARLY"),
        stripe_price_coach_monthly=_env_str("STRIPE_PRICE_COACH_MONTHLY"),
        stripe_price_coach_yearly=_env_str("STRIPE_PRICE_COACH_YEARLY"),
    )


@lru_cache
def get_settings() -> Settings:
    """FastAPI dependency returning the process-wide settings.

    Tests override this dependency to run with their own secrets.
    """
    return load_settings()
