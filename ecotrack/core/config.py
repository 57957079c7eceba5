import logging

from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from typing import Optional

class Settings(BaseSettings):
    # Environment
    ENV: str = "development"
    CONFIG_STRICT: bool = False

    # Persistence (unset = in-memory record store)
    DATABASE_URL: Optional[str] = None
    TEST_DATABASE_URL: Optional[str] = None

    # Identity: HS256 secret shared with the auth provider
    AUTH_JWT_SECRET: Optional[str] = None
    AUTH_JWT_ALGORITHM: str = "HS256"

    # HTTP
    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:3000"  # comma-separated

    # Paging defaults
    LEADERBOARD_DEFAULT_LIMIT: int = 50
    COMMUNITY_PAGE_SIZE: int = 20

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()


def validate_config(strict: Optional[bool] = None, settings_obj: Optional[Settings] = None, logger: Optional[logging.Logger] = None) -> bool:
    """Validate required configuration.

    Only production deployments need a database and a JWT secret; development
    runs fine on the in-memory store with X-User-Id identity.
    In strict mode raise RuntimeError; otherwise emit warnings only.
    Secrets are not logged, only missing keys.
    """
    cfg = settings_obj or settings
    log = logger or logging.getLogger("ecotrack")
    strict_mode = strict if strict is not None else getattr(cfg, "CONFIG_STRICT", False)

    if cfg.ENV.lower() != "production":
        return True

    required_keys = [
        "DATABASE_URL",
        "AUTH_JWT_SECRET",
    ]

    missing = [key for key in required_keys if not getattr(cfg, key, None)]
    if missing:
        message = f"Missing required configuration: {', '.join(missing)}"
        if strict_mode:
            raise RuntimeError(message)
        log.warning(message)

    return True
