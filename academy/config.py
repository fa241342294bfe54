from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    database_url: str = "sqlite:///./academy.db"

    jwt_secret_key: str = "change-this-in-production"
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 60

    # Invitation lifecycle
    invitation_expiry_days: int = 7
    invitation_token_bytes: int = 32

    # Upper bound for a single store call (statement timeout / busy timeout)
    store_timeout_seconds: float = 5.0

    # Base URL used to build /invite/{token} links
    # Default: http://localhost:3000 (local dev)
    app_base_url: str = "http://localhost:3000"

    # CORS configuration - comma-separated list of allowed origins
    cors_allowed_origins: Optional[str] = None

    # Bootstrap admin created by `python -m academy.cli seed-admin`
    admin_email: str = "admin@upperhound.academy"
    admin_password: str = ""

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    def get_cors_origins(self) -> list[str]:
        """Get list of CORS allowed origins, combining defaults with env var.

        - Strips whitespace
        - Removes trailing slashes
        - Deduplicates
        """
        default_origins = [
            "http://localhost:3000",
        ]

        all_origins = list(default_origins)

        if self.cors_allowed_origins:
            for origin in self.cors_allowed_origins.split(","):
                cleaned = origin.strip().rstrip("/")
                if cleaned and cleaned not in all_origins:
                    all_origins.append(cleaned)

        return all_origins


@lru_cache()
def get_settings() -> Settings:
    return Settings()
