# arrivals/config.py
"""
Application configuration using Pydantic-Settings.
All settings can be overridden via environment variables or .env file.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # ── Database (authorized admin allow-list) ────────────────────────────
    DATABASE_URL: str = "sqlite:///./arrivals.db"

    # ── Network ───────────────────────────────────────────────────────────
    BACKEND_IP: str = "0.0.0.0"
    BACKEND_PORT: int = 3001
    CORS_ORIGINS: str = "*"

    # ── Security ──────────────────────────────────────────────────────────
    API_KEY: Optional[str] = None   # Set in .env to require X-API-Key on /api
    AUTHORIZED_USERS: str = ""      # Comma-separated admin ids seeded at startup

    # ── Planning Center Check-Ins (upstream directory) ────────────────────
    PCO_API_BASE: str = "https://api.planningcenteronline.com/check-ins/v2"
    PCO_ACCESS_TOKEN: str = ""
    PCO_ACCESS_SECRET: str = ""
    UPSTREAM_TIMEOUT_SECONDS: float = 12.0
    UPSTREAM_PAGE_SIZE: int = 100

    # ── Pickup requests ───────────────────────────────────────────────────
    PICKUP_REQUEST_TTL_MINUTES: int = 30

    # ── Client polling / reconciliation ───────────────────────────────────
    API_BASE_URL: str = "http://localhost:3001/api"
    EDIT_LEASE_SECONDS: float = 10.0
    ADMIN_POLL_SECONDS: float = 10.0
    BILLBOARD_POLL_SECONDS: float = 10.0
    KIOSK_POLL_SECONDS: float = 15.0
    LOCATION_STATUS_POLL_SECONDS: float = 15.0
    STATUS_BOARD_POLL_SECONDS: float = 30.0

    # ── Logging ───────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"

    @property
    def authorized_user_ids(self) -> list:
        return [uid.strip() for uid in self.AUTHORIZED_USERS.split(",") if uid.strip()]

    @property
    def cors_origins(self) -> list:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
