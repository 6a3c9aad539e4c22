# vdfd/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # --- Runtime ---
    ENV: str = "dev"  # dev|prod
    LOG_LEVEL: str = "INFO"

    # --- Local-first store (on-device) ---
    # sqlalchemy|memory
    LOCAL_STORE_BACKEND: str = "sqlalchemy"
    VDFD_DB_URL: str = "sqlite+aiosqlite:///./vdfd.db"

    # --- Minimal auth (API key); identity itself comes from X-User-Id ---
    # Send: X-API-Key: <key>
    API_KEY: str | None = None

    # --- Remote document store (mirror only, never read from) ---
    # Unset => remote sync is skipped (quiet by default)
    REMOTE_STORE_URL: str | None = None
    REMOTE_STORE_API_KEY: str | None = None
    REMOTE_STORE_SECRET: str | None = None
    REMOTE_TIMEOUT_S: float = 20.0

    # --- Reverse geocoding (Google-compatible) ---
    GEOCODER_URL: str = "https://maps.googleapis.com/maps/api/geocode/json"
    GOOGLE_MAPS_API_KEY: str | None = None
    GEOCODER_TIMEOUT_S: float = 10.0

    # --- Routes / exports ---
    DEFAULT_AVERAGE_SPEED_MPH: float = 30.0
    PDF_MAX_LEADS: int = 20


settings = Settings()
