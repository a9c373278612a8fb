"""Application configuration from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    app_name: str = "shelf.nu"
    debug: bool = True
    secret_key: str = "dev-secret-change-in-production"
    api_prefix: str = "/api/v1"

    # Database
    database_url: str = "postgresql+asyncpg://shelf:shelf@db:5432/shelf"
    database_echo: bool = False

    # Redis (Celery broker + result backend)
    redis_url: str = "redis://redis:6379/0"

    # Auth
    access_token_expire_minutes: int = 60
    jwt_algorithm: str = "HS256"

    # Email / SMTP
    smtp_host: str = "localhost"
    smtp_port: int = 1025
    smtp_from: str = "bookings@shelf.nu"
    frontend_url: str = "http://localhost:3000"

    # Geocoding
    geocode_url: str = "https://geocode.maps.co/search"
    geocode_timeout_seconds: float = 10.0

    # Client hint fallbacks when the browser sends none
    default_time_zone: str = "UTC"
    default_locale: str = "en-US"

    # Bookings
    reminder_lead_hours: int = 1  # checkout/checkin reminders fire this long before from/to
    bookings_per_page: int = 8

    model_config = {"env_prefix": "SHELF_", "env_file": ".env", "extra": "ignore"}


settings = Settings()
