"""Application configuration with environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENV: str = "dev"
    VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # Set to True when running behind a proxy/load balancer to trust X-Forwarded-For
    TRUST_PROXY_HEADERS: bool = False

    # Database
    DATABASE_URL: str
    DATABASE_HOST: str = ""  # Overrides the host part of DATABASE_URL when set
    DATABASE_SSL: bool = False
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # Storage backend: "database" (SQLAlchemy) or "memory" (process-local)
    STORAGE_BACKEND: str = "database"
    SEED_SAMPLE_DATA: bool = False

    # Session tokens (supports key rotation)
    JWT_SECRET: str = "change-this-in-production"
    JWT_SECRET_PREVIOUS: str = ""  # Set during rotation, clear after
    CLIENT_SESSION_HOURS: int = 24
    ADMIN_SESSION_HOURS: int = 8
    SESSION_SWEEP_INTERVAL_SECONDS: int = 3600
    BCRYPT_ROUNDS: int = 12

    # CORS
    CORS_ORIGINS: str = "http://localhost:5000"

    # File uploads
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024  # 10 MB

    # Analytics (raw page views are purged by the sweeper after this many days)
    PAGE_VIEW_RETENTION_DAYS: int = 90

    # Error Tracking (optional, set in production)
    SENTRY_DSN: str = ""

    # Rate Limiting (requests per minute)
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_AUTH: int = 10  # Login/register attempts
    RATE_LIMIT_PAGEVIEWS: int = 120  # Page-view beacons
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def jwt_secrets(self) -> list[str]:
        """Returns list of valid secrets (current first, then previous if set)."""
        secrets = [self.JWT_SECRET]
        if self.JWT_SECRET_PREVIOUS:
            secrets.append(self.JWT_SECRET_PREVIOUS)
        return secrets

    @property
    def uses_memory_storage(self) -> bool:
        return self.STORAGE_BACKEND.lower() == "memory"


settings = Settings()
