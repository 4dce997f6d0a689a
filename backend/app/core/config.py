from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "your-secret-key-change-in-production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = "sqlite:///./careerguard.db"

    # JWT Authentication
    JWT_SECRET: str = DEFAULT_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_HOURS: int = 24
    BCRYPT_ROUNDS: int = 10

    # First admin account, created only when the users table is empty
    BOOTSTRAP_ADMIN_EMAIL: str = ""
    BOOTSTRAP_ADMIN_PASSWORD: str = ""

    # Uploads
    UPLOAD_DIR: str = "./uploads"
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    # Application
    APP_NAME: str = "CareerGuard"
    ENVIRONMENT: str = "development"  # 'development' | 'production' | 'test'
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    PORT: int = 5000
    BACKEND_CORS_ORIGINS: str = (
        "http://localhost:5173,"
        "http://localhost:5174,"
        "http://127.0.0.1:5173,"
        "http://127.0.0.1:5174"
    )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.strip().lower() == "production"

    @property
    def cors_origins(self) -> list[str]:
        return [
            origin.strip()
            for origin in self.BACKEND_CORS_ORIGINS.split(",")
            if origin.strip()
        ]

    @model_validator(mode="after")
    def check_production_secret(self) -> "Settings":
        """Refuse to boot a production server with a missing or placeholder secret."""
        if self.is_production:
            secret = self.JWT_SECRET.strip()
            if not secret or secret == DEFAULT_JWT_SECRET:
                raise ValueError("JWT_SECRET must be set to a non-default value in production")
        return self


settings = Settings()
