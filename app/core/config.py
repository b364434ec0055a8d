from dotenv import load_dotenv
from pydantic import model_validator
from pydantic_settings import BaseSettings

load_dotenv(override=True)

DEFAULT_ENCODE_KEY = "nebula-cdn-development-secret-key-change-me"


class Settings(BaseSettings):
    PROJECT_NAME: str = "Nebula CDN"
    # Application settings
    PORT: int = 8000
    HOST: str = "127.0.0.1"
    VERSION: str = "1.0.0"
    DOC_PASSWORD: str | None = None

    # SSL settings
    SSL_KEY: str | None = None
    SSL_CERT: str | None = None

    # development | test | production
    ENVIRONMENT: str = "development"
    # only honoured when ENVIRONMENT == "development"
    SKIP_AUTH: bool = False

    # User store: memory | sql
    USER_STORE: str = "memory"
    DATABASE_URL: str = "sqlite:///./nebula_cdn.db"

    # Login configuration
    ENCODE_KEY: str = DEFAULT_ENCODE_KEY
    ENCODE_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_SECONDS: int = 24 * 60 * 60  # 24 hours

    # Debug settings
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.strip().lower() == "production"

    @property
    def skip_auth_enabled(self) -> bool:
        return self.SKIP_AUTH and self.ENVIRONMENT.strip().lower() == "development"

    @model_validator(mode="after")
    def _check_production_secret(self) -> "Settings":
        if self.is_production and (not self.ENCODE_KEY or self.ENCODE_KEY == DEFAULT_ENCODE_KEY):
            raise ValueError("ENCODE_KEY must be set to a non-default value in production")
        return self


# Instantiate the settings
settings = Settings()


def get_settings() -> Settings:
    """Dependency hook so handlers read configuration at request time."""
    return settings
