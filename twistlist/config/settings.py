from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """
    Application configuration settings.
    Loads from environment variables or .env file.
    """
    PROJECT_NAME: str = "TwistList"
    PROJECT_VERSION: str = "1.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str

    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    # Access tokens are short-lived; clients renew them through /auth/refresh
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15

    # Session cookie
    AUTH_COOKIE_NAME: str = "auth_token"
    AUTH_COOKIE_MAX_AGE: int = 86400
    AUTH_COOKIE_SECURE: bool = True
    AUTH_COOKIE_SAMESITE: str = "none"

    ALLOWED_ORIGINS: list[str] = [
        "http://localhost:3001",
        "http://127.0.0.1:3001",
    ]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

settings = Settings()
