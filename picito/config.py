from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    app_host: str = "0.0.0.0"
    app_port: int = 8000

    database_url: str = "postgresql+psycopg://app:app@db:5432/picito"
    redis_url: str = "redis://redis:6379/0"

    jwt_secret: str = "dev-secret-change-me"
    jwt_issuer: str = "picito"
    jwt_audience: str = "picito"
    session_expires_hours: int = 24
    session_cookie_name: str = "token"

    # logins with these emails are promoted to global admin
    admin_emails: list[str] = []

    fallback_version: str = "2.10.0"

    log_level: str = "info"
    log_format: str = "json"

    # rate limiting (redis)
    rate_limit_enabled: bool = True
    rate_limit_login_per_min: int = 20

settings = Settings()
