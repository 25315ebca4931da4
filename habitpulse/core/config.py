from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "postgresql://habitpulse:habitpulse@db:5432/habitpulse"
    APP_ENV: str = "development"

    # Comma-separated allowed origins, or "*" to allow all.
    # Example: "https://myapp.com,https://api.myapp.com"
    CORS_ORIGINS: str = "*"

    # "console" for human-readable output, "json" for log shippers.
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"

    # Requests without an X-User-Id header are scoped to this user.
    DEFAULT_USER_ID: str = "local"

    DEFAULT_WEEKLY_TARGET: int = 7
    DEFAULT_MONTHLY_TARGET: int = 30

    # Upper bound on the backward streak walk, in days.
    STREAK_LOOKBACK_DAYS: int = 3650

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def log_json(self) -> bool:
        return self.LOG_FORMAT.strip().lower() == "json"


settings = Settings()
