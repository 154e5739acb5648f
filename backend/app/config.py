from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ---- App ----
    app_env: str = "local"  # local|dev|prod
    database_url: str = "sqlite:///./casa.db"
    app_version: str = "2026-10-18.v1"

    # ---- CORS (used by main.py) ----
    cors_allow_origins: list[str] | str = ["*"]

    # ---- Heartbeat auth ----
    # Scheduled runs present X-Cron-Secret; unset disables that path.
    cron_secret: str | None = None

    # Bearer tokens are HS256 JWTs signed by the hosted auth service.
    jwt_secret: str = "dev-change-me"
    jwt_audience: str | None = "authenticated"

    # ---- Celery ----
    celery_broker_url: str | None = None
    celery_result_backend: str | None = None
    heartbeat_interval_minutes: int = 15

    # ---- Logging ----
    log_level: str = "INFO"
    sql_log_level: str = "WARNING"

    def model_post_init(self, __context) -> None:
        env = (self.app_env or "local").strip().lower()
        is_prod = env in ("prod", "production")

        if is_prod:
            if not self.cron_secret and self.jwt_secret == "dev-change-me":
                raise ValueError("SECURITY: set CRON_SECRET or a real JWT_SECRET in prod")

            origins = self.cors_allow_origins
            if origins == "*" or origins == ["*"] or (isinstance(origins, str) and "*" in origins):
                raise ValueError("SECURITY: cors_allow_origins wildcard is not allowed in prod")


settings = Settings()
