from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Dict


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///toggle_rbac.db"

    # 실험적 기능 플래그 (예: EXPERIMENTAL='{"rbac": true}')
    experimental: Dict[str, bool] = {}

    # App
    app_name: str = "toggle-rbac"
    host: str = ""
    port: int = 8000
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",
        extra="ignore"
    )


settings = Settings()
