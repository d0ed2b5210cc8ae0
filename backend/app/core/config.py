from fastapi import Request
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    app_name: str = "manga_reader"
    environment: str = "dev"
    api_host: str = "0.0.0.0"
    api_port: int = 3001
    database_url: str = "sqlite:///./mangas.db"

    uploads_dir: str = "uploads"
    staging_dir: str = "temp_zips"
    uploads_url_prefix: str = "/uploads"

    default_page_size: int = 10
    max_page_size: int = 100
    rate_limit_requests: int = 60
    rate_limit_window_seconds: float = 60.0
    upload_rate_limit_requests: int = 6

    log_level: str = "INFO"


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
