from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import List, Union
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    # App
    APP_ENV: str = "development"
    PORT: int = 4000
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: Union[str, List[str]] = "http://localhost:3000,http://127.0.0.1:3000"
    SITE_TIMEZONE: str = "Asia/Seoul"

    # Database
    DATABASE_URL: str = "sqlite://./dev.db"
    DB_POOL_SIZE: int = 10

    # Storage
    STORAGE_DRIVER: str = "local"
    STORAGE_DIR: str = "./storage"
    PUBLIC_BASE_URL: str = "http://localhost:4000"
    AWS_REGION: str = "ap-northeast-2"
    AWS_S3_BUCKET_NAME: str = "qwerfansite"
    S3_ENDPOINT_URL: str | None = None
    S3_PUBLIC_BASE_URL: str | None = None

    # Uploads (bytes)
    ALBUM_MAX_UPLOAD: int = 5 * 1024 * 1024
    GALLERY_MAX_UPLOAD: int = 30 * 1024 * 1024
    SETTINGS_MAX_UPLOAD: int = 20 * 1024 * 1024
    MEMBER_MAX_UPLOAD: int = 10 * 1024 * 1024
    ALBUM_COVER_WIDTH: int = 360
    ALBUM_COVER_HEIGHT: int = 280

    # Observability
    METRICS_ENABLED: bool = False
    SENTRY_DSN: str = ""

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(',') if origin.strip()]
        return v

    @field_validator('STORAGE_DRIVER')
    @classmethod
    def check_storage_driver(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("local", "s3"):
            raise ValueError('STORAGE_DRIVER must be "local" or "s3"')
        return v

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
