from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # DB
    DATABASE_URL: str = "sqlite:///./database.db"

    # Remote catalog
    CATALOG_BASE_URL: str = "http://localhost:8080"
    CATALOG_LIST_PATH: str = "/products"
    CATALOG_DETAIL_PATH: str = "/products/{product_id}"
    CATALOG_TIMEOUT_SECONDS: float = 60.0
    CATALOG_CACHE_TTL_SECONDS: float = 300.0

    # Backup snapshots
    BACKUP_SCHEDULE: List[str] = ["09:41", "23:43"]
    BACKUP_TIMEZONE: str = "UTC"
    BACKUP_CHUNK_SIZE: int = 200
    SCHEDULER_ENABLED: bool = True

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
