from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="SPICEPOS_", extra="ignore")

    DATA_DIR: Path = Path("data")
    PRODUCTS_FILE: str = "products.json"
    SALES_FILE: str = "sales.json"
    LOCK_TIMEOUT: float = 10.0  # seconds; -1 waits forever
    TIMEZONE: str = "Asia/Colombo"
    LOG_LEVEL: str = "INFO"
    HOST: str = "127.0.0.1"
    PORT: int = 8085

    @property
    def products_path(self) -> Path:
        return self.DATA_DIR / self.PRODUCTS_FILE

    @property
    def sales_path(self) -> Path:
        return self.DATA_DIR / self.SALES_FILE


@lru_cache
def get_settings() -> Settings:
    return Settings()
