from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SB2BACKUP_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    app_name: str = "db3 to sb2backup"
    host: str = "0.0.0.0"
    # 0 runs the command-line converter instead of the web server.
    port: int = 0
    log_level: str = "INFO"
    log_file: Path | None = Path("log.txt")
    tmp_dir: Path = Path("tmp")
    max_upload_bytes: int = 50 * 1024 * 1024
    # Answer failed uploads with 200 and the error text, as older releases did.
    legacy_error_status: bool = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
