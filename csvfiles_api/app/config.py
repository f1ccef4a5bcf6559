from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017/csv_crud_db")
    CSV_FILES_COLLECTION: str = os.getenv("CSV_FILES_COLLECTION", "csv_files")

    PAGINATION_DEFAULT: int = int(os.getenv("PAGINATION_DEFAULT", "20"))
    PAGINATION_MAX: int = int(os.getenv("PAGINATION_MAX", "100"))

    # 90 days
    INDEX_TTL_SECONDS: int = int(os.getenv("INDEX_TTL_SECONDS", "7776000"))
    INDEX_TTL_ENABLED: bool = _env_bool("INDEX_TTL_ENABLED", False)
    ENSURE_INDEXES_ON_STARTUP: bool = _env_bool("ENSURE_INDEXES_ON_STARTUP", True)

    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


config = Config()
