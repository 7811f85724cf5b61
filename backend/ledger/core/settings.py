import os


def _getenv(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None:
        return default
    value = value.strip()
    return value if value else default


def _getenv_bool(name: str, default: bool = False) -> bool:
    raw = _getenv(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "y", "on"}


def _getenv_int(name: str, default: int) -> int:
    raw = _getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


class Settings:
    def __init__(self) -> None:
        self.environment = (_getenv("ENVIRONMENT", "development") or "development").lower()
        self.database_url = _getenv("DATABASE_URL", "sqlite:///./ledger.db") or "sqlite:///./ledger.db"
        self.db_auto_create = _getenv_bool("DB_AUTO_CREATE", default=True)
        self.cors_allow_origins = _getenv("CORS_ALLOW_ORIGINS")
        self.log_level = (_getenv("LOG_LEVEL", "INFO") or "INFO").upper()

        self.import_max_file_mb = float(_getenv("IMPORT_MAX_FILE_MB", "10") or "10")
        self.import_preview_row_limit = max(1, _getenv_int("IMPORT_PREVIEW_ROW_LIMIT", 100))

    @property
    def import_max_file_bytes(self) -> int:
        return int(self.import_max_file_mb * 1024 * 1024)

    def resolved_cors_origins(self) -> list[str]:
        raw = self.cors_allow_origins
        if raw is None:
            return ["http://localhost:5173", "http://localhost:8000"]
        if raw.strip() == "*":
            return ["*"]
        origins = [o.strip() for o in raw.split(",") if o.strip()]
        return origins


settings = Settings()
