import os
from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url

from meterbill.constants import DEFAULT_FIXED_CHARGE, DEFAULT_SLABS, DEFAULT_TAX_RATE


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="METERBILL_", extra="ignore")

    storage_backend: str = "sqlite"
    db_url: str = "sqlite:///meterbill.db"
    sqlite_busy_timeout_ms: int = 5000

    default_slabs: str = DEFAULT_SLABS
    default_fixed_charge: Decimal = DEFAULT_FIXED_CHARGE
    default_tax_rate: Decimal = DEFAULT_TAX_RATE

    bootstrap_sample_data: bool = True

    log_level: str = "INFO"
    log_json: bool = False
    log_sql: bool = False

    def uses_database(self) -> bool:
        backend = self.storage_backend.lower()
        if backend not in ("sqlite", "memory"):
            raise ValueError(f"Unsupported storage backend: {self.storage_backend}")
        return backend == "sqlite"

    def resolved_db_url(self) -> str:
        """Return ``db_url`` with a SQLite file path expanded to an absolute path."""
        url = make_url(self.db_url)
        if url.get_backend_name() != "sqlite" or url.database in (None, "", ":memory:"):
            return self.db_url
        path = os.path.abspath(os.path.expanduser(url.database))
        return url.set(database=path).render_as_string(hide_password=False)


settings = Settings()
