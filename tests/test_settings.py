import os
from decimal import Decimal

import pytest

from meterbill.settings import Settings


@pytest.fixture()
def clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("METERBILL_"):
            monkeypatch.delenv(key, raising=False)


class TestSettings:
    def test_defaults(self, clean_env):
        s = Settings(_env_file=None)
        assert s.storage_backend == "sqlite"
        assert s.db_url == "sqlite:///meterbill.db"
        assert s.default_slabs == "100:3.5,200:4.5,inf:6.0"
        assert s.default_fixed_charge == Decimal("50.0")
        assert s.default_tax_rate == Decimal("0.05")
        assert s.bootstrap_sample_data is True
        assert s.log_level == "INFO"
        assert s.log_json is False
        assert s.log_sql is False
        assert s.sqlite_busy_timeout_ms == 5000

    def test_env_override(self, clean_env, monkeypatch):
        monkeypatch.setenv("METERBILL_DB_URL", "sqlite:////tmp/other.db")
        monkeypatch.setenv("METERBILL_STORAGE_BACKEND", "memory")
        monkeypatch.setenv("METERBILL_DEFAULT_TAX_RATE", "0.18")
        monkeypatch.setenv("METERBILL_BOOTSTRAP_SAMPLE_DATA", "false")
        monkeypatch.setenv("METERBILL_SQLITE_BUSY_TIMEOUT_MS", "250")
        s = Settings(_env_file=None)
        assert s.db_url == "sqlite:////tmp/other.db"
        assert s.storage_backend == "memory"
        assert s.default_tax_rate == Decimal("0.18")
        assert s.bootstrap_sample_data is False
        assert s.sqlite_busy_timeout_ms == 250


class TestUsesDatabase:
    def test_sqlite(self, clean_env):
        assert Settings(_env_file=None).uses_database() is True

    def test_memory_case_insensitive(self, clean_env):
        assert Settings(_env_file=None, storage_backend="Memory").uses_database() is False

    def test_unsupported(self, clean_env):
        with pytest.raises(ValueError, match="Unsupported storage backend"):
            Settings(_env_file=None, storage_backend="postgres").uses_database()


class TestResolvedDbUrl:
    def test_relative_sqlite_path_made_absolute(self, clean_env, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        s = Settings(_env_file=None, db_url="sqlite:///bills.db")
        assert s.resolved_db_url() == f"sqlite:///{tmp_path / 'bills.db'}"

    def test_home_is_expanded(self, clean_env, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        s = Settings(_env_file=None, db_url="sqlite:///~/meterbill.db")
        assert s.resolved_db_url() == f"sqlite:///{tmp_path / 'meterbill.db'}"

    def test_in_memory_unchanged(self, clean_env):
        s = Settings(_env_file=None, db_url="sqlite:///:memory:")
        assert s.resolved_db_url() == "sqlite:///:memory:"

    def test_server_url_unchanged(self, clean_env):
        s = Settings(_env_file=None, db_url="postgresql://u:p@host/db")
        assert s.resolved_db_url() == "postgresql://u:p@host/db"
