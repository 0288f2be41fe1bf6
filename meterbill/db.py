import logging
import os

from alembic.config import Config
from sqlalchemy import Connection, create_engine, event
from sqlalchemy.engine import Engine, make_url

from alembic import command
from meterbill.settings import settings

logger = logging.getLogger(__name__)

_engine: Engine | None = None
_connection: Connection | None = None


def _sqlite_pragmas() -> list[str]:
    return [
        "PRAGMA foreign_keys = ON",
        f"PRAGMA busy_timeout = {int(settings.sqlite_busy_timeout_ms)}",
    ]


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        raw_url = settings.resolved_db_url()
        url = make_url(raw_url)
        backend = url.get_backend_name()
        if backend == "sqlite":
            _engine = create_engine(raw_url)
            pragmas = _sqlite_pragmas()

            @event.listens_for(_engine, "connect")
            def _apply_pragmas(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                for pragma in pragmas:
                    cursor.execute(pragma)
                cursor.close()

        else:
            _engine = create_engine(raw_url, pool_pre_ping=True, pool_recycle=1800)
        logger.info(
            "Database engine created: backend=%s url=%s",
            backend,
            url.render_as_string(hide_password=True),
        )
    return _engine


def get_connection() -> Connection:
    """Return a global singleton connection for the CLI process."""
    global _connection
    if _connection is None:
        _connection = get_engine().connect()
        logger.debug("Singleton DB connection created")
    return _connection


def _get_alembic_config() -> Config:
    """Build Alembic config pointing at the project root alembic.ini."""
    project_root = os.path.dirname(os.path.dirname(__file__))
    ini_path = os.path.join(project_root, "alembic.ini")
    if not os.path.exists(ini_path):
        ini_path = os.path.join(os.getcwd(), "alembic.ini")
    cfg = Config(ini_path)
    cfg.set_main_option("script_location", os.path.join(project_root, "alembic"))
    return cfg


def initialize_db() -> None:
    """Run all pending Alembic migrations."""
    logger.info("Running Alembic migrations")
    cfg = _get_alembic_config()
    command.upgrade(cfg, "head")
    logger.info("Migrations complete")
