import logging
import sys

from meterbill.settings import settings

logger = logging.getLogger(__name__)

TEXT_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging() -> None:
    """Configure the root logger based on settings.

    Call once at startup.  Call ``reconfigure()`` after any operation that
    may override the root logger (e.g. Alembic ``fileConfig``).
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)

    if settings.log_json:
        from pythonjsonlogger.json import JsonFormatter

        handler.setFormatter(
            JsonFormatter(
                fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
                rename_fields={"asctime": "timestamp", "levelname": "level"},
            )
        )
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    # sqlalchemy.engine emits every statement at INFO.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if settings.log_sql else logging.WARNING)
    logger.debug("Logging configured: level=%s storage=%s", logging.getLevelName(level), settings.storage_backend)


# Alias, used after Alembic migrations may have overridden logging config.
reconfigure = configure_logging
