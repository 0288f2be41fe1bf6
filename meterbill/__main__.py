from meterbill.cli.app import main_menu
from meterbill.db import initialize_db
from meterbill.logging import configure_logging, reconfigure
from meterbill.settings import settings


def main() -> None:
    configure_logging()
    if settings.uses_database():
        initialize_db()
        reconfigure()
    main_menu()


if __name__ == "__main__":
    main()
