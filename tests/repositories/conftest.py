import pytest
from sqlalchemy import Connection

from meterbill.repositories.sqlalchemy import (
    SQLAlchemyBillRepository,
    SQLAlchemyConsumerRepository,
    SQLAlchemyIdAllocator,
    SQLAlchemyReadingRepository,
    SQLAlchemyTariffRepository,
)


@pytest.fixture()
def consumer_repo(db_connection: Connection) -> SQLAlchemyConsumerRepository:
    return SQLAlchemyConsumerRepository(db_connection)


@pytest.fixture()
def reading_repo(db_connection: Connection) -> SQLAlchemyReadingRepository:
    return SQLAlchemyReadingRepository(db_connection)


@pytest.fixture()
def bill_repo(db_connection: Connection) -> SQLAlchemyBillRepository:
    return SQLAlchemyBillRepository(db_connection)


@pytest.fixture()
def tariff_repo(db_connection: Connection) -> SQLAlchemyTariffRepository:
    return SQLAlchemyTariffRepository(db_connection)


@pytest.fixture()
def id_allocator(db_connection: Connection) -> SQLAlchemyIdAllocator:
    return SQLAlchemyIdAllocator(db_connection)
