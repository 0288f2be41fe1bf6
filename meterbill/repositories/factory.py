from functools import cache

from meterbill.repositories.base import (
    BillRepository,
    ConsumerRepository,
    IdAllocator,
    ReadingRepository,
    TariffRepository,
)
from meterbill.settings import settings


@cache
def _memory_store() -> dict:
    """One set of in-memory repositories per process."""
    from meterbill.repositories.memory import (
        InMemoryBillRepository,
        InMemoryConsumerRepository,
        InMemoryIdAllocator,
        InMemoryReadingRepository,
        InMemoryTariffRepository,
    )

    return {
        "consumers": InMemoryConsumerRepository(),
        "readings": InMemoryReadingRepository(),
        "bills": InMemoryBillRepository(),
        "tariff": InMemoryTariffRepository(),
        "ids": InMemoryIdAllocator(),
    }


def get_consumer_repository() -> ConsumerRepository:
    if not settings.uses_database():
        return _memory_store()["consumers"]

    from meterbill.db import get_connection
    from meterbill.repositories.sqlalchemy import SQLAlchemyConsumerRepository

    return SQLAlchemyConsumerRepository(get_connection())


def get_reading_repository() -> ReadingRepository:
    if not settings.uses_database():
        return _memory_store()["readings"]

    from meterbill.db import get_connection
    from meterbill.repositories.sqlalchemy import SQLAlchemyReadingRepository

    return SQLAlchemyReadingRepository(get_connection())


def get_bill_repository() -> BillRepository:
    if not settings.uses_database():
        return _memory_store()["bills"]

    from meterbill.db import get_connection
    from meterbill.repositories.sqlalchemy import SQLAlchemyBillRepository

    return SQLAlchemyBillRepository(get_connection())


def get_tariff_repository() -> TariffRepository:
    if not settings.uses_database():
        return _memory_store()["tariff"]

    from meterbill.db import get_connection
    from meterbill.repositories.sqlalchemy import SQLAlchemyTariffRepository

    return SQLAlchemyTariffRepository(get_connection())


@cache
def get_id_allocator() -> IdAllocator:
    """Shared across services so the allocator's lock serializes every caller."""
    if not settings.uses_database():
        return _memory_store()["ids"]

    from meterbill.db import get_connection
    from meterbill.repositories.sqlalchemy import SQLAlchemyIdAllocator

    return SQLAlchemyIdAllocator(get_connection())
