from datetime import date
from unittest.mock import MagicMock

import pytest
from freezegun import freeze_time

from meterbill.services.consumer_service import ConsumerService


class TestAddConsumer:
    def test_assigns_sequential_ids(self, services):
        first = services.consumers.add_consumer("Aman Sharma")
        second = services.consumers.add_consumer("Seema Roy")
        assert (first.id, second.id) == (1, 2)

    def test_strips_fields(self, services):
        consumer = services.consumers.add_consumer("  Aman Sharma ", " Mumbai ", " 9876500001 ", " MTR-1001 ")
        assert consumer.name == "Aman Sharma"
        assert consumer.address == "Mumbai"
        assert consumer.phone == "9876500001"
        assert consumer.meter_number == "MTR-1001"

    @freeze_time("2025-03-01 09:00:00")
    def test_created_at_defaults_to_today(self, services):
        assert services.consumers.add_consumer("Aman").created_at == date(2025, 3, 1)

    def test_explicit_created_at(self, services):
        joined = date(2024, 1, 15)
        assert services.consumers.add_consumer("Aman", created_at=joined).created_at == joined

    def test_blank_name(self, services):
        with pytest.raises(ValueError, match="name is required"):
            services.consumers.add_consumer("   ")

    def test_allocates_from_consumer_sequence(self):
        allocator = MagicMock()
        allocator.next_id.return_value = 7
        consumer_repo = MagicMock()
        consumer_repo.create.side_effect = lambda consumer: consumer
        service = ConsumerService(consumer_repo, MagicMock(), MagicMock(), allocator)

        consumer = service.add_consumer("Aman")

        allocator.next_id.assert_called_once_with("consumers")
        assert consumer.id == 7


class TestQueries:
    def test_list_ordered_by_id(self, services):
        services.consumers.add_consumer("B")
        services.consumers.add_consumer("A")
        assert [c.name for c in services.consumers.list_consumers()] == ["B", "A"]

    def test_get_missing(self, services):
        assert services.consumers.get_consumer(42) is None


class TestUpdateConsumer:
    def test_blank_keeps_stored_values(self, services):
        consumer = services.consumers.add_consumer("Aman", "Mumbai", "111", "MTR-1")
        updated = services.consumers.update_consumer(consumer.id, phone="222", address="  ")
        assert updated.name == "Aman"
        assert updated.address == "Mumbai"
        assert updated.phone == "222"
        assert updated.meter_number == "MTR-1"
        assert services.consumers.get_consumer(consumer.id).phone == "222"

    def test_unknown(self, services):
        with pytest.raises(ValueError, match="not found"):
            services.consumers.update_consumer(42, name="X")


class TestDeleteConsumer:
    def test_deletes_consumer_and_readings(self, services):
        consumer = services.consumers.add_consumer("Aman")
        services.readings.record_reading(consumer.id, 100, "2025-08-01 10:00")

        services.consumers.delete_consumer(consumer.id)

        assert services.consumers.get_consumer(consumer.id) is None
        assert services.reading_repo.list_for_consumer(consumer.id) == []

    def test_refused_when_bills_exist(self, services):
        consumer = services.consumers.add_consumer("Aman")
        services.readings.record_reading(consumer.id, 1000, "2025-07-31 23:00")
        services.readings.record_reading(consumer.id, 1200, "2025-09-01 01:00")
        services.bills.generate(consumer.id, "2025-08")

        with pytest.raises(ValueError, match="with bills"):
            services.consumers.delete_consumer(consumer.id)
        assert services.consumers.get_consumer(consumer.id) is not None
        assert len(services.readings.list_readings(consumer.id)) == 2

    def test_unknown(self, services):
        with pytest.raises(ValueError, match="not found"):
            services.consumers.delete_consumer(42)
