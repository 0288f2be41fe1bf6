from datetime import datetime

import pytest
from pydantic import ValidationError

from meterbill.models.reading import MeterReading


class TestMeterReading:
    def test_negative_units_rejected(self):
        with pytest.raises(ValidationError):
            MeterReading(consumer_id=1, taken_at=datetime(2025, 8, 1), units=-5)

    def test_frozen(self):
        reading = MeterReading(consumer_id=1, taken_at=datetime(2025, 8, 1), units=5)
        with pytest.raises(ValidationError):
            reading.units = 10
