"""
Tests for child and measurement validation.
"""

from datetime import date

import pytest

from growthlog.errors import FutureDate, InvalidDate, MissingField, OutOfRange
from growthlog.validation import validate_child, validate_measurement

TODAY = date(2024, 7, 1)


class TestValidateChild:
    """Test child validation."""

    def test_valid(self):
        result = validate_child("  Sam ", "2020-01-15", today=TODAY)
        assert result.ok
        assert result.error is None
        assert result.value == {"name": "Sam", "birth_date": date(2020, 1, 15)}

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_blank_name(self, name):
        result = validate_child(name, "2020-01-15", today=TODAY)
        assert not result.ok
        assert isinstance(result.error, MissingField)
        assert result.error.field == "name"

    def test_birth_date_optional_by_default(self):
        result = validate_child("Sam", None, today=TODAY)
        assert result.ok
        assert result.value["birth_date"] is None

    def test_birth_date_required_by_policy(self):
        result = validate_child("Sam", None, require_birth_date=True, today=TODAY)
        assert isinstance(result.error, MissingField)
        assert result.error.field == "birth_date"

    def test_unparsable_birth_date(self):
        result = validate_child("Sam", "15/01/2020", today=TODAY)
        assert isinstance(result.error, InvalidDate)
        assert result.error.field == "birth_date"

    def test_future_birth_date(self):
        result = validate_child("Sam", "2024-07-02", today=TODAY)
        assert isinstance(result.error, FutureDate)

    def test_birth_today_is_allowed(self):
        assert validate_child("Sam", TODAY, today=TODAY).ok

    def test_unwrap_raises(self):
        result = validate_child("", None, today=TODAY)
        with pytest.raises(MissingField):
            result.unwrap()


class TestValidateMeasurement:
    """Test measurement validation."""

    def test_valid(self):
        result = validate_measurement("2024-06-01", 110, "18.5", today=TODAY)
        assert result.ok
        assert result.value == {
            "date": date(2024, 6, 1),
            "height_cm": 110.0,
            "weight_kg": 18.5,
            "head_circumference_cm": None,
        }

    def test_future_date(self):
        result = validate_measurement("2099-01-01", 110, 18)
        assert not result.ok
        assert isinstance(result.error, FutureDate)

    def test_height_below_floor(self):
        result = validate_measurement("2024-01-01", 5, 18)
        assert isinstance(result.error, OutOfRange)
        assert result.error.field == "height_cm"

    def test_missing_date(self):
        result = validate_measurement(None, 110, 18, today=TODAY)
        assert isinstance(result.error, MissingField)
        assert result.error.field == "date"

    def test_invalid_date(self):
        result = validate_measurement("2024-02-30", 110, 18, today=TODAY)
        assert isinstance(result.error, InvalidDate)

    def test_compact_date_is_invalid(self):
        result = validate_measurement("20240601", 110, 18, today=TODAY)
        assert isinstance(result.error, InvalidDate)
        assert result.error.field == "date"

    @pytest.mark.parametrize("height,weight,field", [
        (19.9, 18, "height_cm"),
        (250.1, 18, "height_cm"),
        (0, 18, "height_cm"),
        (-110, 18, "height_cm"),
        ("tall", 18, "height_cm"),
        (True, 18, "height_cm"),
        (110, 0.5, "weight_kg"),
        (110, 301, "weight_kg"),
        (110, -1, "weight_kg"),
    ])
    def test_out_of_range(self, height, weight, field):
        result = validate_measurement("2024-01-01", height, weight, today=TODAY)
        assert isinstance(result.error, OutOfRange)
        assert result.error.field == field

    def test_bounds_are_inclusive(self):
        assert validate_measurement("2024-01-01", 20, 1, today=TODAY).ok
        assert validate_measurement("2024-01-01", 250, 300, today=TODAY).ok

    def test_height_and_weight_individually_optional(self):
        assert validate_measurement("2024-01-01", None, 18, today=TODAY).ok
        assert validate_measurement("2024-01-01", 110, None, today=TODAY).ok
        result = validate_measurement("2024-01-01", None, None, today=TODAY)
        assert result.ok
        assert result.value["date"] == date(2024, 1, 1)

    def test_head_circumference_must_be_positive(self):
        assert validate_measurement("2024-01-01", None, None, head_circumference_cm=48, today=TODAY).ok
        result = validate_measurement("2024-01-01", None, None, head_circumference_cm=-1, today=TODAY)
        assert isinstance(result.error, OutOfRange)
        assert result.error.field == "head_circumference_cm"
