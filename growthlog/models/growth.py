"""
Child and measurement models for Growthlog.

These models are the internal representation of stored records. Storage rows
are plain JSON-friendly dicts; use from_db / to_db to cross that boundary.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field, computed_field

from growthlog.metrics import compute_age_years, compute_bmi


def generate_id() -> str:
    """Generate a unique identifier."""
    return str(uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Measurement(BaseModel):
    """A single dated growth observation for a child."""
    id: str = Field(default_factory=generate_id)
    child_id: str
    date: date
    height_cm: float | None = None
    weight_kg: float | None = None
    head_circumference_cm: float | None = None
    note: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    seq: int = 0

    @computed_field
    @property
    def bmi(self) -> float | None:
        return compute_bmi(self.weight_kg, self.height_cm)

    @classmethod
    def from_db(cls, data: dict) -> "Measurement":
        """Create Measurement from a storage row. A stored bmi is ignored."""
        return cls.model_validate({k: v for k, v in data.items() if k != "bmi"})

    def to_db(self) -> dict:
        return self.model_dump(mode="json")

    def to_view(self) -> dict[str, Any]:
        """Public representation, dates as YYYY-MM-DD."""
        return self.model_dump(mode="json", exclude={"seq"})


class Child(BaseModel):
    """A tracked individual owned by one guardian."""
    id: str = Field(default_factory=generate_id)
    owner_id: str
    name: str
    gender: str | None = None
    birth_date: date | None = None
    created_at: datetime = Field(default_factory=utc_now)

    # Attached by the store on reads, never persisted with the child row
    measurements: list[Measurement] = Field(default_factory=list)

    def age_on(self, as_of: date | None = None) -> int | None:
        return compute_age_years(self.birth_date, as_of)

    @classmethod
    def from_db(cls, data: dict) -> "Child":
        """Create Child from a storage row."""
        return cls.model_validate({k: v for k, v in data.items() if k != "measurements"})

    def to_db(self) -> dict:
        return self.model_dump(mode="json", exclude={"measurements"})

    def to_view(self, as_of: date | None = None) -> dict[str, Any]:
        data = self.model_dump(mode="json", exclude={"measurements"})
        data["age_years"] = self.age_on(as_of)
        data["measurements"] = [m.to_view() for m in self.measurements]
        return data
