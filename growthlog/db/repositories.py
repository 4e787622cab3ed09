"""
Repository classes for storage operations.

Each repository handles CRUD operations for a specific table and converts
between storage rows and models, providing a clean interface for the rest of
the application.
"""

from typing import Optional

from growthlog.db.backends import StorageBackend
from growthlog.models import Child, Guardian, Measurement


class BaseRepository:
  """Base class for all repositories."""

  table_name: str = ""

  def __init__(self, backend: StorageBackend):
    self._backend = backend

  @property
  def backend(self) -> StorageBackend:
    return self._backend

  def _get_row(self, row_id: str) -> Optional[dict]:
    return self._backend.get(self.table_name, str(row_id))

  def delete(self, row_id: str) -> bool:
    """Delete a row by id."""
    return self._backend.delete(self.table_name, str(row_id))


class GuardianRepository(BaseRepository):
  """Repository for guardian accounts."""

  table_name = "guardians"

  def get_by_id(self, guardian_id: str) -> Optional[Guardian]:
    """Get guardian by ID."""
    row = self._get_row(guardian_id)
    return Guardian.from_db(row) if row else None

  def create(self) -> Guardian:
    """Create a new guardian."""
    guardian = Guardian()
    row = self._backend.insert(self.table_name, guardian.to_db())
    return Guardian.from_db(row)


class ChildRepository(BaseRepository):
  """Repository for child records."""

  table_name = "children"

  def get_by_id(self, child_id: str) -> Optional[Child]:
    """Get child by ID."""
    row = self._get_row(child_id)
    return Child.from_db(row) if row else None

  def get_by_owner(self, owner_id: str) -> list[Child]:
    """Get all children for a guardian, oldest first."""
    rows = self._backend.select(self.table_name, {"owner_id": str(owner_id)})
    children = [Child.from_db(r) for r in rows]
    return sorted(children, key=lambda c: c.created_at)

  def create(self, child: Child) -> Child:
    """Create a new child."""
    row = self._backend.insert(self.table_name, child.to_db())
    return Child.from_db(row)

  def update(self, child_id: str, **kwargs) -> Optional[Child]:
    """Update child fields."""
    row = self._backend.update(self.table_name, str(child_id), kwargs)
    return Child.from_db(row) if row else None


class MeasurementRepository(BaseRepository):
  """Repository for growth measurements."""

  table_name = "measurements"

  def get_by_id(self, measurement_id: str) -> Optional[Measurement]:
    """Get measurement by ID."""
    row = self._get_row(measurement_id)
    return Measurement.from_db(row) if row else None

  def get_by_child(self, child_id: str) -> list[Measurement]:
    """Get all measurements for a child, most recent first."""
    rows = self._backend.select(self.table_name, {"child_id": str(child_id)})
    measurements = [Measurement.from_db(r) for r in rows]
    # Two stable sorts: insertion order, then newest date first
    measurements.sort(key=lambda m: m.seq)
    measurements.sort(key=lambda m: m.date, reverse=True)
    return measurements

  def next_seq(self, child_id: str) -> int:
    """Next insertion sequence number for a child's measurements."""
    rows = self._backend.select(self.table_name, {"child_id": str(child_id)})
    return max((r.get("seq", 0) for r in rows), default=0) + 1

  def create(self, measurement: Measurement) -> Measurement:
    """Create a new measurement."""
    row = self._backend.insert(self.table_name, measurement.to_db())
    return Measurement.from_db(row)

  def update(self, measurement_id: str, measurement: Measurement) -> Optional[Measurement]:
    """Replace a measurement's mutable fields, including the derived bmi column."""
    changes = measurement.to_db()
    for key in ("id", "child_id", "created_at", "seq"):
      changes.pop(key, None)
    row = self._backend.update(self.table_name, str(measurement_id), changes)
    return Measurement.from_db(row) if row else None

  def delete_by_child(self, child_id: str) -> int:
    """Delete every measurement of a child."""
    return self._backend.delete_where(self.table_name, {"child_id": str(child_id)})
