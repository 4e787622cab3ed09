"""
Growth store: the authoritative collection of children and measurements.

The store owns identity generation, read ordering and cascade deletes. Every
write is validated in full (patches are merged onto the stored record first)
before the backend is touched, and multi-row writes run inside the backend's
atomic() block.
"""

import logging
from datetime import date
from typing import Any, Callable, Optional

from growthlog.db.backends import StorageBackend
from growthlog.db.repositories import ChildRepository, MeasurementRepository
from growthlog.errors import NotFound, ReadOnlyField, ValidationError
from growthlog.models import Child, Measurement
from growthlog.validation import validate_child, validate_measurement


logger = logging.getLogger(__name__)

CHILD_FIELDS = ("name", "gender", "birth_date")
MEASUREMENT_FIELDS = ("date", "height_cm", "weight_kg", "head_circumference_cm", "note")

# Server-owned or derived; never accepted from a caller
READ_ONLY_FIELDS = ("id", "owner_id", "child_id", "bmi", "age_years", "created_at", "seq", "measurements")


def check_fields(fields: dict, allowed: tuple[str, ...]) -> None:
  """Reject read-only and unknown keys in caller-supplied fields."""
  for key in fields:
    if key in READ_ONLY_FIELDS:
      raise ReadOnlyField(key)
    if key not in allowed:
      raise ValidationError(key, f"Unknown field '{key}'")


def _clean_text(value: Any) -> Optional[str]:
  if value is None:
    return None
  text = str(value).strip()
  return text or None


class GrowthStore:
  """Children and measurements over a pluggable storage backend."""

  def __init__(
    self,
    backend: StorageBackend,
    *,
    require_birth_date: bool = False,
    today: Callable[[], date] = date.today,
  ):
    self.backend = backend
    self.require_birth_date = require_birth_date
    self.today = today
    self.children = ChildRepository(backend)
    self.measurements = MeasurementRepository(backend)

  # ---------------------------------------------------------------------------
  # Children
  # ---------------------------------------------------------------------------

  def _validated_child(self, fields: dict) -> dict:
    result = validate_child(
      fields.get("name"),
      fields.get("birth_date"),
      require_birth_date=self.require_birth_date,
      today=self.today(),
    )
    value = result.unwrap()
    value["gender"] = _clean_text(fields.get("gender"))
    return value

  def _attach(self, child: Child, verbose: bool) -> Child:
    history = self.measurements.get_by_child(child.id)
    child.measurements = history if verbose else history[:1]
    return child

  def create_child(self, owner_id: str, fields: dict) -> Child:
    """Create a child owned by owner_id, with no measurements."""
    check_fields(fields, CHILD_FIELDS)
    value = self._validated_child(fields)
    child = self.children.create(Child(owner_id=owner_id, **value))
    logger.debug("Created child %s for guardian %s", child.id, owner_id)
    return child

  def find_child(self, child_id: str) -> Optional[Child]:
    """Look up a child regardless of owner."""
    return self.children.get_by_id(child_id)

  def get_child(self, child_id: str, owner_id: str, *, verbose: bool = True) -> Child:
    """Get an owned child with its measurements (full history when verbose)."""
    child = self.children.get_by_id(child_id)
    if child is None or child.owner_id != owner_id:
      raise NotFound("child", child_id)
    return self._attach(child, verbose)

  def list_children(self, owner_id: str, *, verbose: bool = False) -> list[Child]:
    """
    All children of a guardian in creation order.

    Without verbose each child carries only its most recent measurement.
    """
    return [self._attach(c, verbose) for c in self.children.get_by_owner(owner_id)]

  def update_child(self, child_id: str, owner_id: str, patch: dict) -> Child:
    """Apply only the fields present in patch. An empty patch writes nothing."""
    check_fields(patch, CHILD_FIELDS)
    child = self.get_child(child_id, owner_id)
    if not patch:
      return child

    merged = {
      "name": child.name,
      "gender": child.gender,
      "birth_date": child.birth_date,
      **patch,
    }
    value = self._validated_child(merged)
    changes = {
      "name": value["name"],
      "gender": value["gender"],
      "birth_date": value["birth_date"].isoformat() if value["birth_date"] else None,
    }
    with self.backend.atomic():
      updated = self.children.update(child_id, **changes)
      if updated is None:
        raise NotFound("child", child_id)
    return self._attach(updated, verbose=True)

  def delete_child(self, child_id: str, owner_id: str) -> None:
    """Delete an owned child and all of its measurements."""
    child = self.children.get_by_id(child_id)
    if child is None or child.owner_id != owner_id:
      raise NotFound("child", child_id)

    with self.backend.atomic():
      removed = self.measurements.delete_by_child(child_id)
      self.children.delete(child_id)
    logger.debug("Deleted child %s and %d measurements", child_id, removed)

  # ---------------------------------------------------------------------------
  # Measurements
  # ---------------------------------------------------------------------------

  def _validated_measurement(self, fields: dict) -> dict:
    result = validate_measurement(
      fields.get("date"),
      fields.get("height_cm"),
      fields.get("weight_kg"),
      head_circumference_cm=fields.get("head_circumference_cm"),
      today=self.today(),
    )
    value = result.unwrap()
    value["note"] = _clean_text(fields.get("note"))
    return value

  def create_measurement(self, child_id: str, fields: dict) -> Measurement:
    """Record a measurement for an existing child."""
    check_fields(fields, MEASUREMENT_FIELDS)
    if self.children.get_by_id(child_id) is None:
      raise NotFound("child", child_id)
    value = self._validated_measurement(fields)

    with self.backend.atomic():
      seq = self.measurements.next_seq(child_id)
      measurement = self.measurements.create(
        Measurement(child_id=child_id, seq=seq, **value)
      )
    logger.debug("Created measurement %s for child %s", measurement.id, child_id)
    return measurement

  def get_measurement(self, measurement_id: str) -> Measurement:
    measurement = self.measurements.get_by_id(measurement_id)
    if measurement is None:
      raise NotFound("measurement", measurement_id)
    return measurement

  def update_measurement(self, measurement_id: str, patch: dict) -> Measurement:
    """
    Apply a partial update. An explicit None clears an optional field.

    The merged record is re-validated and bmi follows the new height/weight.
    """
    check_fields(patch, MEASUREMENT_FIELDS)
    current = self.get_measurement(measurement_id)
    if not patch:
      return current

    merged = current.model_dump(include=set(MEASUREMENT_FIELDS))
    merged.update(patch)
    value = self._validated_measurement(merged)
    candidate = current.model_copy(update=value)

    with self.backend.atomic():
      updated = self.measurements.update(measurement_id, candidate)
      if updated is None:
        raise NotFound("measurement", measurement_id)
    return updated

  def delete_measurement(self, measurement_id: str) -> None:
    if not self.measurements.delete(measurement_id):
      raise NotFound("measurement", measurement_id)
