"""
Error taxonomy for Growthlog.

Validation errors are caller-correctable and always name the offending field.
Ownership and lookup errors carry the entity kind and id. Storage errors wrap
infrastructure faults raised by a backend.
"""

from typing import Optional


class GrowthlogError(Exception):
  """Base class for all domain errors."""

  code: str = "error"

  def to_dict(self) -> dict:
    """Serialize for a presentation layer."""
    return {"error": self.code, "detail": str(self)}


# -----------------------------------------------------------------------------
# Validation
# -----------------------------------------------------------------------------

class ValidationError(GrowthlogError):
  """A field failed validation."""

  code = "validation_error"

  def __init__(self, field: str, message: Optional[str] = None):
    self.field = field
    super().__init__(message or f"Invalid value for '{field}'")

  def to_dict(self) -> dict:
    data = super().to_dict()
    data["field"] = self.field
    return data


class MissingField(ValidationError):
  code = "missing_field"

  def __init__(self, field: str, message: Optional[str] = None):
    super().__init__(field, message or f"'{field}' is required")


class InvalidDate(ValidationError):
  code = "invalid_date"

  def __init__(self, field: str, message: Optional[str] = None):
    super().__init__(field, message or f"'{field}' is not a valid YYYY-MM-DD date")


class FutureDate(ValidationError):
  code = "future_date"

  def __init__(self, field: str, message: Optional[str] = None):
    super().__init__(field, message or f"'{field}' cannot be in the future")


class OutOfRange(ValidationError):
  code = "out_of_range"


class ReadOnlyField(ValidationError):
  """Client tried to set a server-owned field (id, owner, derived metrics)."""

  code = "read_only_field"

  def __init__(self, field: str, message: Optional[str] = None):
    super().__init__(field, message or f"'{field}' cannot be set by the client")


# -----------------------------------------------------------------------------
# Lookup and ownership
# -----------------------------------------------------------------------------

class NotFound(GrowthlogError):
  code = "not_found"

  def __init__(self, entity: str, entity_id: Optional[str] = None):
    self.entity = entity
    self.entity_id = entity_id
    super().__init__(f"{entity.capitalize()} not found")


class Forbidden(GrowthlogError):
  code = "forbidden"

  def __init__(self, entity: str = "resource", entity_id: Optional[str] = None):
    self.entity = entity
    self.entity_id = entity_id
    super().__init__("Access denied")


# -----------------------------------------------------------------------------
# Infrastructure
# -----------------------------------------------------------------------------

class StorageUnavailable(GrowthlogError):
  """The durable storage collaborator failed. Never retried by the core."""

  code = "storage_unavailable"
