"""
Field and cross-field validation for child and measurement records.

Validators are pure: they never touch storage and return a ValidationResult
holding either the normalized values or the first error found.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from growthlog.errors import (
  FutureDate,
  InvalidDate,
  MissingField,
  OutOfRange,
  ValidationError,
)
from growthlog.metrics import parse_date


# Plausibility bounds, inclusive
HEIGHT_CM_RANGE = (20.0, 250.0)
WEIGHT_KG_RANGE = (1.0, 300.0)


@dataclass(frozen=True)
class ValidationResult:
  """Outcome of a validation: either ok with values, or an error."""

  ok: bool
  value: dict = field(default_factory=dict)
  error: Optional[ValidationError] = None

  @classmethod
  def success(cls, **value) -> "ValidationResult":
    return cls(ok=True, value=value)

  @classmethod
  def failure(cls, error: ValidationError) -> "ValidationResult":
    return cls(ok=False, error=error)

  def unwrap(self) -> dict:
    """Return the normalized values or raise the validation error."""
    if not self.ok:
      raise self.error
    return dict(self.value)


def _check_date(field_name: str, raw: Any, today: date, required: bool) -> date | None:
  if raw is None or (isinstance(raw, str) and not raw.strip()):
    if required:
      raise MissingField(field_name)
    return None

  try:
    parsed = parse_date(raw)
  except ValueError:
    raise InvalidDate(field_name) from None

  if parsed > today:
    raise FutureDate(field_name)
  return parsed


def _check_number(field_name: str, raw: Any, bounds: tuple[float, float] | None) -> float | None:
  if raw is None or (isinstance(raw, str) and not raw.strip()):
    return None
  if isinstance(raw, bool):
    raise OutOfRange(field_name, f"'{field_name}' must be a number")

  try:
    value = float(raw)
  except (TypeError, ValueError):
    raise OutOfRange(field_name, f"'{field_name}' must be a number") from None

  if not math.isfinite(value) or value <= 0:
    raise OutOfRange(field_name, f"'{field_name}' must be a positive number")
  if bounds is not None:
    low, high = bounds
    if not low <= value <= high:
      raise OutOfRange(field_name, f"'{field_name}' must be between {low:g} and {high:g}")
  return value


def validate_child(
  name: Any,
  birth_date: Any,
  *,
  require_birth_date: bool = False,
  today: Optional[date] = None,
) -> ValidationResult:
  """
  Validate the editable fields of a child record.

  Fails with MissingField for a blank name (or an absent birth date when the
  policy requires one), InvalidDate for an unparsable birth date and
  FutureDate for a birth date after today.
  """
  today = today or date.today()
  try:
    if not isinstance(name, str) or not name.strip():
      raise MissingField("name")
    born = _check_date("birth_date", birth_date, today, require_birth_date)
  except ValidationError as e:
    return ValidationResult.failure(e)

  return ValidationResult.success(name=name.strip(), birth_date=born)


def validate_measurement(
  measured_on: Any,
  height_cm: Any,
  weight_kg: Any,
  *,
  head_circumference_cm: Any = None,
  today: Optional[date] = None,
) -> ValidationResult:
  """
  Validate a measurement.

  The date is always required. Height and weight are individually optional;
  when supplied they must be positive and within the plausibility bounds.
  Head circumference has no upper bound but must be positive.
  """
  today = today or date.today()
  try:
    when = _check_date("date", measured_on, today, required=True)
    height = _check_number("height_cm", height_cm, HEIGHT_CM_RANGE)
    weight = _check_number("weight_kg", weight_kg, WEIGHT_KG_RANGE)
    head = _check_number("head_circumference_cm", head_circumference_cm, None)
  except ValidationError as e:
    return ValidationResult.failure(e)

  return ValidationResult.success(
    date=when,
    height_cm=height,
    weight_kg=weight,
    head_circumference_cm=head,
  )
