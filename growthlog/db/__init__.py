"""
Storage module for Growthlog.

Provides storage backends and repository classes for data access.
"""

from growthlog.db.backends import (
  StorageBackend,
  MemoryBackend,
  JsonFileBackend,
  SupabaseBackend,
)
from growthlog.db.repositories import (
  GuardianRepository,
  ChildRepository,
  MeasurementRepository,
)

__all__ = [
  "StorageBackend",
  "MemoryBackend",
  "JsonFileBackend",
  "SupabaseBackend",
  "GuardianRepository",
  "ChildRepository",
  "MeasurementRepository",
]
