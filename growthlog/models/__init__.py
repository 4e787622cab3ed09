"""
Data models for Growthlog.
"""

from growthlog.models.growth import Child, Measurement, generate_id
from growthlog.models.guardian import Guardian

__all__ = [
  "Child",
  "Measurement",
  "Guardian",
  "generate_id",
]
