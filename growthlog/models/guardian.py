"""
Guardian model for Growthlog.

A guardian is the account on whose behalf child records are kept. It carries
no profile data; its id is the owner id used for every authorization check.
"""

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, Field


class Guardian(BaseModel):
  """A guardian account, provisioned on first use."""

  id: str = Field(default_factory=lambda: str(uuid4()))
  created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

  @classmethod
  def from_db(cls, data: dict) -> "Guardian":
    """Create Guardian from a storage row."""
    return cls(
      id=data["id"],
      created_at=data.get("created_at", datetime.now(timezone.utc)),
    )

  def to_db(self) -> dict:
    return self.model_dump(mode="json")
