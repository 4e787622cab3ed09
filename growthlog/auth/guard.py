"""
Ownership checks for every growth store operation.

A guardian may observe or mutate only children it owns. Measurements carry no
owner of their own: access flows through the parent child.
"""

from growthlog.auth.identity import IdentityProvider, RequestContext
from growthlog.errors import Forbidden, NotFound
from growthlog.models import Child, Measurement
from growthlog.store import GrowthStore


class AccessGuard:
  """Resolves the acting guardian and authorizes access by ownership."""

  def __init__(self, store: GrowthStore, identity: IdentityProvider):
    self._store = store
    self._identity = identity

  def resolve_identity(self, context: RequestContext) -> str:
    """Owner id for the calling context, provisioning a guardian on first use."""
    return self._identity.resolve(context)

  def authorize_child_access(self, owner_id: str, child_id: str) -> Child:
    child = self._store.find_child(child_id)
    if child is None:
      raise NotFound("child", child_id)
    if child.owner_id != owner_id:
      raise Forbidden("child", child_id)
    return child

  def authorize_measurement_access(self, owner_id: str, measurement_id: str) -> Measurement:
    measurement = self._store.get_measurement(measurement_id)
    child = self._store.find_child(measurement.child_id)
    if child is None:
      raise NotFound("measurement", measurement_id)
    if child.owner_id != owner_id:
      raise Forbidden("measurement", measurement_id)
    return measurement
