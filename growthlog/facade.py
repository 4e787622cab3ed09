"""
Sync facade: the boundary contract for CLI, HTTP or in-process callers.

Each operation resolves the calling guardian, authorizes by ownership,
validates and mutates through the growth store, and returns plain dict views
in which measurements carry a computed bmi and children a computed age_years.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from growthlog.auth.guard import AccessGuard
from growthlog.auth.identity import RequestContext
from growthlog.errors import Forbidden, NotFound
from growthlog.store import GrowthStore


logger = logging.getLogger(__name__)


class SyncFacade:
  """The eight operations exposed to external callers."""

  def __init__(self, store: GrowthStore, guard: AccessGuard, hide_forbidden: bool = False):
    self.store = store
    self.guard = guard
    self.hide_forbidden = hide_forbidden

  @contextmanager
  def _boundary(self) -> Iterator[None]:
    try:
      yield
    except Forbidden as e:
      if self.hide_forbidden:
        raise NotFound(e.entity, e.entity_id) from None
      raise

  def _child_view(self, child) -> dict:
    return child.to_view(as_of=self.store.today())

  # ---------------------------------------------------------------------------
  # Children
  # ---------------------------------------------------------------------------

  def list_children(self, context: RequestContext, verbose: bool = False) -> list[dict]:
    """Children of the caller, oldest first, each with its latest measurement."""
    owner_id = self.guard.resolve_identity(context)
    return [self._child_view(c) for c in self.store.list_children(owner_id, verbose=verbose)]

  def get_child(self, context: RequestContext, child_id: str) -> dict:
    """A child with its full measurement history, most recent first."""
    owner_id = self.guard.resolve_identity(context)
    with self._boundary():
      self.guard.authorize_child_access(owner_id, child_id)
      return self._child_view(self.store.get_child(child_id, owner_id, verbose=True))

  def create_child(self, context: RequestContext, fields: dict) -> dict:
    owner_id = self.guard.resolve_identity(context)
    child = self.store.create_child(owner_id, fields)
    logger.info("Guardian %s created child %s", owner_id, child.id)
    return self._child_view(child)

  def update_child(self, context: RequestContext, child_id: str, patch: dict) -> dict:
    owner_id = self.guard.resolve_identity(context)
    with self._boundary():
      self.guard.authorize_child_access(owner_id, child_id)
      child = self.store.update_child(child_id, owner_id, patch)
    if patch:
      logger.info("Guardian %s updated child %s (%s)", owner_id, child_id, ", ".join(sorted(patch)))
    return self._child_view(child)

  def delete_child(self, context: RequestContext, child_id: str) -> None:
    owner_id = self.guard.resolve_identity(context)
    with self._boundary():
      self.guard.authorize_child_access(owner_id, child_id)
      self.store.delete_child(child_id, owner_id)
    logger.info("Guardian %s deleted child %s", owner_id, child_id)

  # ---------------------------------------------------------------------------
  # Measurements
  # ---------------------------------------------------------------------------

  def create_measurement(self, context: RequestContext, child_id: str, fields: dict) -> dict:
    owner_id = self.guard.resolve_identity(context)
    with self._boundary():
      self.guard.authorize_child_access(owner_id, child_id)
      measurement = self.store.create_measurement(child_id, fields)
    logger.info("Guardian %s added measurement %s to child %s", owner_id, measurement.id, child_id)
    return measurement.to_view()

  def update_measurement(self, context: RequestContext, measurement_id: str, patch: dict) -> dict:
    owner_id = self.guard.resolve_identity(context)
    with self._boundary():
      self.guard.authorize_measurement_access(owner_id, measurement_id)
      measurement = self.store.update_measurement(measurement_id, patch)
    if patch:
      logger.info("Guardian %s updated measurement %s", owner_id, measurement_id)
    return measurement.to_view()

  def delete_measurement(self, context: RequestContext, measurement_id: str) -> None:
    owner_id = self.guard.resolve_identity(context)
    with self._boundary():
      self.guard.authorize_measurement_access(owner_id, measurement_id)
      self.store.delete_measurement(measurement_id)
    logger.info("Guardian %s deleted measurement %s", owner_id, measurement_id)
