"""
Process bootstrap: builds the storage backend, growth store, access guard and
facade from Settings. Entry points own the returned objects' lifecycle.
"""

import logging
import secrets
from datetime import date
from typing import Callable, Optional

from growthlog.auth.guard import AccessGuard
from growthlog.auth.identity import TokenIdentityProvider
from growthlog.config import Settings
from growthlog.db.backends import JsonFileBackend, MemoryBackend, StorageBackend, SupabaseBackend
from growthlog.db.repositories import GuardianRepository
from growthlog.facade import SyncFacade
from growthlog.store import GrowthStore


def configure_logging(settings: Settings) -> None:
  logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
  )


def create_backend(settings: Settings) -> StorageBackend:
  """Storage backend for the configured kind."""
  settings.validate()
  if settings.storage == "memory":
    return MemoryBackend()
  if settings.storage == "supabase":
    from growthlog.db.client import create_supabase_client
    return SupabaseBackend(create_supabase_client(settings))
  return JsonFileBackend(settings.data_file)


def ensure_token_secret(settings: Settings) -> str:
  """
  Token secret for a single-user install.

  Uses the configured secret when present, otherwise reads (or creates) one
  kept next to the data file.
  """
  if settings.token_secret:
    return settings.token_secret

  secret_file = settings.data_dir / "secret"
  if secret_file.exists():
    settings.token_secret = secret_file.read_text(encoding="utf-8").strip()
  else:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.token_secret = secrets.token_urlsafe(32)
    secret_file.write_text(settings.token_secret, encoding="utf-8")
    secret_file.chmod(0o600)
  return settings.token_secret


def build_facade(
  settings: Settings,
  backend: Optional[StorageBackend] = None,
  today: Callable[[], date] = date.today,
) -> SyncFacade:
  """Wire a facade over a backend (created from settings when not given)."""
  if not settings.token_secret:
    raise ValueError("GROWTHLOG_TOKEN_SECRET environment variable not set")

  backend = backend if backend is not None else create_backend(settings)
  store = GrowthStore(backend, require_birth_date=settings.require_birth_date, today=today)
  identity = TokenIdentityProvider(GuardianRepository(backend), settings.token_secret)
  guard = AccessGuard(store, identity)
  return SyncFacade(store, guard, hide_forbidden=settings.hide_forbidden)
