"""
Supabase client wrapper for Growthlog.

Clients are built explicitly from Settings by the process bootstrap; there is
no module-level client instance.
"""

from supabase import create_client, Client

from growthlog.config import Settings


class SupabaseClient:
  """
  Wrapper around Supabase client with convenience methods.

  Uses the service role key: ownership is enforced by the Access Guard, not
  by Row Level Security.
  """

  def __init__(self, client: Client):
    self._client = client

  @property
  def client(self) -> Client:
    """Get the underlying Supabase client."""
    return self._client

  def table(self, name: str):
    """Get a table reference for queries."""
    return self._client.table(name)


def create_supabase_client(settings: Settings) -> SupabaseClient:
  """Build a Supabase client for the configured project."""
  settings.validate()
  raw_client = create_client(settings.supabase_url, settings.supabase_key)
  return SupabaseClient(raw_client)
