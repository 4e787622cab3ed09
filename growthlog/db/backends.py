"""
Durable storage backends.

Every backend satisfies the StorageBackend protocol: rows are JSON-friendly
dicts keyed by an "id" column, grouped in named tables. The growth store only
ever talks to this protocol, so in-memory, file and Supabase storage are
interchangeable.
"""

import copy
import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager, nullcontext
from pathlib import Path
from typing import Iterator, Optional, Protocol

import httpx
from postgrest.exceptions import APIError

from growthlog.db.client import SupabaseClient
from growthlog.errors import StorageUnavailable


logger = logging.getLogger(__name__)

TABLES = ("guardians", "children", "measurements")


class StorageBackend(Protocol):
  """Create/read/update/delete primitives per table."""

  def insert(self, table: str, row: dict) -> dict: ...

  def get(self, table: str, row_id: str) -> Optional[dict]: ...

  def select(self, table: str, filters: Optional[dict] = None) -> list[dict]: ...

  def update(self, table: str, row_id: str, changes: dict) -> Optional[dict]: ...

  def delete(self, table: str, row_id: str) -> bool: ...

  def delete_where(self, table: str, filters: dict) -> int: ...

  def atomic(self): ...


def _matches(row: dict, filters: Optional[dict]) -> bool:
  if not filters:
    return True
  return all(row.get(key) == value for key, value in filters.items())


class MemoryBackend:
  """
  Process-local storage.

  Rows are copied on the way in and out so callers never share state with
  the store. An RLock serializes writers; atomic() rolls back every change
  made inside it if the block raises.
  """

  def __init__(self):
    self._lock = threading.RLock()
    self._tables: dict[str, dict[str, dict]] = {name: {} for name in TABLES}
    self._depth = 0

  def _table(self, table: str) -> dict[str, dict]:
    if table not in self._tables:
      raise KeyError(f"Unknown table '{table}'")
    return self._tables[table]

  def _flush(self) -> None:
    """Persist after a completed write. No-op in memory."""

  @contextmanager
  def atomic(self) -> Iterator[None]:
    with self._lock:
      snapshot = copy.deepcopy(self._tables) if self._depth == 0 else None
      self._depth += 1
      try:
        yield
        if snapshot is not None:
          self._flush()
      except BaseException:
        if snapshot is not None:
          self._tables = snapshot
        raise
      finally:
        self._depth -= 1

  def insert(self, table: str, row: dict) -> dict:
    with self.atomic():
      rows = self._table(table)
      if row["id"] in rows:
        raise ValueError(f"Duplicate id '{row['id']}' in {table}")
      rows[row["id"]] = copy.deepcopy(row)
      return copy.deepcopy(row)

  def get(self, table: str, row_id: str) -> Optional[dict]:
    with self._lock:
      row = self._table(table).get(row_id)
      return copy.deepcopy(row) if row is not None else None

  def select(self, table: str, filters: Optional[dict] = None) -> list[dict]:
    with self._lock:
      return [copy.deepcopy(r) for r in self._table(table).values() if _matches(r, filters)]

  def update(self, table: str, row_id: str, changes: dict) -> Optional[dict]:
    with self.atomic():
      row = self._table(table).get(row_id)
      if row is None:
        return None
      row.update(copy.deepcopy(changes))
      return copy.deepcopy(row)

  def delete(self, table: str, row_id: str) -> bool:
    with self.atomic():
      return self._table(table).pop(row_id, None) is not None

  def delete_where(self, table: str, filters: dict) -> int:
    with self.atomic():
      rows = self._table(table)
      doomed = [row_id for row_id, row in rows.items() if _matches(row, filters)]
      for row_id in doomed:
        del rows[row_id]
      return len(doomed)


class JsonFileBackend(MemoryBackend):
  """
  Storage in a single JSON document on disk.

  The whole document is loaded at construction and rewritten (via a temp
  file and rename) after each completed write or atomic block.
  """

  def __init__(self, path: str | Path):
    super().__init__()
    self.path = Path(path).expanduser()
    self._load()

  def _load(self) -> None:
    if not self.path.exists():
      return
    try:
      data = json.loads(self.path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
      logger.warning("Could not read %s: %s", self.path, e)
      raise StorageUnavailable(f"Could not read {self.path}: {e}") from e

    if not isinstance(data, dict):
      logger.warning("Could not read %s: not a JSON object", self.path)
      raise StorageUnavailable(f"Could not read {self.path}: not a JSON object")

    for name in TABLES:
      rows = data.get(name) or []
      if not isinstance(rows, list) or not all(isinstance(r, dict) and "id" in r for r in rows):
        logger.warning("Could not read %s: malformed '%s' table", self.path, name)
        raise StorageUnavailable(f"Could not read {self.path}: malformed '{name}' table")
      self._tables[name] = {row["id"]: row for row in rows}

  def _flush(self) -> None:
    document = {name: list(rows.values()) for name, rows in self._tables.items()}
    try:
      self.path.parent.mkdir(parents=True, exist_ok=True)
      fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".growthlog-", suffix=".json")
      with os.fdopen(fd, "w", encoding="utf-8") as f:
        json.dump(document, f, indent=2)
      os.replace(tmp_name, self.path)
    except OSError as e:
      logger.warning("Could not write %s: %s", self.path, e)
      raise StorageUnavailable(f"Could not write {self.path}: {e}") from e


class SupabaseBackend:
  """
  Storage in Supabase (PostgREST) tables.

  Each call is a single request; atomic() provides no cross-row guarantee
  beyond what the database gives a single statement. The measurements table
  is expected to declare ON DELETE CASCADE on child_id as well.
  """

  def __init__(self, client: SupabaseClient):
    self._client = client

  @contextmanager
  def _translate(self, action: str, table: str) -> Iterator[None]:
    try:
      yield
    except (APIError, httpx.HTTPError) as e:
      logger.warning("Supabase %s on %s failed: %s", action, table, e)
      raise StorageUnavailable(f"Supabase {action} on {table} failed: {e}") from e

  def atomic(self):
    return nullcontext()

  def _filtered(self, query, filters: Optional[dict]):
    for key, value in (filters or {}).items():
      query = query.eq(key, value)
    return query

  def insert(self, table: str, row: dict) -> dict:
    with self._translate("insert", table):
      response = self._client.table(table).insert(row).execute()
    return response.data[0] if response.data else row

  def get(self, table: str, row_id: str) -> Optional[dict]:
    with self._translate("select", table):
      response = self._client.table(table).select("*").eq("id", row_id).limit(1).execute()
    return response.data[0] if response.data else None

  def select(self, table: str, filters: Optional[dict] = None) -> list[dict]:
    with self._translate("select", table):
      query = self._filtered(self._client.table(table).select("*"), filters)
      response = query.order("created_at").execute()
    return response.data or []

  def update(self, table: str, row_id: str, changes: dict) -> Optional[dict]:
    with self._translate("update", table):
      response = self._client.table(table).update(changes).eq("id", row_id).execute()
    return response.data[0] if response.data else None

  def delete(self, table: str, row_id: str) -> bool:
    with self._translate("delete", table):
      response = self._client.table(table).delete().eq("id", row_id).execute()
    return len(response.data) > 0 if response.data else False

  def delete_where(self, table: str, filters: dict) -> int:
    with self._translate("delete", table):
      response = self._filtered(self._client.table(table).delete(), filters).execute()
    return len(response.data or [])
