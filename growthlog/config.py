"""
Configuration for Growthlog.

Settings come from environment variables (a local .env file is loaded first).
An optional YAML file named by GROWTHLOG_CONFIG supplies defaults that the
environment overrides.
"""

import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv


STORAGE_KINDS = ("memory", "json", "supabase")

_TRUE = {"1", "true", "yes", "on"}


def _as_bool(value, default: bool) -> bool:
  if value is None:
    return default
  if isinstance(value, bool):
    return value
  return str(value).strip().lower() in _TRUE


def load_config_file(path: str | Path) -> dict:
  """Read a YAML config file. Keys match the env var names without the GROWTHLOG_ prefix, lowercased."""
  cfg_path = Path(path).expanduser()
  if not cfg_path.exists():
    raise FileNotFoundError(f"{cfg_path} not found")
  with cfg_path.open("r", encoding="utf-8") as f:
    data = yaml.safe_load(f) or {}
  if not isinstance(data, dict):
    raise ValueError(f"{cfg_path} must contain a mapping")
  return data


class Settings:
  """Runtime settings."""

  def __init__(
    self,
    storage: str = "json",
    data_dir: str | Path = "~/.growthlog",
    require_birth_date: bool = False,
    hide_forbidden: bool = False,
    token_secret: Optional[str] = None,
    log_level: str = "INFO",
    supabase_url: Optional[str] = None,
    supabase_key: Optional[str] = None,
  ):
    self.storage = storage
    self.data_dir = Path(data_dir).expanduser()
    self.require_birth_date = require_birth_date
    self.hide_forbidden = hide_forbidden
    self.token_secret = token_secret
    self.log_level = log_level.upper()
    self.supabase_url = supabase_url
    self.supabase_key = supabase_key

  @classmethod
  def from_env(cls, environ: Optional[dict] = None) -> "Settings":
    """Build settings from the environment, layered over an optional YAML file."""
    if environ is None:
      load_dotenv()
      environ = os.environ

    file_values = {}
    config_path = environ.get("GROWTHLOG_CONFIG")
    if config_path:
      file_values = load_config_file(config_path)

    def pick(key: str, default=None):
      env_value = environ.get(f"GROWTHLOG_{key.upper()}")
      if env_value is not None:
        return env_value
      return file_values.get(key, default)

    return cls(
      storage=pick("storage", "json"),
      data_dir=pick("data_dir", "~/.growthlog"),
      require_birth_date=_as_bool(pick("require_birth_date"), False),
      hide_forbidden=_as_bool(pick("hide_forbidden"), False),
      token_secret=pick("token_secret"),
      log_level=pick("log_level", "INFO"),
      supabase_url=environ.get("SUPABASE_URL") or file_values.get("supabase_url"),
      supabase_key=environ.get("SUPABASE_SERVICE_KEY") or file_values.get("supabase_key"),
    )

  @property
  def data_file(self) -> Path:
    """Path of the JSON document used by the json backend."""
    return self.data_dir / "growthlog.json"

  @property
  def token_file(self) -> Path:
    """Path where the CLI keeps its guardian token."""
    return self.data_dir / "token"

  def validate(self) -> None:
    """Raise error if not properly configured."""
    if self.storage not in STORAGE_KINDS:
      raise ValueError(
        f"GROWTHLOG_STORAGE must be one of {', '.join(STORAGE_KINDS)}, got '{self.storage}'"
      )
    if self.storage == "supabase":
      if not self.supabase_url:
        raise ValueError("SUPABASE_URL environment variable not set")
      if not self.supabase_key:
        raise ValueError("SUPABASE_SERVICE_KEY environment variable not set")
