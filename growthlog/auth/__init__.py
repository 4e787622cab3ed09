"""
Authentication module for Growthlog.

Provides guardian identity resolution and ownership checks. FastAPI
dependencies live in growthlog.auth.middleware.
"""

from growthlog.auth.identity import (
  RequestContext,
  IdentityProvider,
  TokenIdentityProvider,
)
from growthlog.auth.guard import AccessGuard

__all__ = [
  "RequestContext",
  "IdentityProvider",
  "TokenIdentityProvider",
  "AccessGuard",
]
