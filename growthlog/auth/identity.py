"""
Guardian identity resolution.

A guardian is identified by a signed token (HS256 JWT whose subject is the
guardian id) that the caller re-presents on every call. A context without a
token gets a freshly provisioned guardian and a new token bound to it; this is
the only place guardians are ever created.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional, Protocol

from jose import jwt, JWTError

from growthlog.db.repositories import GuardianRepository
from growthlog.errors import Forbidden


logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


@dataclass
class RequestContext:
  """
  Identity state for one calling context (an HTTP client, a CLI profile).

  `token` is what the caller presented. After provisioning, `issued_token`
  holds the new token the presentation layer must hand back to the caller.
  """
  token: Optional[str] = None
  owner_id: Optional[str] = None
  issued_token: Optional[str] = None

  @property
  def is_bound(self) -> bool:
    return self.owner_id is not None

  def bind(self, owner_id: str, token: Optional[str] = None) -> None:
    self.owner_id = owner_id
    if token is not None:
      self.token = token
      self.issued_token = token


class IdentityProvider(Protocol):
  def resolve(self, context: RequestContext) -> str: ...


class TokenIdentityProvider:
  """Resolves and provisions guardians backed by signed tokens."""

  def __init__(self, guardians: GuardianRepository, secret: str):
    if not secret:
      raise ValueError("A token secret is required")
    self._guardians = guardians
    self._secret = secret

  def mint_token(self, guardian_id: str) -> str:
    """Sign a token for a guardian."""
    claims = {"sub": guardian_id, "iat": int(time.time())}
    return jwt.encode(claims, self._secret, algorithm=ALGORITHM)

  def decode_token(self, token: str) -> str:
    """
    Verify a token and return the guardian id it names.

    Raises Forbidden for a malformed or tampered token.
    """
    try:
      claims = jwt.decode(token, self._secret, algorithms=[ALGORITHM])
    except JWTError as e:
      raise Forbidden("guardian") from e

    guardian_id = claims.get("sub")
    if not guardian_id:
      raise Forbidden("guardian")
    return guardian_id

  def provision(self, context: RequestContext) -> str:
    guardian = self._guardians.create()
    context.bind(guardian.id, self.mint_token(guardian.id))
    logger.info("Provisioned guardian %s", guardian.id)
    return guardian.id

  def resolve(self, context: RequestContext) -> str:
    if context.is_bound:
      return context.owner_id

    if context.token:
      guardian_id = self.decode_token(context.token)
      if self._guardians.get_by_id(guardian_id) is not None:
        context.bind(guardian_id)
        return guardian_id
      logger.info("Guardian %s from token no longer exists, provisioning a new one", guardian_id)

    return self.provision(context)
