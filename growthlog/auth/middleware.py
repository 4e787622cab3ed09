"""
Auth dependencies for FastAPI.

The guardian token travels in an httpOnly cookie, or in an Authorization
Bearer header for non-browser clients. First-time callers are provisioned and
receive their token as a cookie on the response.
"""

from typing import Optional

from fastapi import Depends, Request, Response
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from growthlog.auth.identity import RequestContext
from growthlog.facade import SyncFacade


COOKIE_NAME = "guardian_token"
COOKIE_MAX_AGE = 60 * 60 * 24 * 365 * 5  # 5 years

# HTTP Bearer scheme for Authorization header
security = HTTPBearer(auto_error=False)


def get_facade(request: Request) -> SyncFacade:
  """The facade built at startup."""
  return request.app.state.facade


def issue_token(response: Response, context: RequestContext) -> None:
  """Hand a newly provisioned token back to the caller."""
  if context.issued_token:
    response.set_cookie(
      key=COOKIE_NAME,
      value=context.issued_token,
      max_age=COOKIE_MAX_AGE,
      path="/",
      httponly=True,
      samesite="lax",
    )
    response.headers["X-Guardian-Token"] = context.issued_token


async def get_guardian_context(
  request: Request,
  response: Response,
  credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
  facade: SyncFacade = Depends(get_facade),
) -> RequestContext:
  """
  Dependency resolving the calling guardian.

  Use this on every growth route. A tampered token raises Forbidden. The
  context is also kept on request.state so error responses can still hand
  back a newly issued token.
  """
  token = credentials.credentials if credentials else request.cookies.get(COOKIE_NAME)
  context = RequestContext(token=token or None)
  facade.guard.resolve_identity(context)
  request.state.guardian_context = context
  issue_token(response, context)
  return context
