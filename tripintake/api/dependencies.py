"""API Dependencies — context and caller identity for route handlers.

Invariants:
    - Routes reach collaborators only through get_context (app.state.context)
    - A missing or malformed Authorization header is AuthenticationError (401),
      never FastAPI's default 403
    - require_admin rejects authenticated non-admins with PermissionDeniedError

Design Decisions:
    - HTTPBearer(auto_error=False): credential errors flow through the same
      IntakeError envelope as every other rejection (ADR: uniform error shape)
"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tripintake.core.errors import AuthenticationError, PermissionDeniedError
from tripintake.core.repository_protocols import VerifiedIdentity
from tripintake.services.context import AppContext

bearer = HTTPBearer(auto_error=False)


def get_context(request: Request) -> AppContext:
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise RuntimeError("Application context not initialized")
    return context


def get_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    ctx: AppContext = Depends(get_context),
) -> VerifiedIdentity:
    """Verify the bearer token and return the caller."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing or invalid token")
    return ctx.verifier.verify(credentials.credentials)


def require_admin(
    caller: VerifiedIdentity = Depends(get_identity),
) -> VerifiedIdentity:
    if not caller.is_admin:
        raise PermissionDeniedError()
    return caller
