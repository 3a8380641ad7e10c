"""Request dependencies - runtime lookup, caller identity and admin access."""

import secrets
from uuid import UUID

from fastapi import Depends, Header, Request

from slopguess.core.errors import AdminAccessDeniedError, AuthenticationRequiredError
from slopguess.services.runtime import GameRuntime


def get_runtime(request: Request) -> GameRuntime:
    runtime = getattr(request.app.state, "runtime", None)
    if runtime is None:
        raise RuntimeError("Game runtime not initialized")
    return runtime


def optional_user_id(x_user_id: UUID | None = Header(default=None)) -> UUID | None:
    return x_user_id


def require_user_id(user_id: UUID | None = Depends(optional_user_id)) -> UUID:
    if user_id is None:
        raise AuthenticationRequiredError()
    return user_id


def require_admin(
    runtime: GameRuntime = Depends(get_runtime),
    x_admin_key: str | None = Header(default=None),
) -> None:
    """Admin routes are open when no ADMIN_API_KEY is configured."""
    expected = runtime.settings.admin_api_key
    if expected and not secrets.compare_digest(x_admin_key or "", expected):
        raise AdminAccessDeniedError()
