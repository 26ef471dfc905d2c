"""Request guards: bearer-token authentication and role checks."""

from __future__ import annotations

import functools
from typing import Any, Callable, Optional

import jwt
from flask import g, request

_ALGORITHMS = ["HS256", "HS384", "HS512"]
_DECODE_OPTIONS = {
    "verify_aud": False,
    "verify_iat": False,
    "verify_iss": False,
    "verify_sub": False,
    "verify_jti": False,
}

_BEARER = "Bearer "


def _unauthorized(message: str) -> tuple[dict[str, str], int]:
    return {"error": message}, 401


def authorize_token(state: Any) -> Callable[[], Optional[tuple[dict[str, str], int]]]:
    """Build a before-request hook that checks the bearer token.

    On success the token's claims are stored in ``flask.g.user`` and the
    hook returns None so the request goes on; otherwise it returns the
    401 response that ends the request.
    """

    def _authorize() -> Optional[tuple[dict[str, str], int]]:
        auth_header = request.headers.get("Authorization", "")
        if not auth_header:
            return _unauthorized("Authorization header required")

        token_str = auth_header.removeprefix(_BEARER).strip()
        if not token_str or token_str == auth_header:
            return _unauthorized("Invalid Authorization header format")

        key = state.cfg.jwt_secret.encode("utf-8")
        try:
            claims = jwt.decode(
                token_str, key, algorithms=_ALGORITHMS, options=_DECODE_OPTIONS
            )
        except jwt.PyJWTError:
            return _unauthorized("Invalid or expired token")

        if not isinstance(claims, dict):
            return _unauthorized("Invalid token claims")
        g.user = claims
        return None

    return _authorize


def required_role(*roles: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorate a view so that only callers holding one of ``roles`` reach it."""

    def decorator(view: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(view)
        def guarded(*args: Any, **kwargs: Any) -> Any:
            claims = g.get("user")
            if claims is None:
                return {"error": "user not authenticated"}, 401
            role = claims.get("role")
            if not isinstance(role, str):
                return {"error": "Role not found"}, 404
            if role in roles:
                return view(*args, **kwargs)
            return {"error": "Permission denied"}, 403

        return guarded

    return decorator