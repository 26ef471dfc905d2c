"""Password hashing and token issuing."""

from __future__ import annotations

import logging
import time
from typing import Any

import bcrypt
import jwt

COST = 12
_MAX_PASSWORD_BYTES = 72
TOKEN_LIFETIME_SECONDS = 3600

log = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Return a bcrypt hash of ``password``; longer than 72 bytes is an error."""
    raw = password.encode("utf-8")
    if len(raw) > _MAX_PASSWORD_BYTES:
        raise ValueError(
            "Error generating password: password length exceeds 72 bytes"
        )
    return bcrypt.hashpw(raw, bcrypt.gensalt(rounds=COST)).decode("ascii")


def match_password(password: str, hashed_pw: str) -> bool:
    """Tell whether ``password`` matches the bcrypt hash ``hashed_pw``."""
    raw = password.encode("utf-8")[:_MAX_PASSWORD_BYTES]
    try:
        return bcrypt.checkpw(raw, hashed_pw.encode("utf-8"))
    except ValueError:
        return False


def generate_jwt(state: Any, user: Any) -> str:
    """Issue an HS256 token for ``user`` valid for one hour."""
    log.info("user name: %s, role: %s", user.username, user.role)
    claims = {
        "exp": int(time.time()) + TOKEN_LIFETIME_SECONDS,
        "authorized": True,
        "user": user.username,
        "role": user.role,
    }
    signing_key = state.cfg.jwt_secret.encode("utf-8")
    encoded = jwt.encode(claims, signing_key, algorithm="HS256")
    return encoded if isinstance(encoded, str) else encoded.decode("ascii")