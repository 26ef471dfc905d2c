"""Request-level user data and the shared application state."""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from markable.database import Queries

_STRING_FIELDS = ("username", "password", "role")


@dataclass
class User:
    username: str = ""
    password: str = ""
    id: uuid.UUID = field(default_factory=lambda: uuid.UUID(int=0))
    role: str = ""

    @classmethod
    def from_json(cls, data: Union[str, bytes, Mapping[str, Any]]) -> "User":
        """Build a user from a JSON object; keys match case-insensitively."""
        if isinstance(data, (str, bytes, bytearray)):
            try:
                data = json.loads(data)
            except json.JSONDecodeError as exc:
                raise ValueError(f"invalid JSON: {exc}") from exc
        if not isinstance(data, Mapping):
            raise ValueError("expected a JSON object")

        user = cls()
        for key, value in data.items():
            name = str(key).lower()
            if value is None:
                continue
            if name in _STRING_FIELDS:
                if not isinstance(value, str):
                    raise ValueError(f"field {key!r} must be a string")
                setattr(user, name, value)
            elif name == "id":
                if not isinstance(value, str):
                    raise ValueError("field 'id' must be a string")
                try:
                    user.id = uuid.UUID(value)
                except ValueError as exc:
                    raise ValueError(f"invalid UUID: {value!r}") from exc
        return user


@dataclass
class State:
    """What every request handler needs: the queries and the configuration."""

    db: Queries
    cfg: Any