"""Application wiring: routes, guards and the database connection."""

from __future__ import annotations

import datetime
import logging
import sqlite3
import uuid
from contextlib import closing
from typing import Any, Sequence

from flask import Blueprint, Flask

from markable.api import (
    create_patient,
    delete_patient,
    get_patient,
    handle_login,
    handle_registration,
    update_patient,
)
from markable.middleware import authorize_token, required_role

log = logging.getLogger(__name__)

_SQLITE_PREFIX = "sqlite://"


def _adapt(value: Any) -> Any:
    if isinstance(value, datetime.datetime):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    return value


class _Cursor:
    """A cursor that accepts ``%s`` placeholders on an SQLite connection."""

    def __init__(self, cursor: sqlite3.Cursor) -> None:
        self._cursor = cursor

    def execute(self, sql: str, params: Sequence[Any] = ()) -> "_Cursor":
        self._cursor.execute(sql.replace("%s", "?"), tuple(_adapt(p) for p in params))
        return self

    def fetchone(self) -> Any:
        return self._cursor.fetchone()

    def fetchall(self) -> list[Any]:
        return self._cursor.fetchall()

    def close(self) -> None:
        self._cursor.close()


class _SQLiteConnection:
    """An autocommitting SQLite connection shaped for the query layer."""

    def __init__(self, path: str) -> None:
        self._conn = sqlite3.connect(path, isolation_level=None, check_same_thread=False)
        self._conn.create_function(
            "NOW", 0, lambda: datetime.datetime.now(datetime.timezone.utc).isoformat()
        )

    def cursor(self) -> _Cursor:
        return _Cursor(self._conn.cursor())

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "_SQLiteConnection":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def connect_db(db_url: str) -> _SQLiteConnection:
    """Open the database named by ``db_url`` and make sure it answers.

    Only ``sqlite://`` URLs are understood: ``sqlite:///file.db``,
    ``sqlite:////absolute/path.db`` or ``sqlite:///:memory:``.
    """
    if not db_url.startswith(_SQLITE_PREFIX):
        scheme = db_url.split(":", 1)[0]
        raise ValueError(f"Error opening db: unsupported database URL scheme {scheme!r}")
    path = db_url[len(_SQLITE_PREFIX):]
    if path.startswith("/"):
        path = path[1:]
    path = path or ":memory:"

    try:
        connection = _SQLiteConnection(path)
    except sqlite3.Error as exc:
        raise RuntimeError(f"Error opening db: {exc!r}") from exc
    try:
        with closing(connection.cursor()) as cursor:
            cursor.execute("SELECT 1").fetchone()
    except sqlite3.Error as exc:
        connection.close()
        raise RuntimeError(f"Error while pinging: {exc!r}") from exc
    log.info("Database connection established")
    return connection


def handle_root() -> tuple[dict[str, str], int]:
    """Answer the liveness check."""
    return {"message": "pong"}, 200


def create_app(state: Any) -> Flask:
    """Build the application with all routes bound to ``state``."""
    app = Flask(__name__)
    app.add_url_rule("/ping", "ping", handle_root, methods=["GET"])
    app.add_url_rule("/register", "register", handle_registration(state), methods=["POST"])
    app.add_url_rule("/login", "login", handle_login(state), methods=["POST"])

    patients = Blueprint("patients", __name__, url_prefix="/patients")
    patients.before_request(authorize_token(state))
    patients.add_url_rule(
        "",
        "create",
        required_role("Receptionist")(create_patient(state)),
        methods=["POST"],
    )
    patients.add_url_rule(
        "/<name>",
        "get",
        required_role("Receptionist", "Doctor")(get_patient(state)),
        methods=["GET"],
    )
    patients.add_url_rule(
        "/<name>",
        "delete",
        required_role("Receptionist")(delete_patient(state)),
        methods=["DELETE"],
    )
    patients.add_url_rule(
        "/<name>",
        "update",
        required_role("Receptionist", "Doctor")(update_patient(state)),
        methods=["PATCH"],
    )
    app.register_blueprint(patients)
    return app