"""Typed queries against the patients and staff tables."""

from __future__ import annotations

import datetime
import uuid
from contextlib import closing
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence


class NoRowsError(LookupError):
    """Raised when a single-row query matches nothing."""


class DBTX(Protocol):
    """Anything that hands out DB-API cursors: a connection or a transaction."""

    def cursor(self) -> Any: ...


@dataclass
class Patient:
    id: uuid.UUID
    name: str
    age: int
    gender: str
    address: Optional[str]
    diagnosis: Optional[str]
    created_at: datetime.datetime
    updated_at: datetime.datetime


@dataclass
class Staff:
    id: uuid.UUID
    name: str
    role: str
    created_at: datetime.datetime
    updated_at: datetime.datetime
    pw_hash: str


@dataclass
class CreatePatientParams:
    id: uuid.UUID
    name: str
    age: int
    gender: str
    diagnosis: Optional[str]
    address: Optional[str]
    created_at: datetime.datetime
    updated_at: datetime.datetime


@dataclass
class CreateStaffMemberParams:
    id: uuid.UUID
    name: str
    role: str
    created_at: datetime.datetime
    updated_at: datetime.datetime
    pw_hash: str


@dataclass
class UpdatePatientDetailsParams:
    name: str
    age: int
    gender: str
    address: Optional[str]
    diagnosis: Optional[str]


_PATIENT_COLUMNS = "id, name, age, gender, address, diagnosis, created_at, updated_at"
_STAFF_COLUMNS = "id, name, role, created_at, updated_at, pw_hash"

CREATE_PATIENT = f"""insert into patients (id, name, age, gender, diagnosis, address, created_at, updated_at)
values(%s, %s, %s, %s, %s, %s, %s, %s)
Returning {_PATIENT_COLUMNS}
"""

CREATE_STAFF_MEMBER = f"""INSERT INTO staff (id, name, role, created_at, updated_at, pw_hash)
VALUES(%s, %s, %s, %s, %s, %s)
RETURNING {_STAFF_COLUMNS}
"""

DELETE_PATIENT = """DELETE FROM patients
WHERE name = %s
RETURNING id
"""

DROP_ROWS = "TRUNCATE TABLE staff RESTART IDENTITY CASCADE\n"

GET_PATIENT = f"""Select {_PATIENT_COLUMNS} from patients
where name = %s
"""

GET_STAFF_MEMBER = f"""SELECT {_STAFF_COLUMNS} FROM staff
WHERE name = %s
"""

GET_STAFF_HASH = "SELECT pw_hash from staff where name = %s\n"

LIST_STAFF_MEMBERS = "SELECT name FROM staff\n"

UPDATE_PATIENT_DETAILS = f"""UPDATE patients
SET age = %s, gender = %s, address = %s, diagnosis = %s, updated_at = NOW()
WHERE name = %s
RETURNING {_PATIENT_COLUMNS}
"""


def _to_uuid(value: Any) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    if isinstance(value, (bytes, bytearray)) and len(value) == 16:
        return uuid.UUID(bytes=bytes(value))
    return uuid.UUID(str(value))


def _patient_from_row(row: Sequence[Any]) -> Patient:
    pid, name, age, gender, address, diagnosis, created_at, updated_at = row
    return Patient(
        id=_to_uuid(pid),
        name=name,
        age=int(age),
        gender=gender,
        address=address,
        diagnosis=diagnosis,
        created_at=created_at,
        updated_at=updated_at,
    )


def _staff_from_row(row: Sequence[Any]) -> Staff:
    sid, name, role, created_at, updated_at, pw_hash = row
    return Staff(
        id=_to_uuid(sid),
        name=name,
        role=role,
        created_at=created_at,
        updated_at=updated_at,
        pw_hash=pw_hash,
    )


class Queries:
    """The application's queries bound to one connection or transaction."""

    def __init__(self, db: DBTX) -> None:
        self.db = db

    def with_tx(self, tx: DBTX) -> "Queries":
        """Return a copy of these queries that runs on ``tx``."""
        return Queries(tx)

    def _fetch_one(self, sql: str, params: Sequence[Any] = ()) -> Sequence[Any]:
        with closing(self.db.cursor()) as cursor:
            cursor.execute(sql, tuple(params))
            row = cursor.fetchone()
        if row is None:
            raise NoRowsError("no rows in result set")
        return row

    def _fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[Sequence[Any]]:
        with closing(self.db.cursor()) as cursor:
            cursor.execute(sql, tuple(params))
            return list(cursor.fetchall())

    def _execute(self, sql: str, params: Sequence[Any] = ()) -> None:
        with closing(self.db.cursor()) as cursor:
            cursor.execute(sql, tuple(params))

    def create_patient(self, arg: CreatePatientParams) -> Patient:
        row = self._fetch_one(
            CREATE_PATIENT,
            (
                str(arg.id),
                arg.name,
                arg.age,
                arg.gender,
                arg.diagnosis,
                arg.address,
                arg.created_at,
                arg.updated_at,
            ),
        )
        return _patient_from_row(row)

    def create_staff_member(self, arg: CreateStaffMemberParams) -> Staff:
        row = self._fetch_one(
            CREATE_STAFF_MEMBER,
            (
                str(arg.id),
                arg.name,
                arg.role,
                arg.created_at,
                arg.updated_at,
                arg.pw_hash,
            ),
        )
        return _staff_from_row(row)

    def delete_patient(self, name: str) -> uuid.UUID:
        row = self._fetch_one(DELETE_PATIENT, (name,))
        return _to_uuid(row[0])

    def drop_rows(self) -> None:
        self._execute(DROP_ROWS)

    def get_patient(self, name: str) -> Patient:
        return _patient_from_row(self._fetch_one(GET_PATIENT, (name,)))

    def get_staff_member(self, name: str) -> Staff:
        return _staff_from_row(self._fetch_one(GET_STAFF_MEMBER, (name,)))

    def get_staff_passwd_hash(self, name: str) -> str:
        return self._fetch_one(GET_STAFF_HASH, (name,))[0]

    def list_staff_members(self) -> list[str]:
        return [row[0] for row in self._fetch_all(LIST_STAFF_MEMBERS)]

    def update_patient_details(self, arg: UpdatePatientDetailsParams) -> Patient:
        row = self._fetch_one(
            UPDATE_PATIENT_DETAILS,
            (arg.age, arg.gender, arg.address, arg.diagnosis, arg.name),
        )
        return _patient_from_row(row)