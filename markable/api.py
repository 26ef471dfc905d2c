"""HTTP handlers for staff accounts and patient records."""

from __future__ import annotations

import datetime
import json
import logging
import uuid
from typing import Any, Callable, Optional

from flask import request

from markable import auth
from markable.database import (
    CreatePatientParams,
    CreateStaffMemberParams,
    Patient,
    Staff,
    UpdatePatientDetailsParams,
)
from markable.models import User

log = logging.getLogger(__name__)

NIL_UUID = uuid.UUID(int=0)

Response = tuple[Any, int]


class _BindError(ValueError):
    """The request body does not have the expected shape."""


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _timestamp(value: Any) -> Any:
    return value.isoformat() if isinstance(value, datetime.datetime) else value


def _null_string(value: Optional[str]) -> dict[str, Any]:
    return {"String": value or "", "Valid": value is not None}


def _patient_json(patient: Patient) -> dict[str, Any]:
    return {
        "ID": str(patient.id),
        "Name": patient.name,
        "Age": patient.age,
        "Gender": patient.gender,
        "Address": _null_string(patient.address),
        "Diagnosis": _null_string(patient.diagnosis),
        "CreatedAt": _timestamp(patient.created_at),
        "UpdatedAt": _timestamp(patient.updated_at),
    }


def _staff_json(staff: Staff) -> dict[str, Any]:
    return {
        "ID": str(staff.id),
        "Name": staff.name,
        "Role": staff.role,
        "CreatedAt": _timestamp(staff.created_at),
        "UpdatedAt": _timestamp(staff.updated_at),
        "PwHash": staff.pw_hash,
    }


def _request_object() -> dict[str, Any]:
    try:
        data = json.loads(request.get_data())
    except ValueError as exc:
        raise _BindError(f"invalid JSON: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise _BindError("expected a JSON object")
    return {str(key).lower(): value for key, value in data.items()}


def _optional_str(data: dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None or isinstance(value, str):
        return value
    raise _BindError(f"field {key!r} must be a string")


def _optional_int(data: dict[str, Any], key: str) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise _BindError(f"field {key!r} must be an integer")
    return value


def _invalid(exc: Exception) -> Response:
    return {"error": f"Invalid input: {exc}"}, 400


def handle_login(state: Any) -> Callable[[], Response]:
    """Build the view that checks credentials and issues a token."""

    def login() -> Response:
        try:
            user = User.from_json(request.get_data())
        except ValueError:
            return {"error": "Invalid input"}, 400
        try:
            staff = state.db.get_staff_member(user.username)
        except Exception:
            return {"error": "User not found"}, 404
        if not auth.match_password(user.password, staff.pw_hash):
            return {"message": "Incorrect Password"}, 401
        user.role = staff.role
        try:
            token = auth.generate_jwt(state, user)
        except Exception as exc:
            return {"Error generating jwt token": str(exc)}, 401
        return {"message": "Logged in successfully", "token": token}, 200

    return login


def handle_registration(state: Any) -> Callable[[], Response]:
    """Build the view that creates a staff account."""

    def register() -> Response:
        try:
            user = User.from_json(request.get_data())
        except ValueError:
            return {"error": "Invalid input"}, 400
        try:
            pw_hash = auth.hash_password(user.password)
        except ValueError:
            return {"error": "Failed to hash password"}, 500
        now = _now()
        params = CreateStaffMemberParams(
            id=uuid.uuid4(),
            name=user.username,
            role=user.role,
            created_at=now,
            updated_at=now,
            pw_hash=pw_hash,
        )
        try:
            staff = state.db.create_staff_member(params)
        except Exception as exc:
            return {"error": f"Failed to create user: {exc}"}, 500
        return _staff_json(staff), 201

    return register


def create_patient(state: Any) -> Callable[[], Response]:
    """Build the view that admits a new patient."""

    def create() -> Response:
        try:
            data = _request_object()
            name = _optional_str(data, "name")
            age = _optional_int(data, "age")
            gender = _optional_str(data, "gender")
            address = _optional_str(data, "address")
            for key, value in (("name", name), ("age", age), ("gender", gender)):
                if not value:
                    raise _BindError(f"field {key!r} is required")
        except _BindError as exc:
            return _invalid(exc)

        now = _now()
        params = CreatePatientParams(
            id=uuid.uuid4(),
            name=name,
            age=age,
            gender=gender,
            diagnosis=None,
            address=address or None,
            created_at=now,
            updated_at=now,
        )
        try:
            patient = state.db.create_patient(params)
        except Exception as exc:
            log.error("%s", exc)
            return {"error": "failed to create patient"}, 500
        return _patient_json(patient), 200

    return create


def get_patient(state: Any) -> Callable[[str], Response]:
    """Build the view that shows a patient by name."""

    def show(name: str) -> Response:
        try:
            patient = state.db.get_patient(name)
        except Exception as exc:
            return {"error": f"Patient not found: {exc}"}, 404
        return {
            "name": patient.name,
            "age": patient.age,
            "id": str(patient.id),
            "gender": patient.gender,
            "diagnosis": _null_string(patient.diagnosis),
            "admitted_at": _timestamp(patient.created_at),
            "updated_at": _timestamp(patient.updated_at),
        }, 200

    return show


def delete_patient(state: Any) -> Callable[[str], Response]:
    """Build the view that removes a patient by name."""

    def delete(name: str) -> Response:
        try:
            patient_id = state.db.delete_patient(name)
        except Exception as exc:
            return {"error": f"Unexpected error: {exc}"}, 400
        if patient_id == NIL_UUID:
            return {"error": "Patient not found"}, 404
        return {"message": "Patient deleted"}, 200

    return delete


def update_patient(state: Any) -> Callable[[str], Response]:
    """Build the view that changes some of a patient's details."""

    def update(name: str) -> Response:
        try:
            data = _request_object()
            age = _optional_int(data, "age")
            gender = _optional_str(data, "gender")
            address = _optional_str(data, "address")
            diagnosis = _optional_str(data, "diagnosis")
        except _BindError as exc:
            return _invalid(exc)

        try:
            patient = state.db.get_patient(name)
        except Exception:
            return {"error": "Patient not found"}, 404

        params = UpdatePatientDetailsParams(
            name=name,
            age=patient.age if age is None else age,
            gender=patient.gender if gender is None else gender,
            address=patient.address if address is None else (address or None),
            diagnosis=patient.diagnosis if diagnosis is None else (diagnosis or None),
        )
        try:
            updated = state.db.update_patient_details(params)
        except Exception as exc:
            return {"error": f"Update failed: {exc}"}, 500
        return _patient_json(updated), 200

    return update