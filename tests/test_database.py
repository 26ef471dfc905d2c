import datetime
import uuid

import pytest

from markable.database import (
    CreatePatientParams,
    CreateStaffMemberParams,
    NoRowsError,
    Patient,
    Queries,
    Staff,
    UpdatePatientDetailsParams,
)


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.rows = []

    def execute(self, sql, params=()):
        self.conn.calls.append((sql, tuple(params)))
        self.rows = list(self.conn.results.pop(0)) if self.conn.results else []

    def fetchone(self):
        return self.rows.pop(0) if self.rows else None

    def fetchall(self):
        rows, self.rows = self.rows, []
        return rows

    def close(self):
        self.conn.closed += 1


class FakeConnection:
    def __init__(self, *results):
        self.results = list(results)
        self.calls = []
        self.closed = 0

    def cursor(self):
        return FakeCursor(self)


NOW = datetime.datetime(2024, 1, 1, 12, 0, 0)
PID = uuid.uuid4()


def patient_row(name="alice", address=None, diagnosis=None):
    return (str(PID), name, 30, "F", address, diagnosis, NOW, NOW)


def test_create_patient_passes_params_in_order_and_reads_row():
    conn = FakeConnection([patient_row(address="street", diagnosis="flu")])
    params = CreatePatientParams(
        id=PID, name="alice", age=30, gender="F", diagnosis=None,
        address="street", created_at=NOW, updated_at=NOW,
    )
    patient = Queries(conn).create_patient(params)
    sql, sent = conn.calls[0]
    assert "insert into patients" in sql
    assert sent == (str(PID), "alice", 30, "F", None, "street", NOW, NOW)
    assert patient == Patient(PID, "alice", 30, "F", "street", "flu", NOW, NOW)
    assert conn.closed == 1


def test_create_staff_member_returns_staff():
    sid = uuid.uuid4()
    conn = FakeConnection([(sid, "bob", "Doctor", NOW, NOW, "hash")])
    params = CreateStaffMemberParams(
        id=sid, name="bob", role="Doctor", created_at=NOW, updated_at=NOW, pw_hash="hash"
    )
    staff = Queries(conn).create_staff_member(params)
    assert staff == Staff(sid, "bob", "Doctor", NOW, NOW, "hash")
    assert conn.calls[0][1] == (str(sid), "bob", "Doctor", NOW, NOW, "hash")


def test_get_patient_found_and_missing():
    conn = FakeConnection([patient_row()], [])
    queries = Queries(conn)
    assert queries.get_patient("alice").id == PID
    with pytest.raises(NoRowsError):
        queries.get_patient("nobody")
    assert [call[1] for call in conn.calls] == [("alice",), ("nobody",)]


def test_delete_patient_returns_uuid():
    conn = FakeConnection([(str(PID),)])
    assert Queries(conn).delete_patient("alice") == PID
    assert "DELETE FROM patients" in conn.calls[0][0]


def test_delete_patient_missing_raises():
    with pytest.raises(NoRowsError):
        Queries(FakeConnection([])).delete_patient("ghost")


def test_get_staff_member_and_hash():
    sid = uuid.uuid4()
    conn = FakeConnection([(sid.bytes, "bob", "Receptionist", NOW, NOW, "h")], [("h",)])
    queries = Queries(conn)
    staff = queries.get_staff_member("bob")
    assert staff.id == sid
    assert staff.role == "Receptionist"
    assert queries.get_staff_passwd_hash("bob") == staff.pw_hash


def test_get_staff_member_missing_raises():
    with pytest.raises(NoRowsError):
        Queries(FakeConnection([])).get_staff_member("nobody")


def test_list_staff_members():
    conn = FakeConnection([("a",), ("b",)], [])
    queries = Queries(conn)
    assert queries.list_staff_members() == ["a", "b"]
    assert queries.list_staff_members() == []


def test_update_patient_details_order():
    conn = FakeConnection([patient_row(diagnosis="cold")])
    params = UpdatePatientDetailsParams(
        name="alice", age=31, gender="F", address=None, diagnosis="cold"
    )
    patient = Queries(conn).update_patient_details(params)
    sql, sent = conn.calls[0]
    assert "UPDATE patients" in sql
    assert sent == (31, "F", None, "cold", "alice")
    assert patient.diagnosis == "cold"


def test_drop_rows_truncates():
    conn = FakeConnection()
    Queries(conn).drop_rows()
    assert conn.calls[0][0].startswith("TRUNCATE TABLE staff")


def test_with_tx_uses_other_connection():
    main = FakeConnection()
    tx = FakeConnection([("x",)])
    queries = Queries(main)
    tx_queries = queries.with_tx(tx)
    assert tx_queries.list_staff_members() == ["x"]
    assert main.calls == []
    assert queries.db is main