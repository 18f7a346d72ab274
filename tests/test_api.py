"""End-to-end API tests over the in-memory database."""

from __future__ import annotations

from decimal import Decimal
from types import SimpleNamespace

import pytest


@pytest.fixture
def classroom(db):
    db.seed_user("teacher-1", role="teacher")
    db.seed_user("s1", first_name="Ada", last_name="Lovelace", balance="100.00")
    db.seed_user("s2", first_name="Ben", last_name="Okri")
    return db


def test_missing_token_is_rejected(login, client, classroom) -> None:
    """Without an authenticated user override the real header check runs."""
    response = client.get("/stats")

    assert response.status_code == 401
    assert response.json() == {"error": "Missing authorization header", "code": "UNAUTHENTICATED"}


@pytest.mark.parametrize(
    ("method", "path", "body"),
    [
        ("get", "/stats", None),
        ("get", "/students", None),
        ("post", "/payroll/paycheck", {"amount": "10"}),
        (
            "post",
            "/balance/adjust",
            {"student_id": "s2", "amount": "1", "description": "x", "type": "add"},
        ),
        ("get", "/withdrawal-requests/pending", None),
        ("get", "/quick-actions", None),
    ],
)
def test_students_cannot_use_teacher_endpoints(login, classroom, method, path, body) -> None:
    client = login("s1")
    response = client.request(method, path, json=body)

    assert response.status_code == 403
    assert response.json()["code"] == "FORBIDDEN"
    assert classroom.balance_of("s2") == Decimal("0.00")


def test_teachers_cannot_use_student_endpoints(login, classroom) -> None:
    client = login("teacher-1")

    assert client.get("/transactions").status_code == 403
    response = client.post("/withdrawal-requests", json={"amount": "5", "reason": "Snacks"})
    assert response.status_code == 403


def test_auth_user_profile(login, classroom) -> None:
    response = login("s1").get("/auth/user")

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["role"] == "student"
    assert user["account"]["balance"] == "100.00"


def test_paycheck_then_rent(login, classroom) -> None:
    client = login("teacher-1")

    paid = client.post("/payroll/paycheck", json={"amount": 25})
    assert paid.status_code == 200
    assert paid.json()["students_affected"] == 2
    assert set(paid.json()["invalidates"]) == {"students", "stats", "transactions"}

    rent = client.post("/payroll/rent", json={"amount": "50.00"})
    assert rent.status_code == 200
    assert rent.json()["students_affected"] == 2
    assert classroom.balance_of("s1") == Decimal("75.00")
    assert classroom.balance_of("s2") == Decimal("0.00")

    stats = client.get("/stats").json()
    assert stats == {
        "total_students": 2,
        "total_balance": "75.00",
        "pending_requests": 0,
        "weekly_total": "50.00",
    }


def test_invalid_amount_payload(login, classroom) -> None:
    response = login("teacher-1").post("/payroll/paycheck", json={"amount": "-3"})

    assert response.status_code == 422
    assert response.json()["code"] == "INVALID_INPUT"
    assert classroom.rpc_calls == []


def test_adjust_insufficient_balance(login, classroom) -> None:
    response = login("teacher-1").post(
        "/balance/adjust",
        json={"student_id": "s1", "amount": "150", "description": "Lost book", "type": "subtract"},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INSUFFICIENT_BALANCE"
    assert classroom.balance_of("s1") == Decimal("100.00")


def test_adjust_rejects_unknown_type(login, classroom) -> None:
    response = login("teacher-1").post(
        "/balance/adjust",
        json={"student_id": "s1", "amount": "1", "description": "x", "type": "multiply"},
    )

    assert response.status_code == 422
    assert response.json()["code"] == "INVALID_INPUT"


def test_withdrawal_flow(login, classroom) -> None:
    created = login("s1").post(
        "/withdrawal-requests", json={"amount": "40", "reason": "Field trip"}
    )
    assert created.status_code == 200
    request_id = created.json()["request"]["id"]
    assert "pending_requests" in created.json()["invalidates"]

    mine = login("s1").get("/withdrawal-requests/mine").json()["requests"]
    assert [row["id"] for row in mine] == [request_id]

    teacher = login("teacher-1")
    pending = teacher.get("/withdrawal-requests/pending").json()["requests"]
    assert pending[0]["user"]["first_name"] == "Ada"

    approved = teacher.patch(f"/withdrawal-requests/{request_id}", json={"status": "approved"})
    assert approved.status_code == 200
    assert approved.json()["balance"] == "60.00"
    assert "students" in approved.json()["invalidates"]

    again = teacher.patch(f"/withdrawal-requests/{request_id}", json={"status": "denied"})
    assert again.status_code == 409
    assert again.json()["code"] == "ALREADY_RESOLVED"

    history = login("s1").get("/transactions", params={"limit": 1}).json()
    assert history["total"] == 2
    assert history["transactions"][0]["amount"] == "-40.00"
    assert history["transactions"][0]["description"] == "Withdrawal: Field trip"


def test_review_unknown_request(login, classroom) -> None:
    response = login("teacher-1").patch("/withdrawal-requests/404", json={"status": "denied"})

    assert response.status_code == 404
    assert response.json() == {"error": "Withdrawal request not found", "code": "NOT_FOUND"}


def test_quick_action_endpoints(login, classroom) -> None:
    client = login("teacher-1")

    listing = client.get("/quick-actions").json()
    assert len(listing["defaults"]) == 8
    assert listing["custom"] == []

    created = client.post(
        "/quick-actions", json={"name": "Tidy desk", "amount": "3.5", "type": "reward"}
    )
    assert created.status_code == 200
    action_id = created.json()["action"]["id"]
    assert created.json()["invalidates"] == ["quick_actions"]

    applied = client.post(
        "/quick-actions/apply", json={"student_id": "s1", "action_id": str(action_id)}
    )
    assert applied.status_code == 200
    assert applied.json()["balance"] == "103.50"

    fined = client.post(
        "/quick-actions/apply", json={"student_id": "s1", "action_id": "talking-back"}
    )
    assert fined.json()["balance"] == "83.50"

    assert client.delete(f"/quick-actions/{action_id}").status_code == 200
    assert client.delete(f"/quick-actions/{action_id}").status_code == 404


def test_add_and_list_students(login, classroom) -> None:
    client = login("teacher-1")

    created = client.post("/students", json={"first_name": "Cleo", "last_name": "Ray"})
    assert created.status_code == 200
    assert created.json()["student"]["account"]["balance"] == "0.00"

    students = client.get("/students").json()["students"]
    assert [row["first_name"] for row in students] == ["Ada", "Ben", "Cleo"]


def test_first_sign_in_registers_student(login, db) -> None:
    client = login("fresh-auth-user")

    response = client.get("/auth/user")

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["id"] == "fresh-auth-user"
    assert user["role"] == "student"
    assert user["email"] == "fresh-auth-user@example.com"
    assert user["account"]["balance"] == "0.00"

    assert client.get("/transactions").status_code == 200
    assert len([row for row in db.tables["users"] if row["id"] == "fresh-auth-user"]) == 1
    assert len(db.tables["accounts"]) == 1


class _StubAuth:
    def get_user(self, token: str) -> SimpleNamespace:
        if token != "good-token":
            raise ValueError("bad token")
        return SimpleNamespace(
            user=SimpleNamespace(
                id="auth-42",
                email="Grace@Example.com",
                user_metadata={"full_name": "Grace Brewster Hopper"},
            )
        )


def test_callback_registers_user_from_token(login, client, db, monkeypatch) -> None:
    import classbank.dependencies as dependencies

    # The stub has no set_session, so the shared anon client is never mutated.
    monkeypatch.setattr(
        dependencies, "get_supabase_client", lambda: SimpleNamespace(auth=_StubAuth())
    )

    response = client.post(
        "/auth/callback", json={"access_token": "good-token", "refresh_token": "refresh"}
    )

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["first_name"] == "Grace"
    assert user["last_name"] == "Brewster Hopper"
    assert user["email"] == "grace@example.com"
    assert user["account"]["balance"] == "0.00"

    rejected = client.post(
        "/auth/callback", json={"access_token": "stolen", "refresh_token": "refresh"}
    )
    assert rejected.status_code == 401
    assert rejected.json()["code"] == "UNAUTHENTICATED"


@pytest.mark.parametrize("amount", [True, False, None, ["10"]])
def test_non_numeric_json_amount_is_rejected(login, classroom, amount) -> None:
    response = login("teacher-1").post("/payroll/paycheck", json={"amount": amount})

    assert response.status_code == 422
    assert response.json()["code"] == "INVALID_INPUT"
    assert classroom.rpc_calls == []
    assert classroom.balance_of("s2") == Decimal("0.00")
