"""Class-wide paycheck and rent tests."""

from __future__ import annotations

from decimal import Decimal

import pytest
from postgrest import APIError

from classbank.services.payroll_service import PayrollService
from classbank.utils.errors import InvalidInputError


@pytest.fixture
def classroom(db):
    db.seed_user("teacher-1", role="teacher")
    db.seed_user("s1", first_name="Ada", balance="30.00")
    db.seed_user("s2", first_name="Ben", balance="80.00")
    db.seed_user("s3", first_name="Cy")
    return db


def test_paycheck_reaches_every_student(classroom) -> None:
    result = PayrollService(classroom).distribute_paycheck("25", "teacher-1")

    assert result["students_affected"] == 3
    assert result["failed"] == []
    assert result["message"] == "Paycheck of $25.00 distributed to 3 students"
    assert {row["type"] for row in result["transactions"]} == {"paycheck"}
    assert {row["description"] for row in result["transactions"]} == {"Weekly Paycheck"}
    assert classroom.balance_of("s1") == Decimal("55.00")
    assert classroom.balance_of("s2") == Decimal("105.00")
    assert classroom.balance_of("s3") == Decimal("25.00")


def test_paycheck_ignores_teachers(classroom) -> None:
    PayrollService(classroom).distribute_paycheck("10.00", "teacher-1")
    assert classroom.find("accounts", user_id="teacher-1") is None


def test_rent_never_overdraws_and_skips_empty_accounts(classroom) -> None:
    result = PayrollService(classroom).collect_rent("50.00", "teacher-1")

    assert result["students_affected"] == 2
    assert result["message"] == "Monthly rent collected from 2 students"
    amounts = sorted(row["amount"] for row in result["transactions"])
    assert amounts == ["-30.00", "-50.00"]
    assert classroom.balance_of("s1") == Decimal("0.00")
    assert classroom.balance_of("s2") == Decimal("30.00")
    assert classroom.balance_of("s3") == Decimal("0.00")
    empty_account = classroom.find("accounts", user_id="s3")["id"]
    assert not any(
        row["type"] == "rent" and row["account_id"] == empty_account
        for row in classroom.tables["transactions"]
    )


@pytest.mark.parametrize("amount", ["0", "-5", "abc", "1000000000"])
def test_invalid_amount_touches_nothing(classroom, amount: str) -> None:
    with pytest.raises(InvalidInputError):
        PayrollService(classroom).distribute_paycheck(amount, "teacher-1")
    assert classroom.rpc_calls == []


def test_one_failing_account_does_not_stop_the_batch(classroom) -> None:
    failing_account = classroom.find("accounts", user_id="s2")["id"]

    def hook(name: str, params: dict) -> None:
        if params["p_account_id"] == failing_account:
            raise APIError({"message": "connection reset", "code": "08006"})

    classroom.before_rpc.append(hook)
    result = PayrollService(classroom).distribute_paycheck("10.00", "teacher-1")

    assert result["students_affected"] == 2
    assert result["failed"] == [
        {"account_id": failing_account, "error": "connection reset", "code": "INVALID_INPUT"}
    ]
    assert classroom.balance_of("s1") == Decimal("40.00")
    assert classroom.balance_of("s2") == Decimal("80.00")
    assert classroom.balance_of("s3") == Decimal("10.00")


def test_ledger_reconciles_after_repeated_runs(classroom) -> None:
    service = PayrollService(classroom)
    for _ in range(3):
        service.distribute_paycheck("12.34", "teacher-1")
        service.collect_rent("20.00", "teacher-1")

    for user_id in ("s1", "s2", "s3"):
        assert classroom.balance_of(user_id) >= 0
        assert classroom.ledger_total(user_id) == classroom.balance_of(user_id)


def test_paycheck_reaches_students_beyond_row_cap(classroom) -> None:
    classroom.max_rows = 1

    result = PayrollService(classroom).distribute_paycheck("1.00", "teacher-1")

    assert result["students_affected"] == 3
