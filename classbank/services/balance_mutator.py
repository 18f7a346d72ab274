"""Balance mutation rules.

Every ledger operation is expressed here as a pure function of the stored
balance and the requested amount. A function returns the new balance
together with the single transaction row that explains the change, or
``None`` when the operation leaves the account untouched. Persisting both
halves as one atomic unit is the job of :class:`LedgerService`.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum

from classbank.utils.errors import InsufficientBalanceError, InvalidInputError
from classbank.utils.money import ZERO, format_amount, parse_amount, quantize


class TransactionType(StrEnum):
    """Kinds of rows in the transactions ledger."""

    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    PAYCHECK = "paycheck"
    BONUS = "bonus"
    FINE = "fine"
    REWARD = "reward"
    RENT = "rent"


class QuickActionType(StrEnum):
    REWARD = "reward"
    FINE = "fine"


class AdjustmentDirection(StrEnum):
    ADD = "add"
    SUBTRACT = "subtract"


@dataclass(frozen=True)
class LedgerEntry:
    """Transaction row produced by a mutation (signed amount)."""

    type: TransactionType
    amount: Decimal
    description: str

    def to_payload(self) -> dict[str, str]:
        return {
            "type": self.type.value,
            "amount": format_amount(self.amount),
            "description": self.description,
        }


@dataclass(frozen=True)
class Mutation:
    """New balance plus the ledger entry that accounts for it."""

    old_balance: Decimal
    new_balance: Decimal
    entry: LedgerEntry


def _apply(
    balance: Decimal,
    delta: Decimal,
    entry_type: TransactionType,
    description: str,
) -> Mutation:
    old = quantize(balance)
    signed = quantize(delta)
    return Mutation(
        old_balance=old,
        new_balance=quantize(old + signed),
        entry=LedgerEntry(type=entry_type, amount=signed, description=description),
    )


def _require_funds(balance: Decimal, amount: Decimal) -> None:
    if amount > quantize(balance):
        raise InsufficientBalanceError(required=amount, available=quantize(balance))


def paycheck(balance: Decimal, amount: Decimal | str, description: str) -> Mutation:
    """Credit a fixed paycheck, regardless of the current balance."""
    value = parse_amount(amount)
    return _apply(balance, value, TransactionType.PAYCHECK, description)


def rent(balance: Decimal, amount: Decimal | str, description: str) -> Mutation | None:
    """Deduct rent without taking the balance below zero.

    Accounts that are already empty are skipped. When the balance cannot
    cover the full rent only what is available is deducted, and the entry
    records that actual deduction.
    """
    value = parse_amount(amount)
    old = quantize(balance)
    if old <= ZERO:
        return None

    new = max(ZERO, old - value)
    return _apply(old, new - old, TransactionType.RENT, description)


def credit(balance: Decimal, amount: Decimal | str, description: str) -> Mutation:
    """Manual adjustment upwards, recorded as a bonus."""
    value = parse_amount(amount)
    return _apply(balance, value, TransactionType.BONUS, _require_text(description))


def debit(balance: Decimal, amount: Decimal | str, description: str) -> Mutation:
    """Manual adjustment downwards, recorded as a withdrawal."""
    value = parse_amount(amount)
    _require_funds(balance, value)
    return _apply(balance, -value, TransactionType.WITHDRAWAL, _require_text(description))


def adjust(
    balance: Decimal,
    amount: Decimal | str,
    description: str,
    direction: AdjustmentDirection | str,
) -> Mutation:
    """Dispatch a manual adjustment on its direction."""
    try:
        direction = AdjustmentDirection(direction)
    except ValueError as exc:
        raise InvalidInputError("Type must be 'add' or 'subtract'") from exc

    if direction is AdjustmentDirection.ADD:
        return credit(balance, amount, description)
    return debit(balance, amount, description)


def withdrawal(balance: Decimal, amount: Decimal | str, reason: str) -> Mutation:
    """Pay out an approved withdrawal request."""
    value = parse_amount(amount)
    _require_funds(balance, value)
    return _apply(balance, -value, TransactionType.WITHDRAWAL, f"Withdrawal: {reason}")


def quick_action(
    balance: Decimal,
    amount: Decimal | str,
    kind: QuickActionType | str,
    name: str,
) -> Mutation:
    """Apply a reward or fine preset."""
    try:
        kind = QuickActionType(kind)
    except ValueError as exc:
        raise InvalidInputError("Quick action type must be 'reward' or 'fine'") from exc

    value = parse_amount(amount)
    if kind is QuickActionType.REWARD:
        return _apply(balance, value, TransactionType.REWARD, _require_text(name))

    _require_funds(balance, value)
    return _apply(balance, -value, TransactionType.FINE, _require_text(name))


def _require_text(value: str, field: str = "Description") -> str:
    text = (value or "").strip()
    if not text:
        raise InvalidInputError(f"{field} is required")
    return text
