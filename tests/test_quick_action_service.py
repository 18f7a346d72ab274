"""Quick action preset tests."""

from __future__ import annotations

import pytest

from classbank.services.quick_action_service import (
    QuickActionService,
    default_actions,
    slugify,
)
from classbank.utils.errors import InvalidInputError, NotFoundError


def test_slugify() -> None:
    assert slugify("Cheating/Fighting/Office") == "cheating-fighting-office"
    assert slugify("  Perfect Weekly Attendance ") == "perfect-weekly-attendance"


def test_default_presets() -> None:
    actions = default_actions()

    assert len(actions) == 8
    assert len({action["id"] for action in actions}) == 8
    assert [a["name"] for a in actions if a["type"] == "fine"] == [
        "Talking Back",
        "Removed from Class",
        "Cheating/Fighting/Office",
    ]


def test_create_and_list(db) -> None:
    service = QuickActionService(db)
    service.create_action("teacher-1", "Tidy desk", "2.5", "reward")
    service.create_action("teacher-1", " Late homework ", "3", "fine")
    service.create_action("teacher-2", "Someone else's", "1", "reward")

    listing = service.list_actions("teacher-1")

    assert len(listing["defaults"]) == 8
    assert [(a["name"], a["amount"], a["type"]) for a in listing["custom"]] == [
        ("Late homework", "3.00", "fine"),
        ("Tidy desk", "2.50", "reward"),
    ]


@pytest.mark.parametrize(
    ("name", "amount", "kind"),
    [("", "5", "reward"), ("Nap", "0", "reward"), ("Nap", "5", "bonus")],
)
def test_create_rejects_bad_input(db, name: str, amount: str, kind: str) -> None:
    with pytest.raises(InvalidInputError):
        QuickActionService(db).create_action("teacher-1", name, amount, kind)
    assert db.tables["custom_quick_actions"] == []


def test_only_owner_can_delete(db) -> None:
    service = QuickActionService(db)
    action = service.create_action("teacher-1", "Tidy desk", "2.50", "reward")

    with pytest.raises(NotFoundError):
        service.delete_action(action["id"], "teacher-2")
    service.delete_action(action["id"], "teacher-1")

    assert db.tables["custom_quick_actions"] == []
    with pytest.raises(NotFoundError):
        service.delete_action(action["id"], "teacher-1")


def test_resolve(db) -> None:
    service = QuickActionService(db)
    action = service.create_action("teacher-1", "Tidy desk", "2.50", "reward")

    assert service.resolve("talking-back", "teacher-1")["amount"] == "20.00"
    assert service.resolve(str(action["id"]), "teacher-1")["name"] == "Tidy desk"
    with pytest.raises(NotFoundError):
        service.resolve("tidy-desk", "teacher-1")
