import uuid
from types import SimpleNamespace

import pytest

from app.services.assignment import MassAssignResult
from app.services.eligibility import ASSIGNED_TAB, FREE_TAB
from app.services.selection import CardSelection


def card(status="active", assigned_to=None):
    return SimpleNamespace(
        id=uuid.uuid4(),
        card_bin="12345678",
        status=status,
        assigned_to=assigned_to,
        assigned_casino_id=None,
        deposit_amount=None,
        casino_assignments=[],
    )


def test_toggle_selects_and_deselects():
    selection = CardSelection()
    c = card()

    assert selection.toggle(c) is True
    assert c.id in selection
    assert selection.toggle(c) is False
    assert len(selection) == 0


def test_toggle_refuses_disabled_row():
    selection = CardSelection()
    assert selection.toggle(card(status="blocked")) is False
    assert len(selection) == 0


def test_select_all_replaces_selection():
    selection = CardSelection()
    cards = [card(), card(), card(assigned_to=uuid.uuid4())]
    selection.toggle(cards[0])

    ids = selection.select_all_matching(cards)

    assert ids == sorted(str(c.id) for c in cards[:2])


def test_switch_tab_clears():
    selection = CardSelection()
    selection.toggle(card())
    selection.switch_tab(ASSIGNED_TAB)

    assert selection.tab == ASSIGNED_TAB
    assert len(selection) == 0


def test_unknown_tab():
    with pytest.raises(ValueError):
        CardSelection("history")
    with pytest.raises(ValueError):
        CardSelection(FREE_TAB).switch_tab("history")


def test_apply_result_clears_and_returns_warning():
    selection = CardSelection()
    selection.toggle(card())
    selection.toggle(card())

    warning = selection.apply_result(MassAssignResult(assigned_count=1, total_requested=2, casino_name="Spin"))

    assert len(selection) == 0
    assert warning == "1 of 2 cards assigned (some were unavailable)"


def test_apply_result_full_success_has_no_warning():
    selection = CardSelection()
    selection.toggle(card())
    assert selection.apply_result(MassAssignResult(assigned_count=1, total_requested=1, casino_name="Spin")) is None
    assert len(selection) == 0
