"""
Card to casino eligibility rules.

Functions take ORM instances or any objects with the same attributes so the
rules can run without a database. Every casino link is read through
casino_links(), which folds the legacy single-casino field into the
multi-assignment list.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List

from app.models.test_work import OPEN_WORK_STATUSES

FREE_TAB = "free"
ASSIGNED_TAB = "assigned"
TABS = (FREE_TAB, ASSIGNED_TAB)


@dataclass(frozen=True)
class CasinoLink:
    casino_id: Any
    status: str
    has_deposit: bool
    assignment_type: str = "testing"


def _value(v) -> Any:
    """Enum members compare by their value"""
    return getattr(v, "value", v)


def _same_id(a, b) -> bool:
    if a is None or b is None:
        return False
    return str(a) == str(b)


def casino_links(card) -> List[CasinoLink]:
    links: List[CasinoLink] = []
    seen = set()
    for assignment in getattr(card, "casino_assignments", None) or []:
        links.append(CasinoLink(
            casino_id=assignment.casino_id,
            status=_value(assignment.status),
            has_deposit=bool(getattr(assignment, "has_deposit", False)),
            assignment_type=_value(getattr(assignment, "assignment_type", "testing")),
        ))
        seen.add(str(assignment.casino_id))

    legacy_id = getattr(card, "assigned_casino_id", None)
    if legacy_id is not None and str(legacy_id) not in seen:
        links.append(CasinoLink(
            casino_id=legacy_id,
            status="active",
            has_deposit=bool(getattr(card, "deposit_amount", None)),
        ))
    return links


def card_bin6(card) -> str:
    return (card.card_bin or "")[:6]


def is_assigned_to_casino(card, casino_id) -> bool:
    return any(
        link.status == "active" and _same_id(link.casino_id, casino_id)
        for link in casino_links(card)
    )


def is_free_card(card) -> bool:
    return (
        _value(card.status) == "active"
        and card.assigned_to is None
        and getattr(card, "assigned_casino_id", None) is None
    )


def bin_allowed(card, casino) -> bool:
    allowed = getattr(casino, "allowed_bins", None) or []
    if not allowed:
        return True
    return card_bin6(card) in allowed


def is_row_selectable(card, casino=None, tab: str = FREE_TAB) -> bool:
    """
    The one predicate behind both the row checkbox and "select all".

    free tab: card is free, not already linked to the selected casino and
    its BIN is accepted by that casino.
    assigned tab: card has at least one casino link.
    """
    if tab == ASSIGNED_TAB:
        return bool(casino_links(card))
    if tab != FREE_TAB:
        raise ValueError(f"Unknown tab: {tab}")

    if not is_free_card(card):
        return False
    if casino is None:
        return True
    if is_assigned_to_casino(card, casino.id):
        return False
    return bin_allowed(card, casino)


def filter_cards(cards: Iterable, casino=None, tab: str = FREE_TAB) -> list:
    """Selectable cards in source order"""
    return [card for card in cards if is_row_selectable(card, casino, tab)]


def is_eligible(card, casino) -> bool:
    return is_row_selectable(card, casino, FREE_TAB)


def has_open_work(card_id, casino_id, works: Iterable) -> bool:
    return any(
        _same_id(work.card_id, card_id)
        and _same_id(work.casino_id, casino_id)
        and _value(work.status) in OPEN_WORK_STATUSES
        for work in works
    )


def cards_for_test_work(cards: Iterable, casino_id, works: Iterable) -> list:
    """
    Cards a tester may open a new test work with: linked to the casino and
    without a pending/in-progress/active work on the same pair.
    """
    works = list(works)
    if not casino_id:
        return [card for card in cards if casino_links(card)]
    return [
        card for card in cards
        if is_assigned_to_casino(card, casino_id)
        and not has_open_work(card.id, casino_id, works)
    ]


def card_stats(cards: Iterable, casino=None, tab: str = FREE_TAB) -> Dict[str, int]:
    """Counters shown above the card tables"""
    cards = list(cards)
    if tab == ASSIGNED_TAB:
        pool = [card for card in cards if casino_links(card)]
    else:
        # free tab narrows by the casino's BIN list first
        pool = [card for card in cards if casino is None or bin_allowed(card, casino)]

    def _any_link(card, with_deposit: bool) -> bool:
        return any(link.has_deposit == with_deposit for link in casino_links(card))

    in_work = sum(1 for card in pool if _any_link(card, False))
    if tab == ASSIGNED_TAB:
        available = in_work
    else:
        available = sum(1 for card in pool if is_row_selectable(card, casino, FREE_TAB))

    return {
        "total_cards": len(pool),
        "available_cards": available,
        "in_work_cards": in_work,
        "completed_cards": sum(1 for card in pool if _any_link(card, True)),
    }

