"""
In-memory selection of cards on the tester cards page
"""
from typing import Iterable, List, Set

from app.services.eligibility import FREE_TAB, TABS, is_row_selectable


class CardSelection:
    """Selected card ids for the active tab"""

    def __init__(self, tab: str = FREE_TAB):
        if tab not in TABS:
            raise ValueError(f"Unknown tab: {tab}")
        self.tab = tab
        self._ids: Set[str] = set()

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, card_id) -> bool:
        return str(card_id) in self._ids

    @property
    def ids(self) -> List[str]:
        return sorted(self._ids)

    def toggle(self, card, casino=None) -> bool:
        """Flip one row; disabled rows are refused. Returns whether the card is selected afterwards"""
        key = str(card.id)
        if key in self._ids:
            self._ids.discard(key)
            return False
        if not is_row_selectable(card, casino, self.tab):
            return False
        self._ids.add(key)
        return True

    def select_all_matching(self, cards: Iterable, casino=None) -> List[str]:
        self._ids = {str(card.id) for card in cards if is_row_selectable(card, casino, self.tab)}
        return self.ids

    def clear(self):
        self._ids.clear()

    def switch_tab(self, tab: str):
        if tab not in TABS:
            raise ValueError(f"Unknown tab: {tab}")
        self.tab = tab
        self.clear()

    def apply_result(self, result):
        """Clear after a submitted mass assignment; returns the partial-success warning, if any"""
        self.clear()
        return getattr(result, "warning", None)
