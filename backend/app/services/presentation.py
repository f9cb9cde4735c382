"""
Display rules shared by the card, bank and withdrawal views.

Nothing here feeds back into eligibility: a low balance changes how a card
is shown, never whether it may be assigned.
"""
import enum
from typing import Dict, Optional, Set

from app.core.config import settings

LOW_BALANCE_THRESHOLD = settings.LOW_BALANCE_THRESHOLD

NOT_SET = "Not set"


def is_low_balance(balance, threshold: Optional[float] = None) -> bool:
    limit = LOW_BALANCE_THRESHOLD if threshold is None else threshold
    return float(balance or 0) < limit


def balance_state(balance, threshold: Optional[float] = None) -> str:
    """'available' at or above the threshold, 'hidden' below (juniors do not see it)"""
    return "hidden" if is_low_balance(balance, threshold) else "available"


def balance_color(balance, threshold: Optional[float] = None) -> str:
    return "red" if is_low_balance(balance, threshold) else "green"


class WithdrawalStatus(str, enum.Enum):
    new = "new"
    waiting = "waiting"
    received = "received"
    blocked = "blocked"
    problem = "problem"
    block = "block"


WITHDRAWAL_STYLES: Dict[WithdrawalStatus, Dict[str, str]] = {
    WithdrawalStatus.new: {"label": "New", "color": "blue", "icon": "clock"},
    WithdrawalStatus.waiting: {"label": "Waiting", "color": "yellow", "icon": "clock"},
    WithdrawalStatus.received: {"label": "Received", "color": "green", "icon": "check-circle"},
    WithdrawalStatus.blocked: {"label": "Blocked", "color": "red", "icon": "x-circle"},
    WithdrawalStatus.problem: {"label": "Problem", "color": "orange", "icon": "alert-triangle"},
    WithdrawalStatus.block: {"label": "Block", "color": "red", "icon": "x-circle"},
}


def withdrawal_style(status) -> Dict[str, str]:
    """Fixed label/color/icon for a withdrawal status; any status may follow any other"""
    return dict(WITHDRAWAL_STYLES[WithdrawalStatus(status)])


def mask_email(email: Optional[str]) -> str:
    if not email:
        return NOT_SET
    name, sep, domain = email.partition("@")
    if not sep:
        return name[:3] + "***"
    return f"{name[:3]}***@{domain}"


def mask_password(password: Optional[str]) -> str:
    if not password:
        return NOT_SET
    return "*" * len(password)


_MASKERS = {
    "email": mask_email,
    "password": mask_password,
}


class SensitiveToggle:
    """Per-row "show sensitive data" flags of the PayPal tables"""

    def __init__(self):
        self._visible: Set[str] = set()

    def is_visible(self, row_id) -> bool:
        return str(row_id) in self._visible

    def toggle(self, row_id) -> bool:
        key = str(row_id)
        if key in self._visible:
            self._visible.discard(key)
        else:
            self._visible.add(key)
        return key in self._visible

    def display(self, row_id, value: Optional[str], kind: str = "password") -> str:
        if not value:
            return NOT_SET
        if self.is_visible(row_id):
            return value
        return _MASKERS[kind](value)
