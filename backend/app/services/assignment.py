"""
Card assignment to casinos (tester) and to juniors (manager/admin)
"""
import logging
import uuid
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from app.models.card import AssignmentStatus, AssignmentType, Card, CardCasinoAssignment
from app.models.casino import Casino
from app.models.user import User, UserRole
from app.services.eligibility import casino_links, is_assigned_to_casino, is_free_card

logger = logging.getLogger(__name__)


@dataclass
class MassAssignResult:
    assigned_count: int
    total_requested: int
    casino_name: str
    errors: List[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        return f'Assigned {self.assigned_count} of {self.total_requested} cards to casino "{self.casino_name}"'

    @property
    def warning(self) -> Optional[str]:
        if self.assigned_count < self.total_requested:
            return f"{self.assigned_count} of {self.total_requested} cards assigned (some were unavailable)"
        return None

    def to_dict(self) -> dict:
        return {
            "success": True,
            "assigned_count": self.assigned_count,
            "total_requested": self.total_requested,
            "errors": self.errors,
            "message": self.message,
            "warning": self.warning,
        }


def _parse_id(value) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def casino_assignment_error(card: Card, casino: Casino) -> Optional[str]:
    """Why the card cannot be linked to the casino, or None when it can"""
    if card.status != "active":
        return f"Card {card.card_number_mask} is inactive"
    if is_assigned_to_casino(card, casino.id):
        return f"Card {card.card_number_mask} is already assigned to this casino"
    return None


def mass_assign(db: Session, card_ids: Iterable, casino: Casino, assigned_by: User) -> MassAssignResult:
    """
    Link every requested card to the casino in one pass.

    Cards that are missing, inactive or already linked are reported in
    errors and skipped; the rest are committed together.
    """
    card_ids = list(card_ids)
    result = MassAssignResult(assigned_count=0, total_requested=len(card_ids), casino_name=casino.name)

    for raw_id in card_ids:
        card_id = _parse_id(raw_id)
        card = db.query(Card).filter(Card.id == card_id).first() if card_id else None
        if card is None:
            result.errors.append(f"Card {raw_id} not found")
            continue
        error = casino_assignment_error(card, casino)
        if error:
            result.errors.append(error)
            continue

        # appended through the relationship so a repeated id in the same request is caught
        card.casino_assignments.append(CardCasinoAssignment(
            casino_id=casino.id,
            assigned_by=assigned_by.id,
            assignment_type=AssignmentType.testing,
            status=AssignmentStatus.active,
        ))
        result.assigned_count += 1

    db.commit()
    if result.warning:
        logger.warning(f"Mass assignment to {casino.name}: {result.warning}; errors={result.errors}")
    else:
        logger.info(f"Mass assignment to {casino.name}: {result.assigned_count} cards")
    return result


def assign_to_casino(db: Session, card: Card, casino: Casino, assigned_by: User) -> CardCasinoAssignment:
    """Single-card testing assignment; same checks as mass_assign"""
    error = casino_assignment_error(card, casino)
    if error:
        raise ValueError(error)

    assignment = CardCasinoAssignment(
        casino_id=casino.id,
        assigned_by=assigned_by.id,
        assignment_type=AssignmentType.testing,
        status=AssignmentStatus.active,
    )
    card.casino_assignments.append(assignment)
    db.commit()
    db.refresh(assignment)
    logger.info(f"Card {card.card_number_mask} assigned to casino {casino.name}")
    return assignment


def unassign(db: Session, card: Card, casino_id) -> int:
    """
    Remove the active links between a card and a casino.

    Links with a deposit are historical and stay.
    """
    links = [
        link for link in casino_links(card)
        if link.status == "active" and str(link.casino_id) == str(casino_id)
    ]
    if not links:
        raise LookupError("Card is not assigned to this casino")
    if any(link.has_deposit for link in links):
        raise ValueError("Card already has a deposit on this casino and cannot be unassigned")

    removed = 0
    for assignment in list(card.casino_assignments):
        if str(assignment.casino_id) == str(casino_id) and assignment.status == AssignmentStatus.active:
            card.casino_assignments.remove(assignment)
            removed += 1
    if card.assigned_casino_id is not None and str(card.assigned_casino_id) == str(casino_id):
        card.assigned_casino_id = None
        removed += 1

    db.commit()
    logger.info(f"Card {card.card_number_mask} unassigned from casino {casino_id} ({removed} link(s))")
    return removed


def assign_to_junior(db: Session, card: Card, junior: User) -> Card:
    if junior.role != UserRole.junior:
        raise LookupError("Junior not found")
    if not is_free_card(card):
        raise ValueError("Card is not available for assignment")

    card.assigned_to = junior.id
    db.commit()
    db.refresh(card)
    logger.info(f"Card {card.card_number_mask} assigned to junior {junior.username}")
    return card


def unassign_from_junior(db: Session, card: Card) -> Card:
    if card.assigned_to is None:
        raise ValueError("Card is not assigned to a junior")

    card.assigned_to = None
    db.commit()
    db.refresh(card)
    logger.info(f"Card {card.card_number_mask} unassigned from junior")
    return card
