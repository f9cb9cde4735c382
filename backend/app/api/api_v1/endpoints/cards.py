import logging
import uuid
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_current_active_user, require_roles
from app.core.config import settings
from app.core.security import decrypt_secret
from app.crud import crud_bank, crud_card
from app.crud.crud_user import user_crud
from app.models.casino import Casino
from app.models.user import User, UserRole
from app.schemas.card import (
    CardCreate,
    CardAssignAction,
    MassAssignRequest,
    RevealRequest,
    UnassignRequest,
    Card as CardSchema,
)
from app.services import assignment
from app.services.eligibility import TABS, card_stats, filter_cards
from app.services.notifier import notify_card_assignment
from app.services.presentation import balance_state, is_low_balance

logger = logging.getLogger(__name__)

router = APIRouter()

CARD_CREATORS = (UserRole.manager, UserRole.cfo, UserRole.admin)
CARD_FILTER_ROLES = (UserRole.manager, UserRole.tester, UserRole.hr, UserRole.cfo, UserRole.admin)
# PIN accepted from these roles; everyone else uses the default PIN
STAFF_PIN_ROLES = (UserRole.cfo, UserRole.admin, UserRole.manager, UserRole.tester)
# roles that may reveal any card; juniors only their own
REVEAL_ANY_ROLES = (UserRole.admin, UserRole.manager, UserRole.hr, UserRole.cfo, UserRole.tester)


def serialize_card(card) -> dict:
    data = CardSchema.model_validate(card).model_dump(mode="json")
    data["casino_assignments"] = [a for a in data["casino_assignments"] if a["status"] == "active"]
    data["balance_state"] = balance_state(card.account_balance)
    account = card.bank_account
    data["bank_account"] = {
        "id": str(account.id),
        "holder_name": account.holder_name,
        "currency": account.currency,
        "bank": {"name": account.bank.name, "country": account.bank.country} if account.bank else None,
    } if account else None
    return data


def _get_card_or_404(db: Session, card_id: uuid.UUID):
    card = crud_card.get_card(db, card_id)
    if not card:
        raise HTTPException(status_code=404, detail="Card not found")
    return card


def _get_casino_or_404(db: Session, casino_id) -> Casino:
    casino = db.query(Casino).filter(Casino.id == casino_id).first()
    if not casino:
        raise HTTPException(status_code=404, detail="Casino not found")
    return casino


@router.get("")
def get_cards(
    assigned_to: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """Cards by role: juniors get their own cards above the low-balance threshold"""
    if current_user.role == UserRole.junior:
        cards = [
            card for card in crud_card.get_cards(db, assigned_to=current_user.id)
            if not is_low_balance(card.account_balance)
        ]
    elif current_user.role in CARD_FILTER_ROLES:
        cards = crud_card.get_cards(db, assigned_to=assigned_to)
    else:
        cards = crud_card.get_cards(db)

    return {"cards": [serialize_card(card) for card in cards]}


@router.post("")
def create_card(
    card_in: CardCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*CARD_CREATORS))
):
    if not crud_bank.get_account(db, card_in.bank_account_id):
        raise HTTPException(status_code=404, detail="Bank account not found")

    mask = crud_card.mask_card_number(card_in.card_number)
    if crud_card.get_by_mask(db, mask):
        raise HTTPException(status_code=400, detail=f"Card {mask} already exists")

    card = crud_card.create_card(db, card_in)
    logger.info(f"Card {card.card_number_mask} created by {current_user.username}")
    return {
        "success": True,
        "card": serialize_card(card),
        "message": f"Card {card.card_number_mask} created",
    }


@router.get("/eligible")
def get_eligible_cards(
    casino_id: Optional[uuid.UUID] = None,
    tab: str = Query("free"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.tester, UserRole.manager, UserRole.admin))
):
    """Cards the tester may select for the casino, plus the tab counters"""
    if tab not in TABS:
        raise HTTPException(status_code=400, detail=f"Unknown tab: {tab}")
    casino = _get_casino_or_404(db, casino_id) if casino_id else None

    cards = crud_card.get_cards(db)
    selectable = filter_cards(cards, casino, tab)
    return {
        "cards": [serialize_card(card) for card in selectable],
        "stats": card_stats(cards, casino, tab),
        "tab": tab,
        "casino_id": str(casino.id) if casino else None,
    }


@router.post("/assign-correct")
def mass_assign_cards(
    payload: MassAssignRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.tester))
):
    """Assign several cards to one casino in a single request"""
    casino = _get_casino_or_404(db, payload.casino_id)
    result = assignment.mass_assign(db, payload.card_ids, casino, current_user)
    return result.to_dict()


@router.post("/unassign-from-casino")
def unassign_from_casino(
    payload: UnassignRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.tester))
):
    card = _get_card_or_404(db, payload.card_id)
    casino = _get_casino_or_404(db, payload.casino_id)
    try:
        assignment.unassign(db, card, casino.id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "success": True,
        "message": f'Card {card.card_number_mask} unassigned from casino "{casino.name}"',
    }


@router.get("/{card_id}")
def get_card(
    card_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    card = _get_card_or_404(db, card_id)
    if current_user.role == UserRole.junior and card.assigned_to != current_user.id:
        raise HTTPException(status_code=403, detail="No access to this card")
    return {"card": serialize_card(card)}


@router.post("/{card_id}/reveal")
def reveal_card(
    card_id: uuid.UUID,
    payload: RevealRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """Decrypt PAN/CVV after a PIN check; every attempt is logged"""
    card = _get_card_or_404(db, card_id)
    ip_address = request.headers.get("x-forwarded-for") or "127.0.0.1"
    user_agent = request.headers.get("user-agent") or ""
    context = payload.context or {}

    expected_pin = settings.REVEAL_PIN_STAFF if current_user.role in STAFF_PIN_ROLES else settings.REVEAL_PIN_DEFAULT
    if payload.pin_code != expected_pin:
        crud_card.log_access(
            db, card.id, current_user.id, success=False,
            ip_address=ip_address, user_agent=user_agent,
            context={**context, "error": "invalid_pin"},
        )
        logger.warning(f"Invalid reveal PIN for card {card.card_number_mask} from {current_user.username}")
        raise HTTPException(status_code=401, detail="Invalid PIN code")

    can_access = current_user.role in REVEAL_ANY_ROLES or (
        current_user.role == UserRole.junior and card.assigned_to == current_user.id
    )
    if not can_access:
        crud_card.log_access(
            db, card.id, current_user.id, success=False,
            ip_address=ip_address, user_agent=user_agent,
            context={**context, "error": "forbidden"},
        )
        raise HTTPException(status_code=403, detail="No access to this card")

    if card.status != "active":
        crud_card.log_access(
            db, card.id, current_user.id, success=False,
            ip_address=ip_address, user_agent=user_agent,
            context={**context, "error": "card_inactive"},
        )
        raise HTTPException(status_code=400, detail="Card is not available")

    if card.secret is None:
        raise HTTPException(status_code=404, detail="Card secrets not found")

    pan = decrypt_secret(card.secret.pan_encrypted)
    cvv = decrypt_secret(card.secret.cvv_encrypted)
    crud_card.log_access(
        db, card.id, current_user.id, success=True,
        ip_address=ip_address, user_agent=user_agent, context=context,
    )
    logger.info(f"Card {card.card_number_mask} revealed to {current_user.username}")

    return {
        "success": True,
        "card_data": {
            "pan": pan,
            "cvv": cvv,
            "exp_month": card.exp_month,
            "exp_year": card.exp_year,
            "mask": card.card_number_mask,
        },
        "ttl": settings.REVEAL_TTL_SECONDS,
    }


@router.post("/{card_id}/assign")
def assign_card(
    card_id: uuid.UUID,
    payload: CardAssignAction,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """Casino (tester) and junior (manager/admin) assignment actions"""
    card = _get_card_or_404(db, card_id)

    try:
        if payload.action in ("assign_to_casino", "unassign_from_casino"):
            if current_user.role != UserRole.tester:
                raise HTTPException(status_code=403, detail="Only testers can assign cards to casinos")
            if not payload.casino_id:
                raise HTTPException(status_code=400, detail="casino_id is required")
            casino = _get_casino_or_404(db, payload.casino_id)
            if payload.action == "assign_to_casino":
                assignment.assign_to_casino(db, card, casino, current_user)
                message = f'Card {card.card_number_mask} assigned to casino "{casino.name}"'
            else:
                assignment.unassign(db, card, casino.id)
                message = f'Card {card.card_number_mask} unassigned from casino "{casino.name}"'
        else:
            if current_user.role not in (UserRole.manager, UserRole.admin):
                raise HTTPException(status_code=403, detail="Only managers and admins can assign cards to juniors")
            if payload.action == "assign_to_junior":
                if not payload.junior_id:
                    raise HTTPException(status_code=400, detail="junior_id is required")
                junior = user_crud.get(db, payload.junior_id)
                if not junior:
                    raise HTTPException(status_code=404, detail="Junior not found")
                assignment.assign_to_junior(db, card, junior)
                notify_card_assignment(db, junior.id, card.card_number_mask, sender_id=current_user.id)
                message = f"Card {card.card_number_mask} assigned to {junior.full_name}"
            else:
                assignment.unassign_from_junior(db, card)
                message = f"Card {card.card_number_mask} unassigned from junior"
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    db.refresh(card)
    return {"success": True, "card": serialize_card(card), "message": message}
