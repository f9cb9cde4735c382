from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from app.core.security import ENCRYPTION_KEY_ID, encrypt_secret
from app.models.bank import BankAccount
from app.models.card import Card, CardSecret, CardAccessLog
from app.schemas.card import CardCreate


def mask_card_number(card_number: str) -> str:
    """1234567812345678 -> 1234****5678"""
    return f"{card_number[:4]}****{card_number[-4:]}"


def get_card(db: Session, card_id: UUID) -> Optional[Card]:
    return db.query(Card).filter(Card.id == card_id).first()


def get_cards(db: Session, assigned_to: Optional[UUID] = None) -> List[Card]:
    """Cards with their account and casino links, newest first"""
    query = db.query(Card).options(
        selectinload(Card.bank_account).selectinload(BankAccount.bank),
        selectinload(Card.casino_assignments),
    )
    if assigned_to:
        query = query.filter(Card.assigned_to == assigned_to)
    return query.order_by(Card.created_at.desc()).all()


def get_by_mask(db: Session, mask: str) -> Optional[Card]:
    return db.query(Card).filter(Card.card_number_mask == mask).first()


def create_card(db: Session, obj_in: CardCreate) -> Card:
    """Store the masked card and keep PAN/CVV encrypted in card_secrets"""
    card = Card(
        bank_account_id=obj_in.bank_account_id,
        card_number_mask=mask_card_number(obj_in.card_number),
        card_bin=obj_in.card_number[:8],
        card_type=obj_in.card_type,
        exp_month=obj_in.exp_month,
        exp_year=obj_in.exp_year,
        daily_limit=obj_in.daily_limit,
    )
    card.secret = CardSecret(
        pan_encrypted=encrypt_secret(obj_in.card_number),
        cvv_encrypted=encrypt_secret(obj_in.cvv),
        encryption_key_id=ENCRYPTION_KEY_ID,
    )
    db.add(card)
    db.commit()
    db.refresh(card)
    return card


def log_access(
    db: Session,
    card_id: UUID,
    user_id: UUID,
    success: bool,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
    context: Optional[dict] = None,
) -> CardAccessLog:
    entry = CardAccessLog(
        card_id=card_id,
        user_id=user_id,
        access_type="reveal_success" if success else "reveal_attempt",
        success=success,
        ip_address=ip_address,
        user_agent=user_agent,
        context=context or {},
    )
    db.add(entry)
    db.commit()
    return entry
