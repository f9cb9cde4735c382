import logging
import uuid
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, selectinload

from app.api.deps import get_db, require_roles
from app.crud import crud_card
from app.models.casino import Casino, CasinoStatus
from app.models.user import User, UserRole
from app.models.work import Work
from app.schemas.withdrawal import WorkCreate, Work as WorkSchema, WorkWithdrawal as WorkWithdrawalSchema
from app.services.presentation import is_low_balance

logger = logging.getLogger(__name__)

router = APIRouter()

WORK_VIEWERS = (UserRole.junior, UserRole.teamlead, UserRole.manager, UserRole.hr, UserRole.cfo, UserRole.admin)
JUNIOR_FILTER_ROLES = (UserRole.manager, UserRole.hr, UserRole.cfo, UserRole.admin)


def serialize_work(work: Work) -> dict:
    card = work.card
    return {
        **WorkSchema.model_validate(work).model_dump(mode="json"),
        "casino": {
            "id": str(work.casino.id),
            "name": work.casino.name,
            "url": work.casino.url,
            "currency": work.casino.currency,
        },
        "card": {
            "id": str(card.id),
            "card_number_mask": card.card_number_mask,
            "card_bin": card.card_bin,
            "card_type": card.card_type.value,
        },
        "junior": {"id": str(work.junior.id), "name": work.junior.full_name},
        "withdrawals": [
            WorkWithdrawalSchema.model_validate(w).model_dump(mode="json") for w in work.withdrawals
        ],
    }


@router.get("")
def get_works(
    junior_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*WORK_VIEWERS))
):
    """Junior works; juniors see their own, Manager+ may filter by junior"""
    query = db.query(Work).options(selectinload(Work.withdrawals))
    if current_user.role == UserRole.junior:
        query = query.filter(Work.junior_id == current_user.id)
    elif junior_id and current_user.role in JUNIOR_FILTER_ROLES:
        query = query.filter(Work.junior_id == junior_id)

    works = query.order_by(Work.created_at.desc()).all()
    return {"works": [serialize_work(w) for w in works]}


@router.post("")
def create_work(
    work_in: WorkCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.junior))
):
    casino = db.query(Casino).filter(Casino.id == work_in.casino_id).first()
    if not casino or casino.status != CasinoStatus.approved:
        raise HTTPException(status_code=400, detail="Casino is not available for work")

    card = crud_card.get_card(db, work_in.card_id)
    if not card:
        raise HTTPException(status_code=404, detail="Card not found")
    if card.assigned_to != current_user.id:
        raise HTTPException(status_code=403, detail="Card is not assigned to you")
    if card.status != "active":
        raise HTTPException(status_code=400, detail="Card is not available")
    if is_low_balance(card.account_balance):
        raise HTTPException(status_code=400, detail="Insufficient bank account balance")

    work = Work(
        junior_id=current_user.id,
        casino_id=casino.id,
        card_id=card.id,
        deposit_amount=work_in.deposit_amount,
        casino_login=work_in.casino_login,
        casino_password=work_in.casino_password,
        notes=work_in.notes,
    )
    db.add(work)
    db.commit()
    db.refresh(work)
    logger.info(f"Work on {casino.name} with card {card.card_number_mask} created by {current_user.username}")

    return {
        "success": True,
        "work": serialize_work(work),
        "message": f'Work on casino "{casino.name}" created',
    }
