import logging
import uuid
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_current_active_user, require_roles
from app.models.card import Card, CardCasinoAssignment
from app.models.casino import Casino, CasinoStatus
from app.models.test_work import TestWork
from app.models.user import User, UserRole
from app.models.work import Work
from app.schemas.casino import (
    CasinoCreate,
    CasinoUpdate,
    Casino as CasinoSchema,
    CasinoList,
)

logger = logging.getLogger(__name__)

router = APIRouter()

CASINO_EDITORS = (UserRole.tester, UserRole.manager, UserRole.admin)


def _get_casino_or_404(db: Session, casino_id: uuid.UUID) -> Casino:
    casino = db.query(Casino).filter(Casino.id == casino_id).first()
    if not casino:
        raise HTTPException(status_code=404, detail="Casino not found")
    return casino


@router.get("", response_model=CasinoList)
def get_casinos(
    status: Optional[CasinoStatus] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    query = db.query(Casino)
    if status:
        query = query.filter(Casino.status == status)

    total = query.count()
    casinos = query.order_by(Casino.created_at.desc()).all()
    return CasinoList(total=total, items=casinos)


@router.post("")
def create_casino(
    casino_in: CasinoCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*CASINO_EDITORS))
):
    casino = Casino(**casino_in.model_dump(), created_by=current_user.id)
    db.add(casino)
    db.commit()
    db.refresh(casino)
    logger.info(f"Casino {casino.name} created by {current_user.username}")

    return {
        "success": True,
        "casino": CasinoSchema.model_validate(casino),
        "message": f'Casino "{casino.name}" created',
    }


@router.get("/{casino_id}", response_model=CasinoSchema)
def get_casino(
    casino_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    return _get_casino_or_404(db, casino_id)


@router.patch("/{casino_id}")
def update_casino(
    casino_id: uuid.UUID,
    casino_update: CasinoUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*CASINO_EDITORS))
):
    casino = _get_casino_or_404(db, casino_id)

    update_data = casino_update.model_dump(exclude_unset=True)
    if "name" in update_data and not (update_data["name"] or "").strip():
        raise HTTPException(status_code=400, detail="Casino name is required")
    for field, value in update_data.items():
        setattr(casino, field, value)

    db.commit()
    db.refresh(casino)
    logger.info(f"Casino {casino.name} updated by {current_user.username}: {sorted(update_data)}")

    return {
        "success": True,
        "casino": CasinoSchema.model_validate(casino),
        "message": f'Casino "{casino.name}" updated',
    }


@router.delete("/{casino_id}")
def delete_casino(
    casino_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.admin))
):
    casino = _get_casino_or_404(db, casino_id)

    if (
        db.query(TestWork).filter(TestWork.casino_id == casino.id).first()
        or db.query(Work).filter(Work.casino_id == casino.id).first()
    ):
        raise HTTPException(status_code=400, detail="Casino has works and cannot be deleted")

    db.query(CardCasinoAssignment).filter(CardCasinoAssignment.casino_id == casino.id).delete()
    db.query(Card).filter(Card.assigned_casino_id == casino.id).update({"assigned_casino_id": None})
    name = casino.name
    db.delete(casino)
    db.commit()
    logger.info(f"Casino {name} deleted by {current_user.username}")

    return {"success": True, "message": f'Casino "{name}" deleted'}
