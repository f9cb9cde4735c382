import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_current_active_user, require_roles
from app.models.user import User, UserRole
from app.models.work import Work, WorkStatus, WorkWithdrawal
from app.schemas.withdrawal import WorkWithdrawalCreate, WorkWithdrawal as WorkWithdrawalSchema

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
def get_work_withdrawals(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    query = db.query(WorkWithdrawal)
    if current_user.role == UserRole.junior:
        query = query.join(Work, WorkWithdrawal.work_id == Work.id).filter(Work.junior_id == current_user.id)

    withdrawals = query.order_by(WorkWithdrawal.created_at.desc()).all()
    return {"withdrawals": [WorkWithdrawalSchema.model_validate(w) for w in withdrawals]}


@router.post("")
def create_work_withdrawal(
    withdrawal_in: WorkWithdrawalCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.junior))
):
    work = db.query(Work).filter(
        Work.id == withdrawal_in.work_id, Work.junior_id == current_user.id
    ).first()
    if not work:
        raise HTTPException(status_code=404, detail="Work not found or does not belong to you")
    if work.status != WorkStatus.active:
        raise HTTPException(status_code=400, detail="Withdrawals can only be created for active works")

    withdrawal = WorkWithdrawal(work_id=work.id, withdrawal_amount=withdrawal_in.withdrawal_amount)
    db.add(withdrawal)
    db.commit()
    db.refresh(withdrawal)
    logger.info(f"Withdrawal {withdrawal_in.withdrawal_amount} on work {work.id} requested by {current_user.username}")

    return {
        "success": True,
        "withdrawal": WorkWithdrawalSchema.model_validate(withdrawal),
        "message": f"Withdrawal ${withdrawal_in.withdrawal_amount:.2f} created",
    }
