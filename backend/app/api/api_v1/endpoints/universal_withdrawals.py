import logging
import uuid
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_roles
from app.crud.crud_user import user_crud
from app.models.paypal import PayPalWithdrawal
from app.models.user import User, UserRole, UserStatus
from app.models.work import Work, WorkWithdrawal
from app.schemas.paypal import PayPalWithdrawal as PayPalWithdrawalSchema
from app.schemas.withdrawal import (
    WithdrawalAction,
    WithdrawalActionResult,
    UniversalWithdrawalList,
    WorkWithdrawal as WorkWithdrawalSchema,
)
from app.services import withdrawal_review
from app.services.currency import format_currency
from app.services.notifier import notify_withdrawal_action
from app.services.presentation import withdrawal_style

logger = logging.getLogger(__name__)

router = APIRouter()

REVIEWERS = (UserRole.teamlead, UserRole.manager, UserRole.hr, UserRole.cfo, UserRole.admin)


def _user_brief(user) -> dict:
    if user is None:
        return None
    return {
        "id": str(user.id),
        "email": user.email,
        "name": user.full_name,
        "telegram_username": user.telegram_username,
    }


def _currency(withdrawal) -> str:
    if isinstance(withdrawal, PayPalWithdrawal):
        return withdrawal.currency
    return withdrawal.work.casino.currency


def _regular_payload(withdrawal: WorkWithdrawal) -> dict:
    work = withdrawal.work
    return {
        **WorkWithdrawalSchema.model_validate(withdrawal).model_dump(mode="json"),
        "source_type": "regular",
        "style": withdrawal_style(withdrawal.status),
        "work": {
            "id": str(work.id),
            "deposit_amount": float(work.deposit_amount),
            "casino_login": work.casino_login,
            "status": work.status.value,
            "junior": _user_brief(work.junior),
            "casino": {"id": str(work.casino.id), "name": work.casino.name, "currency": work.casino.currency},
            "card_mask": work.card.card_number_mask,
        },
    }


def _paypal_payload(withdrawal: PayPalWithdrawal) -> dict:
    return {
        **PayPalWithdrawalSchema.model_validate(withdrawal).model_dump(mode="json"),
        "source_type": "paypal",
        "user": _user_brief(withdrawal.user),
        "casino_name": withdrawal.casino.name if withdrawal.casino else None,
    }


@router.get("/withdrawals", response_model=UniversalWithdrawalList)
def get_withdrawals(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*REVIEWERS))
):
    """Regular and PayPal withdrawals of the juniors visible to the caller"""
    if current_user.role == UserRole.teamlead:
        juniors = user_crud.get_team(db, current_user.id)
    else:
        juniors = user_crud.get_multi(db, limit=10000, role=UserRole.junior, status=UserStatus.active)
    junior_ids = [j.id for j in juniors]

    if not junior_ids:
        message = "You have no juniors in your team" if current_user.role == UserRole.teamlead else "No active juniors"
        return UniversalWithdrawalList(withdrawals=[], paypal_withdrawals=[], message=message)

    regular = (
        db.query(WorkWithdrawal)
        .join(Work, WorkWithdrawal.work_id == Work.id)
        .filter(Work.junior_id.in_(junior_ids))
        .order_by(WorkWithdrawal.created_at.desc())
        .all()
    )
    paypal = (
        db.query(PayPalWithdrawal)
        .filter(PayPalWithdrawal.user_id.in_(junior_ids))
        .order_by(PayPalWithdrawal.created_at.desc())
        .all()
    )

    return UniversalWithdrawalList(
        withdrawals=[_regular_payload(w) for w in regular],
        paypal_withdrawals=[_paypal_payload(w) for w in paypal],
    )


@router.post("/withdrawals/{withdrawal_id}/action", response_model=WithdrawalActionResult)
def withdrawal_action(
    withdrawal_id: uuid.UUID,
    payload: WithdrawalAction,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*REVIEWERS))
):
    try:
        result = withdrawal_review.perform_action(db, withdrawal_id, payload, current_user)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if payload.action != "create_task":
        withdrawal = withdrawal_review.get_withdrawal(db, withdrawal_id, payload.source_type)
        owner_id = withdrawal_review.withdrawal_owner_id(withdrawal)
        if owner_id:
            notify_withdrawal_action(
                db, owner_id, payload.action, format_currency(withdrawal.withdrawal_amount, _currency(withdrawal)),
                current_user, comment=payload.comment,
            )

    return result
