import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_roles
from app.crud.crud_user import user_crud
from app.models.casino import Casino
from app.models.paypal import (
    PayPalAccount,
    PayPalAccountStatus,
    PayPalWork,
    PayPalWorkStatus,
    PayPalWithdrawal,
)
from app.models.user import User, UserRole
from app.schemas.paypal import (
    PayPalAccountCreate,
    PayPalWorkCreate,
    PayPalWithdrawalCreate,
    PayPalAccount as PayPalAccountSchema,
    PayPalWork as PayPalWorkSchema,
    PayPalWithdrawal as PayPalWithdrawalSchema,
)
from app.services.presentation import mask_password

logger = logging.getLogger(__name__)

router = APIRouter()

ACCOUNT_VIEWERS = (
    UserRole.junior, UserRole.teamlead, UserRole.manager,
    UserRole.cfo, UserRole.hr, UserRole.tester, UserRole.admin,
)
ACCOUNT_MANAGERS = (UserRole.manager, UserRole.hr, UserRole.admin)
WITHDRAWAL_VIEWERS = (UserRole.cfo, UserRole.hr, UserRole.admin, UserRole.manager, UserRole.tester)
# a withdrawal may not exceed this multiple of the deposit
MAX_WITHDRAWAL_MULTIPLIER = 10


def serialize_account(account: PayPalAccount, viewer: User) -> dict:
    data = PayPalAccountSchema.model_validate(account).model_dump(mode="json")
    if account.user_id != viewer.id:
        data["password"] = mask_password(account.password)
    return data


@router.get("/accounts")
def get_paypal_accounts(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*ACCOUNT_VIEWERS))
):
    """PayPal accounts: juniors see their own, team leads their team's"""
    query = db.query(PayPalAccount)
    if current_user.role == UserRole.junior:
        query = query.filter(PayPalAccount.user_id == current_user.id)
    elif current_user.role == UserRole.teamlead:
        owner_ids = [j.id for j in user_crud.get_team(db, current_user.id)]
        owner_ids.append(current_user.id)
        query = query.filter(PayPalAccount.user_id.in_(owner_ids))

    accounts = query.order_by(PayPalAccount.created_at.desc()).all()
    logger.info(f"{current_user.username} ({current_user.role.value}) fetched {len(accounts)} PayPal accounts")
    return {"accounts": [serialize_account(a, current_user) for a in accounts]}


@router.post("/accounts")
def create_paypal_account(
    account_in: PayPalAccountCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.junior, *ACCOUNT_MANAGERS))
):
    owner_id = current_user.id
    if account_in.user_id and account_in.user_id != current_user.id:
        if current_user.role not in ACCOUNT_MANAGERS:
            raise HTTPException(status_code=403, detail="Cannot create accounts for other users")
        if not user_crud.get(db, account_in.user_id):
            raise HTTPException(status_code=404, detail="User not found")
        owner_id = account_in.user_id

    account = PayPalAccount(**account_in.model_dump(exclude={"user_id"}), user_id=owner_id)
    db.add(account)
    db.commit()
    db.refresh(account)
    logger.info(f"PayPal account {account.name} created by {current_user.username}")

    return {
        "success": True,
        "account": serialize_account(account, current_user),
        "message": f'PayPal account "{account.name}" created',
    }


@router.get("/works")
def get_paypal_works(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.junior))
):
    works = (
        db.query(PayPalWork)
        .filter(PayPalWork.user_id == current_user.id)
        .order_by(PayPalWork.created_at.desc())
        .all()
    )
    return {"works": [PayPalWorkSchema.model_validate(w) for w in works]}


@router.post("/works")
def create_paypal_work(
    work_in: PayPalWorkCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.junior))
):
    account = db.query(PayPalAccount).filter(
        PayPalAccount.id == work_in.paypal_account_id,
        PayPalAccount.user_id == current_user.id,
    ).first()
    if not account:
        raise HTTPException(status_code=404, detail="PayPal account not found")
    if account.status != PayPalAccountStatus.active:
        raise HTTPException(status_code=400, detail="PayPal account is not active")

    casino = db.query(Casino).filter(Casino.id == work_in.casino_id).first()
    if not casino:
        raise HTTPException(status_code=404, detail="Casino not found")

    work = PayPalWork(**work_in.model_dump(), user_id=current_user.id)
    db.add(work)
    db.commit()
    db.refresh(work)
    logger.info(f"PayPal work on {casino.name} created by {current_user.username}")

    return {
        "success": True,
        "work": PayPalWorkSchema.model_validate(work),
        "message": f'PayPal work on casino "{casino.name}" created',
    }


@router.get("/withdrawals")
def get_paypal_withdrawals(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*WITHDRAWAL_VIEWERS))
):
    withdrawals = db.query(PayPalWithdrawal).order_by(PayPalWithdrawal.created_at.desc()).all()
    return {"withdrawals": [PayPalWithdrawalSchema.model_validate(w) for w in withdrawals]}


@router.post("/withdrawals")
def create_paypal_withdrawal(
    withdrawal_in: PayPalWithdrawalCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.junior))
):
    work = db.query(PayPalWork).filter(
        PayPalWork.id == withdrawal_in.paypal_work_id,
        PayPalWork.user_id == current_user.id,
    ).first()
    if not work:
        raise HTTPException(status_code=404, detail="PayPal work not found")
    if work.status != PayPalWorkStatus.active:
        raise HTTPException(status_code=400, detail="PayPal work is not active")
    if withdrawal_in.withdrawal_amount > float(work.deposit_amount) * MAX_WITHDRAWAL_MULTIPLIER:
        raise HTTPException(
            status_code=400,
            detail=f"Withdrawal cannot exceed {MAX_WITHDRAWAL_MULTIPLIER}x the deposit",
        )

    withdrawal = PayPalWithdrawal(
        user_id=current_user.id,
        paypal_work_id=work.id,
        paypal_account_id=work.paypal_account_id,
        casino_id=work.casino_id,
        withdrawal_amount=withdrawal_in.withdrawal_amount,
        currency=withdrawal_in.currency,
        notes=withdrawal_in.notes,
    )
    db.add(withdrawal)
    db.commit()
    db.refresh(withdrawal)
    logger.info(f"PayPal withdrawal {withdrawal_in.withdrawal_amount} requested by {current_user.username}")

    return {
        "success": True,
        "withdrawal": PayPalWithdrawalSchema.model_validate(withdrawal),
        "message": f"PayPal withdrawal ${withdrawal_in.withdrawal_amount:.2f} created",
    }
