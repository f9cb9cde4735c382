import logging
import uuid
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_roles
from app.crud import crud_bank
from app.crud.crud_user import user_crud
from app.models.user import User, UserRole
from app.schemas.bank import (
    BankCreate,
    BankAccountCreate,
    BalanceUpdate,
    Bank as BankSchema,
    BankAccount as BankAccountSchema,
    BalanceHistory,
    TeamleadAssign,
)
from app.services.currency import convert_to_usd, get_rates
from app.services.notifier import notify_bank_assignment
from app.services.presentation import balance_state, is_low_balance

logger = logging.getLogger(__name__)

router = APIRouter()

BANK_VIEWERS = (UserRole.manager, UserRole.hr, UserRole.tester, UserRole.cfo, UserRole.admin)
BALANCE_EDITORS = (UserRole.manager, UserRole.hr, UserRole.cfo, UserRole.admin)
BANK_DISTRIBUTORS = (UserRole.manager, UserRole.cfo, UserRole.admin)


def _client_ip(request: Request) -> str:
    return (
        request.headers.get("x-forwarded-for")
        or request.headers.get("x-real-ip")
        or (request.client.host if request.client else "127.0.0.1")
    )


def _account_payload(account, rates) -> dict:
    balance = float(account.balance or 0)
    return {
        **BankAccountSchema.model_validate(account).model_dump(mode="json"),
        "cards_available": not is_low_balance(balance),
        "balance_state": balance_state(balance),
        "balance_usd": round(convert_to_usd(balance, account.currency, rates), 2),
        "cards": [
            {
                "id": str(card.id),
                "card_number_mask": card.card_number_mask,
                "card_bin": card.card_bin,
                "card_type": card.card_type.value,
                "status": card.status.value,
                "assigned_to": str(card.assigned_to) if card.assigned_to else None,
                "exp_month": card.exp_month,
                "exp_year": card.exp_year,
            }
            for card in account.cards
        ],
    }


@router.get("/banks")
def get_banks(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*BANK_VIEWERS))
):
    """Banks -> accounts -> cards with USD balances and statistics"""
    rates = get_rates()
    banks = crud_bank.get_banks(db)

    items = []
    accounts = []
    for bank in banks:
        bank_accounts = [_account_payload(a, rates) for a in bank.accounts]
        accounts.extend(bank_accounts)
        items.append({
            **BankSchema.model_validate(bank).model_dump(mode="json"),
            "accounts": bank_accounts,
        })

    active_accounts = [a for a in accounts if a["is_active"]]
    blocked_accounts = [a for a in accounts if not a["is_active"]]
    active_cards = [c for a in active_accounts for c in a["cards"]]

    statistics = {
        "total_banks": len(items),
        "active_banks": sum(1 for b in items if b["is_active"]),
        "total_accounts": len(accounts),
        "active_accounts": len(active_accounts),
        "blocked_accounts": len(blocked_accounts),
        # balances in USD, active accounts only
        "total_balance": round(sum(a["balance_usd"] for a in active_accounts), 2),
        "blocked_balance": round(sum(a["balance_usd"] for a in blocked_accounts), 2),
        "total_cards": len(active_cards),
        "available_cards": sum(1 for c in active_cards if c["status"] == "active"),
        "low_balance_accounts": sum(1 for a in active_accounts if not a["cards_available"]),
    }

    return {
        "banks": items,
        "statistics": statistics,
        "exchange_rates": {"rates": rates, "coefficient": 0.95},
    }


@router.post("/banks", response_model=BankSchema)
def create_bank(
    bank_in: BankCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.cfo, UserRole.admin))
):
    bank = crud_bank.create_bank(db, bank_in)
    logger.info(f"Bank {bank.name} created by {current_user.username}")
    return bank


@router.post("/banks/{bank_id}/accounts", response_model=BankAccountSchema)
def create_bank_account(
    bank_id: uuid.UUID,
    account_in: BankAccountCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.cfo, UserRole.admin, UserRole.manager))
):
    bank = crud_bank.get_bank(db, bank_id)
    if not bank:
        raise HTTPException(status_code=404, detail="Bank not found")

    account = crud_bank.create_account(db, bank, account_in)
    logger.info(f"Account {account.holder_name} added to bank {bank.name}")
    return account


@router.patch("/bank-accounts/{account_id}/balance")
def update_balance(
    account_id: uuid.UUID,
    payload: BalanceUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*BALANCE_EDITORS))
):
    """Set an account balance; every change is appended to the history"""
    account = crud_bank.get_account(db, account_id)
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")

    entry = crud_bank.update_balance(
        db, account, payload.balance, current_user,
        comment=payload.comment, ip_address=_client_ip(request),
    )
    logger.info(
        f"Balance of {account.holder_name}: {float(entry.old_balance):.2f} -> "
        f"{float(entry.new_balance):.2f} {account.currency} by {current_user.username}"
    )

    cards = account.cards
    available = not is_low_balance(account.balance)
    return {
        "success": True,
        "message": f'Balance of account "{account.holder_name}" updated',
        "account": {
            **BankAccountSchema.model_validate(account).model_dump(mode="json"),
            "bank_name": account.bank.name,
            "bank_country": account.bank.country,
        },
        "affected_cards": len(cards),
        "cards_status": {
            "available": sum(1 for c in cards if c.status == "active") if available else 0,
            "hidden": 0 if available else len(cards),
        },
    }


@router.get("/bank-accounts/{account_id}/balance")
def get_balance_history(
    account_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*BALANCE_EDITORS))
):
    """Balance change history, newest first"""
    if not crud_bank.get_account(db, account_id):
        raise HTTPException(status_code=404, detail="Account not found")

    history = crud_bank.get_balance_history(db, account_id)
    return {
        "history": [
            {
                **BalanceHistory.model_validate(entry).model_dump(mode="json"),
                "changed_by_user": {
                    "name": entry.changed_by_user.full_name,
                    "role": entry.changed_by_user.role.value,
                } if entry.changed_by_user else None,
            }
            for entry in history
        ]
    }


@router.post("/banks/{bank_id}/teamleads")
def assign_bank_to_teamlead(
    bank_id: uuid.UUID,
    payload: TeamleadAssign,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*BANK_DISTRIBUTORS))
):
    bank = crud_bank.get_bank(db, bank_id)
    if not bank:
        raise HTTPException(status_code=404, detail="Bank not found")
    teamlead = user_crud.get(db, payload.teamlead_id)
    if not teamlead or teamlead.role != UserRole.teamlead or not teamlead.is_active:
        raise HTTPException(status_code=400, detail="Bank can only be assigned to an active team lead")
    if crud_bank.get_teamlead_assignment(db, bank.id, teamlead.id):
        raise HTTPException(status_code=400, detail=f"Bank {bank.name} is already assigned to {teamlead.full_name}")

    crud_bank.assign_to_teamlead(db, bank, teamlead, current_user)
    logger.info(f"Bank {bank.name} assigned to {teamlead.username} by {current_user.username}")
    notify_bank_assignment(db, teamlead.id, bank.name, sender_id=current_user.id)

    return {"success": True, "message": f"Bank {bank.name} assigned to {teamlead.full_name}"}


@router.get("/teamlead/assigned-banks")
def get_assigned_banks(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.teamlead))
):
    """Banks handed to the calling team lead, with accounts and cards"""
    rates = get_rates()
    banks = []
    for assignment in crud_bank.get_teamlead_banks(db, current_user.id):
        banks.append({
            **BankSchema.model_validate(assignment.bank).model_dump(mode="json"),
            "assigned_at": assignment.created_at.isoformat(),
            "accounts": [_account_payload(a, rates) for a in assignment.bank.accounts],
        })

    accounts = [a for b in banks for a in b["accounts"]]
    cards = [c for a in accounts for c in a["cards"]]
    stats = {
        "total_banks": len(banks),
        "total_accounts": len(accounts),
        "total_balance": round(sum(a["balance_usd"] for a in accounts), 2),
        "total_cards": len(cards),
        "active_cards": sum(1 for c in cards if c["status"] == "active"),
    }
    response = {"success": True, "banks": banks, "stats": stats}
    if not banks:
        response["message"] = "No banks assigned"
    return response
