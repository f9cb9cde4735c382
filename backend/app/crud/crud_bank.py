from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from app.models.bank import Bank, BankAccount, BankBalanceHistory, BankTeamleadAssignment
from app.models.user import User
from app.schemas.bank import BankCreate, BankAccountCreate

# history rows returned per account
HISTORY_LIMIT = 50


def get_banks(db: Session) -> List[Bank]:
    """Banks with their accounts and cards, newest bank first"""
    return db.query(Bank).options(
        selectinload(Bank.accounts).selectinload(BankAccount.cards)
    ).order_by(Bank.created_at.desc()).all()


def get_bank(db: Session, bank_id: UUID) -> Optional[Bank]:
    return db.query(Bank).filter(Bank.id == bank_id).first()


def create_bank(db: Session, obj_in: BankCreate) -> Bank:
    bank = Bank(**obj_in.model_dump())
    db.add(bank)
    db.commit()
    db.refresh(bank)
    return bank


def get_account(db: Session, account_id: UUID) -> Optional[BankAccount]:
    return db.query(BankAccount).filter(BankAccount.id == account_id).first()


def create_account(db: Session, bank: Bank, obj_in: BankAccountCreate) -> BankAccount:
    account = BankAccount(bank_id=bank.id, **obj_in.model_dump())
    db.add(account)
    db.commit()
    db.refresh(account)
    return account


def update_balance(
    db: Session,
    account: BankAccount,
    new_balance: float,
    user: User,
    comment: Optional[str] = None,
    ip_address: Optional[str] = None,
) -> BankBalanceHistory:
    """Set the balance and append the change to the history"""
    old_balance = float(account.balance or 0)
    entry = BankBalanceHistory(
        bank_account_id=account.id,
        old_balance=old_balance,
        new_balance=new_balance,
        change_amount=new_balance - old_balance,
        change_reason=comment or f"Updated by {user.role.value}",
        changed_by=user.id,
        ip_address=ip_address,
    )
    account.balance = new_balance
    account.balance_updated_by = user.id
    db.add(entry)
    db.commit()
    db.refresh(account)
    return entry


def get_balance_history(db: Session, account_id: UUID, limit: int = HISTORY_LIMIT) -> List[BankBalanceHistory]:
    return db.query(BankBalanceHistory).filter(
        BankBalanceHistory.bank_account_id == account_id
    ).order_by(BankBalanceHistory.created_at.desc()).limit(limit).all()


def get_teamlead_assignment(db: Session, bank_id: UUID, teamlead_id: UUID) -> Optional[BankTeamleadAssignment]:
    return db.query(BankTeamleadAssignment).filter(
        BankTeamleadAssignment.bank_id == bank_id,
        BankTeamleadAssignment.teamlead_id == teamlead_id,
        BankTeamleadAssignment.is_active == True,
    ).first()


def assign_to_teamlead(db: Session, bank: Bank, teamlead: User, assigned_by: User) -> BankTeamleadAssignment:
    assignment = BankTeamleadAssignment(bank_id=bank.id, teamlead_id=teamlead.id, assigned_by=assigned_by.id)
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    return assignment


def get_teamlead_banks(db: Session, teamlead_id: UUID) -> List[BankTeamleadAssignment]:
    """Active assignments with bank, accounts and cards loaded"""
    return db.query(BankTeamleadAssignment).options(
        selectinload(BankTeamleadAssignment.bank)
        .selectinload(Bank.accounts)
        .selectinload(BankAccount.cards)
    ).filter(
        BankTeamleadAssignment.teamlead_id == teamlead_id,
        BankTeamleadAssignment.is_active == True,
    ).order_by(BankTeamleadAssignment.created_at).all()
