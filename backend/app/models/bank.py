from sqlalchemy import Column, String, Boolean, Numeric, Text, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from .base import BaseModel


class Bank(BaseModel):
    """Issuing bank"""
    __tablename__ = "banks"

    name = Column(String(100), nullable=False)
    country = Column(String(50), nullable=True)
    currency = Column(String(10), nullable=False, default="USD")
    is_active = Column(Boolean, default=True)

    accounts = relationship(
        "BankAccount", back_populates="bank",
        cascade="all, delete-orphan", order_by="BankAccount.created_at",
    )


class BankAccount(BaseModel):
    """Account held at a bank; cards draw on its balance"""
    __tablename__ = "bank_accounts"

    bank_id = Column(UUID(as_uuid=True), ForeignKey("banks.id"), nullable=False, index=True)
    holder_name = Column(String(200), nullable=False)
    account_number = Column(String(50), nullable=True)
    sort_code = Column(String(20), nullable=True)
    balance = Column(Numeric(15, 2), nullable=False, default=0)
    currency = Column(String(10), nullable=False, default="USD")
    is_active = Column(Boolean, default=True)
    bank_url = Column(String(500), nullable=True)
    login_password = Column(String(200), nullable=True)

    balance_updated_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)

    bank = relationship("Bank", back_populates="accounts")
    cards = relationship("Card", back_populates="bank_account", order_by="Card.created_at")
    history = relationship(
        "BankBalanceHistory", back_populates="bank_account",
        order_by="BankBalanceHistory.created_at.desc()",
    )


class BankBalanceHistory(BaseModel):
    """Append-only log of balance changes"""
    __tablename__ = "bank_balance_history"

    bank_account_id = Column(UUID(as_uuid=True), ForeignKey("bank_accounts.id"), nullable=False, index=True)
    old_balance = Column(Numeric(15, 2), nullable=False)
    new_balance = Column(Numeric(15, 2), nullable=False)
    change_amount = Column(Numeric(15, 2), nullable=False)
    change_reason = Column(Text, nullable=True)
    changed_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    ip_address = Column(String(64), nullable=True)

    bank_account = relationship("BankAccount", back_populates="history")
    changed_by_user = relationship("User")


class BankTeamleadAssignment(BaseModel):
    """Bank handed to a team lead; inactive rows keep the history"""
    __tablename__ = "bank_teamlead_assignments"

    bank_id = Column(UUID(as_uuid=True), ForeignKey("banks.id"), nullable=False, index=True)
    teamlead_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    assigned_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    bank = relationship("Bank")
