import enum
from sqlalchemy import Column, String, Numeric, Text, Enum, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from .base import BaseModel


class PayPalAccountStatus(str, enum.Enum):
    active = "active"
    blocked = "blocked"
    limited = "limited"


class PayPalWorkStatus(str, enum.Enum):
    active = "active"
    completed = "completed"
    cancelled = "cancelled"


class PayPalAccount(BaseModel):
    __tablename__ = "paypal_accounts"

    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    email = Column(String(200), nullable=False)
    password = Column(String(200), nullable=True)
    phone_number = Column(String(50), nullable=True)
    balance = Column(Numeric(15, 2), nullable=False, default=0)
    currency = Column(String(10), nullable=False, default="USD")
    status = Column(Enum(PayPalAccountStatus), nullable=False, default=PayPalAccountStatus.active)
    notes = Column(Text, nullable=True)

    user = relationship("User")


class PayPalWork(BaseModel):
    """Deposit made on a casino through a PayPal account"""
    __tablename__ = "paypal_works"

    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    paypal_account_id = Column(UUID(as_uuid=True), ForeignKey("paypal_accounts.id"), nullable=False)
    casino_id = Column(UUID(as_uuid=True), ForeignKey("casinos.id"), nullable=False)
    deposit_amount = Column(Numeric(15, 2), nullable=False)
    casino_email = Column(String(200), nullable=True)
    casino_password = Column(String(200), nullable=True)
    status = Column(Enum(PayPalWorkStatus), nullable=False, default=PayPalWorkStatus.active)

    paypal_account = relationship("PayPalAccount")
    casino = relationship("Casino")


class PayPalWithdrawal(BaseModel):
    __tablename__ = "paypal_withdrawals"

    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    paypal_work_id = Column(UUID(as_uuid=True), ForeignKey("paypal_works.id"), nullable=False)
    paypal_account_id = Column(UUID(as_uuid=True), ForeignKey("paypal_accounts.id"), nullable=False)
    casino_id = Column(UUID(as_uuid=True), ForeignKey("casinos.id"), nullable=True)
    withdrawal_amount = Column(Numeric(15, 2), nullable=False)
    currency = Column(String(10), nullable=False, default="USD")
    notes = Column(Text, nullable=True)

    # free-form review states: pending, approved, rejected, blocked
    status = Column(String(20), nullable=False, default="pending")
    manager_status = Column(String(20), nullable=True)
    teamlead_status = Column(String(20), nullable=True)

    manager_comment = Column(Text, nullable=True)
    teamlead_comment = Column(Text, nullable=True)
    hr_comment = Column(Text, nullable=True)
    cfo_comment = Column(Text, nullable=True)
    admin_comment = Column(Text, nullable=True)

    checked_by_manager = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    checked_by_teamlead = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    checked_by_hr = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    checked_by_cfo = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    checked_by_admin = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)

    paypal_work = relationship("PayPalWork")
    paypal_account = relationship("PayPalAccount")
    casino = relationship("Casino")
    user = relationship("User", foreign_keys=[user_id])
