import enum
from datetime import date
from sqlalchemy import Column, String, Numeric, Text, Date, DateTime, Enum, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from .base import BaseModel


class WorkStatus(str, enum.Enum):
    active = "active"
    completed = "completed"
    cancelled = "cancelled"


class WorkWithdrawalStatus(str, enum.Enum):
    new = "new"
    waiting = "waiting"
    received = "received"
    problem = "problem"
    block = "block"


class Work(BaseModel):
    """Junior deposit on a casino with an owned card"""
    __tablename__ = "works"

    junior_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    casino_id = Column(UUID(as_uuid=True), ForeignKey("casinos.id"), nullable=False, index=True)
    card_id = Column(UUID(as_uuid=True), ForeignKey("cards.id"), nullable=False, index=True)
    deposit_amount = Column(Numeric(15, 2), nullable=False)
    casino_login = Column(String(200), nullable=True)
    casino_password = Column(String(200), nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(Enum(WorkStatus), nullable=False, default=WorkStatus.active)
    work_date = Column(Date, default=date.today, nullable=False)

    junior = relationship("User")
    casino = relationship("Casino")
    card = relationship("Card")
    withdrawals = relationship(
        "WorkWithdrawal", back_populates="work",
        cascade="all, delete-orphan", order_by="WorkWithdrawal.created_at",
    )


class WorkWithdrawal(BaseModel):
    __tablename__ = "work_withdrawals"

    work_id = Column(UUID(as_uuid=True), ForeignKey("works.id"), nullable=False, index=True)
    withdrawal_amount = Column(Numeric(15, 2), nullable=False)
    status = Column(Enum(WorkWithdrawalStatus), nullable=False, default=WorkWithdrawalStatus.new)

    checked_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    checked_at = Column(DateTime, nullable=True)
    manager_notes = Column(Text, nullable=True)
    alarm_message = Column(Text, nullable=True)

    # per-role comments written by the universal action endpoint
    manager_comment = Column(Text, nullable=True)
    teamlead_comment = Column(Text, nullable=True)
    hr_comment = Column(Text, nullable=True)
    cfo_comment = Column(Text, nullable=True)
    admin_comment = Column(Text, nullable=True)

    work = relationship("Work", back_populates="withdrawals")
