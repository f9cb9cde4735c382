import enum
from sqlalchemy import Column, String, Integer, Numeric, Boolean, Text, Enum, ForeignKey, JSON
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from .base import BaseModel


class CardStatus(str, enum.Enum):
    active = "active"
    blocked = "blocked"
    inactive = "inactive"


class CardType(str, enum.Enum):
    grey = "grey"
    pink = "pink"  # pink cards carry a daily limit


class AssignmentType(str, enum.Enum):
    testing = "testing"
    work = "work"


class AssignmentStatus(str, enum.Enum):
    active = "active"
    completed = "completed"
    cancelled = "cancelled"


class Card(BaseModel):
    """Payment card drawing on a bank account"""
    __tablename__ = "cards"

    bank_account_id = Column(UUID(as_uuid=True), ForeignKey("bank_accounts.id"), nullable=False, index=True)
    card_number_mask = Column(String(32), unique=True, nullable=False)  # 1234****5678
    card_bin = Column(String(8), nullable=False, index=True)
    card_type = Column(Enum(CardType), nullable=False, default=CardType.grey)
    exp_month = Column(Integer, nullable=False)
    exp_year = Column(Integer, nullable=False)
    status = Column(Enum(CardStatus), nullable=False, default=CardStatus.active)
    daily_limit = Column(Numeric(15, 2), nullable=True)

    # Junior ownership
    assigned_to = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True, index=True)

    # Legacy single-casino link, read through services.eligibility.casino_links
    assigned_casino_id = Column(UUID(as_uuid=True), ForeignKey("casinos.id"), nullable=True)
    deposit_amount = Column(Numeric(15, 2), nullable=True)

    bank_account = relationship("BankAccount", back_populates="cards")
    assignee = relationship("User", back_populates="cards", foreign_keys=[assigned_to])
    legacy_casino = relationship("Casino", foreign_keys=[assigned_casino_id])
    casino_assignments = relationship(
        "CardCasinoAssignment", back_populates="card",
        cascade="all, delete-orphan", order_by="CardCasinoAssignment.created_at",
    )
    secret = relationship("CardSecret", back_populates="card", uselist=False, cascade="all, delete-orphan")

    @property
    def account_balance(self) -> float:
        if self.bank_account is None or self.bank_account.balance is None:
            return 0.0
        return float(self.bank_account.balance)

    @property
    def account_currency(self) -> str:
        return self.bank_account.currency if self.bank_account else "USD"


class CardCasinoAssignment(BaseModel):
    """Many-to-many link between cards and casinos"""
    __tablename__ = "card_casino_assignments"

    card_id = Column(UUID(as_uuid=True), ForeignKey("cards.id"), nullable=False, index=True)
    casino_id = Column(UUID(as_uuid=True), ForeignKey("casinos.id"), nullable=False, index=True)
    assigned_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    assignment_type = Column(Enum(AssignmentType), nullable=False, default=AssignmentType.testing)
    status = Column(Enum(AssignmentStatus), nullable=False, default=AssignmentStatus.active)
    deposit_amount = Column(Numeric(15, 2), nullable=True)

    card = relationship("Card", back_populates="casino_assignments")
    casino = relationship("Casino")

    @property
    def has_deposit(self) -> bool:
        return bool(self.deposit_amount)


class CardSecret(BaseModel):
    """Encrypted PAN/CVV, kept apart from the card row"""
    __tablename__ = "card_secrets"

    card_id = Column(UUID(as_uuid=True), ForeignKey("cards.id"), nullable=False, unique=True)
    pan_encrypted = Column(Text, nullable=False)
    cvv_encrypted = Column(Text, nullable=False)
    encryption_key_id = Column(String(50), nullable=False)

    card = relationship("Card", back_populates="secret")


class CardAccessLog(BaseModel):
    """Every reveal attempt, successful or not"""
    __tablename__ = "card_access_log"

    card_id = Column(UUID(as_uuid=True), ForeignKey("cards.id"), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    access_type = Column(String(30), nullable=False)  # reveal_attempt, reveal_success
    success = Column(Boolean, nullable=False, default=False)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(500), nullable=True)
    context = Column(JSON, nullable=True)
