import enum
from sqlalchemy import Column, String, Integer, Numeric, Text, Enum, ForeignKey, JSON
from sqlalchemy.dialects.postgresql import UUID
from .base import BaseModel


class CasinoStatus(str, enum.Enum):
    new = "new"
    testing = "testing"
    approved = "approved"
    blocked = "blocked"


class WithdrawalTimeUnit(str, enum.Enum):
    instant = "instant"
    minutes = "minutes"
    hours = "hours"
    days = "days"


class Casino(BaseModel):
    __tablename__ = "casinos"

    name = Column(String(200), nullable=False)
    url = Column(String(500), nullable=False)
    promo = Column(String(200), nullable=True)
    company = Column(String(200), nullable=True)
    currency = Column(String(10), nullable=False, default="USD")
    status = Column(Enum(CasinoStatus), nullable=False, default=CasinoStatus.new)

    # 6-digit BIN prefixes; empty list accepts every card
    allowed_bins = Column(JSON, nullable=False, default=list)

    auto_approve_limit = Column(Numeric(15, 2), nullable=False, default=100)
    withdrawal_time_value = Column(Integer, nullable=False, default=0)
    withdrawal_time_unit = Column(Enum(WithdrawalTimeUnit), nullable=False, default=WithdrawalTimeUnit.instant)
    notes = Column(Text, nullable=True)
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
