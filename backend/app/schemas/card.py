from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Literal, Optional
from datetime import date, datetime
from uuid import UUID
from app.models.card import CardStatus, CardType, AssignmentType, AssignmentStatus


class CardCreate(BaseModel):
    bank_account_id: UUID
    card_number: str
    cvv: str
    exp_month: int = Field(..., ge=1, le=12)
    exp_year: int
    card_type: CardType = CardType.grey
    daily_limit: Optional[float] = Field(None, ge=0)

    @field_validator("card_number", mode="before")
    @classmethod
    def clean_card_number(cls, v):
        v = str(v).replace(" ", "").replace("-", "")
        if len(v) != 16 or not v.isdigit():
            raise ValueError("Card number must contain 16 digits")
        return v

    @field_validator("cvv", mode="before")
    @classmethod
    def check_cvv(cls, v):
        v = str(v)
        if not v.isdigit() or len(v) not in (3, 4):
            raise ValueError("CVV must contain 3 or 4 digits")
        return v

    @field_validator("exp_year", mode="before")
    @classmethod
    def normalize_year(cls, v):
        v = int(v)
        # two-digit years are 20xx
        return 2000 + v if v < 100 else v

    @model_validator(mode="after")
    def not_expired(self):
        today = date.today()
        if (self.exp_year, self.exp_month) < (today.year, today.month):
            raise ValueError("Card is expired")
        return self

class CardUpdate(BaseModel):
    status: Optional[CardStatus] = None
    card_type: Optional[CardType] = None
    daily_limit: Optional[float] = Field(None, ge=0)

class CasinoAssignment(BaseModel):
    id: UUID
    casino_id: UUID
    assignment_type: AssignmentType
    status: AssignmentStatus
    deposit_amount: Optional[float] = None
    has_deposit: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class Card(BaseModel):
    id: UUID
    bank_account_id: UUID
    card_number_mask: str
    card_bin: str
    card_type: CardType
    exp_month: int
    exp_year: int
    status: CardStatus
    daily_limit: Optional[float] = None
    assigned_to: Optional[UUID] = None
    assigned_casino_id: Optional[UUID] = None
    deposit_amount: Optional[float] = None
    account_balance: float
    account_currency: str
    casino_assignments: List[CasinoAssignment] = []
    created_at: datetime

    class Config:
        from_attributes = True


class RevealRequest(BaseModel):
    pin_code: str = Field(..., min_length=1)
    context: Optional[dict] = None

class CardAssignAction(BaseModel):
    action: Literal["assign_to_casino", "unassign_from_casino", "assign_to_junior", "unassign_from_junior"]
    casino_id: Optional[UUID] = None
    junior_id: Optional[UUID] = None

class MassAssignRequest(BaseModel):
    card_ids: List[str] = Field(..., min_length=1)
    casino_id: UUID

class UnassignRequest(BaseModel):
    card_id: UUID
    casino_id: UUID
