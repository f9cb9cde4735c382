from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from uuid import UUID


class BankBase(BaseModel):
    name: str = Field(..., min_length=1)
    country: Optional[str] = None
    currency: str = "USD"
    is_active: bool = True

class BankCreate(BankBase):
    pass

class BankAccountBase(BaseModel):
    holder_name: str = Field(..., min_length=1)
    account_number: Optional[str] = None
    sort_code: Optional[str] = None
    balance: float = Field(0, ge=0)
    currency: str = "USD"
    is_active: bool = True
    bank_url: Optional[str] = None
    login_password: Optional[str] = None

class BankAccountCreate(BankAccountBase):
    pass

class BankAccount(BaseModel):
    id: UUID
    bank_id: UUID
    holder_name: str
    account_number: Optional[str] = None
    sort_code: Optional[str] = None
    balance: float
    currency: str
    is_active: bool
    bank_url: Optional[str] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class Bank(BaseModel):
    id: UUID
    name: str
    country: Optional[str] = None
    currency: str
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class BalanceUpdate(BaseModel):
    balance: float = Field(..., strict=True)
    comment: Optional[str] = None

    @field_validator("balance")
    @classmethod
    def balance_not_negative(cls, v):
        if v < 0:
            raise ValueError("Balance must be a non-negative number")
        return v

class BalanceHistory(BaseModel):
    id: UUID
    bank_account_id: UUID
    old_balance: float
    new_balance: float
    change_amount: float
    change_reason: Optional[str] = None
    changed_by: Optional[UUID] = None
    created_at: datetime

    class Config:
        from_attributes = True


class TeamleadAssign(BaseModel):
    teamlead_id: UUID
