from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime
from uuid import UUID
from app.models.paypal import PayPalAccountStatus, PayPalWorkStatus


class PayPalAccountCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: Optional[str] = None
    phone_number: Optional[str] = None
    balance: float = Field(0, ge=0)
    currency: str = "USD"
    notes: Optional[str] = None
    user_id: Optional[UUID] = None

class PayPalAccount(BaseModel):
    id: UUID
    user_id: UUID
    name: str
    email: str
    password: Optional[str] = None
    phone_number: Optional[str] = None
    balance: float
    currency: str
    status: PayPalAccountStatus
    notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

class PayPalWorkCreate(BaseModel):
    paypal_account_id: UUID
    casino_id: UUID
    deposit_amount: float = Field(..., gt=0)
    casino_email: Optional[str] = None
    casino_password: Optional[str] = None

class PayPalWork(BaseModel):
    id: UUID
    user_id: UUID
    paypal_account_id: UUID
    casino_id: UUID
    deposit_amount: float
    casino_email: Optional[str] = None
    status: PayPalWorkStatus
    created_at: datetime

    class Config:
        from_attributes = True

class PayPalWithdrawalCreate(BaseModel):
    paypal_work_id: UUID
    withdrawal_amount: float = Field(..., gt=0)
    currency: str = "USD"
    notes: Optional[str] = None

class PayPalWithdrawal(BaseModel):
    id: UUID
    user_id: UUID
    paypal_work_id: UUID
    paypal_account_id: UUID
    casino_id: Optional[UUID] = None
    withdrawal_amount: float
    currency: str
    notes: Optional[str] = None
    status: str
    manager_status: Optional[str] = None
    teamlead_status: Optional[str] = None
    manager_comment: Optional[str] = None
    teamlead_comment: Optional[str] = None
    hr_comment: Optional[str] = None
    cfo_comment: Optional[str] = None
    admin_comment: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
