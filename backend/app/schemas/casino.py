from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional
from datetime import datetime
from urllib.parse import urlparse
from uuid import UUID
from app.models.casino import CasinoStatus, WithdrawalTimeUnit


def _check_url(v):
    parsed = urlparse(v or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("Invalid casino URL")
    return v

# columns that must keep a value once the casino exists
REQUIRED_ON_UPDATE = (
    "name", "url", "currency", "status", "allowed_bins",
    "auto_approve_limit", "withdrawal_time_value", "withdrawal_time_unit",
)

def _check_bins(v):
    if v is None:
        return v
    bins = [str(b).strip() for b in v]
    for b in bins:
        if len(b) != 6 or not b.isdigit():
            raise ValueError(f"BIN must be 6 digits: {b}")
    # keep order, drop duplicates
    return list(dict.fromkeys(bins))


class CasinoBase(BaseModel):
    name: str = Field(..., min_length=1)
    url: str
    promo: Optional[str] = None
    company: Optional[str] = None
    currency: str = "USD"
    status: CasinoStatus = CasinoStatus.new
    allowed_bins: List[str] = []
    auto_approve_limit: float = Field(100, ge=0)
    withdrawal_time_value: int = Field(0, ge=0)
    withdrawal_time_unit: WithdrawalTimeUnit = WithdrawalTimeUnit.instant
    notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Casino name is required")
        return v

    @field_validator("url")
    @classmethod
    def check_url(cls, v):
        return _check_url(v)

    @field_validator("allowed_bins")
    @classmethod
    def check_bins(cls, v):
        return _check_bins(v)

class CasinoCreate(CasinoBase):
    pass

class CasinoUpdate(BaseModel):
    name: Optional[str] = None
    url: Optional[str] = None
    promo: Optional[str] = None
    company: Optional[str] = None
    currency: Optional[str] = None
    status: Optional[CasinoStatus] = None
    allowed_bins: Optional[List[str]] = None
    auto_approve_limit: Optional[float] = Field(None, ge=0)
    withdrawal_time_value: Optional[int] = Field(None, ge=0)
    withdrawal_time_unit: Optional[WithdrawalTimeUnit] = None
    notes: Optional[str] = None

    @field_validator("url")
    @classmethod
    def check_url(cls, v):
        return v if v is None else _check_url(v)

    @field_validator("allowed_bins")
    @classmethod
    def check_bins(cls, v):
        return _check_bins(v)

    @model_validator(mode="after")
    def required_fields_are_not_null(self):
        for field in REQUIRED_ON_UPDATE:
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field}: cannot be null")
        return self

class Casino(CasinoBase):
    id: UUID
    created_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class CasinoList(BaseModel):
    total: int
    items: list[Casino]
