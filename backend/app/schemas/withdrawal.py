from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import date, datetime
from uuid import UUID
from app.models.work import WorkStatus, WorkWithdrawalStatus
from app.models.task import TaskPriority


# junior works
class WorkCreate(BaseModel):
    casino_id: UUID
    card_id: UUID
    deposit_amount: float = Field(..., gt=0)
    casino_login: Optional[str] = None
    casino_password: Optional[str] = None
    notes: Optional[str] = None

class Work(BaseModel):
    id: UUID
    junior_id: UUID
    casino_id: UUID
    card_id: UUID
    deposit_amount: float
    casino_login: Optional[str] = None
    notes: Optional[str] = None
    status: WorkStatus
    work_date: date
    created_at: datetime

    class Config:
        from_attributes = True

class WorkWithdrawalCreate(BaseModel):
    work_id: UUID
    withdrawal_amount: float = Field(..., gt=0)

class WorkWithdrawal(BaseModel):
    id: UUID
    work_id: UUID
    withdrawal_amount: float
    status: WorkWithdrawalStatus
    checked_by: Optional[UUID] = None
    checked_at: Optional[datetime] = None
    manager_notes: Optional[str] = None
    alarm_message: Optional[str] = None
    manager_comment: Optional[str] = None
    teamlead_comment: Optional[str] = None
    hr_comment: Optional[str] = None
    cfo_comment: Optional[str] = None
    admin_comment: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


# universal review of regular and PayPal withdrawals
class WithdrawalAction(BaseModel):
    action: Literal["approve", "reject", "block", "comment", "create_task"]
    source_type: Literal["regular", "paypal"]
    comment: Optional[str] = None
    task_title: Optional[str] = None
    task_description: Optional[str] = None
    task_priority: TaskPriority = TaskPriority.medium
    task_assignee_id: Optional[UUID] = None

class WithdrawalActionResult(BaseModel):
    success: bool = True
    message: str
    action: str
    update_result: Optional[dict] = None
    task_result: Optional[dict] = None
    performed_by: dict

class UniversalWithdrawalList(BaseModel):
    withdrawals: List[dict]
    paypal_withdrawals: List[dict]
    message: Optional[str] = None
