import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.paypal import PayPalWithdrawal
from app.models.task import Task, TaskStatus
from app.models.user import User, UserRole
from app.models.work import WorkWithdrawal, WorkWithdrawalStatus
from app.schemas.withdrawal import WithdrawalAction

logger = logging.getLogger(__name__)

ACTIONS = ("approve", "reject", "block", "comment", "create_task")

# role -> actions it may perform on any withdrawal
PERMISSIONS = {
    UserRole.teamlead: frozenset({"approve", "reject", "comment"}),
    UserRole.manager: frozenset(ACTIONS),
    UserRole.admin: frozenset(ACTIONS),
    UserRole.hr: frozenset({"comment", "block", "create_task"}),
    UserRole.cfo: frozenset({"comment", "block", "create_task"}),
}

ACTION_STATUS = {
    "approve": "approved",
    "reject": "rejected",
    "block": "blocked",
}

# review status -> status of a regular work withdrawal
REGULAR_STATUS = {
    "approved": WorkWithdrawalStatus.received,
    "rejected": WorkWithdrawalStatus.problem,
    "blocked": WorkWithdrawalStatus.block,
}


def can_perform(role: UserRole, action: str) -> bool:
    return action in PERMISSIONS.get(role, frozenset())


def get_withdrawal(db: Session, withdrawal_id: UUID, source_type: str):
    model = WorkWithdrawal if source_type == "regular" else PayPalWithdrawal
    return db.query(model).filter(model.id == withdrawal_id).first()


def withdrawal_owner_id(withdrawal) -> Optional[UUID]:
    if isinstance(withdrawal, WorkWithdrawal):
        return withdrawal.work.junior_id if withdrawal.work else None
    return withdrawal.user_id


def _set_status(withdrawal, new_status: str, user: User, comment: Optional[str]) -> None:
    now = datetime.utcnow()
    role = user.role.value

    if isinstance(withdrawal, WorkWithdrawal):
        # only the line roles move a regular withdrawal; others raise an alarm
        if user.role in (UserRole.manager, UserRole.teamlead):
            withdrawal.status = REGULAR_STATUS[new_status]
            withdrawal.checked_by = user.id
            withdrawal.checked_at = now
            if comment:
                withdrawal.manager_notes = comment
        else:
            withdrawal.alarm_message = comment or f"{role.upper()}: {new_status}"
        return

    if user.role == UserRole.manager:
        withdrawal.manager_status = new_status
    elif user.role == UserRole.teamlead:
        withdrawal.teamlead_status = new_status
    else:
        withdrawal.status = new_status
    setattr(withdrawal, f"checked_by_{role}", user.id)
    if comment:
        setattr(withdrawal, f"{role}_comment", comment)


def _summary(withdrawal, source_type: str) -> dict:
    table = "work_withdrawals" if source_type == "regular" else "paypal_withdrawals"
    status = withdrawal.status.value if hasattr(withdrawal.status, "value") else withdrawal.status
    return {"table": table, "id": str(withdrawal.id), "status": status}


def perform_action(db: Session, withdrawal_id: UUID, payload: WithdrawalAction, user: User) -> dict:
    """
    Apply a review action to a regular or PayPal withdrawal.

    Raises PermissionError when the role may not perform the action,
    LookupError for an unknown withdrawal and ValueError for a bad payload.
    """
    if user.role not in PERMISSIONS:
        raise PermissionError("Role has no access to withdrawal management")
    if not can_perform(user.role, payload.action):
        raise PermissionError(f'Role {user.role.value} may not perform "{payload.action}"')

    withdrawal = get_withdrawal(db, withdrawal_id, payload.source_type)
    if withdrawal is None:
        raise LookupError("Withdrawal not found")

    update_result = None
    task_result = None

    if payload.action in ACTION_STATUS:
        _set_status(withdrawal, ACTION_STATUS[payload.action], user, payload.comment)
        update_result = _summary(withdrawal, payload.source_type)
    elif payload.action == "comment":
        if not payload.comment:
            raise ValueError("Comment is required")
        setattr(withdrawal, f"{user.role.value}_comment", payload.comment)
        update_result = _summary(withdrawal, payload.source_type)
    else:
        if not payload.task_title:
            raise ValueError("Task title is required")
        task = Task(
            title=payload.task_title,
            description=payload.task_description or f"Task for withdrawal #{withdrawal_id}",
            priority=payload.task_priority,
            task_status=TaskStatus.todo if payload.task_assignee_id else TaskStatus.backlog,
            assignee_id=payload.task_assignee_id,
            created_by=user.id,
            tags=["withdrawal", payload.source_type, "urgent"],
            meta={
                "withdrawal_id": str(withdrawal_id),
                "source_type": payload.source_type,
                "created_from": "withdrawal_action",
            },
        )
        db.add(task)
        db.flush()
        task_result = {"id": str(task.id), "title": task.title, "tags": task.tags}

    db.commit()
    logger.info(f"Withdrawal {withdrawal_id} ({payload.source_type}): {payload.action} by {user.username}")

    if payload.action == "create_task":
        message = f'Task "{payload.task_title}" created'
    else:
        message = f'Action "{payload.action}" completed'

    return {
        "success": True,
        "message": message,
        "action": payload.action,
        "update_result": update_result,
        "task_result": task_result,
        "performed_by": {"id": str(user.id), "name": user.full_name, "role": user.role.value},
    }
