import logging
import uuid
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_current_active_user, require_roles
from app.crud.crud_user import user_crud
from app.models.notification import NotificationType
from app.models.task import Task, TaskPriority, TaskStatus
from app.models.user import User, UserRole
from app.schemas.task import TaskCreate, TaskUpdate, TaskDelegate, Task as TaskSchema, TaskList
from app.services.notifier import bus

logger = logging.getLogger(__name__)

router = APIRouter()

TASK_CREATORS = (UserRole.cfo, UserRole.manager, UserRole.hr, UserRole.admin, UserRole.teamlead)
TASK_SUPERVISORS = (UserRole.manager, UserRole.hr, UserRole.admin)
DELEGATORS = (UserRole.teamlead, UserRole.manager, UserRole.admin)


def _get_task_or_404(db: Session, task_id: uuid.UUID) -> Task:
    task = db.query(Task).filter(Task.id == task_id).first()
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


def _notify_assignee(db: Session, task: Task, sender: User):
    bus.publish(
        db,
        [task.assignee_id],
        title="New task",
        message=f'Task "{task.title}" was assigned to you',
        type=NotificationType.task,
        sender_id=sender.id,
        meta={"task_id": str(task.id)},
        action_url="/dashboard/tasks",
    )


@router.get("", response_model=TaskList)
def get_tasks(
    assignee_id: Optional[uuid.UUID] = None,
    task_status: Optional[TaskStatus] = None,
    priority: Optional[TaskPriority] = None,
    my_tasks: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    query = db.query(Task)
    if current_user.role in (UserRole.junior, UserRole.tester):
        query = query.filter(or_(Task.assignee_id == current_user.id, Task.created_by == current_user.id))
    if assignee_id:
        query = query.filter(Task.assignee_id == assignee_id)
    if task_status:
        query = query.filter(Task.task_status == task_status)
    if priority:
        query = query.filter(Task.priority == priority)
    if my_tasks:
        query = query.filter(Task.assignee_id == current_user.id)

    total = query.count()
    tasks = query.order_by(Task.created_at.desc()).all()
    return TaskList(total=total, items=tasks)


@router.post("", response_model=TaskSchema)
def create_task(
    task_in: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*TASK_CREATORS))
):
    if task_in.assignee_id and not user_crud.get(db, task_in.assignee_id):
        raise HTTPException(status_code=404, detail="Assignee not found")

    task = Task(
        title=task_in.title.strip(),
        description=task_in.description,
        priority=task_in.priority,
        task_status=TaskStatus.todo if task_in.assignee_id else TaskStatus.backlog,
        assignee_id=task_in.assignee_id,
        created_by=current_user.id,
        due_date=task_in.due_date,
        tags=task_in.tags,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info(f"Task {task.title} created by {current_user.username}")

    if task.assignee_id:
        _notify_assignee(db, task, current_user)
    return task


@router.patch("/{task_id}", response_model=TaskSchema)
def update_task(
    task_id: uuid.UUID,
    task_update: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    task = _get_task_or_404(db, task_id)

    can_edit = (
        task.created_by == current_user.id
        or task.assignee_id == current_user.id
        or current_user.role in TASK_SUPERVISORS
        or (current_user.role == UserRole.teamlead and task.assignee and task.assignee.role == UserRole.junior)
    )
    if not can_edit:
        raise HTTPException(status_code=403, detail="Access denied")

    update_data = task_update.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(task, field, value)

    if task_update.task_status == TaskStatus.done and task.completed_at is None:
        task.completed_at = datetime.utcnow()
    elif task_update.task_status and task_update.task_status != TaskStatus.done:
        task.completed_at = None

    db.commit()
    db.refresh(task)
    logger.info(f"Task {task.id} updated by {current_user.username}: {sorted(update_data)}")
    return task


@router.post("/{task_id}/delegate")
def delegate_task(
    task_id: uuid.UUID,
    payload: TaskDelegate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    task = _get_task_or_404(db, task_id)

    if task.created_by != current_user.id and current_user.role not in DELEGATORS:
        raise HTTPException(status_code=403, detail="Access denied")

    assignee = user_crud.get(db, payload.assignee_id)
    if not assignee or not assignee.is_active:
        raise HTTPException(status_code=400, detail="Invalid assignee")
    if current_user.role == UserRole.teamlead and assignee.team_lead_id != current_user.id:
        raise HTTPException(status_code=403, detail="Team Lead can only delegate to their own juniors")

    task.assignee_id = assignee.id
    if task.task_status == TaskStatus.backlog:
        task.task_status = TaskStatus.todo
    if payload.comment:
        meta = dict(task.meta or {})
        meta["delegation_comments"] = meta.get("delegation_comments", []) + [{
            "by": str(current_user.id),
            "comment": payload.comment,
        }]
        task.meta = meta

    db.commit()
    db.refresh(task)
    logger.info(f"Task {task.id} delegated to {assignee.username} by {current_user.username}")
    _notify_assignee(db, task, current_user)

    return {
        "success": True,
        "task": TaskSchema.model_validate(task),
        "message": f"Task delegated to {assignee.full_name}",
        "delegated_by": current_user.role.value,
    }
