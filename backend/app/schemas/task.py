from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from uuid import UUID
from app.models.task import TaskPriority, TaskStatus


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.medium
    assignee_id: Optional[UUID] = None
    due_date: Optional[datetime] = None
    tags: List[str] = []

class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    task_status: Optional[TaskStatus] = None
    due_date: Optional[datetime] = None
    tags: Optional[List[str]] = None

class TaskDelegate(BaseModel):
    assignee_id: UUID
    comment: Optional[str] = None

class Task(BaseModel):
    id: UUID
    title: str
    description: Optional[str] = None
    priority: TaskPriority
    task_status: TaskStatus
    assignee_id: Optional[UUID] = None
    created_by: UUID
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    tags: List[str] = []
    meta: Optional[dict] = None
    created_at: datetime

    class Config:
        from_attributes = True

class TaskList(BaseModel):
    total: int
    items: list[Task]
