from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, List

from twistlist.enums import TaskStatus
from twistlist.schemas.user_schema import UserResponse

class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[str] = None
    tags: Optional[str] = None
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    points: Optional[int] = None
    position: Optional[int] = Field(default=None, ge=0)
    project_id: int
    assigned_user_id: Optional[int] = None

class TaskUpdate(BaseModel):
    """
    Partial update. author_user_id and project_id are not updatable.
    """
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[str] = None
    tags: Optional[str] = None
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    points: Optional[int] = None
    position: Optional[int] = Field(default=None, ge=0)
    assigned_user_id: Optional[int] = None

    @field_validator("title", "status", "position")
    @classmethod
    def reject_null(cls, value):
        # Omit the field to leave it unchanged; these columns are NOT NULL
        if value is None:
            raise ValueError("may not be null")
        return value

class TaskPosition(BaseModel):
    id: int
    position: int = Field(ge=0)

class TaskResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    status: str
    priority: Optional[str] = None
    tags: Optional[str] = None
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    points: Optional[int] = None
    position: int = 0
    project_id: int
    author_user_id: int
    assigned_user_id: Optional[int] = None
    author: Optional[UserResponse] = None
    assignee: Optional[UserResponse] = None

    class Config:
        from_attributes = True
