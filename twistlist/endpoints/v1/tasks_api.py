from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from twistlist.auth.dependencies import get_current_user
from twistlist.constants import SuccessMessages
from twistlist.database.session import get_db
from twistlist.enums import TaskStatus
from twistlist.schemas.auth_schema import MessageResponse
from twistlist.schemas.task_schema import TaskCreate, TaskUpdate, TaskPosition, TaskResponse
from twistlist.schemas.user_schema import CurrentUser
from twistlist.utils import task_service

router = APIRouter(prefix="/tasks", tags=["Tasks"])

@router.post("", status_code=201, response_model=TaskResponse)
def create_task(
    task_data: TaskCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    return task_service.create_task(db, current_user, task_data)

@router.get("", response_model=List[TaskResponse])
def get_tasks(
    project_id: Optional[int] = None,
    status: Optional[TaskStatus] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """
    Tasks the caller authored or is assigned to.
    """
    return task_service.list_tasks(db, current_user, project_id=project_id, status=status)

# Declared before /{task_id} so "reorder" is not parsed as an id
@router.patch("/reorder", response_model=List[TaskResponse])
def reorder_tasks(
    positions: List[TaskPosition],
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """
    Bulk position update; all or nothing.
    """
    return task_service.reorder_tasks(db, current_user, positions)

@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    return task_service.get_task(db, current_user, task_id)

@router.patch("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: int,
    task_data: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    return task_service.update_task(db, current_user, task_id, task_data)

@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """
    Only the author may delete a task.
    """
    task_service.delete_task(db, current_user, task_id)
    return {"message": SuccessMessages.TASK_DELETED}
