from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from twistlist.auth.permissions import (
    can_access_project, can_view_task, can_update_task, can_delete_task,
)
from twistlist.constants import ErrorMessages
from twistlist.enums import TaskStatus
from twistlist.exceptions import (
    raise_forbidden, raise_validation_error, raise_project_not_found, raise_task_not_found,
)
from twistlist.models import Project, Task, User
from twistlist.schemas.task_schema import TaskCreate, TaskUpdate, TaskPosition
from twistlist.schemas.user_schema import CurrentUser
from twistlist.utils.common import get_object_or_none, apply_updates
from twistlist.utils.logger import get_logger

logger = get_logger(__name__)


# --- Helpers ---

def _task_query(db: Session):
    return db.query(Task).options(joinedload(Task.author), joinedload(Task.assignee))


def _get_task(db: Session, task_id: int) -> Task:
    task = _task_query(db).filter(Task.id == task_id).first()
    if not task:
        raise_task_not_found()
    return task


def _validate_assignee(db: Session, assigned_user_id: Optional[int]):
    if assigned_user_id is None:
        return
    if not get_object_or_none(db, User, assigned_user_id):
        raise_validation_error(ErrorMessages.ASSIGNEE_NOT_FOUND, details={"assigned_user_id": assigned_user_id})


def _next_position(db: Session, project_id: int) -> int:
    current = db.query(func.max(Task.position)).filter(Task.project_id == project_id).scalar()
    return 0 if current is None else current + 1


def _normalize(updates: dict) -> dict:
    status = updates.get("status")
    if isinstance(status, TaskStatus):
        updates["status"] = status.value
    return updates


# --- CRUD ---

def create_task(db: Session, user: CurrentUser, data: TaskCreate) -> Task:
    """
    Creates a task authored by the caller in a project their team can see.
    """
    project = get_object_or_none(db, Project, data.project_id)
    if not project:
        raise_project_not_found()
    if not can_access_project(user, project.team_ids):
        raise_forbidden(ErrorMessages.NO_PROJECT_ACCESS)

    _validate_assignee(db, data.assigned_user_id)

    fields = _normalize(data.model_dump(exclude_none=True))
    if "position" not in fields:
        fields["position"] = _next_position(db, project.id)

    task = Task(**fields, author_user_id=user.id)
    db.add(task)
    db.flush()

    logger.info("Task %s created in project %s by user %s", task.id, project.id, user.id)
    return _get_task(db, task.id)


def list_tasks(
    db: Session,
    user: CurrentUser,
    project_id: Optional[int] = None,
    status: Optional[TaskStatus] = None,
) -> List[Task]:
    """
    Tasks the caller authored or is assigned to, optionally filtered.
    """
    query = _task_query(db).filter(
        or_(Task.author_user_id == user.id, Task.assigned_user_id == user.id)
    )
    if project_id is not None:
        query = query.filter(Task.project_id == project_id)
    if status is not None:
        query = query.filter(Task.status == TaskStatus(status).value)
    return query.order_by(Task.position, Task.id).all()


def get_task(db: Session, user: CurrentUser, task_id: int) -> Task:
    task = _get_task(db, task_id)
    if not can_view_task(user, task):
        raise_forbidden(ErrorMessages.NO_PERMISSION_VIEW_TASK)
    return task


def update_task(db: Session, user: CurrentUser, task_id: int, data: TaskUpdate) -> Task:
    """
    Author or assignee may update. The author and project never change here.
    """
    task = _get_task(db, task_id)
    if not can_update_task(user, task):
        logger.warning("User %s denied update on task %s", user.id, task_id)
        raise_forbidden(ErrorMessages.NO_PERMISSION_UPDATE_TASK)

    updates = _normalize(data.model_dump(exclude_unset=True))
    new_assignee = updates.get("assigned_user_id")
    if new_assignee is not None and new_assignee != task.assigned_user_id:
        _validate_assignee(db, new_assignee)

    changes = apply_updates(task, updates)
    db.flush()
    if changes:
        logger.info("Task %s updated by user %s: %s", task.id, user.id, ", ".join(sorted(changes)))
    return _get_task(db, task.id)


def delete_task(db: Session, user: CurrentUser, task_id: int):
    task = _get_task(db, task_id)
    if not can_delete_task(user, task):
        logger.warning("User %s denied delete on task %s", user.id, task_id)
        raise_forbidden(ErrorMessages.NO_PERMISSION_DELETE_TASK)

    db.delete(task)
    db.flush()
    logger.info("Task %s deleted by user %s", task_id, user.id)


def reorder_tasks(db: Session, user: CurrentUser, positions: List[TaskPosition]) -> List[Task]:
    """
    Bulk position update. Every task is checked before any is changed,
    so the whole batch applies or none of it does.
    """
    if not positions:
        return []

    ids = [p.id for p in positions]
    if len(set(ids)) != len(ids):
        raise_validation_error(ErrorMessages.DUPLICATE_REORDER_IDS)

    tasks = {t.id: t for t in db.query(Task).filter(Task.id.in_(ids)).all()}
    for task_id in ids:
        task = tasks.get(task_id)
        if not task:
            raise_task_not_found()
        if not can_update_task(user, task):
            raise_forbidden(ErrorMessages.NO_PERMISSION_UPDATE_TASK)

    for p in positions:
        tasks[p.id].position = p.position
    db.flush()

    logger.info("User %s reordered %d tasks", user.id, len(positions))
    return (
        _task_query(db)
        .filter(Task.id.in_(ids))
        .order_by(Task.position, Task.id)
        .all()
    )
