"""
Authorization policy.

Pure functions: they take the caller's identity and the already-loaded
resource and answer yes/no. Services decide which error to raise.
Team trust is flat: any member may act on anything belonging to the team.
"""
from typing import Iterable, Optional

from twistlist.models import Task
from twistlist.schemas.user_schema import CurrentUser


def is_team_member(user: CurrentUser, team_id: Optional[int]) -> bool:
    """
    Exact team match; membership of some other team does not count.
    """
    return team_id is not None and user.team_id is not None and user.team_id == team_id


def can_access_project(user: CurrentUser, project_team_ids: Iterable[int]) -> bool:
    """
    A project is visible iff it is linked to the caller's current team.
    """
    if user.team_id is None:
        return False
    return user.team_id in set(project_team_ids)


def is_task_author(user: CurrentUser, task: Task) -> bool:
    return task.author_user_id == user.id


def is_task_assignee(user: CurrentUser, task: Task) -> bool:
    return task.assigned_user_id is not None and task.assigned_user_id == user.id


def can_view_task(user: CurrentUser, task: Task) -> bool:
    return is_task_author(user, task) or is_task_assignee(user, task)


def can_update_task(user: CurrentUser, task: Task) -> bool:
    return is_task_author(user, task) or is_task_assignee(user, task)


def can_delete_task(user: CurrentUser, task: Task) -> bool:
    """
    Only the author may delete; assignees may not.
    """
    return is_task_author(user, task)
