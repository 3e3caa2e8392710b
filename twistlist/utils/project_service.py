from typing import List

from sqlalchemy.orm import Session, selectinload

from twistlist.auth.permissions import can_access_project, is_team_member
from twistlist.constants import ErrorMessages
from twistlist.exceptions import raise_forbidden, raise_validation_error, raise_project_not_found
from twistlist.models import Project, ProjectTeam, Team
from twistlist.schemas.project_schema import ProjectCreate, ProjectUpdate
from twistlist.schemas.user_schema import CurrentUser
from twistlist.utils.common import get_object_or_none, apply_updates
from twistlist.utils.logger import get_logger

logger = get_logger(__name__)


def get_accessible_project(db: Session, user: CurrentUser, project_id: int) -> Project:
    """
    Loads a project the caller's team is linked to.
    Raises NotFoundError if missing, AuthzError if not linked.
    """
    project = (
        db.query(Project)
        .options(selectinload(Project.team_links))
        .filter(Project.id == project_id)
        .first()
    )
    if not project:
        raise_project_not_found()
    if not can_access_project(user, project.team_ids):
        logger.warning("User %s denied on project %s", user.id, project_id)
        raise_forbidden(ErrorMessages.NO_PROJECT_ACCESS)
    return project


def create_project(db: Session, user: CurrentUser, data: ProjectCreate) -> Project:
    """
    Creates a project and links it to a team in the same transaction.
    The team is the one supplied, or the caller's own team.
    """
    team_id = data.team_id if data.team_id is not None else user.team_id
    if team_id is None:
        raise_validation_error(ErrorMessages.NO_TEAM_FOR_PROJECT)

    team = get_object_or_none(db, Team, team_id)
    if not team:
        raise_validation_error(ErrorMessages.PROJECT_TEAM_NOT_FOUND, details={"team_id": team_id})
    if not is_team_member(user, team.id):
        raise_forbidden(ErrorMessages.NOT_TEAM_MEMBER)

    project = Project(**data.model_dump(exclude={"team_id"}))
    db.add(project)
    db.flush()

    db.add(ProjectTeam(project_id=project.id, team_id=team.id))
    db.flush()
    db.refresh(project)

    logger.info("Project %s created for team %s by user %s", project.id, team.id, user.id)
    return project


def list_projects(db: Session, user: CurrentUser) -> List[Project]:
    """
    Exactly the projects linked to the caller's current team.
    """
    if user.team_id is None:
        return []

    return (
        db.query(Project)
        .join(ProjectTeam, ProjectTeam.project_id == Project.id)
        .filter(ProjectTeam.team_id == user.team_id)
        .options(selectinload(Project.team_links))
        .order_by(Project.id)
        .all()
    )


def get_project(db: Session, user: CurrentUser, project_id: int) -> Project:
    return get_accessible_project(db, user, project_id)


def update_project(db: Session, user: CurrentUser, project_id: int, data: ProjectUpdate) -> Project:
    project = get_accessible_project(db, user, project_id)
    apply_updates(project, data.model_dump(exclude_unset=True))
    db.flush()
    db.refresh(project)
    return project


def delete_project(db: Session, user: CurrentUser, project_id: int):
    project = get_accessible_project(db, user, project_id)
    db.delete(project)
    db.flush()
    logger.info("Project %s deleted by user %s", project_id, user.id)
