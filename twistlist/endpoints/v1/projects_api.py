from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from twistlist.auth.dependencies import get_current_user
from twistlist.constants import SuccessMessages
from twistlist.database.session import get_db
from twistlist.schemas.auth_schema import MessageResponse
from twistlist.schemas.project_schema import ProjectCreate, ProjectUpdate, ProjectResponse
from twistlist.schemas.user_schema import CurrentUser
from twistlist.utils import project_service

router = APIRouter(prefix="/projects", tags=["Projects"])

@router.post("", status_code=201, response_model=ProjectResponse)
def create_project(
    project_data: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """
    Creates a project linked to the given team, or to the caller's team.
    """
    return project_service.create_project(db, current_user, project_data)

@router.get("", response_model=List[ProjectResponse])
def get_projects(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """
    Projects linked to the caller's current team.
    """
    return project_service.list_projects(db, current_user)

@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    return project_service.get_project(db, current_user, project_id)

@router.patch("/{project_id}", response_model=ProjectResponse)
def update_project(
    project_id: int,
    project_data: ProjectUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    return project_service.update_project(db, current_user, project_id, project_data)

@router.delete("/{project_id}", response_model=MessageResponse)
def delete_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    project_service.delete_project(db, current_user, project_id)
    return {"message": SuccessMessages.PROJECT_DELETED}
