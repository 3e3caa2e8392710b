from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from twistlist.auth.dependencies import get_current_user
from twistlist.constants import SuccessMessages
from twistlist.database.session import get_db
from twistlist.schemas.auth_schema import MessageResponse
from twistlist.schemas.team_schema import (
    TeamCreate, TeamUpdate, TeamMemberAdd, TeamResponse,
    TeamDetailResponse, TeamRequestResponse,
)
from twistlist.schemas.user_schema import CurrentUser
from twistlist.utils import team_service

router = APIRouter(prefix="/teams", tags=["Teams"])

@router.post("", status_code=201, response_model=TeamResponse)
def create_team(
    team_data: TeamCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """
    Creates a new team. The creator becomes its first member.
    """
    return team_service.create_team(db, current_user, team_data)

@router.get("", response_model=List[TeamDetailResponse])
def get_all_teams(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """
    Retrieves all teams with members and pending join requests.
    """
    return team_service.list_teams(db, current_user)

@router.post("/leave", response_model=MessageResponse)
def leave_team(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """
    Leaves the caller's current team.
    """
    return {"message": team_service.leave_team(db, current_user.id)}

@router.get("/{team_id}", response_model=TeamDetailResponse)
def get_team(
    team_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    return team_service.get_team(db, current_user, team_id)

@router.patch("/{team_id}", response_model=TeamResponse)
def update_team(
    team_id: int,
    team_data: TeamUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    return team_service.update_team(db, current_user, team_id, team_data)

@router.delete("/{team_id}", response_model=MessageResponse)
def delete_team(
    team_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """
    Deletes a team. Any member may do this.
    """
    team_service.delete_team(db, current_user, team_id)
    return {"message": SuccessMessages.TEAM_DELETED}

@router.post("/{team_id}/members", status_code=201, response_model=MessageResponse)
def add_team_member(
    team_id: int,
    member: TeamMemberAdd,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """
    Adds a user by username or email, without a join request.
    """
    return {"message": team_service.add_member(db, current_user, team_id, member.username_or_email)}

@router.post("/{team_id}/join", response_model=TeamRequestResponse)
def request_join(
    team_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    return team_service.request_join(db, current_user, team_id)

@router.post("/{team_id}/requests/{request_id}/accept", response_model=TeamRequestResponse)
def accept_request(
    team_id: int,
    request_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    return team_service.accept_request(db, current_user, team_id, request_id)

@router.post("/{team_id}/requests/{request_id}/reject", response_model=TeamRequestResponse)
def reject_request(
    team_id: int,
    request_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    return team_service.reject_request(db, current_user, team_id, request_id)
