"""
Team membership and join-request lifecycle.

Per (team, user) pair the states are NonMember -> PendingRequest -> Member,
with Rejected as a side state that can be re-opened to PendingRequest.
Every member has equal power over requests, roster and deletion.
All writes happen inside the caller's request-scoped transaction, so a
multi-step change (membership + request status) commits or rolls back as one.
"""
from typing import List

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from twistlist.auth.permissions import is_team_member
from twistlist.constants import ErrorMessages, SuccessMessages
from twistlist.enums import ErrorCode, TeamRequestStatus
from twistlist.exceptions import (
    raise_conflict, raise_forbidden, raise_validation_error,
    raise_team_not_found, raise_request_not_found, raise_user_not_found,
)
from twistlist.models import Team, TeamRequest, User
from twistlist.schemas.team_schema import TeamCreate, TeamUpdate
from twistlist.schemas.user_schema import CurrentUser
from twistlist.utils.common import get_object_or_404, apply_updates
from twistlist.utils.logger import get_logger

logger = get_logger(__name__)


# --- Helpers ---

def _get_team(db: Session, team_id: int) -> Team:
    return get_object_or_404(db, Team, team_id, raise_team_not_found)


def _get_team_as_member(db: Session, user: CurrentUser, team_id: int) -> Team:
    team = _get_team(db, team_id)
    if not is_team_member(user, team.id):
        logger.warning("User %s denied on team %s: not a member", user.id, team.id)
        raise_forbidden(ErrorMessages.NOT_TEAM_MEMBER)
    return team


def _get_pending_request(db: Session, team: Team, request_id: int) -> TeamRequest:
    join_request = get_object_or_404(db, TeamRequest, request_id, raise_request_not_found)
    if join_request.team_id != team.id:
        raise_validation_error(ErrorMessages.REQUEST_WRONG_TEAM)
    if join_request.status != TeamRequestStatus.PENDING.value:
        raise_validation_error(
            ErrorMessages.REQUEST_NOT_PENDING,
            details={"status": join_request.status},
        )
    return join_request


# --- Teams ---

def create_team(db: Session, user: CurrentUser, data: TeamCreate) -> Team:
    """
    Creates a team and makes the creator a member of it.
    A creator who belonged to another team is moved to the new one.
    """
    creator = get_object_or_404(db, User, user.id, raise_user_not_found)

    team = Team(**data.model_dump())
    db.add(team)
    db.flush()

    if creator.team_id is not None:
        logger.info("User %s leaves team %s to create a new one", creator.id, creator.team_id)
    creator.team_id = team.id
    db.flush()
    db.refresh(team)

    logger.info("Team %s created by user %s", team.id, user.id)
    return team


def list_teams(db: Session, user: CurrentUser) -> List[Team]:
    """
    Returns every team with its roster and pending requests.
    Visible to any authenticated user, members or not.
    """
    return (
        db.query(Team)
        .options(
            selectinload(Team.members),
            selectinload(Team.requests).selectinload(TeamRequest.user),
        )
        .order_by(Team.id)
        .all()
    )


def get_team(db: Session, user: CurrentUser, team_id: int) -> Team:
    return _get_team_as_member(db, user, team_id)


def update_team(db: Session, user: CurrentUser, team_id: int, data: TeamUpdate) -> Team:
    team = _get_team_as_member(db, user, team_id)
    apply_updates(team, data.model_dump(exclude_unset=True))
    db.flush()
    db.refresh(team)
    return team


def delete_team(db: Session, user: CurrentUser, team_id: int):
    """
    Deletes a team. Members are detached; requests and project links go with it.
    """
    team = _get_team_as_member(db, user, team_id)
    db.delete(team)
    db.flush()
    logger.info("Team %s deleted by user %s", team_id, user.id)


# --- Roster ---

def add_member(db: Session, user: CurrentUser, team_id: int, username_or_email: str) -> str:
    """
    Adds a user directly, bypassing the request flow.
    No-op if the target already belongs to this team.
    """
    team = _get_team_as_member(db, user, team_id)

    target = db.query(User).filter(
        or_(User.username == username_or_email, User.email == username_or_email)
    ).first()
    if not target:
        raise_user_not_found()

    if target.team_id == team.id:
        return SuccessMessages.MEMBER_ALREADY_IN_TEAM
    if target.team_id is not None:
        raise_conflict(ErrorMessages.USER_IN_OTHER_TEAM, ErrorCode.USER_IN_OTHER_TEAM)

    target.team_id = team.id
    db.flush()
    logger.info("User %s added to team %s by user %s", target.id, team.id, user.id)
    return SuccessMessages.MEMBER_ADDED


def leave_team(db: Session, user_id: int) -> str:
    """
    Clears the user's team. Outstanding join requests are left untouched.
    """
    member = get_object_or_404(db, User, user_id, raise_user_not_found)
    if member.team_id is None:
        return SuccessMessages.NOT_IN_ANY_TEAM

    logger.info("User %s left team %s", member.id, member.team_id)
    member.team_id = None
    db.flush()
    return SuccessMessages.LEFT_TEAM


# --- Join requests ---

def request_join(db: Session, user: CurrentUser, team_id: int) -> TeamRequest:
    """
    Opens a join request, or re-opens a rejected one (same row).
    """
    team = _get_team(db, team_id)
    if is_team_member(user, team.id):
        raise_conflict(ErrorMessages.ALREADY_IN_TEAM, ErrorCode.ALREADY_MEMBER)

    existing = db.query(TeamRequest).filter(
        TeamRequest.team_id == team.id,
        TeamRequest.user_id == user.id,
    ).first()

    if existing:
        if existing.status == TeamRequestStatus.PENDING.value:
            raise_conflict(ErrorMessages.REQUEST_ALREADY_PENDING, ErrorCode.REQUEST_ALREADY_PENDING)
        if existing.status == TeamRequestStatus.APPROVED.value:
            raise_conflict(ErrorMessages.REQUEST_ALREADY_APPROVED, ErrorCode.REQUEST_ALREADY_APPROVED)

        existing.status = TeamRequestStatus.PENDING.value
        db.flush()
        logger.info("Join request %s re-opened by user %s", existing.id, user.id)
        return existing

    join_request = TeamRequest(
        team_id=team.id,
        user_id=user.id,
        status=TeamRequestStatus.PENDING.value,
    )
    db.add(join_request)
    db.flush()
    db.refresh(join_request)
    logger.info("Join request %s opened by user %s for team %s", join_request.id, user.id, team.id)
    return join_request


def accept_request(db: Session, user: CurrentUser, team_id: int, request_id: int) -> TeamRequest:
    """
    Approves a pending request: the requester joins the team and the request
    becomes APPROVED. Both changes are flushed together and commit or roll
    back with the surrounding transaction.
    """
    team = _get_team_as_member(db, user, team_id)
    join_request = _get_pending_request(db, team, request_id)

    requester = get_object_or_404(db, User, join_request.user_id, raise_user_not_found)
    if requester.team_id is not None and requester.team_id != team.id:
        logger.info("User %s moves from team %s to team %s", requester.id, requester.team_id, team.id)

    requester.team_id = team.id
    join_request.status = TeamRequestStatus.APPROVED.value
    db.flush()

    logger.info("Join request %s accepted by user %s", join_request.id, user.id)
    return join_request


def reject_request(db: Session, user: CurrentUser, team_id: int, request_id: int) -> TeamRequest:
    """
    Rejects a pending request. Membership is not touched.
    """
    team = _get_team_as_member(db, user, team_id)
    join_request = _get_pending_request(db, team, request_id)

    join_request.status = TeamRequestStatus.REJECTED.value
    db.flush()

    logger.info("Join request %s rejected by user %s", join_request.id, user.id)
    return join_request
