from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from twistlist.auth.dependencies import get_current_user
from twistlist.constants import SuccessMessages
from twistlist.database.session import get_db
from twistlist.schemas.auth_schema import SignUpRequest, SignInRequest, TokenResponse, MessageResponse
from twistlist.schemas.user_schema import CurrentUser
from twistlist.utils import auth_service

router = APIRouter(prefix="/auth", tags=["Authentication"])

@router.post("/signup", status_code=201, response_model=MessageResponse)
def signup(
    data: SignUpRequest,
    response: Response,
    db: Session = Depends(get_db)
):
    """
    Registers a new user and starts a session.
    """
    token = auth_service.signup(db, data)
    auth_service.set_session_cookie(response, token)
    return {"message": SuccessMessages.SIGNED_UP}

@router.post("/signin", response_model=TokenResponse)
def signin(
    data: SignInRequest,
    response: Response,
    db: Session = Depends(get_db)
):
    """
    Signs in with email or username.
    The token is set as a cookie and also returned in the body.
    """
    token = auth_service.signin(db, data)
    auth_service.set_session_cookie(response, token)
    return {"access_token": token}

@router.post("/refresh", response_model=TokenResponse)
def refresh(
    response: Response,
    current_user: CurrentUser = Depends(get_current_user)
):
    """
    Re-issues the access token for a session that is still valid.
    """
    token = auth_service.refresh(current_user)
    auth_service.set_session_cookie(response, token)
    return {"access_token": token}

@router.post("/logout", response_model=MessageResponse)
def logout(response: Response):
    auth_service.clear_session_cookie(response)
    return {"message": SuccessMessages.LOGGED_OUT}
