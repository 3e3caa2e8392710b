from fastapi import Response
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from twistlist.auth.auth_utils import hash_password, verify_password, create_access_token
from twistlist.config.settings import settings
from twistlist.exceptions import raise_credentials_taken, raise_invalid_credentials
from twistlist.models import User
from twistlist.schemas.auth_schema import SignUpRequest, SignInRequest
from twistlist.schemas.user_schema import CurrentUser
from twistlist.utils.logger import get_logger

logger = get_logger(__name__)


def signup(db: Session, data: SignUpRequest) -> str:
    """
    Registers a user and returns a signed access token.
    Raises ConflictError if the email or username is taken.
    """
    existing = db.query(User).filter(
        or_(User.email == data.email, User.username == data.username)
    ).first()
    if existing:
        raise_credentials_taken()

    user = User(
        username=data.username,
        email=data.email,
        hashed_password=hash_password(data.password),
    )
    db.add(user)
    try:
        db.flush()
    except IntegrityError:
        # Lost a race against a concurrent signup with the same credentials
        raise_credentials_taken()

    logger.info("User %s registered", user.id)
    return create_access_token(user.id, user.email)


def signin(db: Session, data: SignInRequest) -> str:
    """
    Looks the user up by email or username and verifies the password.
    Raises AuthError ("Credentials incorrect") on any mismatch.
    """
    user = db.query(User).filter(
        or_(User.email == data.email_or_username, User.username == data.email_or_username)
    ).first()

    if not user or not verify_password(user.hashed_password, data.password):
        logger.warning("Failed sign-in for %r", data.email_or_username)
        raise_invalid_credentials()

    return create_access_token(user.id, user.email)


def refresh(user: CurrentUser) -> str:
    """
    Issues a fresh token for a session that is still valid.
    """
    return create_access_token(user.id, user.email)


def set_session_cookie(response: Response, token: str):
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=settings.AUTH_COOKIE_MAX_AGE,
        path="/",
        secure=settings.AUTH_COOKIE_SECURE,
        httponly=True,
        samesite=settings.AUTH_COOKIE_SAMESITE,
    )


def clear_session_cookie(response: Response):
    # Attributes must match the ones used when the cookie was set
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value="",
        max_age=0,
        path="/",
        secure=settings.AUTH_COOKIE_SECURE,
        httponly=True,
        samesite=settings.AUTH_COOKIE_SAMESITE,
    )
