from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session

from twistlist.auth.auth_utils import decode_access_token
from twistlist.config.settings import settings
from twistlist.constants import ErrorMessages
from twistlist.database.session import get_db
from twistlist.exceptions import raise_unauthorized
from twistlist.models import User
from twistlist.schemas.user_schema import CurrentUser
from twistlist.utils.logger import get_logger

logger = get_logger(__name__)

security = HTTPBearer(auto_error=False)


def extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    """
    Session cookie first, Authorization bearer header as a fallback.
    """
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if token:
        return token
    if credentials and credentials.scheme.lower() == "bearer":
        return credentials.credentials
    return None


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> CurrentUser:
    """
    Dependency to get the current authenticated user from the session token.

    Args:
        request: Incoming request (for the session cookie)
        credentials: Optional bearer token credentials
        db: Database session

    Returns:
        CurrentUser: identity of the caller, re-read from the database

    Raises:
        AuthError: If the token is missing, invalid, expired, or the user no longer exists
    """
    token = extract_token(request, credentials)
    if not token:
        raise_unauthorized()

    try:
        payload = decode_access_token(token)
        user_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        logger.info("Rejected session token on %s", request.url.path)
        raise_unauthorized(ErrorMessages.INVALID_TOKEN)

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise_unauthorized(ErrorMessages.SESSION_USER_GONE)

    return CurrentUser.model_validate(user)
