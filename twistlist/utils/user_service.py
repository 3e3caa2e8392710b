from typing import List

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from twistlist.auth.auth_utils import hash_password
from twistlist.constants import USER_SEARCH_LIMIT
from twistlist.exceptions import raise_credentials_taken, raise_user_not_found
from twistlist.models import User
from twistlist.schemas.user_schema import CurrentUser, UserUpdate
from twistlist.utils.common import get_object_or_404, apply_updates
from twistlist.utils.logger import get_logger

logger = get_logger(__name__)


def get_profile(db: Session, user: CurrentUser) -> User:
    return get_object_or_404(db, User, user.id, raise_user_not_found)


def update_profile(db: Session, user: CurrentUser, data: UserUpdate) -> User:
    """
    Updates username, email, password or profile picture.
    Raises ConflictError if the new username or email belongs to someone else.
    """
    db_user = get_object_or_404(db, User, user.id, raise_user_not_found)
    updates = data.model_dump(exclude_unset=True, exclude_none=True)

    clash_filters = []
    if "username" in updates:
        clash_filters.append(User.username == updates["username"])
    if "email" in updates:
        clash_filters.append(User.email == updates["email"])
    if clash_filters:
        clash = db.query(User).filter(User.id != db_user.id, or_(*clash_filters)).first()
        if clash:
            raise_credentials_taken()

    password = updates.pop("password", None)
    if password:
        db_user.hashed_password = hash_password(password)

    apply_updates(db_user, updates)
    try:
        db.flush()
    except IntegrityError:
        raise_credentials_taken()

    db.refresh(db_user)
    return db_user


def search_users(db: Session, query: str) -> List[User]:
    """
    Case-insensitive substring match on username or email, for typeahead.
    `%` and `_` in the query match literally.
    """
    escaped = query.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    pattern = f"%{escaped}%"
    return (
        db.query(User)
        .filter(or_(User.username.ilike(pattern, escape="\\"), User.email.ilike(pattern, escape="\\")))
        .order_by(User.username)
        .limit(USER_SEARCH_LIMIT)
        .all()
    )


def delete_account(db: Session, user: CurrentUser):
    db_user = get_object_or_404(db, User, user.id, raise_user_not_found)
    db.delete(db_user)
    db.flush()
    logger.info("User %s deleted their account", user.id)
