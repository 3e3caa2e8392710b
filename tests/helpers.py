# tests/helpers.py

from twistlist.models import User
from twistlist.schemas.user_schema import CurrentUser

TEST_PASSWORD = "correct-horse-battery"


def as_current(db, user: User) -> CurrentUser:
    """
    Identity snapshot of a user, as the session dependency would build it.
    """
    db.flush()
    db.refresh(user)
    return CurrentUser.model_validate(user)
