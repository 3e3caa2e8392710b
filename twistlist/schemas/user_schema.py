from pydantic import BaseModel, Field
from typing import Optional

from twistlist.constants import MIN_PASSWORD_LENGTH
from twistlist.schemas.auth_schema import EMAIL_PATTERN

class UserUpdate(BaseModel):
    username: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN, max_length=255)
    password: Optional[str] = Field(default=None, min_length=MIN_PASSWORD_LENGTH)
    profile_picture_url: Optional[str] = Field(default=None, max_length=500)

class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    profile_picture_url: Optional[str] = None
    team_id: Optional[int] = None

    class Config:
        from_attributes = True

class CurrentUser(UserResponse):
    """
    Identity of the authenticated caller.
    Built once per request by the session dependency and passed
    explicitly into every service call.
    """
    class Config:
        from_attributes = True
        frozen = True
