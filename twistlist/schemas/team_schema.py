from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, List

from twistlist.schemas.user_schema import UserResponse

class TeamCreate(BaseModel):
    team_name: str = Field(min_length=1, max_length=100)
    product_owner_user_id: Optional[int] = None
    project_manager_user_id: Optional[int] = None

class TeamUpdate(BaseModel):
    team_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    product_owner_user_id: Optional[int] = None
    project_manager_user_id: Optional[int] = None

    @field_validator("team_name")
    @classmethod
    def reject_null_name(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value

class TeamMemberAdd(BaseModel):
    username_or_email: str = Field(min_length=1)

class TeamResponse(BaseModel):
    id: int
    team_name: str
    product_owner_user_id: Optional[int] = None
    project_manager_user_id: Optional[int] = None

    class Config:
        from_attributes = True

class TeamRequestResponse(BaseModel):
    id: int
    team_id: int
    user_id: int
    status: str
    created_at: Optional[datetime] = None
    user: Optional[UserResponse] = None

    class Config:
        from_attributes = True

class TeamDetailResponse(TeamResponse):
    """
    Team with its roster and open join requests.
    """
    members: List[UserResponse] = []
    pending_requests: List[TeamRequestResponse] = []

    class Config:
        from_attributes = True
