from pydantic import BaseModel, Field, field_validator
from datetime import date
from typing import Optional, List

class ProjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    # Defaults to the caller's own team
    team_id: Optional[int] = None

class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("name")
    @classmethod
    def reject_null_name(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value

class ProjectResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    team_ids: List[int] = []

    class Config:
        from_attributes = True
