from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from twistlist.auth.dependencies import get_current_user
from twistlist.constants import SuccessMessages
from twistlist.database.session import get_db
from twistlist.schemas.auth_schema import MessageResponse
from twistlist.schemas.user_schema import CurrentUser, UserResponse, UserUpdate
from twistlist.utils import user_service

router = APIRouter(prefix="/users", tags=["Users"])

@router.get("/profile", response_model=UserResponse)
def get_profile(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    return user_service.get_profile(db, current_user)

@router.patch("/profile", response_model=UserResponse)
def update_profile(
    data: UserUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    return user_service.update_profile(db, current_user, data)

@router.get("/search", response_model=List[UserResponse])
def search_users(
    q: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """
    Typeahead lookup by username or email.
    """
    return user_service.search_users(db, q)

@router.delete("/account", response_model=MessageResponse)
def delete_account(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    user_service.delete_account(db, current_user)
    return {"message": SuccessMessages.ACCOUNT_DELETED}
