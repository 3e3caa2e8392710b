from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from twistlist.database.base import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    profile_picture_url = Column(String(500), nullable=True)

    # At most one active team membership at a time
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    team = relationship("Team", back_populates="members", foreign_keys=[team_id])
    team_requests = relationship(
        "TeamRequest",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    authored_tasks = relationship(
        "Task",
        back_populates="author",
        foreign_keys="Task.author_user_id",
        cascade="all, delete-orphan",
    )
    assigned_tasks = relationship(
        "Task",
        back_populates="assignee",
        foreign_keys="Task.assigned_user_id",
    )
