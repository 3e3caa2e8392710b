from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from twistlist.database.base import Base
from twistlist.enums import TeamRequestStatus

class Team(Base):
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, index=True)
    team_name = Column(String(100), nullable=False)

    # Informational labels; not used for authorization
    product_owner_user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL", use_alter=True, name="fk_teams_product_owner"),
        nullable=True,
    )
    project_manager_user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL", use_alter=True, name="fk_teams_project_manager"),
        nullable=True,
    )

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    # Relationships
    members = relationship("User", back_populates="team", foreign_keys="User.team_id")
    requests = relationship(
        "TeamRequest",
        back_populates="team",
        cascade="all, delete-orphan",
    )
    project_links = relationship(
        "ProjectTeam",
        back_populates="team",
        cascade="all, delete-orphan",
    )

    @property
    def pending_requests(self):
        return [r for r in self.requests if r.status == TeamRequestStatus.PENDING.value]


class TeamRequest(Base):
    """
    A user's request to join a team.
    One row per (team, user); a rejected row is re-opened rather than duplicated.
    """
    __tablename__ = "team_requests"
    __table_args__ = (
        UniqueConstraint("team_id", "user_id", name="uq_team_request_team_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(20), nullable=False, default=TeamRequestStatus.PENDING.value)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    team = relationship("Team", back_populates="requests")
    user = relationship("User", back_populates="team_requests")
