from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from twistlist.database.base import Base

class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    tasks = relationship(
        "Task",
        back_populates="project",
        cascade="all, delete-orphan"
    )
    team_links = relationship("ProjectTeam", back_populates="project", cascade="all, delete-orphan")

    @property
    def team_ids(self):
        return [link.team_id for link in self.team_links]


class ProjectTeam(Base):
    __tablename__ = "project_teams"
    __table_args__ = (
        UniqueConstraint("project_id", "team_id", name="uq_project_team"),
    )

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)

    project = relationship("Project", back_populates="team_links")
    team = relationship("Team", back_populates="project_links")
