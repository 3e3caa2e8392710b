from twistlist.database.base import Base
from .user import User
from .team import Team, TeamRequest
from .project import Project, ProjectTeam
from .task import Task
