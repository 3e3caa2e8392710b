from .auth_schema import SignUpRequest, SignInRequest, TokenResponse, MessageResponse
from .user_schema import UserUpdate, UserResponse, CurrentUser
from .team_schema import (
    TeamCreate, TeamUpdate, TeamMemberAdd, TeamResponse,
    TeamRequestResponse, TeamDetailResponse,
)
from .project_schema import ProjectCreate, ProjectUpdate, ProjectResponse
from .task_schema import TaskCreate, TaskUpdate, TaskPosition, TaskResponse
