# Users search
USER_SEARCH_LIMIT = 10
MIN_PASSWORD_LENGTH = 8


class ErrorMessages:
    USER_NOT_FOUND = "User not found"
    TEAM_NOT_FOUND = "Team not found"
    REQUEST_NOT_FOUND = "Request not found"
    PROJECT_NOT_FOUND = "Project not found"
    TASK_NOT_FOUND = "Task not found"

    # Auth
    CREDENTIALS_INCORRECT = "Credentials incorrect"
    CREDENTIALS_TAKEN = "Email or username already taken"
    NOT_AUTHENTICATED = "Not authenticated"
    INVALID_TOKEN = "Invalid or expired session"
    SESSION_USER_GONE = "User not found"

    # Teams
    NOT_TEAM_MEMBER = "You are not a member of this team"
    ALREADY_IN_TEAM = "You are already in this team"
    REQUEST_ALREADY_PENDING = "You already have a pending request for this team"
    REQUEST_ALREADY_APPROVED = "You have already been approved for this team"
    REQUEST_WRONG_TEAM = "Request does not belong to this team"
    REQUEST_NOT_PENDING = "Request is not pending"
    USER_IN_OTHER_TEAM = "User is already in another team"

    # Projects
    NO_TEAM_FOR_PROJECT = "You must belong to a team or supply a team_id to create a project"
    PROJECT_TEAM_NOT_FOUND = "Team not found"
    NO_PROJECT_ACCESS = "You do not have access to this project"

    # Tasks
    ASSIGNEE_NOT_FOUND = "Assigned user not found"
    DUPLICATE_REORDER_IDS = "Duplicate task ids in reorder request"
    NO_PERMISSION_VIEW_TASK = "You do not have permission to view this task"
    NO_PERMISSION_UPDATE_TASK = "You do not have permission to update this task"
    NO_PERMISSION_DELETE_TASK = "You do not have permission to delete this task. Only the author can delete."

    # Users
    PASSWORD_TOO_SHORT = f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"


class SuccessMessages:
    SIGNED_UP = "User successfully registered"
    LOGGED_OUT = "Logged out successfully"
    ACCOUNT_DELETED = "Account deleted successfully"

    TEAM_DELETED = "Team deleted successfully"
    MEMBER_ADDED = "Member added successfully"
    MEMBER_ALREADY_IN_TEAM = "User is already in this team"
    LEFT_TEAM = "Left team successfully"
    NOT_IN_ANY_TEAM = "User is not in any team"
    JOIN_REQUEST_SENT = "Join request sent successfully"
    REQUEST_ACCEPTED = "Request accepted successfully"
    REQUEST_REJECTED = "Request rejected successfully"

    PROJECT_DELETED = "Project deleted successfully"
    TASK_DELETED = "Task deleted successfully"
    TASKS_REORDERED = "Tasks reordered successfully"
