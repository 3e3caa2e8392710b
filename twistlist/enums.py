from enum import Enum

class TaskStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"

class TeamRequestStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

class ErrorCode(str, Enum):
    # Generic
    BAD_REQUEST = "BAD_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"

    # Auth / User
    USER_NOT_FOUND = "USER_NOT_FOUND"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    CREDENTIALS_TAKEN = "CREDENTIALS_TAKEN"

    # Domain
    TEAM_NOT_FOUND = "TEAM_NOT_FOUND"
    REQUEST_NOT_FOUND = "REQUEST_NOT_FOUND"
    PROJECT_NOT_FOUND = "PROJECT_NOT_FOUND"
    TASK_NOT_FOUND = "TASK_NOT_FOUND"

    # Membership state machine
    ALREADY_MEMBER = "ALREADY_MEMBER"
    REQUEST_ALREADY_PENDING = "REQUEST_ALREADY_PENDING"
    REQUEST_ALREADY_APPROVED = "REQUEST_ALREADY_APPROVED"
    REQUEST_NOT_PENDING = "REQUEST_NOT_PENDING"
    USER_IN_OTHER_TEAM = "USER_IN_OTHER_TEAM"
