from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder

from twistlist.constants import ErrorMessages
from twistlist.enums import ErrorCode


class BaseAPIException(HTTPException):
    """
    Base exception for all API errors.
    Enforces a consistent, frontend-friendly response structure.
    """

    default_status_code = 500
    default_error_code = ErrorCode.INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        error_code: ErrorCode | None = None,
        details: dict | None = None,
        status_code: int | None = None,
    ):
        status_code = status_code or self.default_status_code
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details


# --------------------------------------------------
# ERROR TAXONOMY
# --------------------------------------------------

class ValidationError(BaseAPIException):
    """Malformed or inconsistent input."""
    default_status_code = 400
    default_error_code = ErrorCode.VALIDATION_ERROR


class AuthError(BaseAPIException):
    """Missing, invalid or expired session, or bad credentials."""
    default_status_code = 401
    default_error_code = ErrorCode.UNAUTHORIZED


class AuthzError(BaseAPIException):
    """Authenticated but not permitted for this resource."""
    default_status_code = 403
    default_error_code = ErrorCode.FORBIDDEN


class NotFoundError(BaseAPIException):
    default_status_code = 404
    default_error_code = ErrorCode.NOT_FOUND


class ConflictError(BaseAPIException):
    """Uniqueness or state-transition violation."""
    default_status_code = 400
    default_error_code = ErrorCode.CONFLICT


# --------------------------------------------------
# GLOBAL EXCEPTION HANDLERS
# --------------------------------------------------

def _error_body(request: Request, message: str, error_code, details):
    return {
        "success": False,
        "message": message,
        "error_code": error_code,
        "path": request.url.path,
        "details": details,
    }


async def base_api_exception_handler(request: Request, exc: BaseAPIException):
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc.message, exc.error_code, exc.details),
    )


async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Body/query validation happens before any business logic runs;
    it is reported as a ValidationError (400) instead of FastAPI's 422.
    """
    return JSONResponse(
        status_code=400,
        content=_error_body(
            request,
            "Invalid request",
            ErrorCode.VALIDATION_ERROR,
            {"errors": jsonable_encoder(exc.errors())},
        ),
    )


# --------------------------------------------------
# CENTRAL ERROR FACTORY
# --------------------------------------------------

def raise_validation_error(message: str, details: dict | None = None):
    raise ValidationError(message, details=details)


def raise_unauthorized(
    message: str = ErrorMessages.NOT_AUTHENTICATED,
    error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    status_code: int | None = None,
):
    raise AuthError(message, error_code=error_code, status_code=status_code)


def raise_forbidden(message: str):
    raise AuthzError(message)


def raise_not_found(message: str, error_code: ErrorCode = ErrorCode.NOT_FOUND):
    raise NotFoundError(message, error_code=error_code)


def raise_conflict(
    message: str,
    error_code: ErrorCode = ErrorCode.CONFLICT,
    status_code: int | None = None,
):
    raise ConflictError(message, error_code=error_code, status_code=status_code)


# --------------------------------------------------
# DOMAIN-SPECIFIC HELPERS
# --------------------------------------------------

def raise_invalid_credentials():
    # Bad credentials answer 403, not 401
    raise_unauthorized(
        ErrorMessages.CREDENTIALS_INCORRECT,
        ErrorCode.INVALID_CREDENTIALS,
        status_code=403,
    )


def raise_credentials_taken():
    raise_conflict(
        ErrorMessages.CREDENTIALS_TAKEN,
        ErrorCode.CREDENTIALS_TAKEN,
        status_code=403,
    )


def raise_user_not_found():
    raise_not_found(ErrorMessages.USER_NOT_FOUND, ErrorCode.USER_NOT_FOUND)


def raise_team_not_found():
    raise_not_found(ErrorMessages.TEAM_NOT_FOUND, ErrorCode.TEAM_NOT_FOUND)


def raise_request_not_found():
    raise_not_found(ErrorMessages.REQUEST_NOT_FOUND, ErrorCode.REQUEST_NOT_FOUND)


def raise_project_not_found():
    raise_not_found(ErrorMessages.PROJECT_NOT_FOUND, ErrorCode.PROJECT_NOT_FOUND)


def raise_task_not_found():
    raise_not_found(ErrorMessages.TASK_NOT_FOUND, ErrorCode.TASK_NOT_FOUND)
