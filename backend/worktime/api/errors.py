"""Translation of error codes into HTTP responses."""

from fastapi import HTTPException, status

from worktime.constants.errors import ErrorCode, explain_error
from worktime.services.outcome import Outcome

STATUS_FOR_CODE = {
    ErrorCode.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.UNKNOWN_OR_BLOCKED_USER: status.HTTP_404_NOT_FOUND,
    ErrorCode.UNKNOWN_PROJECT: status.HTTP_404_NOT_FOUND,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.NO_ACTIVE_SESSION: status.HTTP_404_NOT_FOUND,
    ErrorCode.SESSION_ALREADY_ACTIVE: status.HTTP_409_CONFLICT,
    ErrorCode.DUPLICATE_USERNAME: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorCode.PROJECT_CLOSED: status.HTTP_409_CONFLICT,
    ErrorCode.UNRECOGNIZED_QR_FORMAT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.LOGIN_REQUIRED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.PROJECT_NOT_SELECTABLE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NO_PENDING_STOP: status.HTTP_400_BAD_REQUEST,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.VALIDATION_ERROR: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def http_error(code: ErrorCode, message: str = None, **context) -> HTTPException:
    """HTTPException carrying ``{"code", "message"}`` as its detail."""
    headers = {"WWW-Authenticate": "Bearer"} if code is ErrorCode.INVALID_CREDENTIALS else None
    return HTTPException(
        status_code=STATUS_FOR_CODE.get(code, status.HTTP_400_BAD_REQUEST),
        detail={"code": code.value, "message": message or explain_error(code, context)},
        headers=headers,
    )


def raise_for_outcome(outcome: Outcome):
    """Return the outcome's value, raising the matching HTTP error on failure."""
    if not outcome.ok:
        raise http_error(outcome.error, outcome.detail)
    return outcome.value


def not_found(entity: str) -> HTTPException:
    return http_error(ErrorCode.NOT_FOUND, entity=entity)


def forbidden() -> HTTPException:
    return http_error(ErrorCode.FORBIDDEN)
