from enum import Enum
from typing import Dict, Optional


class ErrorCode(str, Enum):
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    UNKNOWN_OR_BLOCKED_USER = "UNKNOWN_OR_BLOCKED_USER"
    UNRECOGNIZED_QR_FORMAT = "UNRECOGNIZED_QR_FORMAT"
    LOGIN_REQUIRED = "LOGIN_REQUIRED"
    SESSION_ALREADY_ACTIVE = "SESSION_ALREADY_ACTIVE"
    PROJECT_CLOSED = "PROJECT_CLOSED"
    UNKNOWN_PROJECT = "UNKNOWN_PROJECT"
    PROJECT_NOT_SELECTABLE = "PROJECT_NOT_SELECTABLE"
    NO_ACTIVE_SESSION = "NO_ACTIVE_SESSION"
    NO_PENDING_STOP = "NO_PENDING_STOP"
    DUPLICATE_USERNAME = "DUPLICATE_USERNAME"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    FORBIDDEN = "FORBIDDEN"


_TEMPLATES = {
    ErrorCode.INVALID_CREDENTIALS: "Incorrect username or password.",
    ErrorCode.UNKNOWN_OR_BLOCKED_USER: "User {user_id} does not exist or is blocked.",
    ErrorCode.UNRECOGNIZED_QR_FORMAT: "Unrecognized QR code format: {payload}.",
    ErrorCode.LOGIN_REQUIRED: "Log in before scanning a project code.",
    ErrorCode.SESSION_ALREADY_ACTIVE: "User {user_id} already has an active session.",
    ErrorCode.PROJECT_CLOSED: "Project {project_id} is closed and cannot accept new sessions.",
    ErrorCode.UNKNOWN_PROJECT: "Project {project_id} does not exist.",
    ErrorCode.PROJECT_NOT_SELECTABLE: "Project {project_id} cannot be selected manually by user {user_id}.",
    ErrorCode.NO_ACTIVE_SESSION: "No active session found for user {user_id}.",
    ErrorCode.NO_PENDING_STOP: "There is no session waiting for stop confirmation.",
    ErrorCode.DUPLICATE_USERNAME: "Username {username} is already taken.",
    ErrorCode.ALREADY_EXISTS: "{entity} already exists.",
    ErrorCode.NOT_FOUND: "{entity} not found.",
    ErrorCode.VALIDATION_ERROR: "Invalid request: {detail}.",
    ErrorCode.FORBIDDEN: "You are not allowed to perform this action.",
}


def explain_error(code: ErrorCode, context: Optional[Dict] = None) -> str:
    context = dict(context or {})
    context.setdefault("entity", "Resource")
    context.setdefault("detail", "")
    try:
        return _TEMPLATES[code].format(**context)
    except KeyError:
        # Missing context key; fall back to the bare code
        return code.value.replace("_", " ").capitalize()
