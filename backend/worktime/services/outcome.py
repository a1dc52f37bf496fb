from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from worktime.constants.errors import ErrorCode, explain_error


class Outcome(BaseModel):
    """
    Result of a session or kiosk operation.

    Expected failures (bad QR code, blocked user, closed project, ...) are
    reported through ``error`` instead of raising, so callers decide how to
    surface them. ``value`` carries the payload of a successful operation.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    error: Optional[ErrorCode] = None
    detail: Optional[str] = None
    value: Any = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any = None, detail: Optional[str] = None) -> "Outcome":
        return cls(value=value, detail=detail)

    @classmethod
    def failure(cls, code: ErrorCode, **context) -> "Outcome":
        return cls(error=code, detail=explain_error(code, context))
