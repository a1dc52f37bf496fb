from worktime.constants.errors import ErrorCode, explain_error

__all__ = ["ErrorCode", "explain_error"]
