from typing import Any

# Response codes returned in the JSON envelope
CODE_OK = 0
CODE_INVALID_PARAMS = 101
CODE_USER_NOT_FOUND = 102
CODE_OPERATION_FAILED = 103
CODE_RATE_LIMITED = 104


class ReportError(Exception):
    """Base class for errors surfaced to the reporting client."""

    status_code: int = 500
    error_code: int = CODE_OPERATION_FAILED

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_content(self) -> dict[str, Any]:
        return {"code": self.error_code, "message": self.message}


class ReportValidationError(ReportError):
    status_code = 400
    error_code = CODE_INVALID_PARAMS

    def __init__(self, errors: list[dict[str, str]], message: str = "Invalid parameters"):
        super().__init__(message)
        self.errors = errors

    def to_content(self) -> dict[str, Any]:
        return {**super().to_content(), "errors": self.errors}


class UserNotFoundError(ReportError):
    status_code = 404
    error_code = CODE_USER_NOT_FOUND

    def __init__(self, user_id: int):
        super().__init__("User not found")
        self.user_id = user_id


class OperationFailedError(ReportError):
    """Persistence failed; the client should resend the whole report."""

    status_code = 503
    error_code = CODE_OPERATION_FAILED

    def __init__(self, detail: str):
        super().__init__("Operation failed, please retry the report")
        self.detail = detail

    def to_content(self) -> dict[str, Any]:
        return {**super().to_content(), "detail": self.detail}


class ConflictError(Exception):
    """A concurrent insert already stored the same row.

    Raised and absorbed inside the address book services; never reaches a client.
    """


def format_validation_errors(errors) -> list[dict[str, str]]:
    """Flatten pydantic error dicts into ``{field, message}`` items."""
    formatted = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        formatted.append({"field": ".".join(loc) or "body", "message": error.get("msg", "")})
    return formatted
