"""
Error taxonomy shared by the store, the linking layer and the routes.

The store and linking layer only raise; mapping to HTTP status codes and
response envelopes happens in main.py.
"""

from typing import Any, Dict, List, Optional


class AppError(Exception):
    status_code = 500

    def detail(self) -> Any:
        return str(self)


class ValidationError(AppError):
    """One or more field rules (presence, length, format, enum, uniqueness) failed."""

    status_code = 400

    def __init__(self, errors: List[Dict[str, str]]):
        self.errors = errors
        summary = "; ".join(f"{e['field']}: {e['message']}" for e in errors)
        super().__init__(f"Validation failed: {summary}")

    def detail(self) -> Any:
        return {"message": str(self), "fields": self.errors}


class NotFoundError(AppError):
    status_code = 404

    def __init__(self, kind: str, doc_id: Any):
        self.kind = kind
        self.doc_id = doc_id
        super().__init__(f"{kind} {doc_id} not found")


class AuthenticationError(AppError):
    status_code = 401


class PermissionDeniedError(AppError):
    status_code = 403


class UnknownError(AppError):
    status_code = 500


class ApiError(Exception):
    """
    Raised by route handlers: a user-facing message plus the failure that caused it.

    Failures are a 500 unless the cause is an AuthenticationError (401). With
    `keep_status`, any AppError cause keeps its own status code instead.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None, keep_status: bool = False):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.keep_status = keep_status

    @property
    def status_code(self) -> int:
        if isinstance(self.cause, AuthenticationError):
            return self.cause.status_code
        if self.keep_status and isinstance(self.cause, AppError):
            return self.cause.status_code
        return 500

    def detail(self) -> Any:
        if isinstance(self.cause, AppError):
            return self.cause.detail()
        if self.cause is not None:
            return str(self.cause)
        return self.message
