"""
Error taxonomy shared by services and dependencies.

All errors are HTTPException subclasses so services can keep the
``except HTTPException: raise`` / ``except Exception`` pattern and the
app-level handlers can render them into the response envelope. ``code`` is a
stable machine-readable tag the web client switches on (e.g. to prompt a
GitHub re-link instead of logging the user out).
"""

from fastapi import HTTPException
from typing import Optional


class AppError(HTTPException):
    default_status: int = 500
    default_code: Optional[str] = None

    def __init__(self, detail: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(status_code=status_code or self.default_status, detail=detail)
        self.code = code or self.default_code


class AuthenticationError(AppError):
    default_status = 401
    default_code = "unauthenticated"


class AuthorizationError(AppError):
    default_status = 403
    default_code = "forbidden"


class ValidationFailure(AppError):
    default_status = 400
    default_code = "validation_error"


class NotFoundError(AppError):
    default_status = 404
    default_code = "not_found"


class UpstreamError(AppError):
    default_status = 500
    default_code = "upstream_error"


class GitHubNotLinkedError(AppError):
    default_status = 412
    default_code = "github_not_linked"

    def __init__(self, detail: str = "GitHub token not found for user"):
        super().__init__(detail)


class StorageNotConfiguredError(AppError):
    default_status = 503
    default_code = "storage_not_configured"
