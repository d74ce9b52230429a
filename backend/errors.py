# errors.py
from __future__ import annotations
from typing import Any, Dict, Optional


class AppError(Exception):
    """Base for errors that are safe to show to the caller as JSON."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body

class ValidationError(AppError):
    status_code = 400

class ConflictError(AppError):
    status_code = 400

class AuthError(AppError):
    status_code = 401

class UpstreamError(AppError):
    status_code = 502

    def __init__(self, message: str, details: Any = None, upstream_status: Optional[int] = None):
        super().__init__(message, details=details)
        self.upstream_status = upstream_status

class InternalError(AppError):
    status_code = 500
