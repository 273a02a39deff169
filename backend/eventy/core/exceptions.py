"""
Domain errors raised by the service layer.

Services never build HTTP responses themselves. The handlers registered in
eventy.main translate each error into its status code and a JSON body of
the form {"message": ..., "errors": [...]}.
"""

from typing import Optional

from fastapi import status


class EventyError(Exception):
    """Base error with a user-safe message and the HTTP status it maps to."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "server_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"message": self.message}


class ValidationError(EventyError):
    """Missing or invalid input. Carries optional per-field problems."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"

    def __init__(self, message: str, errors: Optional[list[dict]] = None) -> None:
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.errors:
            body["errors"] = self.errors
        return body


class AuthenticationError(EventyError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "authentication_error"


class AuthorizationError(EventyError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "authorization_error"


class NotFoundError(EventyError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class ConflictError(EventyError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"
