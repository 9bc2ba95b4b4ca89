"""
Error taxonomy shared by services and routes.

Services raise these at the point of detection. main.py turns them into
HTTP responses with a single exception handler.
"""
from fastapi import status


class CRMError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Unexpected error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthenticationMissing(CRMError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class AuthorizationDenied(CRMError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You do not have permission to perform this action"


class RecordNotFound(CRMError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Record not found"


class ValidationError(CRMError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Invalid input"


class UpstreamServiceError(CRMError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Upstream service failure"
