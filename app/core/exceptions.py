"""
Error kinds raised by services and collaborators.

Each one is an HTTPException carrying its own status code, so routes can let
them propagate and FastAPI renders the response.
"""

from typing import Dict, Optional

from fastapi import HTTPException, status


class ServiceError(HTTPException):
    """Base class for application errors with a fixed status code."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Internal server error"

    def __init__(self, detail: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(
            status_code=type(self).status_code,
            detail=detail or self.default_detail,
            headers=headers,
        )


class ValidationError(ServiceError):
    """Malformed input or input rejected by the identity provider."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class InvalidCredentials(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid credentials"


class AccountNotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Account not found"


class ProviderError(ServiceError):
    """The identity provider failed for a reason other than bad input."""
    default_detail = "Identity provider request failed"


class PersistenceInconsistency(ServiceError):
    """A profile write reported success but the document cannot be read back."""
    default_detail = "Account created but verification failed. Please contact support."


class EmailDispatchError(ServiceError):
    default_detail = "Unable to send email"


class InternalError(ServiceError):
    pass
