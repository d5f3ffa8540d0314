"""
HTTP-aware exceptions for Shopcore.

Services raise these directly; FastAPI turns them into responses.
"""
from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """Resource not found exception."""

    def __init__(self, resource: str = "Resource"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found"
        )


class ForbiddenError(HTTPException):
    """Access denied exception."""

    def __init__(self, detail: str = "Access denied"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail
        )


class BadRequestError(HTTPException):
    """Bad request exception."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail
        )


class ValidationError(HTTPException):
    """Malformed or missing field."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"field": field, "message": message},
        )


class StateError(BadRequestError):
    """Invalid state transition."""


class ConflictError(HTTPException):
    """Conflict exception (e.g., duplicate resource)."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail
        )


class UnauthorizedError(HTTPException):
    """Unauthorized exception."""

    def __init__(self, detail: str = "Invalid credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class TenantSuspendedError(HTTPException):
    """Tenant is temporarily unavailable."""

    def __init__(self, subdomain: str):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "code": "tenant_suspended",
                "message": f"Store '{subdomain}' is temporarily unavailable",
            },
        )


class TenantArchivedError(HTTPException):
    """Tenant is permanently unavailable."""

    def __init__(self, subdomain: str):
        super().__init__(
            status_code=status.HTTP_410_GONE,
            detail={
                "code": "tenant_archived",
                "message": f"Store '{subdomain}' is no longer available",
            },
        )
