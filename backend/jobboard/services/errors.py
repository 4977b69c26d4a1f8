"""
Service-layer errors.

Services raise these instead of HTTPException; `jobboard.main` renders any
ServiceError as `{"detail": message}` with the error's status code.
"""


class ServiceError(Exception):
    """Base class for expected, user-facing failures."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnauthenticatedError(ServiceError):
    """No valid session."""
    status_code = 401


class ForbiddenError(ServiceError):
    """Wrong role, or not the owner of the resource."""
    status_code = 403


class NotFoundError(ServiceError):
    """Resource absent, or invisible to the caller's tenant scope."""
    status_code = 404


class ValidationError(ServiceError):
    """Missing or invalid input."""
    status_code = 400


class ConflictError(ServiceError):
    """Duplicate application, or a concurrent write won the race."""
    status_code = 409


class UpstreamError(ServiceError):
    """The file storage backend failed."""
    status_code = 502
