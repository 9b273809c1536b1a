"""
Typed failures raised by the service layer.

Each error carries the HTTP status and the error code the API layer puts in
the response envelope (see api/errors.py). Messages are safe to show to
clients: never include secrets, hashes or token strings in them.
"""


class ServiceError(Exception):
    status_code = 500
    error = "INTERNAL_ERROR"
    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(ServiceError):
    status_code = 400
    error = "VALIDATION_ERROR"
    default_message = "Invalid input"


class DuplicateIdentity(ServiceError):
    status_code = 400
    error = "DUPLICATE_IDENTITY"
    default_message = "Username or email is already in use"


class Unauthorized(ServiceError):
    status_code = 401
    error = "UNAUTHORIZED"
    default_message = "Authentication required"


class InvalidCredentials(Unauthorized):
    error = "INVALID_CREDENTIALS"
    default_message = "Invalid credentials"


class InvalidToken(Unauthorized):
    error = "INVALID_TOKEN"
    default_message = "Token is invalid or expired"


class Forbidden(ServiceError):
    status_code = 403
    error = "FORBIDDEN"
    default_message = "Forbidden"


class NotFound(ServiceError):
    status_code = 404
    error = "NOT_FOUND"
    default_message = "Resource not found"


class InternalError(ServiceError):
    pass


class ConfigurationError(RuntimeError):
    """Raised at startup when the service cannot run safely."""
