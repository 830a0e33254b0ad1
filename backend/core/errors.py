"""Application error taxonomy.

Every error carries the HTTP status it maps to and a message that is safe
to show to clients. ``backend.main`` turns them into ``{"error": message}``
responses.
"""


class AppError(Exception):
    status_code = 500
    default_message = "Server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Missing or malformed input the client can fix."""
    status_code = 400
    default_message = "Invalid request"


class ConflictError(AppError):
    """A resource with the same identity already exists."""
    # The registration API has always answered duplicates with 400.
    status_code = 400
    default_message = "Resource already exists"


class AuthenticationError(AppError):
    status_code = 401
    default_message = "Invalid email or password"


class ForbiddenError(AppError):
    status_code = 403
    default_message = "You do not have permission to perform this action"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class UpstreamError(AppError):
    """The external place provider failed or returned garbage."""
    status_code = 502
    default_message = "Upstream service unavailable"


class StorageUnavailableError(AppError):
    status_code = 503
    default_message = "Database unavailable. Verify DATABASE_URL and database credentials."


class InternalError(AppError):
    status_code = 500
    default_message = "Server error"
