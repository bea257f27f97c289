"""FundSpark — Error Taxonomy.

Workflow code raises these; the HTTP layer renders them as
``{"success": false, "message": ...}`` with the matching status code.
"""


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class Unauthorized(AppError):
    status_code = 401
    default_message = "Access denied. No token provided."


class Forbidden(AppError):
    status_code = 403
    default_message = "Access denied"


class NotFound(AppError):
    status_code = 404
    default_message = "Resource not found"


class Conflict(AppError):
    """A well-formed request that breaks a business rule."""

    status_code = 400
    default_message = "Request conflicts with the current state"


class Internal(AppError):
    status_code = 500
