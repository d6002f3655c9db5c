"""Error taxonomy for the portal API.

Every error carries an HTTP status and a message that is safe to show the
client. The application renders them as ``{"message": ...}`` bodies; anything
outside this hierarchy becomes a generic 500.
"""


class PortalError(Exception):
    """Base class for errors with a client-facing message."""

    status_code: int = 500
    message: str = "Internal server error."

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidTokenError(PortalError):
    """The Facebook access token is missing, expired or rejected."""

    status_code = 400
    message = "Invalid or expired Facebook access token."


class UpstreamUnavailableError(PortalError):
    """The Graph API could not be reached or answered unusably. Retryable."""

    status_code = 503
    message = "Facebook is temporarily unavailable. Please try again."


class ConflictError(PortalError):
    """An insert lost a uniqueness race; retry as a lookup."""

    status_code = 409
    message = "This account is being created by another request. Please retry."


class NotFoundOrProtectedError(PortalError):
    """Role update matched no row: the user is missing or is an admin."""

    status_code = 404
    message = "User not found or the user is an admin who cannot be demoted."


class ValidationError(PortalError):
    status_code = 400
    message = "Invalid request."
