"""
Newsdesk Errors
===============

Exception taxonomy shared by the API client, the auth service and the
query cache.
"""


class NewsdeskError(Exception):
    """Base class for every error raised by this package."""


class ApiError(NewsdeskError):
    """The remote API answered with a non-2xx status."""

    def __init__(self, status_code, message=''):
        self.status_code = status_code
        self.message = message or f'HTTP error! status: {status_code}'
        super().__init__(self.message)


class UnauthorizedError(ApiError):
    """The remote API rejected the bearer token (401)."""


class TransientNetworkError(NewsdeskError):
    """The request never got an answer: connection failure or timeout."""


class MalformedResponse(NewsdeskError):
    """The response body does not have the shape the client expects."""


class InvalidCredentials(NewsdeskError):
    """Login rejected by the server."""


class RegistrationRejected(NewsdeskError):
    """Registration rejected by the server; the message is server-defined."""


class SessionInvalid(NewsdeskError):
    """A stored token could not be verified and no cached profile exists."""


class MutationFailed(NewsdeskError):
    """A create/update/delete call failed or its answer could not be read."""

    def __init__(self, kind, cause):
        self.kind = kind
        self.cause = cause
        super().__init__(str(cause))

    @property
    def status_code(self):
        """HTTP status to report to the initiating view."""
        code = getattr(self.cause, 'status_code', None)
        if code and 400 <= code < 500:
            return code
        return 502


class ValidationError(NewsdeskError, ValueError):
    """Submitted form data cannot be sent to the API."""
