# spending_api/errors.py


class SpendingAppError(Exception):
    """Base class for errors that map onto an HTTP status."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SpendingAppError):
    status_code = 400


class AlreadyExistsError(SpendingAppError):
    status_code = 400


class NotFoundError(SpendingAppError):
    status_code = 404


class AuthenticationError(SpendingAppError):
    status_code = 401


class AuthConfigurationError(SpendingAppError):
    """The identity provider is not configured on this server."""
    status_code = 500
