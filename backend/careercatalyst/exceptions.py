"""Custom exceptions for the CareerCatalyst API.

Each error knows the HTTP status and the short error kind that the API
sends back, so the routes only need to raise them.
"""


class CareerCatalystError(Exception):
    """Base exception for all CareerCatalyst errors."""
    status_code = 500
    kind = "server_error"

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
        self.message = message


class InvalidInputError(CareerCatalystError):
    """Raised when a request carries a value we refuse to compute with."""
    status_code = 400
    kind = "invalid_input"


class ConflictError(CareerCatalystError):
    """Raised when a username or email is already taken."""
    status_code = 409
    kind = "conflict"


class AuthenticationError(CareerCatalystError):
    """Raised when the username/password pair does not match."""
    status_code = 401
    kind = "invalid_credentials"


class NotFoundError(CareerCatalystError):
    """Raised when a requested record does not exist."""
    status_code = 404
    kind = "not_found"


class DeliveryFailedError(CareerCatalystError):
    """Raised when an email could not be handed to the SMTP server."""
    status_code = 500
    kind = "delivery_failed"


class ConfigError(CareerCatalystError):
    """Raised when there's an issue with configuration."""
    status_code = 500
    kind = "config_error"
