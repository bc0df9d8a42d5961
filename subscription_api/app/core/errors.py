"""
Error taxonomy for the subscription API.

Every error raised on purpose by the service or the store derives from
``SubscriptionAPIError`` and carries a client-facing ``message`` plus
the HTTP ``status_code`` the API layer should answer with.  Storage
failures use status 500; their message is logged but never sent to the
client.
"""


class SubscriptionAPIError(Exception):
    """Base class for all errors raised by the application."""

    status_code = 400
    default_message = "invalid request"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(SubscriptionAPIError):
    status_code = 404
    default_message = "subscription not found"


class AlreadyExistsError(SubscriptionAPIError):
    """Declared for completeness; no current flow raises it."""

    status_code = 409
    default_message = "subscription already exists"


class InvalidDataError(SubscriptionAPIError):
    default_message = "invalid data provided"


class InvalidDateFormatError(SubscriptionAPIError):
    default_message = "invalid date format, expected MM-YYYY"


class InvalidUUIDError(SubscriptionAPIError):
    default_message = "invalid UUID format"


class InvalidDateRangeError(SubscriptionAPIError):
    default_message = "invalid date range: start date must be before or equal to end date"


class InvalidPriceError(SubscriptionAPIError):
    default_message = "price must be a positive integer"


class InvalidPaginationError(SubscriptionAPIError):
    """Declared for completeness; pagination values are clamped instead."""

    default_message = "invalid pagination parameters"


class InvalidJSONError(SubscriptionAPIError):
    default_message = "invalid JSON format"


class MissingRequiredFieldError(SubscriptionAPIError):
    default_message = "missing required field"

    def __init__(self, field: str | None = None):
        super().__init__(f"{field} is required" if field else None)
        self.field = field


class StorageError(SubscriptionAPIError):
    """Persistence failure.  The message is for logs only."""

    status_code = 500
    default_message = "storage error"


class DatabaseConnectionError(StorageError):
    default_message = "database connection error"


class DatabaseQueryError(StorageError):
    default_message = "database query error"
