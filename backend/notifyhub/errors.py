"""Error types raised by the services and mapped to HTTP responses in main."""


class NotifyHubError(Exception):
    """Base class for errors reported to API clients."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(NotifyHubError):
    """A required field is missing or invalid."""

    status_code = 400


class NotFoundError(NotifyHubError):
    """No device, message, broadcast, recipient or user matches."""

    status_code = 404


class StorageError(NotifyHubError):
    """A collection could not be read or written."""

    status_code = 500
