"""Status definitions and exceptions for ExpenseClient.

This module provides:
    - Status: enumeration of possible application states
    - STATUS_MESSAGE: user-facing messages for each status
    - get_message: retrieve the message for a status
    - BaseStatusException: base exception carrying a Status
    - ApiException and its subclasses raised by the HTTP layer
    - describe: the inline error text shown by pages for a failed request
"""
import enum
import logging
from typing import Dict, List, Optional


class Status(enum.StrEnum):
    """Enumeration of application status codes."""
    UnknownStatus = enum.auto()
    Okay = enum.auto()

    # Config status
    ClientConfigNotFound = enum.auto()
    ClientConfigInvalid = enum.auto()

    # Authentication status
    NotAuthenticated = enum.auto()
    Forbidden = enum.auto()

    # Request status
    ValidationFailed = enum.auto()
    NotFound = enum.auto()
    Conflict = enum.auto()
    ServerError = enum.auto()
    RequestFailed = enum.auto()

    # Service status
    ServiceUnavailable = enum.auto()
    OperationCancelled = enum.auto()


STATUS_MESSAGE: Dict[Status, str] = {
    Status.UnknownStatus: 'Unknown status. Please check the settings.',
    Status.Okay: 'Everything is okay.',

    Status.ClientConfigNotFound: 'Could not find the client config.',
    Status.ClientConfigInvalid: 'The client config seems to be incomplete, or contains invalid values.',

    Status.NotAuthenticated: 'Authentication required. Please sign in again.',
    Status.Forbidden: 'Access forbidden: You don\'t have permission to access this resource.',

    Status.ValidationFailed: 'The server rejected the request as invalid.',
    Status.NotFound: 'Resource not found.',
    Status.Conflict: 'The request conflicts with the current state of the resource.',
    Status.ServerError: 'Server error: Something went wrong on the server.',
    Status.RequestFailed: 'The request could not be completed.',

    Status.ServiceUnavailable: 'Network error: No response received from server.',
    Status.OperationCancelled: 'The operation was cancelled or timed out.',
}


def get_message(status: Status) -> str:
    """
    Get the message for a given status.

    Args:
        status (Status): The status enum.

    Returns:
        str: The message associated with the status.
    """
    return STATUS_MESSAGE.get(status, 'Unknown status')


class BaseStatusException(Exception):
    """Base exception for status-based errors in ExpenseClient.

    Attributes:
        status (Status): Status code associated with this error.
        status_message (str): User-facing message for the status.

    Args:
        message (str): Optional additional context for the error.
    """
    status = Status.UnknownStatus

    def __init__(self, message: str = None):
        self.status_message = get_message(self.status)
        exception_message = f'{self.status_message} {message}' if message else self.status_message
        super().__init__(exception_message)

        logging.error(exception_message)

        from ..ui.actions import signals
        signals.error.emit(message or self.status_message)


class UnknownException(BaseStatusException):
    """Exception for an unknown error during status processing."""
    pass


class ClientConfigNotFoundException(BaseStatusException):
    """Exception raised when the client configuration file cannot be found."""
    status = Status.ClientConfigNotFound


class ClientConfigInvalidException(BaseStatusException):
    """Exception raised when the client configuration is invalid or malformed."""
    status = Status.ClientConfigInvalid


class ServiceUnavailableException(BaseStatusException):
    """Exception raised when the backend cannot be reached or does not answer in time."""
    status = Status.ServiceUnavailable


class OperationCancelledException(BaseStatusException):
    """Exception raised when the user cancels a running request or it times out."""
    status = Status.OperationCancelled


class ApiException(BaseStatusException):
    """Base exception for error responses returned by the backend.

    Attributes:
        http_status (int): The HTTP status code of the response.
        server_message (str): The ``message`` field of the server's error body, if any.
        validation_errors (list[dict]): ``{'field': ..., 'message': ...}`` items, if any.
    """
    status = Status.RequestFailed

    def __init__(
            self,
            message: str = None,
            http_status: Optional[int] = None,
            server_message: Optional[str] = None,
            validation_errors: Optional[List[Dict[str, str]]] = None,
    ):
        self.http_status = http_status
        self.server_message = server_message or ''
        self.validation_errors = list(validation_errors or [])
        super().__init__(message or self.server_message or None)


class ValidationFailedException(ApiException):
    """Exception raised for 400 responses, usually carrying field validation errors."""
    status = Status.ValidationFailed


class NotAuthenticatedException(ApiException):
    """Exception raised for 401 responses, or when a request needs a token we don't have."""
    status = Status.NotAuthenticated


class ForbiddenException(ApiException):
    """Exception raised for 403 responses."""
    status = Status.Forbidden


class NotFoundException(ApiException):
    """Exception raised for 404 responses."""
    status = Status.NotFound


class ConflictException(ApiException):
    """Exception raised for 409 responses."""
    status = Status.Conflict


class ServerErrorException(ApiException):
    """Exception raised for 5xx responses."""
    status = Status.ServerError


class RequestFailedException(ApiException):
    """Exception raised for any other unsuccessful response."""
    status = Status.RequestFailed


HTTP_STATUS_EXCEPTIONS: Dict[int, type] = {
    400: ValidationFailedException,
    401: NotAuthenticatedException,
    403: ForbiddenException,
    404: NotFoundException,
    409: ConflictException,
}


def exception_for_status(http_status: int) -> type:
    """Return the exception class used for an unsuccessful HTTP status code."""
    if http_status in HTTP_STATUS_EXCEPTIONS:
        return HTTP_STATUS_EXCEPTIONS[http_status]
    if http_status >= 500:
        return ServerErrorException
    return RequestFailedException


def format_validation_errors(validation_errors: List[Dict[str, str]]) -> str:
    """Join validation errors as ``'field: message, field: message'``."""
    return ', '.join(
        f'{item.get("field", "")}: {item.get("message", "")}' for item in validation_errors
    )


def describe(ex: Exception, fallback: str) -> str:
    """Return the text a page shows inline for a failed request.

    Validation errors take precedence, then the server's own message, then ``fallback``.

    Args:
        ex: The exception raised by a service call.
        fallback: The page-specific message used when the server said nothing useful.

    Returns:
        str: The message to display.
    """
    if isinstance(ex, ApiException):
        if ex.validation_errors:
            return f'Validation failed: {format_validation_errors(ex.validation_errors)}'
        if ex.server_message:
            return ex.server_message
    return fallback
