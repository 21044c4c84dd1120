"""Generic exceptions and errors for backends."""

from typing import Optional

STATUS_CODE_NOT_FOUND = 404
STATUS_CODE_ALREADY_EXISTS = 409


class BackendError(Exception):
    """Error happened on the backend."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        """Initialize exception with message and optional HTTP status code.

        Args:
            message: The error message
            status_code: Numeric status code reported by the backend, if any
        """
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(BackendError):
    """A named or keyed resource does not exist on the backend."""


class MultipleResultsError(BackendError):
    """A lookup expected to be unique matched more than one resource."""


class AlreadyExistsError(BackendError):
    """The backend reported a conflict: the resource already exists."""


class ValidationError(BackendError):
    """Request was rejected before any call to the backend."""


class ConfigurationError(Exception):
    """Agent configuration is incorrect."""


def is_already_exists(error: BaseException) -> bool:
    """Tell whether the error is the backend's "already exists" conflict."""
    return getattr(error, "status_code", None) == STATUS_CODE_ALREADY_EXISTS
