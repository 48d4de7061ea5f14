"""Errors raised by motor_populate."""


class ODMError(Exception):
    """Base class for all exceptions in motor_populate."""


class ConnectionError(ODMError):
    """No connection is registered under the requested alias."""


class OperationError(ODMError):
    """Raised when an operation cannot be performed."""


class DoesNotExist(ODMError):
    """Raised when a query that should return a document returns nothing."""


class PopulateError(ODMError):
    """Base class for errors raised while populating a path.

    :parameters:
      - `message`: A human readable description of the failure.
      - `path`: The path that was being populated.

    """

    def __init__(self, message, path=None):
        super().__init__(message)
        self.message = message
        self.path = path


class UnresolvedReference(PopulateError):
    """No reference metadata could be found for a path in strict mode."""


class ModelNotFound(PopulateError):
    """The collection a path refers to is not registered in strict mode."""

    def __init__(self, message, path=None, model=None):
        super().__init__(message, path)
        self.model = model


class FetchFailure(PopulateError):
    """The store rejected the batched query for a path."""
