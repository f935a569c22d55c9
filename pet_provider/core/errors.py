"""
Error taxonomy for the pet provider.

Every error the gateway raises derives from GatewayError, which is a
ValueError so that callers treating bad requests as bad arguments keep
working.
"""


class GatewayError(ValueError):
    """Base class for errors raised by the pet provider."""


class UnrecognizedAddress(GatewayError):
    """Raised when a URI matches neither the collection nor the item shape."""

    def __init__(self, uri: str, operation: str | None = None):
        self.uri = uri
        self.operation = operation
        if operation:
            message = f"Cannot {operation} unknown URI {uri}"
        else:
            message = f"Unknown URI {uri}"
        super().__init__(message)


class UnsupportedOperation(GatewayError):
    """Raised when an operation is not allowed for the resolved address."""

    def __init__(self, operation: str, uri: str):
        self.operation = operation
        self.uri = uri
        super().__init__(f"{operation.capitalize()} is not supported for {uri}")


class StoreFailure(GatewayError):
    """
    Raised when the backing store reports an error.

    The driver exception is chained as __cause__.
    """

    def __init__(self, operation: str, message: str):
        self.operation = operation
        self.message = message
        super().__init__(f"Store {operation} failed: {message}")
