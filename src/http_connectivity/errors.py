"""Shared error types for http_connectivity."""


class ConnectivityError(RuntimeError):
    """Base exception for the http_connectivity package."""


class ConnectionManagerClosedError(ConnectivityError):
    """Raised when a shut-down connection manager is mutated or subscribed to.

    Attributes:
        operation: Name of the rejected manager operation.
    """

    def __init__(self, operation: str) -> None:
        """Initialize a closed-manager exception payload.

        Args:
            operation: Manager method that was called after shutdown.
        """
        self.operation = operation
        super().__init__(f"connection_manager_closed: {operation}")


class SubscriptionClosedError(ConnectivityError):
    """Raised when reading from a closed subscription with nothing pending."""
