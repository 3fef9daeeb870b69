"""Pipeline exceptions.

Every error the cleaner raises derives from ``CleanerError`` so the pass
boundary and ``init()`` can isolate them from the host page.
"""


class CleanerError(Exception):
    """Base exception for all cleaner errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        """Initialize cleaner exception.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InitializationError(CleanerError):
    """Raised when the pipeline cannot attach to the host document."""

    pass


class NodeProcessingError(CleanerError):
    """Raised when cleaning or rendering a single comment fails."""

    pass
