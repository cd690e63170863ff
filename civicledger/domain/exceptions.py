"""Base exception classes for the Civic Ledger domain layer."""


class CivicLedgerError(Exception):
    """Base exception for all domain errors.

    All domain-specific exceptions MUST inherit from this class.
    This enables consistent error handling across the application,
    in particular the HTTP layer which maps subclasses to status codes.
    """

    def __init__(self, message: str = "") -> None:
        """Initialize the exception with an optional message.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)
