class LedgerError(Exception):
    """Base class for business-rule failures raised by the trader service."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(LedgerError):
    """The requested trader, bill, item or payment does not exist."""


class ValidationError(LedgerError):
    """A required field is missing or a ledger rule would be broken."""
