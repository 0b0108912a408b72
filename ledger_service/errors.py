class LedgerError(Exception):
    """Base class for expected, caller-visible ledger outcomes."""


class MalformedRequest(LedgerError):
    """Raised when a transaction body fails validation."""


class TransactionRejected(LedgerError):
    """Raised when the conditional balance update matched no row."""


class AccountNotFound(LedgerError):
    """Raised for ids outside the fixed account set or with no ledger history."""
