"""
txnledger Exception Hierarchy

All exceptions inherit from TxnLedgerError for easy catching.
"""


class TxnLedgerError(Exception):
    """Base exception for all txnledger errors"""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ValidationError(TxnLedgerError):
    """Raised when a record or call argument has the wrong shape"""
    pass


class StorageError(TxnLedgerError):
    """Raised when the persistence substrate cannot complete a read or write"""
    pass


class IntegrityError(StorageError):
    """Raised when stored data fails its hash chain or signature check"""
    pass


class ConfigError(TxnLedgerError):
    """Raised when configuration cannot be loaded or is invalid"""
    pass


class UnknownMethodError(TxnLedgerError):
    """Raised when the call boundary receives a method it does not expose"""
    pass
