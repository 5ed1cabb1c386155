"""
Exceptions for the tokendrop package.
"""
from typing import Optional


class TokenDropError(Exception):
    """Base exception for all tokendrop errors."""
    pass


class ConfigError(TokenDropError):
    """Raised when the treasury configuration is missing or invalid."""
    pass


class InvalidAddress(TokenDropError, ValueError):
    """Raised when a recipient identifier is not a valid account address."""

    def __init__(self, message: str, raw: Optional[object] = None):
        self.raw = raw
        super().__init__(message)


class ChainError(TokenDropError):
    """Base exception for ledger-side failures."""
    pass


class ChainUnavailable(ChainError):
    """Raised when the RPC endpoint cannot be reached or answers garbage."""

    def __init__(self, message: str, operation: Optional[str] = None):
        self.operation = operation
        super().__init__(message)


class SubmissionError(ChainError):
    """Raised when a transaction could not be signed or was rejected by the node."""
    pass


class ContractError(ChainError):
    """Raised when the node answers but the token contract call itself fails."""

    def __init__(self, message: str, operation: Optional[str] = None):
        self.operation = operation
        super().__init__(message)
