"""
Error Classification

Defines the error taxonomy for wallet sessions.
Errors are classified as selection errors (programmer mistakes, raised to the
caller) or provider errors (recovered by the session manager and surfaced as
``ErrorRaised`` events).
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(str, Enum):
    """Categories of errors for recovery decisions."""

    SELECTION = "selection"       # Wrong space/provider chosen by the caller
    SESSION = "session"           # Operation invalid in the current state
    PROVIDER = "provider"         # Wallet provider refused or failed
    TRANSACTION = "transaction"   # Submission or confirmation failed
    CANCELLED = "cancelled"       # Superseded by a session teardown


class WalletSessionError(Exception):
    """Base class for all wallet session errors."""

    kind: str = "WalletSessionError"
    category: ErrorCategory = ErrorCategory.PROVIDER
    recoverable: bool = True

    def __init__(self, message: Optional[str] = None, **details: Any):
        self.message = message or self.__class__.__doc__.strip().rstrip(".")
        self.details: Dict[str, Any] = details
        super().__init__(self.message)


# Selection errors are never retried
class SelectionError(WalletSessionError):
    """Invalid space or provider selection."""

    category = ErrorCategory.SELECTION
    recoverable = False


class InvalidSpace(SelectionError):
    """Space is not registered."""

    kind = "InvalidSpace"


# Registry lookups report the same condition under their own name
UnknownSpace = InvalidSpace


class InvalidProvider(SelectionError):
    """Provider is not valid for the selected space."""

    kind = "InvalidProvider"


class NoSpaceSelected(SelectionError):
    """No space has been selected."""

    kind = "NoSpaceSelected"


class NoProviderSelected(SelectionError):
    """No wallet provider has been selected."""

    kind = "NoProviderSelected"


class NotConnected(WalletSessionError):
    """Wallet is not connected."""

    kind = "NotConnected"
    category = ErrorCategory.SESSION
    recoverable = False


# Provider interaction errors
class ProviderUnavailable(WalletSessionError):
    """Wallet provider is not installed."""

    kind = "ProviderUnavailable"


class ConnectionRejected(WalletSessionError):
    """Wallet provider rejected the connection request."""

    kind = "ConnectionRejected"


class NoAccounts(WalletSessionError):
    """No accounts found."""

    kind = "NoAccounts"


class ChainSwitchFailed(WalletSessionError):
    """Wallet provider rejected the network switch."""

    kind = "ChainSwitchFailed"


class TransactionRejected(WalletSessionError):
    """Transaction was rejected in the wallet."""

    kind = "TransactionRejected"
    category = ErrorCategory.TRANSACTION


class TransactionFailed(WalletSessionError):
    """Transaction failed."""

    kind = "TransactionFailed"
    category = ErrorCategory.TRANSACTION


class ConfirmationTimeout(TransactionFailed):
    """Transaction was not mined within the confirmation window."""

    kind = "ConfirmationTimeout"


class Cancelled(WalletSessionError):
    """Operation was cancelled because the session was torn down."""

    kind = "Cancelled"
    category = ErrorCategory.CANCELLED


__all__ = [
    "ErrorCategory",
    "WalletSessionError",
    "SelectionError",
    "InvalidSpace",
    "UnknownSpace",
    "InvalidProvider",
    "NoSpaceSelected",
    "NoProviderSelected",
    "NotConnected",
    "ProviderUnavailable",
    "ConnectionRejected",
    "NoAccounts",
    "ChainSwitchFailed",
    "TransactionRejected",
    "TransactionFailed",
    "ConfirmationTimeout",
    "Cancelled",
]
