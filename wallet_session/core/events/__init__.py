"""
Change Events Module

Session change events and the process-wide notifier that broadcasts them.
"""

from .models import (
    AccountChanged,
    BalanceUpdated,
    BlockNumberUpdated,
    ChainChanged,
    ChangeEvent,
    ChangeEventType,
    ChangeHandler,
    ConnectionEstablished,
    ConnectionLost,
    ErrorRaised,
    TransactionConfirmed,
    TransactionSent,
)
from .notifier import ChangeNotifier, Subscription, get_change_notifier

__all__ = [
    # Models
    "ChangeEvent",
    "ChangeEventType",
    "ChangeHandler",
    "ConnectionEstablished",
    "ConnectionLost",
    "AccountChanged",
    "ChainChanged",
    "BalanceUpdated",
    "BlockNumberUpdated",
    "TransactionSent",
    "TransactionConfirmed",
    "ErrorRaised",
    # Notifier
    "ChangeNotifier",
    "Subscription",
    "get_change_notifier",
]
