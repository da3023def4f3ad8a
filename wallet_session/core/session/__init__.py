"""
Wallet Session Module

The session aggregate and the manager that drives its state machine.
"""

from .manager import AdapterFactory, SessionManager
from .models import Session, SessionState, TransactionRecord

__all__ = [
    "SessionManager",
    "AdapterFactory",
    "Session",
    "SessionState",
    "TransactionRecord",
]
