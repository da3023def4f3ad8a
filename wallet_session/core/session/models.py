"""
Session Models

The single active space/provider/account/chain aggregate and the ephemeral
records kept while a transaction is being confirmed.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from ...providers.base import WalletAdapter
from ..spaces import Space


class SessionState(str, Enum):
    """States the session moves through."""

    IDLE = "idle"                           # No space selected
    SPACE_SELECTED = "space_selected"       # Space set, no provider
    PROVIDER_SELECTED = "provider_selected" # Adapter created, not connected
    CONNECTED = "connected"                 # Account and chain populated


@dataclass
class Session:
    """
    Mutable session aggregate owned by the session manager.

    The state is derived from which fields are populated, so the invariants
    below cannot drift from it:
    - ``account`` set implies an adapter that reports itself connected
    - no ``space`` implies no provider and no adapter
    """

    space: Optional[Space] = None
    provider_name: Optional[str] = None
    adapter: Optional[WalletAdapter] = None
    account: Optional[str] = None
    chain_id: Optional[str] = None

    @property
    def state(self) -> SessionState:
        if self.space is None:
            return SessionState.IDLE
        if self.adapter is None:
            return SessionState.SPACE_SELECTED
        if self.account is None:
            return SessionState.PROVIDER_SELECTED
        return SessionState.CONNECTED

    @property
    def is_connected(self) -> bool:
        return self.state == SessionState.CONNECTED

    def clear_connection(self) -> None:
        self.account = None
        self.chain_id = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "space": self.space.name if self.space else None,
            "providerName": self.provider_name,
            "account": self.account,
            "chainId": self.chain_id,
        }


@dataclass
class TransactionRecord:
    """A submitted transaction awaiting its receipt."""

    tx_hash: str
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    attempts: int = 0
