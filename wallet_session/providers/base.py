from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Protocol, TYPE_CHECKING

from ..core.spaces import ChainInfo

if TYPE_CHECKING:
    from .variants import WalletVariant


# EIP-1193 provider error codes
USER_REJECTED_REQUEST = 4001
UNAUTHORIZED = 4100
UNRECOGNIZED_CHAIN = 4902


class ProviderRpcError(Exception):
    """Error returned by a wallet provider request."""

    def __init__(self, code: int, message: str, data: Any = None):
        super().__init__(f"[{code}] {message}")
        self.code = code
        self.message = message
        self.data = data

    @property
    def user_rejected(self) -> bool:
        return self.code == USER_REJECTED_REQUEST


class InjectedProvider(Protocol):
    """The request/listener surface every wallet provider handle exposes.

    Handlers passed to ``on`` may return awaitables; providers await them.
    """

    async def request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        ...

    def on(self, event: str, handler: Callable[[Any], Any]) -> None:
        ...

    def remove_listener(self, event: str, handler: Callable[[Any], Any]) -> None:
        ...


# Looks up the injected handle for a variant, None when absent
ProviderDiscovery = Callable[["WalletVariant"], Optional[InjectedProvider]]


@dataclass(frozen=True)
class ProviderDescriptor:
    """Identifies one adapter kind within one space."""

    name: str
    space: str


class ReceiptStatus(str, Enum):
    SUCCESS = "success"
    REVERTED = "reverted"


@dataclass
class TransactionReceipt:
    """Receipt normalized across RPC dialects."""

    transaction_hash: str
    status: Optional[ReceiptStatus]
    block_number: Optional[int] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_mined(self) -> bool:
        return self.status is not None


class AdapterEventSink(Protocol):
    """Receives provider-originated changes from an adapter."""

    async def on_account_changed(self, adapter: "WalletAdapter", account: str) -> None:
        ...

    async def on_chain_changed(self, adapter: "WalletAdapter", chain_id: str) -> None:
        ...

    async def on_disconnected(self, adapter: "WalletAdapter") -> None:
        ...


class WalletAdapter(ABC):
    """Capability interface for one wallet provider in one space."""

    descriptor: ProviderDescriptor

    @property
    def name(self) -> str:
        return self.descriptor.name

    @abstractmethod
    def is_installed(self) -> bool:
        """Check if the provider handle is present in the host environment"""

    @abstractmethod
    async def connect(self) -> str:
        """Perform the connection handshake and return the account"""

    @abstractmethod
    def disconnect_wallet(self) -> None:
        """Clear local connection state and remove listeners"""

    @abstractmethod
    def watch_account_and_chain(self) -> None:
        """Install account and chain change listeners on the provider"""

    @abstractmethod
    def get_account(self) -> Optional[str]:
        """Get the connected account"""

    @abstractmethod
    def get_chain_id(self) -> Optional[str]:
        """Get the chain id reported by the provider"""

    @abstractmethod
    def get_chain_info(self) -> ChainInfo:
        """Get the chain this adapter requires"""

    @abstractmethod
    async def get_balance(self) -> Decimal:
        """Get the native balance of the connected account"""

    @abstractmethod
    async def get_block_number(self) -> int:
        """Get the latest block (or epoch) number"""

    @abstractmethod
    async def get_transaction_receipt(self, tx_hash: str) -> Optional[TransactionReceipt]:
        """Get the receipt for a transaction, None while pending"""

    @abstractmethod
    async def send_transaction(self, to: str, amount: str) -> str:
        """Send a native value transfer and return its hash"""

    def is_connected(self) -> bool:
        return self.get_account() is not None
