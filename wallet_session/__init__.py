"""
Wallet session orchestration.

Usage:
    from wallet_session import SessionManager, host_discovery

    manager = SessionManager(discover=host_discovery({"ethereum": provider}))
    manager.subscribe(print)

    await manager.select_space("espace")
    await manager.select_provider("MetaMask")
    account = await manager.connect()
    tx_hash = await manager.send_transaction("0x...", "0.5")
"""

from .core.errors import (
    Cancelled,
    ChainSwitchFailed,
    ConfirmationTimeout,
    ConnectionRejected,
    InvalidProvider,
    InvalidSpace,
    NoAccounts,
    NoProviderSelected,
    NoSpaceSelected,
    NotConnected,
    ProviderUnavailable,
    TransactionFailed,
    TransactionRejected,
    UnknownSpace,
    WalletSessionError,
)
from .core.events import ChangeNotifier, Subscription, get_change_notifier
from .core.registry import SpaceRegistry, build_default_registry
from .core.session import Session, SessionManager, SessionState
from .core.spaces import AddressFormat, ChainInfo, Space
from .providers import (
    HttpJsonRpcProvider,
    InjectedWalletAdapter,
    ProviderDescriptor,
    ProviderRpcError,
    WalletVariant,
    host_discovery,
    static_discovery,
)

__version__ = "0.1.0"

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
    "SpaceRegistry",
    "build_default_registry",
    "Space",
    "AddressFormat",
    "ChainInfo",
    "ChangeNotifier",
    "Subscription",
    "get_change_notifier",
    "InjectedWalletAdapter",
    "HttpJsonRpcProvider",
    "ProviderDescriptor",
    "ProviderRpcError",
    "WalletVariant",
    "host_discovery",
    "static_discovery",
    "WalletSessionError",
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
