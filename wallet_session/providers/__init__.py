"""
Wallet Providers Module

Adapter interface, the injected wallet adapter, the wallet variants it is
parameterized by, and an HTTP JSON-RPC provider for headless use.
"""

from .base import (
    USER_REJECTED_REQUEST,
    UNAUTHORIZED,
    UNRECOGNIZED_CHAIN,
    AdapterEventSink,
    InjectedProvider,
    ProviderDescriptor,
    ProviderDiscovery,
    ProviderRpcError,
    ReceiptStatus,
    TransactionReceipt,
    WalletAdapter,
)
from .http import HttpJsonRpcProvider
from .injected import InjectedWalletAdapter, RpcTransport
from .variants import (
    CONFLUX_CHAINS,
    CORE_DIALECT,
    EVM_DIALECT,
    RpcDialect,
    WalletVariant,
    conflux_variants,
    host_discovery,
    static_discovery,
)

__all__ = [
    # Interface
    "WalletAdapter",
    "AdapterEventSink",
    "InjectedProvider",
    "ProviderDescriptor",
    "ProviderDiscovery",
    "ProviderRpcError",
    "ReceiptStatus",
    "TransactionReceipt",
    "USER_REJECTED_REQUEST",
    "UNAUTHORIZED",
    "UNRECOGNIZED_CHAIN",
    # Implementations
    "InjectedWalletAdapter",
    "RpcTransport",
    "HttpJsonRpcProvider",
    # Variants
    "RpcDialect",
    "EVM_DIALECT",
    "CORE_DIALECT",
    "WalletVariant",
    "CONFLUX_CHAINS",
    "conflux_variants",
    "host_discovery",
    "static_discovery",
]
