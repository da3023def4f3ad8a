"""
Wallet variants.

Every supported wallet integration is described by data: which injected
handle it binds to, which RPC dialect it speaks and which chain it requires.
A single adapter implementation is parameterized by these variants.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from ..core.spaces import CORE_SPACE, ESPACE_SPACE, ChainInfo, parse_quantity
from .base import (
    InjectedProvider,
    ProviderDescriptor,
    ProviderDiscovery,
    ReceiptStatus,
    TransactionReceipt,
)


@dataclass(frozen=True)
class RpcDialect:
    """JSON-RPC method names and receipt conventions of a chain family."""

    name: str
    request_accounts: str
    chain_id: str
    switch_chain: str
    get_balance: str
    balance_tag: str
    block_number: str
    block_number_params: tuple
    get_receipt: str
    send_transaction: str
    receipt_status_field: str
    success_status: int
    receipt_block_field: str

    def parse_receipt(self, tx_hash: str, raw: Optional[Dict[str, Any]]) -> Optional[TransactionReceipt]:
        if not raw:
            return None

        status_value = parse_quantity(raw.get(self.receipt_status_field))
        if status_value is None:
            status = None
        elif status_value == self.success_status:
            status = ReceiptStatus.SUCCESS
        else:
            status = ReceiptStatus.REVERTED

        return TransactionReceipt(
            transaction_hash=raw.get("transactionHash") or tx_hash,
            status=status,
            block_number=parse_quantity(raw.get(self.receipt_block_field)),
            raw=dict(raw),
        )


EVM_DIALECT = RpcDialect(
    name="eth",
    request_accounts="eth_requestAccounts",
    chain_id="eth_chainId",
    switch_chain="wallet_switchEthereumChain",
    get_balance="eth_getBalance",
    balance_tag="latest",
    block_number="eth_blockNumber",
    block_number_params=(),
    get_receipt="eth_getTransactionReceipt",
    send_transaction="eth_sendTransaction",
    receipt_status_field="status",
    success_status=1,
    receipt_block_field="blockNumber",
)

# Conflux Core reports outcomeStatus 0 on success and counts epochs, not blocks
CORE_DIALECT = RpcDialect(
    name="cfx",
    request_accounts="cfx_requestAccounts",
    chain_id="cfx_chainId",
    switch_chain="wallet_switchConfluxChain",
    get_balance="cfx_getBalance",
    balance_tag="latest_state",
    block_number="cfx_epochNumber",
    block_number_params=("latest_mined",),
    get_receipt="cfx_getTransactionReceipt",
    send_transaction="cfx_sendTransaction",
    receipt_status_field="outcomeStatus",
    success_status=0,
    receipt_block_field="epochNumber",
)


@dataclass(frozen=True)
class WalletVariant:
    """One wallet integration within one space."""

    name: str
    space: str
    discovery_key: str
    dialect: RpcDialect
    chain: ChainInfo
    marker: Optional[str] = None

    @property
    def descriptor(self) -> ProviderDescriptor:
        return ProviderDescriptor(name=self.name, space=self.space)


# Chains per network
CONFLUX_CHAINS: Dict[str, Dict[str, ChainInfo]] = {
    "mainnet": {
        CORE_SPACE: ChainInfo(
            chain_id=1029,
            name="Conflux Core",
            native_symbol="CFX",
            rpc_url="https://main.confluxrpc.com",
            explorer_url="https://confluxscan.io",
        ),
        ESPACE_SPACE: ChainInfo(
            chain_id=1030,
            name="Conflux eSpace",
            native_symbol="CFX",
            rpc_url="https://evm.confluxrpc.com",
            explorer_url="https://evm.confluxscan.io",
        ),
    },
    "testnet": {
        CORE_SPACE: ChainInfo(
            chain_id=1,
            name="Conflux Core Testnet",
            native_symbol="CFX",
            rpc_url="https://test.confluxrpc.com",
            explorer_url="https://testnet.confluxscan.io",
        ),
        ESPACE_SPACE: ChainInfo(
            chain_id=71,
            name="Conflux eSpace Testnet",
            native_symbol="CFX",
            rpc_url="https://evmtestnet.confluxrpc.com",
            explorer_url="https://evmtestnet.confluxscan.io",
        ),
    },
}


def conflux_variants(network: str = "mainnet") -> List[WalletVariant]:
    """The wallet integrations available for a Conflux network, in menu order."""
    try:
        chains = CONFLUX_CHAINS[network]
    except KeyError:
        raise ValueError(
            f"Unknown network {network!r}. Expected one of {sorted(CONFLUX_CHAINS)}"
        ) from None

    return [
        WalletVariant(
            name="Fluent",
            space=CORE_SPACE,
            discovery_key="conflux",
            marker="is_fluent",
            dialect=CORE_DIALECT,
            chain=chains[CORE_SPACE],
        ),
        WalletVariant(
            name="MetaMask",
            space=ESPACE_SPACE,
            discovery_key="ethereum",
            marker="is_metamask",
            dialect=EVM_DIALECT,
            chain=chains[ESPACE_SPACE],
        ),
        WalletVariant(
            name="Fluent",
            space=ESPACE_SPACE,
            discovery_key="ethereum",
            marker="is_fluent",
            dialect=EVM_DIALECT,
            chain=chains[ESPACE_SPACE],
        ),
    ]


def host_discovery(host: Mapping[str, Any]) -> ProviderDiscovery:
    """
    Discover providers from a host environment mapping.

    The mapping plays the role of the browser globals: ``host["ethereum"]``
    is the injected EVM handle, ``host["conflux"]`` the Conflux Core one. A
    handle only matches a variant when it carries the variant's marker flag
    (``is_metamask``, ``is_fluent``).
    """

    def discover(variant: WalletVariant) -> Optional[InjectedProvider]:
        handle = host.get(variant.discovery_key)
        if handle is None:
            return None
        if variant.marker and not getattr(handle, variant.marker, False):
            return None
        return handle

    return discover


def static_discovery(handle: Optional[InjectedProvider]) -> ProviderDiscovery:
    """Hand the same provider handle to every variant."""

    def discover(variant: WalletVariant) -> Optional[InjectedProvider]:
        return handle

    return discover


__all__ = [
    "RpcDialect",
    "EVM_DIALECT",
    "CORE_DIALECT",
    "WalletVariant",
    "CONFLUX_CHAINS",
    "conflux_variants",
    "host_discovery",
    "static_discovery",
]
