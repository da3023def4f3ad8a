"""
Injected wallet adapter.

Binds one wallet variant (MetaMask on eSpace, Fluent on Core, ...) to the
provider handle found in the host environment and implements the adapter
capability set on top of the variant's RPC dialect.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Any, List, Optional

from ..config import settings
from ..core.errors import (
    ChainSwitchFailed,
    ConnectionRejected,
    InvalidProvider,
    NoAccounts,
    NotConnected,
    ProviderUnavailable,
    TransactionFailed,
    TransactionRejected,
    WalletSessionError,
)
from ..core.spaces import ChainInfo, Space, normalize_chain_id, parse_quantity
from .base import (
    UNRECOGNIZED_CHAIN,
    AdapterEventSink,
    InjectedProvider,
    ProviderDiscovery,
    ProviderRpcError,
    TransactionReceipt,
    WalletAdapter,
)
from .variants import WalletVariant


logger = logging.getLogger(__name__)


class RpcTransport:
    """Provider handle plus a per-request timeout."""

    def __init__(self, provider: InjectedProvider, timeout_s: float):
        self.provider = provider
        self.timeout_s = timeout_s

    async def call(self, method: str, *params: Any) -> Any:
        return await asyncio.wait_for(
            self.provider.request(method, list(params)),
            timeout=self.timeout_s,
        )


class InjectedWalletAdapter(WalletAdapter):
    """
    Adapter for a browser-style injected wallet.

    Lifecycle:
    - ``connect`` requests accounts, reads the chain, switches to the required
      chain when needed and installs change listeners
    - provider events update local state and are forwarded to the event sink
    - ``disconnect_wallet`` clears local state and removes the listeners
    """

    def __init__(
        self,
        variant: WalletVariant,
        space: Space,
        discover: ProviderDiscovery,
        sink: Optional[AdapterEventSink] = None,
        request_timeout_seconds: Optional[float] = None,
    ):
        if variant.space != space.name:
            raise InvalidProvider(
                f"{variant.name} is registered for space {variant.space!r}, not {space.name!r}"
            )

        self.variant = variant
        self.descriptor = variant.descriptor
        self.space = space
        self._sink = sink
        self._timeout_s = (
            settings.request_timeout_seconds
            if request_timeout_seconds is None
            else request_timeout_seconds
        )
        if self._timeout_s <= 0:
            raise ValueError(f"request_timeout_seconds must be > 0, got {self._timeout_s}")
        self._provider = discover(variant)
        self._transport: Optional[RpcTransport] = None
        self._account: Optional[str] = None
        self._chain_id: Optional[str] = None
        self._listening = False

    def __repr__(self) -> str:
        return f"<InjectedWalletAdapter {self.variant.name}@{self.space.name}>"

    # =========================================================================
    # State
    # =========================================================================

    def is_installed(self) -> bool:
        return self._provider is not None

    def get_account(self) -> Optional[str]:
        return self._account

    def get_chain_id(self) -> Optional[str]:
        return self._chain_id

    def get_chain_info(self) -> ChainInfo:
        return self.variant.chain

    @property
    def is_listening(self) -> bool:
        return self._listening

    def _require_provider(self) -> InjectedProvider:
        if self._provider is None:
            raise ProviderUnavailable(f"{self.variant.name} is not installed.")
        return self._provider

    def _require_connection(self) -> str:
        self._require_provider()
        if self._account is None or self._transport is None:
            raise NotConnected(f"{self.variant.name} is not connected.")
        return self._account

    # =========================================================================
    # Connection
    # =========================================================================

    async def connect(self) -> str:
        provider = self._require_provider()
        dialect = self.variant.dialect

        # A reconnect re-runs the whole handshake with fresh listeners
        self._remove_listeners()

        try:
            transport = RpcTransport(provider, self._timeout_s)
            accounts = await self._request_accounts(transport)
            if not accounts:
                raise NoAccounts("No accounts found.")

            account = accounts[0]
            chain_id = await self._read_chain_id(transport)

            required = self.variant.chain.chain_id
            if int(chain_id) != required:
                await self._switch_chain(transport)
                chain_id = str(required)

        except WalletSessionError:
            self.disconnect_wallet()
            raise

        self._transport = transport
        self._account = account
        self._chain_id = chain_id
        self.watch_account_and_chain()

        logger.info(f"Connected to {self.variant.name}: {account} on chain {chain_id}")
        return account

    async def _request_accounts(self, transport: RpcTransport) -> List[str]:
        method = self.variant.dialect.request_accounts
        try:
            accounts = await transport.call(method)
        except ProviderRpcError as e:
            raise ConnectionRejected(
                f"{self.variant.name} rejected the connection request: {e.message}",
                code=e.code,
            ) from e
        except Exception as e:
            raise ConnectionRejected(f"Error connecting to {self.variant.name}: {e}") from e
        return list(accounts or [])

    async def _read_chain_id(self, transport: RpcTransport) -> str:
        try:
            raw = await transport.call(self.variant.dialect.chain_id)
            return normalize_chain_id(raw)
        except Exception as e:
            raise ConnectionRejected(
                f"Could not read the active network from {self.variant.name}: {e}"
            ) from e

    async def _switch_chain(self, transport: RpcTransport) -> None:
        chain = self.variant.chain
        try:
            await transport.call(self.variant.dialect.switch_chain, {"chainId": chain.hex_chain_id})
        except ProviderRpcError as e:
            if e.code == UNRECOGNIZED_CHAIN:
                raise ChainSwitchFailed(
                    f"Network {chain.name} is not added to {self.variant.name}.",
                    code=e.code,
                ) from e
            raise ChainSwitchFailed(
                f"{self.variant.name} did not switch to {chain.name}: {e.message}",
                code=e.code,
            ) from e
        except Exception as e:
            raise ChainSwitchFailed(f"Error switching network to {chain.name}: {e}") from e

        logger.info(f"Network switched to: {chain.name} ({chain.chain_id})")

    def disconnect_wallet(self) -> None:
        self._account = None
        self._chain_id = None
        self._transport = None
        self._remove_listeners()
        logger.info(f"{self.variant.name} wallet disconnected")

    # =========================================================================
    # Change listeners
    # =========================================================================

    def watch_account_and_chain(self) -> None:
        if self._provider is None or self._listening:
            return

        self._provider.on("accountsChanged", self._handle_accounts_changed)
        self._provider.on("chainChanged", self._handle_chain_changed)
        self._listening = True

    def _remove_listeners(self) -> None:
        if self._provider is None or not self._listening:
            return

        try:
            self._provider.remove_listener("accountsChanged", self._handle_accounts_changed)
            self._provider.remove_listener("chainChanged", self._handle_chain_changed)
        except Exception as e:
            logger.warning(f"Failed to remove {self.variant.name} listeners: {e}")
        finally:
            self._listening = False

    async def _handle_accounts_changed(self, accounts: List[str]) -> None:
        if not accounts:
            logger.warning(f"No accounts connected to {self.variant.name}")
            self.disconnect_wallet()
            if self._sink:
                await self._sink.on_disconnected(self)
            return

        self._account = accounts[0]
        logger.info(f"Account changed: {self._account}")
        if self._sink:
            await self._sink.on_account_changed(self, self._account)

    async def _handle_chain_changed(self, chain_id: Any) -> None:
        try:
            new_chain_id = normalize_chain_id(chain_id)
        except ValueError:
            logger.warning(f"Ignoring malformed chain id from {self.variant.name}: {chain_id!r}")
            return

        self._chain_id = new_chain_id
        logger.info(f"Network changed: {new_chain_id}")
        if self._sink:
            await self._sink.on_chain_changed(self, new_chain_id)

        required = self.variant.chain.chain_id
        if self._transport is None or int(new_chain_id) == required:
            return

        try:
            await self._switch_chain(self._transport)
        except ChainSwitchFailed as e:
            logger.warning(f"Could not restore {self.variant.chain.name}: {e.message}")
            return

        # Providers normally announce the switch themselves; cover the ones that don't
        if self._chain_id == new_chain_id:
            self._chain_id = str(required)
            if self._sink:
                await self._sink.on_chain_changed(self, self._chain_id)

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_balance(self) -> Decimal:
        account = self._require_connection()
        dialect = self.variant.dialect
        raw = await self._transport.call(dialect.get_balance, account, dialect.balance_tag)
        return self.space.from_base_units(parse_quantity(raw) or 0)

    async def get_block_number(self) -> int:
        self._require_connection()
        dialect = self.variant.dialect
        raw = await self._transport.call(dialect.block_number, *dialect.block_number_params)
        return parse_quantity(raw) or 0

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[TransactionReceipt]:
        self._require_connection()
        dialect = self.variant.dialect
        raw = await self._transport.call(dialect.get_receipt, tx_hash)
        return dialect.parse_receipt(tx_hash, raw)

    # =========================================================================
    # Transactions
    # =========================================================================

    async def send_transaction(self, to: str, amount: str) -> str:
        account = self._require_connection()

        try:
            to_address = self.space.normalize_address(to)
            value = self.space.to_base_units(amount)
        except ValueError as e:
            raise TransactionFailed(str(e)) from e

        tx = {"from": account, "to": to_address, "value": hex(value)}
        try:
            result = await self._transport.call(self.variant.dialect.send_transaction, tx)
        except ProviderRpcError as e:
            if e.user_rejected:
                raise TransactionRejected(
                    f"Transaction rejected in {self.variant.name}.", code=e.code
                ) from e
            raise TransactionFailed(
                f"Error sending transaction with {self.variant.name}: {e.message}",
                code=e.code,
            ) from e
        except Exception as e:
            raise TransactionFailed(
                f"Error sending transaction with {self.variant.name}: {e}"
            ) from e

        tx_hash = result.get("hash") if isinstance(result, dict) else result
        if not tx_hash:
            raise TransactionFailed(f"{self.variant.name} returned no transaction hash.")

        logger.info(f"Transaction sent: {tx_hash} ({amount} {self.space.native_symbol} to {to_address})")
        return tx_hash
