"""
Session manager.

Owns the single active wallet session and drives it through its states:

    IDLE -> SPACE_SELECTED -> PROVIDER_SELECTED -> CONNECTED

Selection mistakes are raised to the caller. Failures reported by the wallet
provider are recovered here: the session falls back to its last stable state
and an ``ErrorRaised`` event is published instead.
"""

import asyncio
import dataclasses
import logging
from decimal import Decimal
from typing import Callable, Dict, List, Optional

from ...config import settings
from ...logging_config import bind_session_context
from ...providers.base import AdapterEventSink, ProviderDiscovery, ReceiptStatus, TransactionReceipt, WalletAdapter
from ...providers.injected import InjectedWalletAdapter
from ...providers.variants import WalletVariant, host_discovery
from ..errors import (
    Cancelled,
    ConfirmationTimeout,
    NoProviderSelected,
    NoSpaceSelected,
    NotConnected,
    WalletSessionError,
)
from ..events import (
    AccountChanged,
    BalanceUpdated,
    BlockNumberUpdated,
    ChainChanged,
    ChangeEvent,
    ChangeHandler,
    ChangeNotifier,
    ConnectionEstablished,
    ConnectionLost,
    ErrorRaised,
    Subscription,
    TransactionConfirmed,
    TransactionSent,
    get_change_notifier,
)
from ..registry import SpaceRegistry, build_default_registry
from ..spaces import ChainInfo, Space
from .models import Session, SessionState, TransactionRecord


logger = logging.getLogger(__name__)


AdapterFactory = Callable[[WalletVariant, Space, AdapterEventSink], WalletAdapter]


class SessionManager:
    """
    Orchestrates one wallet session.

    Concurrency:
    - ``_state_lock`` serializes every session mutation, whether it comes
      from an API call or from a provider change event
    - ``_request_lock`` keeps a single connect or transaction submission in
      flight at a time
    - confirmation waits run outside both locks and are cancelled through
      ``_cancel_event`` whenever the session is torn down
    """

    def __init__(
        self,
        registry: Optional[SpaceRegistry] = None,
        discover: Optional[ProviderDiscovery] = None,
        notifier: Optional[ChangeNotifier] = None,
        adapter_factory: Optional[AdapterFactory] = None,
        poll_interval_seconds: Optional[float] = None,
        max_receipt_attempts: Optional[int] = None,
        request_timeout_seconds: Optional[float] = None,
    ):
        self.registry = registry or build_default_registry()
        self.notifier = notifier or get_change_notifier()
        self._discover = discover or host_discovery({})
        self._adapter_factory = adapter_factory or self._create_injected_adapter

        self.poll_interval_seconds = (
            settings.receipt_poll_interval_seconds
            if poll_interval_seconds is None
            else poll_interval_seconds
        )
        self.max_receipt_attempts = (
            settings.receipt_max_attempts
            if max_receipt_attempts is None
            else max_receipt_attempts
        )
        self.request_timeout_seconds = (
            settings.request_timeout_seconds
            if request_timeout_seconds is None
            else request_timeout_seconds
        )

        if self.poll_interval_seconds < 0:
            raise ValueError(f"poll_interval_seconds must be >= 0, got {self.poll_interval_seconds}")
        if self.max_receipt_attempts < 1:
            raise ValueError(f"max_receipt_attempts must be >= 1, got {self.max_receipt_attempts}")
        if self.request_timeout_seconds <= 0:
            raise ValueError(f"request_timeout_seconds must be > 0, got {self.request_timeout_seconds}")

        self._session = Session()
        self._state_lock = asyncio.Lock()
        self._request_lock = asyncio.Lock()
        self._cancel_event = asyncio.Event()
        self._pending: Dict[str, TransactionRecord] = {}

    def _create_injected_adapter(
        self,
        variant: WalletVariant,
        space: Space,
        sink: AdapterEventSink,
    ) -> WalletAdapter:
        return InjectedWalletAdapter(
            variant,
            space,
            self._discover,
            sink=sink,
            request_timeout_seconds=self.request_timeout_seconds,
        )

    # =========================================================================
    # Introspection
    # =========================================================================

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def session(self) -> Session:
        """Shallow copy of the current session."""
        return dataclasses.replace(self._session)

    @property
    def pending_transactions(self) -> List[TransactionRecord]:
        return list(self._pending.values())

    def get_account(self) -> Optional[str]:
        return self._session.account

    def get_chain_id(self) -> Optional[str]:
        return self._session.chain_id

    def subscribe(self, handler: ChangeHandler) -> Subscription:
        return self.notifier.subscribe(handler)

    def _require_adapter(self) -> WalletAdapter:
        if self._session.adapter is None:
            raise NoProviderSelected("Select a wallet provider first.")
        return self._session.adapter

    def _require_connected(self) -> WalletAdapter:
        if self._session.state != SessionState.CONNECTED:
            raise NotConnected("Wallet is not connected.")
        return self._session.adapter

    # =========================================================================
    # Selection
    # =========================================================================

    async def select_space(self, space: str) -> None:
        """Select a chain space, discarding any session in another space."""
        async with self._state_lock:
            target = self.registry.get_space(space)
            was_connected = self._teardown_adapter()
            self._session = Session(space=target)
            bind_session_context(self._session)

            logger.info(f"Space selected: {target.name}")
            if was_connected:
                self._publish(ConnectionLost())

    async def select_provider(self, name: str) -> None:
        """Select the wallet provider to use within the current space."""
        async with self._state_lock:
            space = self._session.space
            if space is None:
                raise NoSpaceSelected("Select a space before choosing a wallet provider.")

            variant = self.registry.get_variant(space, name)

            # A factory failure leaves the current session untouched
            adapter = self._adapter_factory(variant, space, self)
            was_connected = self._teardown_adapter()

            self._session = Session(space=space, provider_name=variant.name, adapter=adapter)
            bind_session_context(self._session)

            logger.info(f"Provider selected: {variant.name} in {space.name}")
            if was_connected:
                self._publish(ConnectionLost())

    def _teardown_adapter(self) -> bool:
        """Gracefully disconnect the current adapter; its outcome is ignored."""
        was_connected = self._session.account is not None
        self._cancel_pending()

        adapter = self._session.adapter
        if adapter is not None:
            try:
                adapter.disconnect_wallet()
            except Exception as e:
                logger.warning(f"Ignoring error while discarding {adapter.name}: {e}")

        return was_connected

    def _cancel_pending(self) -> None:
        self._cancel_event.set()
        self._cancel_event = asyncio.Event()

    # =========================================================================
    # Connection
    # =========================================================================

    def is_wallet_installed(self) -> bool:
        return self._require_adapter().is_installed()

    async def connect(self) -> Optional[str]:
        """
        Connect the selected wallet.

        Re-running while connected repeats the handshake. Returns the account,
        or None when the provider failed (an ``ErrorRaised`` event describes why).

        Raises:
            NoProviderSelected: If no provider has been selected
        """
        async with self._request_lock:
            async with self._state_lock:
                adapter = self._require_adapter()
                was_connected = self._session.account is not None

                try:
                    account = await adapter.connect()
                except Exception as e:
                    self._session.clear_connection()
                    bind_session_context(self._session)
                    try:
                        adapter.disconnect_wallet()
                    except Exception:
                        logger.exception(f"Failed to reset {adapter.name} after connect error")
                    if was_connected:
                        self._cancel_pending()
                        self._publish(ConnectionLost())
                    self._publish_error(e)
                    return None

                self._session.account = account
                self._session.chain_id = adapter.get_chain_id()
                bind_session_context(self._session)
                self._publish(ConnectionEstablished(account=account, chain_id=self._session.chain_id))
                return account

    async def disconnect(self) -> None:
        """Disconnect the wallet. Always succeeds and keeps the selected provider."""
        async with self._state_lock:
            self._disconnect_locked()

    def _disconnect_locked(self) -> None:
        self._cancel_pending()

        adapter = self._session.adapter
        if adapter is not None:
            try:
                adapter.disconnect_wallet()
            except Exception as e:
                logger.warning(f"Ignoring error while disconnecting {adapter.name}: {e}")

        self._session.clear_connection()
        bind_session_context(self._session)
        logger.info("Wallet session disconnected")
        self._publish(ConnectionLost())

    # =========================================================================
    # Provider change events
    # =========================================================================

    def _is_live(self, adapter: WalletAdapter) -> bool:
        return adapter is self._session.adapter and self._session.account is not None

    async def on_account_changed(self, adapter: WalletAdapter, account: str) -> None:
        async with self._state_lock:
            if not self._is_live(adapter):
                logger.debug(f"Ignoring account change from inactive {adapter.name}")
                return
            self._session.account = account
            self._publish(AccountChanged(account=account))

    async def on_chain_changed(self, adapter: WalletAdapter, chain_id: str) -> None:
        async with self._state_lock:
            if not self._is_live(adapter):
                logger.debug(f"Ignoring chain change from inactive {adapter.name}")
                return
            self._session.chain_id = chain_id
            self._publish(ChainChanged(chain_id=chain_id))

    async def on_disconnected(self, adapter: WalletAdapter) -> None:
        async with self._state_lock:
            if not self._is_live(adapter):
                return
            logger.warning(f"{adapter.name} reported no accounts, disconnecting")
            self._disconnect_locked()

    # =========================================================================
    # Queries
    # =========================================================================

    def get_chain_info(self) -> ChainInfo:
        return self._require_connected().get_chain_info()

    async def get_balance(self) -> Optional[Decimal]:
        adapter = self._require_connected()
        try:
            balance = await adapter.get_balance()
        except Exception as e:
            logger.error(f"Error fetching balance: {e}")
            self._publish_error(e)
            return None

        self._publish(BalanceUpdated(amount=balance))
        return balance

    async def get_block_number(self) -> Optional[int]:
        adapter = self._require_connected()
        try:
            block_number = await adapter.get_block_number()
        except Exception as e:
            logger.error(f"Error fetching block number: {e}")
            self._publish_error(e)
            return None

        self._publish(BlockNumberUpdated(block_number=block_number))
        return block_number

    # =========================================================================
    # Transactions
    # =========================================================================

    async def send_transaction(self, to: str, amount: str) -> Optional[str]:
        """
        Send a native value transfer and wait until it is mined.

        Returns the transaction hash once a receipt is observed, or None when
        the wallet refused, the receipt never arrived within the confirmation
        window, or the session was torn down while waiting.

        Raises:
            NotConnected: If the session is not connected
        """
        async with self._request_lock:
            async with self._state_lock:
                adapter = self._require_connected()
                cancel_event = self._cancel_event

            try:
                tx_hash = await adapter.send_transaction(to, amount)
            except Exception as e:
                self._publish_error(e)
                return None

        record = TransactionRecord(tx_hash=tx_hash)
        self._pending[tx_hash] = record
        self._publish(TransactionSent(tx_hash=tx_hash))
        logger.info(f"Transaction initiated, waiting for confirmation. TxHash: {tx_hash}")

        try:
            receipt = await self._wait_for_confirmation(adapter, record, cancel_event)
        except (Cancelled, ConfirmationTimeout) as e:
            self._publish_error(e)
            return None
        finally:
            self._pending.pop(tx_hash, None)

        self._publish(
            TransactionConfirmed(
                tx_hash=tx_hash,
                status=receipt.status.value,
                block_number=receipt.block_number,
            )
        )
        if receipt.status == ReceiptStatus.REVERTED:
            self._publish(ErrorRaised(kind="TransactionFailed", message=f"Transaction {tx_hash} reverted"))

        return tx_hash

    async def _wait_for_confirmation(
        self,
        adapter: WalletAdapter,
        record: TransactionRecord,
        cancel_event: asyncio.Event,
    ) -> TransactionReceipt:
        """Poll for a mined receipt, bounded by ``max_receipt_attempts``."""
        for attempt in range(1, self.max_receipt_attempts + 1):
            if cancel_event.is_set():
                raise Cancelled(f"Session ended while waiting for {record.tx_hash}")

            record.attempts = attempt
            try:
                receipt = await adapter.get_transaction_receipt(record.tx_hash)
            except Exception as e:
                if cancel_event.is_set():
                    raise Cancelled(f"Session ended while waiting for {record.tx_hash}") from e
                logger.warning(f"Error checking transaction status: {e}")
            else:
                if receipt is not None and receipt.is_mined:
                    logger.info(
                        f"Transaction confirmed: {record.tx_hash} "
                        f"(block {receipt.block_number}, attempt {attempt})"
                    )
                    return receipt

            if attempt == self.max_receipt_attempts:
                break

            try:
                await asyncio.wait_for(cancel_event.wait(), timeout=self.poll_interval_seconds)
            except asyncio.TimeoutError:
                continue
            raise Cancelled(f"Session ended while waiting for {record.tx_hash}")

        raise ConfirmationTimeout(
            f"Transaction {record.tx_hash} was not mined after {self.max_receipt_attempts} attempts"
        )

    # =========================================================================
    # Events
    # =========================================================================

    def _publish(self, event: ChangeEvent) -> None:
        self.notifier.publish(event)

    def _publish_error(self, error: Exception) -> None:
        kind = getattr(error, "kind", type(error).__name__)
        message = error.message if isinstance(error, WalletSessionError) else str(error)
        logger.warning(f"{kind}: {message}")
        self._publish(ErrorRaised(kind=kind, message=message))
