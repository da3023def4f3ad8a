"""
Shared fixtures: an in-memory wallet provider and pre-wired session managers.
"""

import inspect
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from wallet_session.core.events import ChangeEvent, ChangeNotifier
from wallet_session.core.registry import SpaceRegistry, build_default_registry
from wallet_session.core.session import SessionManager
from wallet_session.core.spaces import AddressFormat, ChainInfo, Space
from wallet_session.providers import EVM_DIALECT, WalletVariant, host_discovery


CAFE = "0x" + "cafe" * 10
BEEF = "0x" + "beef" * 10
CORE_ACCOUNT = "cfx:aak2rra2njvd77ezwjvx04kkds9fzagfe6ku8scz91"
TX_HASH = "0x" + "ab" * 32


class FakeWalletProvider:
    """
    In-memory EIP-1193 style provider.

    ``responses`` overrides a method with a value, an exception to raise, or a
    callable taking the params. Switch requests update ``chain_id`` and emit
    ``chainChanged`` like a real wallet does.
    """

    def __init__(
        self,
        accounts: Optional[List[str]] = None,
        chain_id: str = "0x406",
        balance: str = "0x0",
        block_number: str = "0x10",
        tx_hash: str = TX_HASH,
        is_metamask: bool = True,
        is_fluent: bool = False,
    ):
        self.accounts = [CAFE] if accounts is None else accounts
        self.chain_id = chain_id
        self.balance = balance
        self.block_number = block_number
        self.tx_hash = tx_hash
        self.receipts: List[Optional[Dict[str, Any]]] = []
        self.responses: Dict[str, Any] = {}
        self.calls: List[Tuple[str, List[Any]]] = []
        self.listeners: Dict[str, List[Callable[[Any], Any]]] = defaultdict(list)
        self.is_metamask = is_metamask
        self.is_fluent = is_fluent

    async def request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        params = list(params or [])
        self.calls.append((method, params))

        if method in self.responses:
            response = self.responses[method]
            if isinstance(response, BaseException):
                raise response
            if callable(response):
                response = response(params)
                if inspect.isawaitable(response):
                    response = await response
            return response

        if method.endswith("_requestAccounts"):
            return list(self.accounts)
        if method.endswith("_chainId"):
            return self.chain_id
        if method.startswith("wallet_switch"):
            self.chain_id = params[0]["chainId"]
            await self.emit("chainChanged", self.chain_id)
            return None
        if method.endswith("_getBalance"):
            return self.balance
        if method in ("eth_blockNumber", "cfx_epochNumber"):
            return self.block_number
        if method.endswith("_getTransactionReceipt"):
            if len(self.receipts) > 1:
                return self.receipts.pop(0)
            return self.receipts[0] if self.receipts else None
        if method.endswith("_sendTransaction"):
            return self.tx_hash
        raise AssertionError(f"Unexpected method {method}")

    def on(self, event: str, handler: Callable[[Any], Any]) -> None:
        self.listeners[event].append(handler)

    def remove_listener(self, event: str, handler: Callable[[Any], Any]) -> None:
        self.listeners[event] = [h for h in self.listeners[event] if h != handler]

    async def emit(self, event: str, payload: Any) -> None:
        for handler in list(self.listeners[event]):
            result = handler(payload)
            if inspect.isawaitable(result):
                await result

    def methods(self) -> List[str]:
        return [method for method, _ in self.calls]

    def count(self, method: str) -> int:
        return self.methods().count(method)


@pytest.fixture
def fake_provider() -> FakeWalletProvider:
    return FakeWalletProvider()


@pytest.fixture
def notifier() -> ChangeNotifier:
    return ChangeNotifier()


@pytest.fixture
def events(notifier: ChangeNotifier) -> List[ChangeEvent]:
    """Every event published on the test notifier, in order."""
    received: List[ChangeEvent] = []
    notifier.subscribe(received.append)
    return received


@pytest.fixture
def registry() -> SpaceRegistry:
    return build_default_registry("mainnet")


@pytest.fixture
def alpha_registry() -> SpaceRegistry:
    """A two-space registry with one wallet in ``alpha`` and one in ``beta``."""
    alpha = Space(name="alpha", label="Alpha", native_symbol="ALP", address_format=AddressFormat.HEX)
    beta = Space(name="beta", label="Beta", native_symbol="BET", address_format=AddressFormat.HEX)
    acme = WalletVariant(
        name="Acme",
        space="alpha",
        discovery_key="ethereum",
        dialect=EVM_DIALECT,
        chain=ChainInfo(chain_id=7, name="Alpha Chain", native_symbol="ALP"),
    )
    zeta = WalletVariant(
        name="Zeta",
        space="beta",
        discovery_key="ethereum",
        dialect=EVM_DIALECT,
        chain=ChainInfo(chain_id=8, name="Beta Chain", native_symbol="BET"),
    )
    return SpaceRegistry([(alpha, [acme]), (beta, [zeta])])


@pytest.fixture
def manager(
    registry: SpaceRegistry,
    fake_provider: FakeWalletProvider,
    notifier: ChangeNotifier,
) -> SessionManager:
    """Manager over the default Conflux registry with MetaMask injected."""
    return SessionManager(
        registry=registry,
        discover=host_discovery({"ethereum": fake_provider}),
        notifier=notifier,
        poll_interval_seconds=0,
        max_receipt_attempts=5,
        request_timeout_seconds=5,
    )


@pytest.fixture
def alpha_manager(
    alpha_registry: SpaceRegistry,
    notifier: ChangeNotifier,
) -> SessionManager:
    """Manager over the alpha registry with a provider on chain 7 holding 0x01."""
    provider = FakeWalletProvider(accounts=["0x01"], chain_id="0x7", balance="0xde0b6b3a7640000")
    return SessionManager(
        registry=alpha_registry,
        discover=host_discovery({"ethereum": provider}),
        notifier=notifier,
        poll_interval_seconds=0,
        max_receipt_attempts=5,
    )
