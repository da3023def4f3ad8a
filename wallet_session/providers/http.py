"""
HTTP JSON-RPC provider.

Speaks the injected provider surface (``request`` / ``on`` /
``remove_listener``) against a node over HTTP, so sessions can run headless
against a node that manages its own accounts (dev nodes, local signers).
"""

from __future__ import annotations

import inspect
import itertools
import logging
from typing import Any, Callable, Dict, List, Optional

import httpx

from .base import ProviderRpcError

logger = logging.getLogger(__name__)

# Wallet-only methods translated to their node equivalents
_NODE_METHODS = {
    "eth_requestAccounts": "eth_accounts",
    "cfx_requestAccounts": "cfx_accounts",
}

# Nodes serve exactly one chain; switching is a no-op when it already matches
_SWITCH_METHODS = {
    "wallet_switchEthereumChain": "eth_chainId",
    "wallet_switchConfluxChain": "cfx_chainId",
}

INTERNAL_ERROR = -32603


class HttpJsonRpcProvider:
    """Provider handle backed by an HTTP JSON-RPC endpoint."""

    name = "http"
    timeout_s = 20

    def __init__(
        self,
        rpc_url: str,
        timeout_s: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
        is_metamask: bool = False,
        is_fluent: bool = False,
    ):
        self.rpc_url = rpc_url
        if timeout_s is not None:
            self.timeout_s = timeout_s
        self._client = client
        self._ids = itertools.count(1)
        self._listeners: Dict[str, List[Callable[[Any], Any]]] = {}
        self.is_metamask = is_metamask
        self.is_fluent = is_fluent

    async def request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        params = list(params or [])

        if method in _SWITCH_METHODS:
            return await self._switch_chain(method, params)

        return await self._rpc_call(_NODE_METHODS.get(method, method), params)

    async def _switch_chain(self, method: str, params: List[Any]) -> None:
        requested = (params[0] or {}).get("chainId") if params else None
        current = await self._rpc_call(_SWITCH_METHODS[method], [])
        if requested is None or int(str(requested), 0) != int(str(current), 0):
            raise ProviderRpcError(
                4902,
                f"Node at {self.rpc_url} serves chain {current}, cannot switch to {requested}",
            )
        return None

    async def _rpc_call(self, method: str, params: List[Any]) -> Any:
        if not self._client or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout_s)

        try:
            response = await self._client.post(
                self.rpc_url,
                json={"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ProviderRpcError(INTERNAL_ERROR, f"{method} failed: {e}") from e

        payload = response.json()
        if payload.get("error"):
            error = payload["error"]
            raise ProviderRpcError(
                error.get("code", INTERNAL_ERROR),
                error.get("message", "Unknown RPC error"),
                error.get("data"),
            )
        return payload.get("result")

    def on(self, event: str, handler: Callable[[Any], Any]) -> None:
        self._listeners.setdefault(event, []).append(handler)

    def remove_listener(self, event: str, handler: Callable[[Any], Any]) -> None:
        handlers = self._listeners.get(event, [])
        self._listeners[event] = [h for h in handlers if h != handler]

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    async def emit(self, event: str, payload: Any) -> None:
        """Deliver an event to listeners; nodes have no push channel of their own."""
        for handler in list(self._listeners.get(event, [])):
            result = handler(payload)
            if inspect.isawaitable(result):
                await result

    async def aclose(self) -> None:
        """Close HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
