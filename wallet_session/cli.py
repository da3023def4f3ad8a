#!/usr/bin/env python3
"""Command line for driving a wallet session against an HTTP JSON-RPC node"""

import argparse
import asyncio
import sys
from typing import List, Optional, Tuple

from .config import settings
from .core.errors import WalletSessionError
from .core.events import ChangeEvent, ChangeNotifier, ErrorRaised
from .core.registry import SpaceRegistry, build_default_registry
from .core.session import SessionManager
from .logging_config import setup_logging
from .providers import HttpJsonRpcProvider, static_discovery


def print_event(event: ChangeEvent) -> None:
    """Pretty print a change event"""
    if isinstance(event, ErrorRaised):
        print(f"❌ {event.kind}: {event.message}")
        return

    details = {k: v for k, v in event.to_dict().items() if k not in ("type", "timestamp")}
    suffix = " ".join(f"{key}={value}" for key, value in details.items())
    print(f"📣 {event.type.value} {suffix}".rstrip())


def cli_spaces(registry: SpaceRegistry) -> None:
    print("\nSpaces")
    print("=" * 50)
    for space in registry.list_spaces():
        providers = ", ".join(d.name for d in registry.list_providers(space))
        print(f"{space.name:<8} {space.label:<16} {space.native_symbol:<5} [{providers}]")


def cli_providers(registry: SpaceRegistry, space: str) -> None:
    print(f"\nProviders in {space}")
    print("-" * 50)
    for i, descriptor in enumerate(registry.list_providers(space), 1):
        chain = registry.get_variant(space, descriptor.name).chain
        print(f"{i:2d}. {descriptor.name:<10} {chain.name} (chain {chain.chain_id})")


async def open_session(
    registry: SpaceRegistry,
    space: str,
    provider_name: Optional[str],
    rpc_url: Optional[str],
) -> Tuple[SessionManager, HttpJsonRpcProvider, Optional[str]]:
    """Select, connect and return the live session"""
    if not provider_name:
        provider_name = registry.list_providers(space)[0].name

    variant = registry.get_variant(space, provider_name)
    url = rpc_url or settings.rpc_url_for(space) or variant.chain.rpc_url
    provider = HttpJsonRpcProvider(url, timeout_s=settings.request_timeout_seconds)

    notifier = ChangeNotifier()
    notifier.subscribe(print_event)
    manager = SessionManager(
        registry=registry,
        discover=static_discovery(provider),
        notifier=notifier,
    )

    print(f"🔌 Connecting {provider_name} on {space} via {url}...")
    await manager.select_space(space)
    await manager.select_provider(provider_name)
    account = await manager.connect()
    return manager, provider, account


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Wallet session CLI")
    parser.add_argument("--log-level", help="Override LOG_LEVEL")
    parser.add_argument("--log-format", choices=["auto", "json", "console"], help="Override LOG_FORMAT")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("spaces", help="List chain spaces and their providers")

    providers_parser = subparsers.add_parser("providers", help="List providers valid in a space")
    providers_parser.add_argument("space", help="Space name (core, espace)")

    def add_session_args(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("--space", default=settings.default_space or "espace", help="Space name")
        sub.add_argument("--provider", help="Provider name (default: first in space)")
        sub.add_argument("--rpc-url", help="Node RPC URL (default: from settings or chain)")

    add_session_args(subparsers.add_parser("connect", help="Connect and show the session"))
    add_session_args(subparsers.add_parser("balance", help="Show the native balance"))
    add_session_args(subparsers.add_parser("block-number", help="Show the latest block number"))

    send_parser = subparsers.add_parser("send", help="Send native value and wait for the receipt")
    send_parser.add_argument("to", help="Recipient address")
    send_parser.add_argument("amount", help="Amount in whole units, e.g. 0.5")
    add_session_args(send_parser)

    return parser


async def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level, args.log_format)

    if not args.command:
        parser.print_help()
        return 0

    registry = build_default_registry()
    command = args.command.lower()

    try:
        if command == "spaces":
            cli_spaces(registry)
            return 0

        if command == "providers":
            cli_providers(registry, args.space)
            return 0

        manager, provider, account = await open_session(
            registry, args.space, args.provider, args.rpc_url
        )
    except WalletSessionError as e:
        print(f"❌ {e.kind}: {e.message}")
        return 2

    try:
        if account is None:
            return 1

        if command == "connect":
            chain = manager.get_chain_info()
            print(f"\nAccount: {account}")
            print(f"Chain:   {chain.name} ({manager.get_chain_id()})")
            return 0

        if command == "balance":
            balance = await manager.get_balance()
            if balance is None:
                return 1
            print(f"💰 {balance} {manager.session.space.native_symbol}")
            return 0

        if command == "block-number":
            block_number = await manager.get_block_number()
            return 0 if block_number is not None else 1

        if command == "send":
            tx_hash = await manager.send_transaction(args.to, args.amount)
            if tx_hash is None:
                return 1
            print(f"✅ Confirmed {tx_hash}")
            return 0

        print(f"❌ Unknown command: {command}")
        parser.print_help()
        return 2
    finally:
        await manager.disconnect()
        await provider.aclose()


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
