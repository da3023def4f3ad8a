"""
Tests for the command line
"""

import json

import httpx
import pytest

from conftest import CAFE
from wallet_session import cli
from wallet_session.providers import HttpJsonRpcProvider


NODE_RESULTS = {
    "eth_accounts": [CAFE],
    "eth_chainId": "0x406",
    "eth_getBalance": "0x14d1120d7b160000",
    "eth_blockNumber": "0x64",
}


def node_handler(request: httpx.Request) -> httpx.Response:
    body = json.loads(request.content)
    return httpx.Response(
        200, json={"jsonrpc": "2.0", "id": body["id"], "result": NODE_RESULTS[body["method"]]}
    )


@pytest.fixture(autouse=True)
def quiet_cli(monkeypatch):
    """Keep the CLI off the root logger and on the mainnet registry."""
    monkeypatch.setattr(cli, "setup_logging", lambda *args, **kwargs: None)
    monkeypatch.setattr(cli.settings, "network", "mainnet")


@pytest.fixture
def mock_node(monkeypatch):
    urls = []

    def make_provider(url, timeout_s=None):
        urls.append(url)
        client = httpx.AsyncClient(transport=httpx.MockTransport(node_handler))
        return HttpJsonRpcProvider(url, client=client)

    monkeypatch.setattr(cli, "HttpJsonRpcProvider", make_provider)
    return urls


class TestListing:
    """Tests for the registry listing commands."""

    @pytest.mark.asyncio
    async def test_spaces(self, capsys):
        assert await cli.main(["spaces"]) == 0

        output = capsys.readouterr().out
        assert "Conflux Core" in output
        assert "[MetaMask, Fluent]" in output

    @pytest.mark.asyncio
    async def test_providers(self, capsys):
        assert await cli.main(["providers", "core"]) == 0

        output = capsys.readouterr().out
        assert "Fluent" in output
        assert "chain 1029" in output

    @pytest.mark.asyncio
    async def test_unknown_space(self, capsys):
        assert await cli.main(["providers", "bitcoin"]) == 2

        assert "InvalidSpace" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_no_command(self, capsys):
        assert await cli.main([]) == 0

        assert "usage" in capsys.readouterr().out


class TestSessionCommands:
    """Tests for commands that open a session against a node."""

    @pytest.mark.asyncio
    async def test_balance(self, capsys, mock_node):
        code = await cli.main(["balance", "--space", "espace", "--rpc-url", "http://node.test"])

        output = capsys.readouterr().out
        assert code == 0
        assert mock_node == ["http://node.test"]
        assert "💰 1.5 CFX" in output
        assert "connection_established" in output

    @pytest.mark.asyncio
    async def test_connect_uses_chain_rpc_by_default(self, capsys, mock_node, monkeypatch):
        monkeypatch.setattr(cli.settings, "espace_rpc_url", "")

        code = await cli.main(["connect", "--space", "espace"])

        assert code == 0
        assert mock_node == ["https://evm.confluxrpc.com"]
        assert CAFE in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_block_number(self, capsys, mock_node):
        code = await cli.main(["block-number", "--space", "espace", "--rpc-url", "http://node.test"])

        assert code == 0
        assert "block_number=100" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_unknown_provider(self, capsys, mock_node):
        code = await cli.main(["connect", "--space", "espace", "--provider", "Acme"])

        assert code == 2
        assert "InvalidProvider" in capsys.readouterr().out
