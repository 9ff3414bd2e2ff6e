"""
PUMPBUNDLER Test Suite - Shared Fixtures
"""

import asyncio
from types import SimpleNamespace

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer
from solders.transaction import VersionedTransaction

from pumpbundler.config import BundlerConfig
from pumpbundler.logger import BundlerLogger

ENDPOINTS = [
    "https://ny.relay.test/api/v1/bundles",
    "https://amsterdam.relay.test/api/v1/bundles",
    "https://tokyo.relay.test/api/v1/bundles",
]


def make_signed_tx(payer: Keypair, lamports: int = 1_000) -> VersionedTransaction:
    """A small signed v0 transfer standing in for a caller's sell transaction."""
    ix = transfer(
        TransferParams(from_pubkey=payer.pubkey(), to_pubkey=Pubkey.new_unique(), lamports=lamports)
    )
    message = MessageV0.try_compile(payer.pubkey(), [ix], [], Hash.new_unique())
    return VersionedTransaction(message, [payer])


def make_blockhash(height: int = 1_000) -> SimpleNamespace:
    return SimpleNamespace(blockhash=Hash.new_unique(), last_valid_block_height=height)


class FakeResponse:
    def __init__(self, status: int = 200, payload=None):
        self.status = status
        self._payload = payload

    async def json(self):
        return self._payload


class FakeRequest:
    """Async context manager returned by FakeSession.post."""

    def __init__(self, route: dict):
        self.route = route

    async def __aenter__(self):
        await asyncio.sleep(self.route.get("delay", 0))
        if "raise" in self.route:
            raise self.route["raise"]
        return FakeResponse(self.route.get("status", 200), self.route.get("payload"))

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Just enough of aiohttp.ClientSession for the broadcaster."""

    def __init__(self, routes: dict):
        self.routes = routes
        self.calls = []
        self.closed = False

    def post(self, url, json=None):
        self.calls.append((url, json))
        return FakeRequest(self.routes[url])

    async def close(self):
        self.closed = True


def ok_route(bundle_id: str, delay: float = 0.0) -> dict:
    return {"delay": delay, "payload": {"jsonrpc": "2.0", "id": 1, "result": bundle_id}}


@pytest.fixture
def bundler_config():
    """Configuration with fake relays and no log file."""
    return BundlerConfig(
        rpc_url="https://rpc.test",
        block_engine_urls=list(ENDPOINTS),
        jito_fee_lamports=1_000_000,
        log_file="",
    )


@pytest.fixture
def logger(bundler_config):
    """Logger instance for tests."""
    return BundlerLogger(bundler_config)


@pytest.fixture
def payer():
    return Keypair()
