#!/usr/bin/env python3
"""
PUMPBUNDLER - Relay Broadcaster Tests

Fan-out, per-endpoint failure capture, aggregation and bundle status.

Run with: pytest tests/test_relay.py -v
"""

import asyncio
import time

import aiohttp
import pytest

from conftest import ENDPOINTS, FakeSession, ok_route
from pumpbundler.config import DEFAULT_BLOCK_ENGINE_URL, bundle_endpoint
from pumpbundler.protocol.relay import (
    BroadcastReport,
    EndpointOutcome,
    RelayBroadcaster,
    send_bundle_payload,
)

SERIALIZED = ["feeTxBase58", "sellTxBase58"]


def _relay(bundler_config, logger, routes) -> tuple[RelayBroadcaster, FakeSession]:
    relay = RelayBroadcaster(bundler_config, logger)
    session = FakeSession(routes)
    relay.session = session
    return relay, session


class TestPayload:
    def test_send_bundle_envelope(self):
        assert send_bundle_payload(SERIALIZED) == {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "sendBundle",
            "params": [SERIALIZED],
        }

    def test_bundle_endpoint_regions(self):
        assert bundle_endpoint("ny") == "https://ny.mainnet.block-engine.jito.wtf/api/v1/bundles"
        assert bundle_endpoint("nowhere") == bundle_endpoint("mainnet")

    def test_default_endpoint_is_ny_region(self):
        assert DEFAULT_BLOCK_ENGINE_URL == bundle_endpoint("ny")


class TestAggregation:
    def test_report_accepted_with_one_success(self):
        report = BroadcastReport(
            outcomes=[
                EndpointOutcome(url="a", error="HTTP 500"),
                EndpointOutcome(url="b", bundle_id="id-b"),
            ]
        )
        assert report.accepted is True
        assert report.bundle_id == "id-b"
        assert len(report.failures) == 1

    def test_empty_report_not_accepted(self):
        report = BroadcastReport()
        assert report.accepted is False
        assert report.bundle_id is None


class TestBroadcast:
    @pytest.mark.asyncio
    async def test_posts_same_payload_to_every_endpoint(self, bundler_config, logger):
        relay, session = _relay(
            bundler_config, logger, {url: ok_route(f"id-{i}") for i, url in enumerate(ENDPOINTS)}
        )

        report = await relay.broadcast(SERIALIZED)

        assert sorted(url for url, _ in session.calls) == sorted(ENDPOINTS)
        assert all(body == send_bundle_payload(SERIALIZED) for _, body in session.calls)
        assert report.accepted is True
        assert report.bundle_id in {"id-0", "id-1", "id-2"}

    @pytest.mark.asyncio
    async def test_partial_failure_is_captured(self, bundler_config, logger):
        routes = {
            ENDPOINTS[0]: {"raise": aiohttp.ClientConnectionError("connection refused")},
            ENDPOINTS[1]: {"status": 503, "payload": None},
            ENDPOINTS[2]: ok_route("landed-id"),
        }
        relay, _ = _relay(bundler_config, logger, routes)

        report = await relay.broadcast(SERIALIZED)

        assert report.accepted is True
        assert report.bundle_id == "landed-id"
        errors = {o.url: o.error for o in report.failures}
        assert "connection refused" in errors[ENDPOINTS[0]]
        assert errors[ENDPOINTS[1]] == "HTTP 503"

    @pytest.mark.asyncio
    async def test_accepted_status_202_counts_as_success(self, bundler_config, logger):
        routes = {
            url: {"status": 202, "payload": {"jsonrpc": "2.0", "id": 1, "result": f"id-{i}"}}
            for i, url in enumerate(ENDPOINTS)
        }
        relay, _ = _relay(bundler_config, logger, routes)

        report = await relay.broadcast(SERIALIZED)

        assert report.accepted is True
        assert report.bundle_id in {"id-0", "id-1", "id-2"}
        assert all(o.status == 202 for o in report.outcomes)

    @pytest.mark.asyncio
    async def test_json_rpc_error_field(self, bundler_config, logger):
        routes = {
            url: {"payload": {"jsonrpc": "2.0", "id": 1, "error": {"code": -32602, "message": "bundle contains an expired blockhash"}}}
            for url in ENDPOINTS
        }
        relay, _ = _relay(bundler_config, logger, routes)

        report = await relay.broadcast(SERIALIZED)

        assert report.accepted is False
        assert report.bundle_id is None
        assert all(o.error == "bundle contains an expired blockhash" for o in report.outcomes)

    @pytest.mark.asyncio
    async def test_timeouts_never_raise(self, bundler_config, logger):
        routes = {url: {"raise": asyncio.TimeoutError()} for url in ENDPOINTS}
        relay, _ = _relay(bundler_config, logger, routes)

        report = await relay.broadcast(SERIALIZED)

        assert report.accepted is False
        assert all(o.error.startswith("Timeout") for o in report.outcomes)

    @pytest.mark.asyncio
    async def test_missing_result_is_failure(self, bundler_config, logger):
        routes = {url: {"payload": {"jsonrpc": "2.0", "id": 1}} for url in ENDPOINTS}
        relay, _ = _relay(bundler_config, logger, routes)

        report = await relay.broadcast(SERIALIZED)
        assert report.accepted is False

    @pytest.mark.asyncio
    async def test_fan_out_is_concurrent(self, bundler_config, logger):
        """Latency tracks the slowest endpoint, not the sum of all of them."""
        delays = [0.3, 0.2, 0.1]
        routes = {url: ok_route(f"id-{i}", delay=d) for i, (url, d) in enumerate(zip(ENDPOINTS, delays))}
        relay, _ = _relay(bundler_config, logger, routes)

        started = time.monotonic()
        report = await relay.broadcast(SERIALIZED)
        elapsed = time.monotonic() - started

        assert report.accepted is True
        assert len(report.outcomes) == 3
        assert elapsed < sum(delays) - 0.1
        assert elapsed >= max(delays) - 0.05

    @pytest.mark.asyncio
    async def test_slow_failure_does_not_cancel_success(self, bundler_config, logger):
        routes = {
            ENDPOINTS[0]: {"delay": 0.05, "raise": aiohttp.ClientError("boom")},
            ENDPOINTS[1]: ok_route("id-late", delay=0.15),
            ENDPOINTS[2]: {"delay": 0.1, "status": 429, "payload": None},
        }
        relay, _ = _relay(bundler_config, logger, routes)

        report = await relay.broadcast(SERIALIZED)

        assert len(report.outcomes) == 3
        assert report.bundle_id == "id-late"

    @pytest.mark.asyncio
    async def test_close_releases_session(self, bundler_config, logger):
        relay, session = _relay(bundler_config, logger, {})
        await relay.close()
        assert session.closed is True
        assert relay.session is None


class TestBundleStatus:
    @pytest.mark.asyncio
    async def test_landed_status(self, bundler_config, logger):
        payload = {
            "jsonrpc": "2.0",
            "result": {
                "value": [
                    {
                        "bundle_id": "abc",
                        "confirmation_status": "confirmed",
                        "slot": 242_806_119,
                        "err": {"Ok": None},
                        "transactions": ["sig1", "sig2"],
                    }
                ]
            },
            "id": 1,
        }
        relay, session = _relay(bundler_config, logger, {ENDPOINTS[0]: {"payload": payload}})

        status = await relay.get_bundle_status("abc")

        assert status["status"] == "confirmed"
        assert status["slot"] == 242_806_119
        assert status["transactions"] == ["sig1", "sig2"]
        assert session.calls[0][1]["method"] == "getBundleStatuses"

    @pytest.mark.asyncio
    async def test_unknown_bundle(self, bundler_config, logger):
        payload = {"jsonrpc": "2.0", "result": {"value": []}, "id": 1}
        relay, _ = _relay(bundler_config, logger, {ENDPOINTS[0]: {"payload": payload}})

        status = await relay.get_bundle_status("missing")
        assert status == {"bundle_id": "missing", "status": "not_found"}

    @pytest.mark.asyncio
    async def test_status_error_never_raises(self, bundler_config, logger):
        routes = {ENDPOINTS[0]: {"raise": aiohttp.ClientError("down")}}
        relay, _ = _relay(bundler_config, logger, routes)

        status = await relay.get_bundle_status("abc")
        assert status["status"] == "unknown"
