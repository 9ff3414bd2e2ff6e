#!/usr/bin/env python3
"""
PUMPBUNDLER - Relay Broadcasting

Fans a serialized bundle out to every configured Jito block engine at once.
Partial failure is the normal case: one accepting endpoint is enough.
Any 2xx response carrying a `result` counts as acceptance.
"""

import asyncio
import time
from dataclasses import dataclass, field

import aiohttp

from pumpbundler.config import BundlerConfig
from pumpbundler.logger import BundlerLogger


def send_bundle_payload(serialized: list[str]) -> dict:
    return {
        "jsonrpc": "2.0",
        "id": 1,
        "method": "sendBundle",
        "params": [serialized],
    }


@dataclass
class EndpointOutcome:
    """What one block engine said about the bundle."""

    url: str
    bundle_id: str | None = None
    error: str | None = None
    status: int | None = None
    elapsed_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None and self.bundle_id is not None


@dataclass
class BroadcastReport:
    """Aggregate of every endpoint's outcome."""

    outcomes: list[EndpointOutcome] = field(default_factory=list)

    @property
    def successes(self) -> list[EndpointOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failures(self) -> list[EndpointOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def accepted(self) -> bool:
        return bool(self.successes)

    @property
    def bundle_id(self) -> str | None:
        # Relay ids are advisory; any accepting endpoint's id will do
        successes = self.successes
        return successes[-1].bundle_id if successes else None


class RelayBroadcaster:
    """
    Concurrent sendBundle client for one or more block engines.
    """

    def __init__(self, config: BundlerConfig, logger: BundlerLogger):
        self.config = config
        self.logger = logger
        self.endpoints = list(config.block_engine_urls)
        self.timeout = config.relay_timeout_seconds
        self.session: aiohttp.ClientSession | None = None

    async def initialize(self):
        """Initialize HTTP session."""
        if not self.session:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )

    async def close(self):
        """Close HTTP session."""
        if self.session:
            await self.session.close()
            self.session = None

    async def _send(self, url: str, payload: dict) -> EndpointOutcome:
        """POST to one endpoint. Every failure is captured, nothing escapes."""
        outcome = EndpointOutcome(url=url)
        started = time.monotonic()

        try:
            async with self.session.post(url, json=payload) as response:
                outcome.status = response.status
                if not 200 <= response.status < 300:
                    outcome.error = f"HTTP {response.status}"
                else:
                    data = await response.json()
                    if data.get("error"):
                        error = data["error"]
                        outcome.error = (
                            error.get("message", str(error)) if isinstance(error, dict) else str(error)
                        )
                    elif data.get("result"):
                        outcome.bundle_id = str(data["result"])
                    else:
                        outcome.error = "Response carried no result"
        except asyncio.TimeoutError:
            outcome.error = f"Timeout after {self.timeout}s"
        except Exception as e:
            outcome.error = str(e) or type(e).__name__

        outcome.elapsed_seconds = time.monotonic() - started
        self.logger.endpoint_outcome(url, outcome.bundle_id, outcome.error, outcome.elapsed_seconds)
        return outcome

    async def broadcast(self, serialized: list[str]) -> BroadcastReport:
        """
        Send the bundle to every endpoint concurrently and wait for all of them.

        Args:
            serialized: Base58 transactions, fee transaction first

        Returns:
            BroadcastReport; `accepted` is True if any endpoint took the bundle
        """
        if not self.session:
            await self.initialize()

        payload = send_bundle_payload(serialized)
        self.logger.info(
            f"Sending bundle of {len(serialized)} txs to {len(self.endpoints)} endpoint(s)"
        )

        outcomes = await asyncio.gather(*(self._send(url, payload) for url in self.endpoints))
        report = BroadcastReport(outcomes=list(outcomes))

        if not report.accepted:
            self.logger.warning("No successful responses received from any block engine")
        return report

    async def get_bundle_status(self, bundle_id: str, url: str | None = None) -> dict:
        """
        Check the status of a submitted bundle.

        Args:
            bundle_id: Bundle ID returned from broadcast
            url: Block engine to ask (defaults to the first configured)

        Returns:
            Status dictionary with landing information
        """
        if not self.session:
            await self.initialize()

        url = url or self.endpoints[0]
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "getBundleStatuses",
            "params": [[bundle_id]],
        }

        try:
            async with self.session.post(url, json=payload) as response:
                if 200 <= response.status < 300:
                    data = await response.json()

                    result = data.get("result") or {}
                    if result.get("value"):
                        bundle_status = result["value"][0]
                        return {
                            "bundle_id": bundle_id,
                            "status": bundle_status.get("confirmation_status"),
                            "slot": bundle_status.get("slot"),
                            "err": bundle_status.get("err"),
                            "transactions": bundle_status.get("transactions", []),
                        }
        except Exception as e:
            return {"bundle_id": bundle_id, "status": "unknown", "error": str(e)}

        return {"bundle_id": bundle_id, "status": "not_found"}
