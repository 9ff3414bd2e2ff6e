#!/usr/bin/env python3
"""
PUMPBUNDLER - Logging

Human-readable lines for the terminal, structured fields for whoever
consumes the records (every event carries `event` and `fields` extras).
"""

import logging
from logging.handlers import RotatingFileHandler

from .config import LAMPORTS_PER_SOL, BundlerConfig


class BundlerLogger:
    """
    Thin wrapper over the "PUMPBUNDLER" logger with bundle lifecycle events.
    """

    def __init__(self, config: BundlerConfig):
        self.logger = logging.getLogger("PUMPBUNDLER")
        level = logging.getLevelName(config.log_level.upper())
        # Unknown names come back as "Level X"; validate() reports those
        self.logger.setLevel(level if isinstance(level, int) else logging.INFO)

        # logging.getLogger returns the same instance; only attach handlers once
        if not self.logger.handlers:
            console = logging.StreamHandler()
            console.setFormatter(logging.Formatter(
                '%(asctime)s | %(levelname)8s | %(message)s',
                datefmt='%H:%M:%S'
            ))
            self.logger.addHandler(console)

            if config.log_file:
                file_handler = RotatingFileHandler(
                    config.log_file,
                    maxBytes=10_000_000,  # 10MB
                    backupCount=5
                )
                file_handler.setFormatter(logging.Formatter(
                    '%(asctime)s | %(levelname)8s | %(name)s | %(message)s'
                ))
                self.logger.addHandler(file_handler)

    def event(self, name: str, level: int = logging.INFO, **fields):
        """Emit a structured event: `name | key=value ...`."""
        rendered = " ".join(f"{key}={value}" for key, value in fields.items())
        message = f"{name} | {rendered}" if rendered else name
        self.logger.log(level, message, extra={"event": name, "fields": fields})

    def tip_paid(self, tip_account: str, lamports: int, tx_count: int):
        self.event(
            "bundle.tip",
            tip_account=tip_account,
            tip_sol=f"{lamports / LAMPORTS_PER_SOL:.6f}",
            tx_count=tx_count,
        )

    def simulation_result(self, index: int, signature: str, ok: bool, detail: str | None = None):
        """Simulation is diagnostic; failures are warnings, never errors."""
        self.event(
            "bundle.simulation",
            level=logging.INFO if ok else logging.WARNING,
            index=index,
            signature=signature,
            ok=ok,
            detail=detail,
        )

    def endpoint_outcome(self, url: str, bundle_id: str | None, error: str | None, elapsed: float):
        self.event(
            "relay.outcome",
            level=logging.INFO if error is None else logging.WARNING,
            url=url,
            bundle_id=bundle_id,
            error=error,
            elapsed=f"{elapsed:.3f}s",
        )

    def bundle_confirmation(self, signature: str, bundle_id: str | None, confirmed: bool):
        self.event(
            "bundle.confirmation",
            level=logging.INFO if confirmed else logging.WARNING,
            signature=signature,
            bundle_id=bundle_id,
            confirmed=confirmed,
        )

    def error(self, context: str, error: Exception):
        self.logger.error(f"{context}: {str(error)}")

    def info(self, message: str):
        self.logger.info(message)

    def warning(self, message: str):
        self.logger.warning(message)

    def debug(self, message: str):
        self.logger.debug(message)
