"""
PUMPBUNDLER Core - Ledger RPC client.
"""

from .client import LedgerClient

__all__ = [
    "LedgerClient",
]
