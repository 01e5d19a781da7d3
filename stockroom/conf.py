"""
Stockroom configuration.

Usage in settings.py:
    STOCKROOM = {
        "TRANSACTION_TIMEOUT_SECONDS": 10,
        "MAX_ATTEMPTS": 3,
        "RETRY_BACKOFF_SECONDS": 0.25,
        "RECONCILIATION_FALLBACK_DEPARTMENT": "central-store",
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class StockroomSettings:
    """Stockroom configuration settings."""

    # Lock/statement timeout for mutating transactions (0 = database default)
    TRANSACTION_TIMEOUT_SECONDS: float = 10

    # Attempts for approve/reject when the transaction fails transiently
    MAX_ATTEMPTS: int = 3

    # Linear backoff between attempts (seconds * attempt number)
    RETRY_BACKOFF_SECONDS: float = 0.25

    # Department code that absorbs unplaced surplus during reconciliation
    RECONCILIATION_FALLBACK_DEPARTMENT: str = ""


def get_stockroom_settings() -> StockroomSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "STOCKROOM", {})
    return StockroomSettings(**{
        k: v for k, v in user_settings.items()
        if k in StockroomSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_stockroom_settings(), name)


stockroom_settings = _LazySettings()
