"""
Transaction helpers: bounded timeouts, error mapping, retries.

Every mutating operation runs inside ``atomic_operation()``. The transaction
is the only concurrency boundary; there are no in-process locks.
"""

import logging
import time
from contextlib import contextmanager

from django.db import DEFAULT_DB_ALIAS, OperationalError, transaction

from stockroom.conf import stockroom_settings
from stockroom.exceptions import StockroomError

logger = logging.getLogger('stockroom')


def _apply_timeout(using: str) -> None:
    """Bound lock waits and statements for the current transaction (PostgreSQL)."""
    timeout = stockroom_settings.TRANSACTION_TIMEOUT_SECONDS
    if not timeout:
        return
    connection = transaction.get_connection(using)
    if connection.vendor != 'postgresql':
        return
    millis = int(timeout * 1000)
    with connection.cursor() as cursor:
        cursor.execute(f"SET LOCAL lock_timeout = {millis}")
        cursor.execute(f"SET LOCAL statement_timeout = {millis}")


@contextmanager
def atomic_operation(using: str = DEFAULT_DB_ALIAS):
    """
    transaction.atomic() with a bounded timeout.

    Raises:
        StockroomError('OPERATION_FAILED'): On timeout, deadlock or other
            transaction-level failure. The transaction is rolled back.
    """
    try:
        with transaction.atomic(using=using):
            _apply_timeout(using)
            yield
    except OperationalError as exc:
        raise StockroomError('OPERATION_FAILED', reason=str(exc)) from exc


def run_with_retry(operation, *, attempts: int | None = None, label: str = 'operation'):
    """
    Run ``operation()`` again when it fails with OPERATION_FAILED.

    Validation errors propagate immediately. Each attempt starts from a fresh
    transaction, so no partial state survives a failed attempt.
    """
    max_attempts = attempts or stockroom_settings.MAX_ATTEMPTS
    backoff = stockroom_settings.RETRY_BACKOFF_SECONDS

    for attempt in range(1, max_attempts + 1):
        try:
            return operation()
        except StockroomError as exc:
            if not exc.is_retryable or attempt == max_attempts:
                raise
            logger.warning(
                "stock.retry",
                extra={
                    "operation": label,
                    "attempt": attempt,
                    "reason": exc.data.get('reason', ''),
                },
            )
            time.sleep(backoff * attempt)
