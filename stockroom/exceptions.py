"""
Exceptions for Stockroom.

All errors are StockroomError with a structured code for programmatic handling.
"""

from decimal import Decimal
from typing import Any


class BaseError(Exception):
    """
    Structured exception carrying a code, a message and context data.

    Subclasses declare ``_default_messages`` so callers only pass the code
    and the context:

        raise SomeError('NOT_FOUND', transfer_id='transfer:12')
    """

    _default_messages: dict[str, str] = {}

    def __init__(self, code: str, message: str | None = None, **data: Any):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(self.message)

    def __str__(self) -> str:
        if not self.data:
            return f"[{self.code}] {self.message}"
        details = ", ".join(f"{k}={v}" for k, v in self.data.items())
        return f"[{self.code}] {self.message} ({details})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code!r}, data={self.data!r})"


# Error kinds: what the caller should do about it.
NOT_FOUND = 'NotFound'
FORBIDDEN = 'Forbidden'
INSUFFICIENT_QUANTITY = 'InsufficientQuantity'
INSUFFICIENT_AVAILABLE = 'InsufficientAvailable'
CONFLICT = 'Conflict'
INVALID_REQUEST = 'InvalidRequest'
OPERATION_FAILED = 'OperationFailed'


class StockroomError(BaseError):
    """
    Structured exception for inventory transfer operations.

    Usage:
        try:
            stockroom.approve(transfer, bar)
        except StockroomError as e:
            if e.code == 'INSUFFICIENT_QUANTITY':
                print(f"Only {e.available} left at the source")
            elif e.is_retryable:
                schedule_retry()

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    _default_messages = {
        'NOT_FOUND': 'Referenced record does not exist',
        'NOT_FOUND_AT_SOURCE': 'Service is not at the expected source location',
        'FORBIDDEN': 'Only the destination department may act on this transfer',
        'INSUFFICIENT_QUANTITY': 'Not enough quantity at the source',
        'INSUFFICIENT_AVAILABLE': 'Requested amount exceeds unreserved quantity',
        'CONFLICT': 'Operation conflicts with current state',
        'ALREADY_PRESENT': 'Service is already present at the destination',
        'ALREADY_PROCESSED': 'Transfer is no longer pending',
        'INVALID_REQUEST': 'Malformed request',
        'INVALID_QUANTITY': 'Invalid quantity (must be positive)',
        'OPERATION_FAILED': 'Transaction failed, safe to retry',
    }

    _kinds = {
        'NOT_FOUND': NOT_FOUND,
        'NOT_FOUND_AT_SOURCE': NOT_FOUND,
        'FORBIDDEN': FORBIDDEN,
        'INSUFFICIENT_QUANTITY': INSUFFICIENT_QUANTITY,
        'INSUFFICIENT_AVAILABLE': INSUFFICIENT_AVAILABLE,
        'CONFLICT': CONFLICT,
        'ALREADY_PRESENT': CONFLICT,
        'ALREADY_PROCESSED': CONFLICT,
        'INVALID_REQUEST': INVALID_REQUEST,
        'INVALID_QUANTITY': INVALID_REQUEST,
        'OPERATION_FAILED': OPERATION_FAILED,
    }

    @property
    def kind(self) -> str:
        """Error family (NotFound, Conflict, ...) for this code. Unmapped codes are never retryable."""
        return self._kinds.get(self.code, INVALID_REQUEST)

    @property
    def is_retryable(self) -> bool:
        """True only for transient transaction failures."""
        return self.kind == OPERATION_FAILED

    @property
    def available(self) -> Decimal:
        """Shortcut for data['available']."""
        return self.data.get('available', Decimal('0'))

    @property
    def requested(self) -> Decimal:
        """Shortcut for data['requested']."""
        return self.data.get('requested', Decimal('0'))

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'kind': self.kind,
            'message': self.message,
            'retryable': self.is_retryable,
            'data': {
                k: str(v) if isinstance(v, Decimal) else v
                for k, v in self.data.items()
            }
        }
