"""
Tests for StockroomError.
"""

from decimal import Decimal

import pytest

from stockroom import StockroomError


class TestStockroomError:

    @pytest.mark.parametrize('code,kind', [
        ('NOT_FOUND', 'NotFound'),
        ('NOT_FOUND_AT_SOURCE', 'NotFound'),
        ('FORBIDDEN', 'Forbidden'),
        ('ALREADY_PRESENT', 'Conflict'),
        ('ALREADY_PROCESSED', 'Conflict'),
        ('INVALID_QUANTITY', 'InvalidRequest'),
        ('OPERATION_FAILED', 'OperationFailed'),
    ])
    def test_kind(self, code, kind):
        assert StockroomError(code).kind == kind

    def test_only_operation_failed_is_retryable(self):
        assert StockroomError('OPERATION_FAILED').is_retryable
        assert not StockroomError('INSUFFICIENT_QUANTITY').is_retryable

    def test_unknown_code_is_not_retryable(self):
        error = StockroomError('TYPO_CODE')

        assert error.kind == 'InvalidRequest'
        assert not error.is_retryable

    def test_default_message(self):
        error = StockroomError('FORBIDDEN', transfer_id='transfer:1')

        assert 'destination department' in error.message
        assert str(error).startswith('[FORBIDDEN]')
        assert 'transfer_id=transfer:1' in str(error)

    def test_as_dict_serializes_decimals(self):
        error = StockroomError(
            'INSUFFICIENT_QUANTITY', available=Decimal('5.000'), requested=Decimal('8'),
        )

        assert error.as_dict() == {
            'code': 'INSUFFICIENT_QUANTITY',
            'kind': 'InsufficientQuantity',
            'message': 'Not enough quantity at the source',
            'retryable': False,
            'data': {'available': '5.000', 'requested': '8'},
        }
