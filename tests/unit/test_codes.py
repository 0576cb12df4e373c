"""Unit tests for unit/transaction code sequencing"""

from armada_ledger.domain.codes import next_transaction_code, next_unit_code


def test_next_unit_code_first():
    assert next_unit_code(None) == "UNT-001"


def test_next_unit_code_increments():
    assert next_unit_code("UNT-041") == "UNT-042"
    assert next_unit_code("UNT-999") == "UNT-1000"


def test_next_unit_code_other_format_keeps_prefix_and_width():
    assert next_unit_code("CAR-0099") == "CAR-0100"


def test_next_unit_code_unrecognized_falls_back():
    assert next_unit_code("ABC") == "UNT-001"


def test_next_transaction_code_same_year():
    assert next_transaction_code("TRX-2025-007", 2025) == "TRX-2025-008"


def test_next_transaction_code_restarts_each_year():
    """Sequence resets when the year changes"""
    assert next_transaction_code("TRX-2024-120", 2025) == "TRX-2025-001"
    assert next_transaction_code(None, 2025) == "TRX-2025-001"


def test_next_transaction_code_trailing_number():
    assert next_transaction_code("SALE-09", 2025) == "SALE-10"
