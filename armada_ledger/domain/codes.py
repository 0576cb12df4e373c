"""Sequential code generation for units and transactions"""

import re
from typing import Optional

UNIT_CODE_PATTERN = re.compile(r"UNT-(\d+)")
TRANSACTION_CODE_PATTERN = re.compile(r"TRX-(\d{4})-(\d+)")
TRAILING_NUMBER_PATTERN = re.compile(r"(\d+)$")


def _increment_trailing_number(code: str) -> Optional[str]:
    """'ABC-009' -> 'ABC-010', keeping prefix and zero padding"""
    match = TRAILING_NUMBER_PATTERN.search(code)
    if not match:
        return None
    digits = match.group(1)
    prefix = code[: len(code) - len(digits)]
    return f"{prefix}{str(int(digits) + 1).zfill(len(digits))}"


def next_unit_code(latest: Optional[str]) -> str:
    """
    Next unit code after the highest existing one.

    Examples:
        None      -> UNT-001
        UNT-041   -> UNT-042
        CAR-0099  -> CAR-0100
    """
    if not latest:
        return "UNT-001"

    match = UNIT_CODE_PATTERN.search(latest)
    if match:
        return f"UNT-{str(int(match.group(1)) + 1).zfill(3)}"

    return _increment_trailing_number(latest) or "UNT-001"


def next_transaction_code(latest: Optional[str], year: int) -> str:
    """
    Next transaction code; the TRX-YYYY-NNN sequence restarts every year.

    Examples:
        None, 2025          -> TRX-2025-001
        TRX-2025-007, 2025  -> TRX-2025-008
        TRX-2024-120, 2025  -> TRX-2025-001
    """
    default = f"TRX-{year}-001"
    if not latest:
        return default

    match = TRANSACTION_CODE_PATTERN.search(latest)
    if match:
        if int(match.group(1)) == year:
            return f"TRX-{year}-{str(int(match.group(2)) + 1).zfill(3)}"
        return default

    return _increment_trailing_number(latest) or default
