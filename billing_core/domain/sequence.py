"""Record number assignment: PREFIX-YYYYMMDD-NNNN"""

from datetime import date
from typing import Iterable
from billing_core.domain.exceptions import SequenceExhaustedError

MAX_SEQUENCE = 9999


def assign_next_number(prefix: str, existing_numbers: Iterable[str], on_date: date) -> str:
    """
    First unused number for this prefix and date, starting at 0001.

    Only numbers with the exact same prefix and date count as taken, so
    JO-20240105-0001 and INV-20240105-0001 can coexist. Gaps left by
    deleted records are reused.

    Example:
        assign_next_number("JO", ["JO-20240105-0001"], date(2024, 1, 5))
        -> "JO-20240105-0002"
    """
    stem = f"{prefix}-{on_date:%Y%m%d}-"
    taken = {number for number in existing_numbers if number.startswith(stem)}

    for sequence in range(1, MAX_SEQUENCE + 1):
        candidate = f"{stem}{sequence:04d}"
        if candidate not in taken:
            return candidate

    raise SequenceExhaustedError(f"No sequence numbers left for {stem}NNNN")
