import logging
from collections.abc import Sequence
from typing import Any, NamedTuple

from community_config import DEFAULT_EDGE_WEIGHT, MAX_EDGE_WEIGHT, RECORD_FIELD_COUNT
from community_errors import MalformedRecord

logger = logging.getLogger(__name__)

RawRow = Sequence[Any]


class EdgeRecord(NamedTuple):
    """One validated interaction: `source` -> `target` with a positive integer weight."""

    source: str
    target: str
    weight: int


def parse_weight(raw_weight: Any, default: int = DEFAULT_EDGE_WEIGHT) -> int:
    """Parses a weight field as an unsigned integer >= 1.

    Anything else (empty, non-numeric, padded with whitespace, zero, negative,
    or larger than an unsigned 32-bit value) falls back to `default`.

    Args:
        raw_weight: The textual weight field. Integers are accepted as-is.
        default: Weight substituted when the field cannot be used.

    Returns:
        The parsed weight or `default`.
    """
    if isinstance(raw_weight, bool) or raw_weight is None:
        return default
    if isinstance(raw_weight, int):
        value = raw_weight
    else:
        text = str(raw_weight)
        digits = text[1:] if text.startswith("+") else text
        if not digits or not digits.isascii() or not digits.isdigit():
            return default
        value = int(digits)
    if value < 1 or value > MAX_EDGE_WEIGHT:
        return default
    return value


def _identifier(value: Any) -> str | None:
    if value is None:
        return None
    text = value if isinstance(value, str) else str(value)
    return text or None


def parse_record(row: RawRow, position: int | None = None) -> EdgeRecord:
    """Turns one raw row `(source, target, weight)` into an `EdgeRecord`.

    Raises:
        MalformedRecord: If the row does not have exactly three fields or an
            identifier field is missing or empty.
    """
    if isinstance(row, str | bytes) or not isinstance(row, Sequence):
        raise MalformedRecord("Row is not a sequence of fields", row=row, position=position)
    if len(row) != RECORD_FIELD_COUNT:
        raise MalformedRecord(
            f"Expected {RECORD_FIELD_COUNT} fields, got {len(row)}", row=row, position=position
        )

    source = _identifier(row[0])
    target = _identifier(row[1])
    if source is None or target is None:
        raise MalformedRecord("Missing source or target identifier", row=row, position=position)

    return EdgeRecord(source, target, parse_weight(row[2]))
