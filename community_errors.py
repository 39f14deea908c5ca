"""Exception taxonomy for interaction-log community detection.

Recoverable weight problems never surface here: `interaction_records.parse_weight`
absorbs them and substitutes the default weight.
"""

from typing import Any


class CommunityDetectionError(Exception):
    """Base class for errors raised while building or labeling an interaction graph."""


class MalformedRecord(CommunityDetectionError, ValueError):
    """A row lacks the source/target identifier fields.

    Fatal to the whole ingestion call: no partial graph is returned.
    """

    def __init__(self, message: str, row: Any = None, position: int | None = None) -> None:
        super().__init__(message)
        self.row = row
        self.position = position

    def __str__(self) -> str:
        base = super().__str__()
        if self.position is None:
            return base
        return f"{base} (row {self.position}: {self.row!r})"


class PartitionViolation(CommunityDetectionError, RuntimeError):
    """A graph node has no community id in the labeling it is rendered with."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"Node {identifier!r} is missing from the community labeling")
        self.identifier = identifier
