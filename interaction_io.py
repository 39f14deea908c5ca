# ruff: noqa: E501
import logging
import os
from collections.abc import Iterable

import polars as pl

from community_config import RECORD_FIELD_COUNT
from community_errors import MalformedRecord

logger = logging.getLogger(__name__)

InteractionRow = tuple[str | None, str | None, str | None]
LOG_SCHEMA: list[tuple[str, type[pl.DataType]]] = [
    ("source", pl.String),
    ("target", pl.String),
    ("weight", pl.Int64),
]


def write_interaction_log(interactions: Iterable[tuple[str, str, int]], file_path: str) -> int:
    """Writes interactions as header-less `source,target,weight` lines.

    Args:
        interactions: `(source, target, weight)` triples.
        file_path: Destination path; parent directories are created.

    Returns:
        The number of rows written.
    """
    df = pl.DataFrame(list(interactions), schema=LOG_SCHEMA, orient="row")
    parent = os.path.dirname(file_path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    df.write_csv(file_path, include_header=False)
    logger.info(f"Wrote {df.height} interactions to {file_path}.")
    return df.height


def read_interaction_log(file_path: str) -> list[InteractionRow]:
    """Reads a header-less interaction log into raw text rows.

    Every field is kept as text (or None when empty); validation is left to
    `interaction_records.parse_record`.

    Raises:
        FileNotFoundError: If `file_path` does not exist.
        MalformedRecord: If the file does not have exactly three columns.
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Interaction log not found: {file_path}")
    if os.path.getsize(file_path) == 0:
        logger.warning(f"Interaction log {file_path} is empty.")
        return []

    try:
        df = pl.read_csv(file_path, has_header=False, infer_schema_length=0)
    except pl.exceptions.NoDataError:
        logger.warning(f"Interaction log {file_path} has no rows.")
        return []
    except pl.exceptions.ComputeError as e:
        raise MalformedRecord(f"Could not parse interaction log {file_path}: {e}") from e

    if df.width != RECORD_FIELD_COUNT:
        raise MalformedRecord(
            f"Interaction log {file_path} has {df.width} columns, expected {RECORD_FIELD_COUNT}"
        )

    logger.info(f"Read {df.height} interactions from {file_path}.")
    return df.rows()
