# ruff: noqa: E501
import logging
import threading
import time
from collections.abc import Iterable, Iterator, Mapping
from concurrent.futures import ThreadPoolExecutor, as_completed
from itertools import islice
from types import MappingProxyType

import networkx as nx
import rustworkx as rx

from community_config import ROWS_PER_TASK, default_max_workers
from community_errors import MalformedRecord
from interaction_records import EdgeRecord, RawRow, parse_record

logger = logging.getLogger(__name__)

WeightedEdge = tuple[str, str, int]


class InteractionGraph:
    """Weighted directed interaction graph with an identifier registry.

    Nodes are actor identifiers stored as `rustworkx.PyDiGraph` node payloads;
    the registry maps each identifier to its node index (assigned densely in
    first-seen order). At most one edge exists per ordered (source, target)
    pair and its payload is the accumulated integer weight.

    Mutation goes through `add_record`, which performs the registry lookup or
    insert and the edge upsert under one lock. Once `freeze` has been called
    the graph is read-only.
    """

    def __init__(self) -> None:
        self._graph: rx.PyDiGraph = rx.PyDiGraph(multigraph=False)
        self._registry: dict[str, int] = {}
        self._lock = threading.Lock()
        self._frozen = False

    def _node_index_locked(self, identifier: str) -> int:
        node_idx = self._registry.get(identifier)
        if node_idx is None:
            node_idx = self._graph.add_node(identifier)
            self._registry[identifier] = node_idx
        return node_idx

    def add_record(self, record: EdgeRecord) -> None:
        """Registers both endpoints and adds `record.weight` to the edge's weight."""
        with self._lock:
            if self._frozen:
                raise RuntimeError("InteractionGraph is frozen; construction has completed")
            source_idx = self._node_index_locked(record.source)
            target_idx = self._node_index_locked(record.target)
            if self._graph.has_edge(source_idx, target_idx):
                current: int = self._graph.get_edge_data(source_idx, target_idx)
                self._graph.update_edge(source_idx, target_idx, current + record.weight)
            else:
                self._graph.add_edge(source_idx, target_idx, record.weight)

    def freeze(self) -> "InteractionGraph":
        with self._lock:
            self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def rx_graph(self) -> rx.PyDiGraph:
        """The underlying rustworkx graph. Callers must not mutate it."""
        return self._graph

    @property
    def registry(self) -> Mapping[str, int]:
        """Read-only identifier -> node index mapping."""
        return MappingProxyType(self._registry)

    @property
    def num_nodes(self) -> int:
        return self._graph.num_nodes()

    @property
    def num_edges(self) -> int:
        return self._graph.num_edges()

    def __len__(self) -> int:
        return self._graph.num_nodes()

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._registry

    def node_index(self, identifier: str) -> int:
        """Raises KeyError for an identifier that was never seen."""
        return self._registry[identifier]

    def identifier(self, node_idx: int) -> str:
        return self._graph[node_idx]

    def node_indices(self) -> list[int]:
        return list(self._graph.node_indices())

    def identifiers(self) -> list[str]:
        """Identifiers ordered by node index."""
        return [self._graph[node_idx] for node_idx in self._graph.node_indices()]

    def successors(self, node_idx: int) -> list[int]:
        return list(self._graph.successor_indices(node_idx))

    def edge_weight(self, source: str, target: str) -> int | None:
        """Accumulated weight of `source` -> `target`, or None if there is no such edge."""
        source_idx = self._registry.get(source)
        target_idx = self._registry.get(target)
        if source_idx is None or target_idx is None:
            return None
        if not self._graph.has_edge(source_idx, target_idx):
            return None
        return self._graph.get_edge_data(source_idx, target_idx)

    def edges(self) -> list[WeightedEdge]:
        """All edges as `(source, target, weight)` triples, in edge index order."""
        return [
            (self._graph[source_idx], self._graph[target_idx], weight)
            for source_idx, target_idx, weight in self._graph.weighted_edge_list()
        ]

    def total_weight(self) -> int:
        return sum(weight for _, _, weight in self._graph.weighted_edge_list())

    def to_networkx(self) -> nx.DiGraph:
        """Copies the graph into a NetworkX DiGraph keyed by identifier, weights under 'weight'."""
        nx_graph: nx.DiGraph = nx.DiGraph()
        nx_graph.add_nodes_from(self.identifiers())
        nx_graph.add_weighted_edges_from(self.edges())
        return nx_graph


def _chunked(rows: Iterable[RawRow], size: int) -> Iterator[tuple[int, list[RawRow]]]:
    """Yields `(offset, chunk)` pairs where `offset` is the position of the chunk's first row."""
    iterator = iter(rows)
    offset = 0
    while True:
        chunk = list(islice(iterator, size))
        if not chunk:
            return
        yield offset, chunk
        offset += len(chunk)


def _ingest_chunk(
    graph: InteractionGraph,
    offset: int,
    chunk: list[RawRow],
    abort: threading.Event,
) -> int:
    ingested = 0
    for position, row in enumerate(chunk, start=offset):
        if abort.is_set():
            break
        try:
            # Parsing happens outside the graph lock; only the upsert is serialized.
            record = parse_record(row, position=position)
        except MalformedRecord:
            abort.set()
            raise
        graph.add_record(record)
        ingested += 1
    logger.debug(f"Ingested {ingested} rows starting at row {offset}")
    return ingested


def build_graph(
    rows: Iterable[RawRow],
    max_workers: int | None = None,
    rows_per_task: int = ROWS_PER_TASK,
) -> InteractionGraph:
    """Builds a frozen `InteractionGraph` from raw `(source, target, weight)` rows.

    Rows are split into chunks that a thread pool ingests concurrently in
    arbitrary order. Edge weights are the sum over every row for the same
    ordered pair, so the result does not depend on scheduling; node index
    assignment order does.

    Args:
        rows: Raw rows of three textual fields each.
        max_workers: Thread pool size. Defaults to `community_config.default_max_workers()`.
        rows_per_task: Number of rows handed to a worker at a time.

    Returns:
        The completed, frozen graph.

    Raises:
        MalformedRecord: If any row lacks its identifier fields. Work already
            done is discarded and no graph is returned.
        ValueError: If `max_workers` or `rows_per_task` is not positive.
    """
    workers: int = max_workers if max_workers is not None else default_max_workers()
    if workers < 1:
        raise ValueError(f"max_workers must be positive, got {workers}")
    if rows_per_task < 1:
        raise ValueError(f"rows_per_task must be positive, got {rows_per_task}")

    graph = InteractionGraph()
    abort = threading.Event()
    start_time: float = time.time()
    total_rows = 0

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="graph-build") as pool:
        futures = [
            pool.submit(_ingest_chunk, graph, offset, chunk, abort)
            for offset, chunk in _chunked(rows, rows_per_task)
        ]
        try:
            for future in as_completed(futures):
                total_rows += future.result()
        except MalformedRecord as e:
            for pending in futures:
                pending.cancel()
            logger.warning(f"Graph construction aborted: {e}")
            raise

    graph.freeze()
    logger.info(
        f"Built interaction graph with {graph.num_nodes} nodes and {graph.num_edges} edges "
        f"from {total_rows} rows using {workers} workers in {time.time() - start_time:.3f}s."
    )
    return graph
