import logging
from collections.abc import Iterator, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from types import MappingProxyType

import networkx as nx

from community_config import default_max_workers
from interaction_graph import InteractionGraph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Labeling:
    """Community partition of an interaction graph.

    `labels` maps every node identifier to its community id; `members[cid]`
    lists the identifiers of community `cid` in node index order. Ids are
    dense and zero-based, numbered in the order the traversal finalized the
    components.
    """

    labels: Mapping[str, int]
    members: tuple[tuple[str, ...], ...]

    @property
    def num_communities(self) -> int:
        return len(self.members)

    def __len__(self) -> int:
        return len(self.labels)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self.labels

    def __iter__(self) -> Iterator[str]:
        return iter(self.labels)

    def community_of(self, identifier: str) -> int:
        return self.labels[identifier]

    def communities(self) -> dict[int, list[str]]:
        """Community id -> member identifiers."""
        return {community_id: list(nodes) for community_id, nodes in enumerate(self.members)}

    def sizes(self) -> list[int]:
        return [len(nodes) for nodes in self.members]


def strongly_connected_components(graph: InteractionGraph) -> list[list[int]]:
    """Strongly connected components over node indices, via `nx.strongly_connected_components`.

    Nodes are inserted in node index order and edges in edge index order, so
    the traversal (and the component order it yields) is deterministic for a
    given graph. Components come out in reverse topological order of the
    condensation; each component's node indices are sorted.
    """
    digraph: nx.DiGraph = nx.DiGraph()
    digraph.add_nodes_from(graph.node_indices())
    digraph.add_edges_from(
        (source_idx, target_idx) for source_idx, target_idx in graph.rx_graph.edge_list()
    )
    return [sorted(component) for component in nx.strongly_connected_components(digraph)]


def _component_pairs(
    graph: InteractionGraph, community_id: int, component: list[int]
) -> list[tuple[str, int]]:
    return [(graph.identifier(node_idx), community_id) for node_idx in component]


def label_communities(graph: InteractionGraph, max_workers: int | None = None) -> Labeling:
    """Partitions the graph into strongly connected components.

    The traversal itself is sequential. Once the components are known, the
    identifier -> community id pairs for each component are produced on a
    thread pool; components are disjoint so no two tasks touch the same node.

    Args:
        graph: A fully built interaction graph. It is only read.
        max_workers: Thread pool size for the grouping step.

    Returns:
        A `Labeling` covering every node of `graph` exactly once.
    """
    components: list[list[int]] = strongly_connected_components(graph)
    workers: int = max_workers if max_workers is not None else default_max_workers()

    with ThreadPoolExecutor(max_workers=max(1, workers), thread_name_prefix="labeling") as pool:
        per_component: list[list[tuple[str, int]]] = list(
            pool.map(
                lambda item: _component_pairs(graph, item[0], item[1]),
                enumerate(components),
            )
        )

    labels: dict[str, int] = {}
    for pairs in per_component:
        labels.update(pairs)
    members = tuple(tuple(identifier for identifier, _ in pairs) for pairs in per_component)

    singletons = sum(1 for nodes in members if len(nodes) == 1)
    logger.info(
        f"Labeled {len(labels)} nodes into {len(members)} communities ({singletons} singletons)."
    )
    return Labeling(labels=MappingProxyType(labels), members=members)
