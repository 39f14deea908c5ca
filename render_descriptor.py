# ruff: noqa: E501
import logging
from dataclasses import dataclass
from functools import cached_property

import matplotlib.colors as mcolors

from community_config import FILL_SATURATION, FILL_VALUE, HUE_STEP_DEGREES
from community_errors import PartitionViolation
from community_labels import Labeling
from interaction_graph import InteractionGraph

logger = logging.getLogger(__name__)


def community_hue(community_id: int) -> int:
    """Hue in degrees for a community id; consecutive ids are 60 degrees apart."""
    return (community_id * HUE_STEP_DEGREES) % 360


@dataclass(frozen=True)
class NodeStyle:
    index: int
    identifier: str
    community_id: int
    hue: int
    saturation: float = FILL_SATURATION
    value: float = FILL_VALUE

    @property
    def label(self) -> str:
        return self.identifier

    @property
    def fillcolor(self) -> str:
        """Graphviz HSV color string, each component in [0, 1]."""
        return f"{self.hue / 360:.3f} {self.saturation:.3f} {self.value:.3f}"

    @property
    def hex_color(self) -> str:
        """The same color as an RGB hex string, for matplotlib."""
        return mcolors.to_hex(mcolors.hsv_to_rgb((self.hue / 360, self.saturation, self.value)))


@dataclass(frozen=True)
class EdgeStyle:
    source: int
    target: int
    weight: int

    @property
    def label(self) -> str:
        return str(self.weight)


def _dot_quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


@dataclass(frozen=True)
class RenderDescriptor:
    """Renderable view of a labeled interaction graph.

    Nodes and edges refer to each other by graph node index. The descriptor
    is derived data and is rebuilt on every run.
    """

    nodes: tuple[NodeStyle, ...]
    edges: tuple[EdgeStyle, ...]

    @cached_property
    def _nodes_by_identifier(self) -> dict[str, NodeStyle]:
        return {node.identifier: node for node in self.nodes}

    def node_by_identifier(self, identifier: str) -> NodeStyle:
        """Raises KeyError for an identifier with no node."""
        return self._nodes_by_identifier[identifier]

    def to_dot(self, graph_name: str = "interactions") -> str:
        """Encodes the descriptor as Graphviz DOT text."""
        lines: list[str] = [f"digraph {_dot_quote(graph_name)} {{"]
        for node in self.nodes:
            lines.append(
                f"    {node.index} [ label={_dot_quote(node.label)}, style=filled, "
                f"fillcolor={_dot_quote(node.fillcolor)} ]"
            )
        for edge in self.edges:
            lines.append(f"    {edge.source} -> {edge.target} [ label={_dot_quote(edge.label)} ]")
        lines.append("}")
        return "\n".join(lines) + "\n"


def describe(graph: InteractionGraph, labeling: Labeling) -> RenderDescriptor:
    """Builds the render descriptor for `graph` colored by `labeling`.

    Raises:
        PartitionViolation: If a graph node has no community id in `labeling`.
    """
    nodes: list[NodeStyle] = []
    for node_idx in graph.node_indices():
        identifier = graph.identifier(node_idx)
        community_id = labeling.labels.get(identifier)
        if community_id is None:
            raise PartitionViolation(identifier)
        nodes.append(
            NodeStyle(
                index=node_idx,
                identifier=identifier,
                community_id=community_id,
                hue=community_hue(community_id),
            )
        )

    edges = tuple(
        EdgeStyle(source=source_idx, target=target_idx, weight=weight)
        for source_idx, target_idx, weight in graph.rx_graph.weighted_edge_list()
    )
    logger.debug(f"Described {len(nodes)} nodes and {len(edges)} edges for rendering.")
    return RenderDescriptor(nodes=tuple(nodes), edges=edges)
