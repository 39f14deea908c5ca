# ruff: noqa: E501
import logging
import os
import shutil
import subprocess
import sys

import matplotlib.pyplot as plt
import networkx as nx

from community_config import DEFAULT_SEED
from interaction_graph import InteractionGraph
from render_descriptor import RenderDescriptor

logger = logging.getLogger(__name__)

GRAPHVIZ_BINARY = "dot"


def save_dot(descriptor: RenderDescriptor, file_path: str) -> str:
    """Writes the descriptor's DOT encoding to `file_path` and returns the path."""
    parent = os.path.dirname(file_path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(file_path, "w", encoding="utf-8") as f:
        f.write(descriptor.to_dot())
    logger.info(f"Saved DOT graph with {len(descriptor.nodes)} nodes to {file_path}.")
    return file_path


def render_image(dot_file: str, output_image: str, image_format: str = "png") -> str:
    """Runs Graphviz `dot` to turn `dot_file` into an image.

    Raises:
        FileNotFoundError: If the `dot` binary is not on PATH.
        subprocess.CalledProcessError: If `dot` exits with an error.
    """
    binary = shutil.which(GRAPHVIZ_BINARY)
    if binary is None:
        raise FileNotFoundError(
            f"Graphviz '{GRAPHVIZ_BINARY}' executable not found. Install Graphviz to render images."
        )
    command = [binary, f"-T{image_format}", dot_file, "-o", output_image]
    logger.info(f"Rendering {dot_file} -> {output_image}")
    subprocess.run(command, check=True, capture_output=True)
    return output_image


def open_file(file_path: str) -> None:
    """Opens `file_path` with the platform's default application."""
    if sys.platform.startswith("win"):
        os.startfile(file_path)  # type: ignore[attr-defined]
        return
    opener = "open" if sys.platform == "darwin" else "xdg-open"
    subprocess.run([opener, file_path], check=True)


def plot_communities(
    graph: InteractionGraph,
    descriptor: RenderDescriptor,
    output_file: str,
    seed: int = DEFAULT_SEED,
) -> str | None:
    """Draws the graph with community fill colors using matplotlib.

    Does not need Graphviz. Returns `output_file`, or None for an empty graph.
    """
    if not descriptor.nodes:
        logger.warning("Graph is empty; skipping community preview plot.")
        return None

    plt.switch_backend("Agg")
    nx_graph: nx.DiGraph = graph.to_networkx()
    node_list: list[str] = [node.identifier for node in descriptor.nodes]
    node_colors: list[str] = [node.hex_color for node in descriptor.nodes]
    pos = nx.spring_layout(nx_graph, seed=seed)

    size = max(8.0, min(30.0, len(node_list) ** 0.5 * 2))
    fig, ax = plt.subplots(figsize=(size, size), dpi=150)
    nx.draw_networkx_nodes(nx_graph, pos, nodelist=node_list, node_color=node_colors, ax=ax)
    nx.draw_networkx_labels(nx_graph, pos, font_size=6, ax=ax)
    nx.draw_networkx_edges(nx_graph, pos, arrows=True, arrowsize=8, width=0.6, ax=ax)
    nx.draw_networkx_edge_labels(
        nx_graph,
        pos,
        edge_labels={(u, v): str(w) for u, v, w in nx_graph.edges(data="weight")},
        font_size=5,
        ax=ax,
    )
    ax.set_axis_off()

    parent = os.path.dirname(output_file)
    if parent:
        os.makedirs(parent, exist_ok=True)
    try:
        plt.savefig(output_file, bbox_inches="tight")
        logger.info(f"Community preview saved to {output_file}")
    finally:
        plt.close(fig)
    return output_file
