# ruff: noqa: E501
import argparse
import logging
import os
import subprocess
import sys
from dataclasses import dataclass

from community_config import (
    DEFAULT_DOT_FILE,
    DEFAULT_IMAGE_FILE,
    DEFAULT_LOG_FILE,
    DEFAULT_NUM_INTERACTIONS,
    DEFAULT_NUM_USERS,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PREVIEW_FILE,
    DEFAULT_SEED,
)
from community_errors import CommunityDetectionError
from community_labels import Labeling, label_communities
from graph_rendering import open_file, plot_communities, render_image, save_dot
from interaction_generator import generate_interaction_log, make_rng
from interaction_graph import InteractionGraph, build_graph
from interaction_io import read_interaction_log
from render_descriptor import RenderDescriptor, describe

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    graph: InteractionGraph
    labeling: Labeling
    descriptor: RenderDescriptor
    log_file: str
    dot_file: str
    image_file: str | None = None
    preview_file: str | None = None

    @property
    def num_communities(self) -> int:
        return self.labeling.num_communities


def run_pipeline(
    input_path: str | None = None,
    output_dir: str = DEFAULT_OUTPUT_DIR,
    num_users: int = DEFAULT_NUM_USERS,
    num_interactions: int = DEFAULT_NUM_INTERACTIONS,
    seed: int | None = DEFAULT_SEED,
    max_workers: int | None = None,
    render: bool = False,
    open_image: bool = False,
    preview: bool = False,
) -> PipelineResult:
    """Runs interaction log -> graph -> communities -> DOT (-> image).

    Without `input_path` a synthetic log is generated into `output_dir` first.

    Args:
        input_path: Existing header-less `source,target,weight` log to use.
        output_dir: Directory for the generated log, DOT file and images.
        num_users: Users to generate when no input is given.
        num_interactions: Interactions to generate when no input is given.
        seed: Seed for the synthetic data.
        max_workers: Thread pool size for graph construction and labeling.
        render: Run Graphviz on the DOT file.
        open_image: Open the rendered image (implies `render`).
        preview: Also draw a matplotlib preview image.

    Returns:
        A `PipelineResult` with the graph, labeling, descriptor and written paths.
    """
    os.makedirs(output_dir, exist_ok=True)

    if input_path is None:
        log_file = os.path.join(output_dir, DEFAULT_LOG_FILE)
        generate_interaction_log(num_users, num_interactions, log_file, rng=make_rng(seed))
    else:
        log_file = input_path

    rows = read_interaction_log(log_file)
    graph = build_graph(rows, max_workers=max_workers)
    labeling = label_communities(graph, max_workers=max_workers)
    descriptor = describe(graph, labeling)

    result = PipelineResult(
        graph=graph,
        labeling=labeling,
        descriptor=descriptor,
        log_file=log_file,
        dot_file=save_dot(descriptor, os.path.join(output_dir, DEFAULT_DOT_FILE)),
    )

    if render or open_image:
        result.image_file = render_image(result.dot_file, os.path.join(output_dir, DEFAULT_IMAGE_FILE))
        if open_image:
            open_file(result.image_file)

    if preview:
        result.preview_file = plot_communities(
            graph, descriptor, os.path.join(output_dir, DEFAULT_PREVIEW_FILE)
        )

    return result


def log_community_summary(labeling: Labeling) -> None:
    logger.info(f"Detected {labeling.num_communities} communities:")
    for community_id, members in labeling.communities().items():
        logger.info(f"Community {community_id} ({len(members)} members)")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Detect communities (strongly connected components) in a weighted "
            "interaction log and write a Graphviz description of the result."
        )
    )
    parser.add_argument(
        "--input",
        default=None,
        help="Existing header-less 'source,target,weight' log. A synthetic log is generated when omitted.",
    )
    parser.add_argument("--output-dir", default=DEFAULT_OUTPUT_DIR, help="Directory for output files.")
    parser.add_argument("--users", type=int, default=DEFAULT_NUM_USERS, help="Synthetic users to generate.")
    parser.add_argument(
        "--interactions",
        type=int,
        default=DEFAULT_NUM_INTERACTIONS,
        help="Synthetic interactions to generate.",
    )
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Seed for synthetic data.")
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker threads (default: $COMMUNITY_MAX_WORKERS or CPU count).",
    )
    parser.add_argument("--render", action="store_true", help="Render the DOT file to PNG with Graphviz.")
    parser.add_argument("--open", action="store_true", help="Open the rendered image (implies --render).")
    parser.add_argument("--preview", action="store_true", help="Write a matplotlib preview image.")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point. Returns the process exit code."""
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        force=True,
    )

    try:
        result = run_pipeline(
            input_path=args.input,
            output_dir=args.output_dir,
            num_users=args.users,
            num_interactions=args.interactions,
            seed=args.seed,
            max_workers=args.workers,
            render=args.render,
            open_image=args.open,
            preview=args.preview,
        )
    except (CommunityDetectionError, OSError, ValueError, subprocess.CalledProcessError) as e:
        logger.error(f"Community detection failed: {e}", exc_info=True)
        return 1

    log_community_summary(result.labeling)
    return 0


if __name__ == "__main__":
    sys.exit(main())
