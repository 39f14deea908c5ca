# Licensed under the Apache License, Version 2.0 (the "License"); you may
# not use this file except in compliance with the License. You may obtain
# a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations
# under the License.

import re
from types import MappingProxyType

import matplotlib.colors as mcolors
import pytest

from community_errors import PartitionViolation
from community_labels import Labeling, label_communities
from interaction_graph import build_graph
from render_descriptor import EdgeStyle, NodeStyle, community_hue, describe


@pytest.fixture
def example_graph():
    rows = [("alice", "bob", "5"), ("bob", "alice", "3"), ("carol", "dave", "7")]
    return build_graph(rows, max_workers=1)


def test_community_hue_steps():
    assert [community_hue(i) for i in range(7)] == [0, 60, 120, 180, 240, 300, 0]


@pytest.mark.parametrize("community_id", range(0, 14))
def test_adjacent_ids_differ_by_sixty_degrees(community_id):
    assert (community_hue(community_id + 1) - community_hue(community_id)) % 360 == 60


def test_describe_example(example_graph):
    labeling = label_communities(example_graph, max_workers=1)
    descriptor = describe(example_graph, labeling)

    assert [n.identifier for n in descriptor.nodes] == ["alice", "bob", "carol", "dave"]
    alice = descriptor.node_by_identifier("alice")
    bob = descriptor.node_by_identifier("bob")
    assert alice.fillcolor == bob.fillcolor
    assert alice.label == "alice"
    assert descriptor.node_by_identifier("carol").fillcolor != descriptor.node_by_identifier(
        "dave"
    ).fillcolor
    assert sorted(e.label for e in descriptor.edges) == ["3", "5", "7"]


def test_same_community_same_color(example_graph):
    labeling = label_communities(example_graph, max_workers=1)
    descriptor = describe(example_graph, labeling)
    by_community: dict[int, set[str]] = {}
    for node in descriptor.nodes:
        by_community.setdefault(node.community_id, set()).add(node.fillcolor)
    assert all(len(colors) == 1 for colors in by_community.values())


def test_node_style_color_encodings():
    style = NodeStyle(index=0, identifier="n", community_id=1, hue=60)
    assert style.fillcolor == "0.167 0.500 0.700"
    expected = mcolors.to_hex(mcolors.hsv_to_rgb((60 / 360, 0.5, 0.7)))
    assert style.hex_color == expected
    assert re.fullmatch(r"#[0-9a-f]{6}", style.hex_color)


def test_edge_label_is_integer_weight():
    assert EdgeStyle(source=0, target=1, weight=42).label == "42"


def test_missing_node_is_partition_violation(example_graph):
    partial = Labeling(labels=MappingProxyType({"alice": 0, "bob": 0, "carol": 1}), members=())
    with pytest.raises(PartitionViolation) as exc_info:
        describe(example_graph, partial)
    assert exc_info.value.identifier == "dave"


def test_to_dot_encodes_nodes_edges_and_colors(example_graph):
    descriptor = describe(example_graph, label_communities(example_graph, max_workers=1))
    dot = descriptor.to_dot()

    assert dot.startswith('digraph "interactions" {')
    assert dot.rstrip().endswith("}")
    for node in descriptor.nodes:
        assert f'{node.index} [ label="{node.identifier}", style=filled, fillcolor="{node.fillcolor}" ]' in dot
    for edge in descriptor.edges:
        assert f'{edge.source} -> {edge.target} [ label="{edge.weight}" ]' in dot
    assert dot.count("->") == 3


def test_to_dot_escapes_quotes():
    graph = build_graph([('say "hi"', "back\\slash", "2")], max_workers=1)
    dot = describe(graph, label_communities(graph, max_workers=1)).to_dot()
    assert 'label="say \\"hi\\""' in dot
    assert 'label="back\\\\slash"' in dot


def test_node_by_identifier_lookup(example_graph):
    descriptor = describe(example_graph, label_communities(example_graph, max_workers=1))
    for node in descriptor.nodes:
        assert descriptor.node_by_identifier(node.identifier) is node
    assert descriptor.node_by_identifier("dave").index == example_graph.node_index("dave")
    with pytest.raises(KeyError):
        descriptor.node_by_identifier("nobody")
