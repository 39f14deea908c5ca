#!/usr/bin/env python3
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

"""
Simple example of strongly-connected-component communities on an interaction log
"""

from community_labels import label_communities
from interaction_graph import build_graph
from render_descriptor import describe


def main():
    """Build a small interaction graph and print its communities"""

    rows = [
        ("alice", "bob", "5"),
        ("bob", "alice", "3"),
        ("bob", "erin", "2"),
        ("erin", "alice", "1"),
        ("carol", "dave", "7"),
        ("carol", "dave", "4"),
        ("dave", "frank", "oops"),  # unparseable weight counts as 1
    ]

    graph = build_graph(rows, max_workers=4)
    labeling = label_communities(graph)
    descriptor = describe(graph, labeling)

    print(f"Number of communities detected: {labeling.num_communities}")
    for community_id, members in labeling.communities().items():
        print(f"Community {community_id}:")
        for identifier in members:
            node = descriptor.node_by_identifier(identifier)
            print(f"  - {identifier} (fillcolor {node.fillcolor}, {node.hex_color})")

    print("\nGraph summary:")
    print(f"  - Total nodes: {graph.num_nodes}")
    print(f"  - Total edges: {graph.num_edges}")
    print(f"  - Total weight: {graph.total_weight()}")

    print("\nEdges between communities:")
    for source, target, weight in graph.edges():
        if labeling.community_of(source) != labeling.community_of(target):
            print(f"  - {source} -> {target} (weight {weight})")

    print("\nDOT output:")
    print(descriptor.to_dot())


if __name__ == "__main__":
    main()
