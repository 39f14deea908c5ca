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

import random
import threading
import unittest
from collections import Counter

import pytest

from community_config import MAX_WORKERS_ENV_VAR, default_max_workers
from community_errors import MalformedRecord
from interaction_graph import InteractionGraph, build_graph
from interaction_records import EdgeRecord


class TestBuildGraph(unittest.TestCase):
    """Graph construction from raw interaction rows."""

    def test_empty_input(self):
        graph = build_graph([], max_workers=2)
        self.assertEqual(graph.num_nodes, 0)
        self.assertEqual(graph.num_edges, 0)
        self.assertTrue(graph.frozen)

    def test_end_to_end_example(self):
        rows = [("alice", "bob", "5"), ("bob", "alice", "3"), ("carol", "dave", "7")]
        graph = build_graph(rows, max_workers=3, rows_per_task=1)
        self.assertEqual(graph.num_nodes, 4)
        self.assertEqual(graph.num_edges, 3)
        self.assertEqual(graph.edge_weight("alice", "bob"), 5)
        self.assertEqual(graph.edge_weight("bob", "alice"), 3)
        self.assertEqual(graph.edge_weight("carol", "dave"), 7)
        self.assertIsNone(graph.edge_weight("dave", "carol"))

    def test_duplicate_rows_merge_into_one_edge(self):
        graph = build_graph([("x", "y", "2"), ("x", "y", "3")], max_workers=2, rows_per_task=1)
        self.assertEqual(graph.num_edges, 1)
        self.assertEqual(graph.edge_weight("x", "y"), 5)
        self.assertEqual(graph.edges(), [("x", "y", 5)])

    def test_direction_matters(self):
        graph = build_graph([("a", "b", "1"), ("b", "a", "1")], max_workers=1)
        self.assertEqual(graph.num_edges, 2)

    def test_self_interaction(self):
        graph = build_graph([("solo", "solo", "4"), ("solo", "solo", "")], max_workers=1)
        self.assertEqual(graph.num_nodes, 1)
        self.assertEqual(graph.edge_weight("solo", "solo"), 5)

    def test_invalid_weight_defaults_to_one(self):
        graph = build_graph([("a", "b", "not-a-number")], max_workers=1)
        self.assertEqual(graph.edge_weight("a", "b"), 1)

    def test_registry_is_bijection(self):
        rows = [(f"u{i % 17}", f"u{(i * 7) % 23}", str(i % 5 + 1)) for i in range(300)]
        graph = build_graph(rows, max_workers=4, rows_per_task=8)
        registry = dict(graph.registry)
        self.assertEqual(len(registry), graph.num_nodes)
        self.assertEqual(sorted(registry.values()), list(range(graph.num_nodes)))
        for identifier, node_idx in registry.items():
            self.assertEqual(graph.identifier(node_idx), identifier)
            self.assertEqual(graph.node_index(identifier), node_idx)
        self.assertEqual(set(graph.identifiers()), set(registry))

    def test_single_field_row_aborts_construction(self):
        rows = [("a", "b", "1")] * 50 + [("only-one",)] + [("c", "d", "2")] * 50
        with self.assertRaises(MalformedRecord) as ctx:
            build_graph(rows, max_workers=4, rows_per_task=10)
        self.assertEqual(ctx.exception.position, 50)

    def test_frozen_graph_rejects_mutation(self):
        graph = build_graph([("a", "b", "1")], max_workers=1)
        with self.assertRaises(RuntimeError):
            graph.add_record(EdgeRecord("a", "c", 1))
        self.assertEqual(graph.num_edges, 1)

    def test_invalid_pool_arguments(self):
        with self.assertRaises(ValueError):
            build_graph([("a", "b", "1")], max_workers=0)
        with self.assertRaises(ValueError):
            build_graph([("a", "b", "1")], max_workers=1, rows_per_task=0)

    def test_accepts_generator_input(self):
        rows = ((f"n{i}", f"n{i + 1}", "1") for i in range(10))
        graph = build_graph(rows, max_workers=2, rows_per_task=3)
        self.assertEqual(graph.num_nodes, 11)
        self.assertEqual(graph.num_edges, 10)

    def test_to_networkx(self):
        graph = build_graph([("a", "b", "2"), ("b", "c", "3"), ("a", "b", "1")], max_workers=2)
        nx_graph = graph.to_networkx()
        self.assertEqual(set(nx_graph.nodes()), {"a", "b", "c"})
        self.assertEqual(nx_graph["a"]["b"]["weight"], 3)
        self.assertEqual(nx_graph["b"]["c"]["weight"], 3)
        self.assertTrue(nx_graph.is_directed())


@pytest.mark.parametrize("workers,rows_per_task", [(1, 1000), (2, 1), (8, 3), (16, 64)])
def test_weight_sum_is_order_and_concurrency_independent(workers, rows_per_task):
    rng = random.Random(1234)
    users = [f"user{i}" for i in range(25)]
    rows = [
        (rng.choice(users), rng.choice(users), str(rng.randint(1, 20))) for _ in range(2000)
    ]
    expected: Counter = Counter()
    for source, target, weight in rows:
        expected[(source, target)] += int(weight)

    shuffled = rows[:]
    rng.shuffle(shuffled)
    graph = build_graph(shuffled, max_workers=workers, rows_per_task=rows_per_task)

    assert graph.num_edges == len(expected)
    assert {(s, t): w for s, t, w in graph.edges()} == dict(expected)
    assert graph.total_weight() == sum(expected.values())


def test_concurrent_add_record_creates_single_edge():
    graph = InteractionGraph()
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        for _ in range(250):
            graph.add_record(EdgeRecord("x", "y", 2))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert graph.num_nodes == 2
    assert graph.num_edges == 1
    assert graph.edge_weight("x", "y") == 8 * 250 * 2


def test_default_max_workers_env_override(monkeypatch):
    monkeypatch.setenv(MAX_WORKERS_ENV_VAR, "3")
    assert default_max_workers() == 3
    monkeypatch.setenv(MAX_WORKERS_ENV_VAR, "zero")
    assert default_max_workers() >= 1
    monkeypatch.delenv(MAX_WORKERS_ENV_VAR)
    assert default_max_workers() >= 1
