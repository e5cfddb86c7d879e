# /tests/test_graph_builder.py

import unittest
from unittest.mock import MagicMock
import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from core.graph_builder import (
    ARTIST_GRAPH_QUERY,
    FOCAL_ARTIST_WEIGHT,
    GraphAssembler,
    resolve_raw_id,
)

def artist(name, **extra):
    return {"name": name, "_id": f"4:db:{name}", **extra}


class TestGraphAssembler(unittest.TestCase):

    def setUp(self):
        self.mock_db_client = MagicMock()
        self.mock_session = self.mock_db_client.session.return_value.__enter__.return_value
        self.assembler = GraphAssembler(self.mock_db_client)

    def _monet_row(self, artwork_count=3, related_names=("Edgar Degas",)):
        impressionism = {"name": "Impressionism", "_id": "4:db:m1"}
        return {
            "artist": artist("Claude Monet"),
            "artworks": [{"id": i, "title": f"Water Lilies {i}"} for i in range(artwork_count)],
            "movements": [impressionism],
            "related_pairs": [
                {"movement": impressionism, "artist": artist(name)} for name in related_names
            ],
        }

    def test_unknown_artist_returns_none(self):
        self.mock_session.run.return_value = []

        self.assertIsNone(self.assembler.build_graph("Unknown Artist Name"))
        self.mock_session.run.assert_called_once_with(ARTIST_GRAPH_QUERY, {"name": "Unknown Artist Name"})

    def test_empty_name_returns_none_without_store_call(self):
        self.assertIsNone(self.assembler.build_graph(""))
        self.assertIsNone(self.assembler.build_graph("  "))
        self.mock_db_client.session.assert_not_called()

    def test_store_error_returns_none(self):
        self.mock_session.run.side_effect = RuntimeError("ServiceUnavailable")
        self.assertIsNone(self.assembler.build_graph("Claude Monet"))

    def test_basic_graph(self):
        self.mock_session.run.return_value = [self._monet_row()]

        graph = self.assembler.build_graph("Claude Monet")

        node_ids = [node.id for node in graph.nodes]
        self.assertEqual(node_ids[0], "artist-Claude Monet")
        self.assertIn("artwork-0", node_ids)
        self.assertIn("movement-Impressionism", node_ids)
        self.assertIn("artist-Edgar Degas", node_ids)

        edges = {(e.source, e.target, e.type) for e in graph.edges}
        self.assertIn(("artist-Claude Monet", "artwork-1", "CREATED"), edges)
        self.assertIn(("artist-Claude Monet", "movement-Impressionism", "BELONGS_TO"), edges)
        self.assertIn(("artist-Edgar Degas", "artist-Claude Monet", "RELATED"), edges)
        self.assertIn(("artist-Edgar Degas", "movement-Impressionism", "BELONGS_TO"), edges)
        self.assertNotIn(("artist-Claude Monet", "artist-Edgar Degas", "RELATED"), edges)

    def test_focal_artist_has_unique_highest_weight(self):
        self.mock_session.run.return_value = [self._monet_row()]

        graph = self.assembler.build_graph("Claude Monet")

        focal = [node for node in graph.nodes if node.weight == FOCAL_ARTIST_WEIGHT]
        self.assertEqual([node.id for node in focal], ["artist-Claude Monet"])
        self.assertTrue(all(node.weight < FOCAL_ARTIST_WEIGHT for node in graph.nodes[1:]))

    def test_caps(self):
        related = [f"Painter {i}" for i in range(9)]
        self.mock_session.run.return_value = [self._monet_row(artwork_count=35, related_names=related)]

        graph = self.assembler.build_graph("Claude Monet")

        artworks = [node for node in graph.nodes if node.kind.value == "artwork"]
        related_nodes = [node for node in graph.nodes if node.kind.value == "artist" and node.id != "artist-Claude Monet"]
        self.assertEqual(len(artworks), 20)
        self.assertEqual([node.id for node in artworks][:2], ["artwork-0", "artwork-1"])
        self.assertEqual([node.label for node in related_nodes], related[:5])

    def test_zero_caps_are_honored(self):
        self.mock_session.run.return_value = [self._monet_row(artwork_count=3, related_names=("Edgar Degas",))]
        assembler = GraphAssembler(self.mock_db_client, artwork_limit=0, related_limit=0)

        graph = assembler.build_graph("Claude Monet")

        self.assertEqual([node.id for node in graph.nodes], ["artist-Claude Monet", "movement-Impressionism"])
        self.assertEqual((assembler.artwork_limit, assembler.related_limit), (0, 0))

    def test_node_ids_are_unique(self):
        cubism = {"name": "Cubism"}
        collage = {"name": "Collage"}
        braque = artist("Georges Braque")
        row = {
            "artist": artist("Pablo Picasso"),
            "artworks": [{"id": 1, "title": "Guernica"}, {"id": 1, "title": "Guernica"}, None],
            "movements": [cubism, collage, None],
            "related_pairs": [
                {"movement": cubism, "artist": braque},
                {"movement": collage, "artist": braque},
                {"movement": cubism, "artist": artist("Pablo Picasso")},
                None,
            ],
        }
        self.mock_session.run.return_value = [row]

        graph = self.assembler.build_graph("Pablo Picasso")

        node_ids = [node.id for node in graph.nodes]
        self.assertEqual(len(node_ids), len(set(node_ids)))
        self.assertEqual(node_ids.count("artist-Georges Braque"), 1)
        edge_keys = [(e.source, e.target, e.type) for e in graph.edges]
        self.assertEqual(len(edge_keys), len(set(edge_keys)))
        self.assertFalse(any(e.source == e.target for e in graph.edges))

    def test_deterministic(self):
        self.mock_session.run.return_value = [self._monet_row(artwork_count=4, related_names=("A", "B"))]

        first = self.assembler.build_graph("Claude Monet")
        second = self.assembler.build_graph("Claude Monet")

        self.assertEqual(first.model_dump(), second.model_dump())


class TestResolveRawId(unittest.TestCase):

    def test_fallback_chain(self):
        self.assertEqual(resolve_raw_id({"id": 12.0, "title": "x"}, "title"), "12")
        self.assertEqual(resolve_raw_id({"title": "Olympia", "_id": "4:x:1"}, "title"), "Olympia")
        self.assertEqual(resolve_raw_id({"_id": "4:x:1"}, "title"), "4:x:1")
        self.assertEqual(resolve_raw_id({}, "name", fallback="Claude Monet"), "Claude Monet")
        self.assertEqual(resolve_raw_id(None, "name"), "")


if __name__ == '__main__':
    unittest.main()
