# /tests/test_catalog.py

import unittest
from unittest.mock import MagicMock
import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from core.catalog import ArtistCatalog
from core.console import execute_raw_query

def artist_row(artist, **overrides):
    row = {
        "artist": artist,
        "movements": ["Impressionism", None],
        "graph_painting_count": 3,
        "artworks": [{"id": str(i), "title": f"Haystacks {i}", "url": None, "info": None} for i in range(3)],
        "influenced_by": [{"name": "Eugène Boudin", "wikidata_id": "Q312597"}],
        "influences": [],
        "mentors": [{"name": None, "wikidata_id": None}],
        "students": [],
    }
    row.update(overrides)
    return row


class TestArtistCatalog(unittest.TestCase):

    def setUp(self):
        self.mock_db_client = MagicMock()
        self.mock_session = self.mock_db_client.session.return_value.__enter__.return_value
        self.catalog = ArtistCatalog(self.mock_db_client)

    def test_artist_detail_defaults(self):
        self.mock_session.run.return_value = [artist_row({"name": "Claude Monet"})]

        detail = self.catalog.get_artist_detail("Claude Monet")

        self.assertEqual(detail.bio, "Biography not available.")
        self.assertEqual(detail.nationality, "Unknown")
        self.assertEqual(detail.wikipedia, "#")
        self.assertEqual(detail.paintings_count, 3)
        self.assertEqual(detail.movements, ["Impressionism"])
        self.assertEqual(detail.influenced_by[0].wikidata_id, "Q312597")
        self.assertEqual(detail.mentors, [])

    def test_paintings_count_priority(self):
        self.mock_session.run.return_value = [artist_row({"name": "Claude Monet", "paintings_count": 73, "paintings": "12"})]
        self.assertEqual(self.catalog.get_artist_detail("Claude Monet").paintings_count, 73)

        self.mock_session.run.return_value = [artist_row({"name": "Claude Monet", "paintings": "12.0"})]
        self.assertEqual(self.catalog.get_artist_detail("Claude Monet").paintings_count, 12)

    def test_legacy_years_field(self):
        self.mock_session.run.return_value = [artist_row({"name": "Hans Von Aachen", "born_died_str": "(b. 1552, Köln, d. 1615, Praha)"})]
        self.assertEqual(self.catalog.get_artist_detail("Hans Von Aachen").years, "(b. 1552, Köln, d. 1615, Praha)")

    def test_artworks_are_capped(self):
        artworks = [{"id": str(i), "title": "t", "url": None, "info": None} for i in range(30)]
        self.mock_session.run.return_value = [artist_row({"name": "Claude Monet"}, artworks=artworks)]
        self.assertEqual(len(self.catalog.get_artist_detail("Claude Monet").artworks), 20)

    def test_unknown_or_empty_artist(self):
        self.mock_session.run.return_value = []
        self.assertIsNone(self.catalog.get_artist_detail("Nobody"))
        self.assertIsNone(self.catalog.get_artist_detail(""))

    def test_store_error_is_none(self):
        self.mock_session.run.side_effect = RuntimeError("ServiceUnavailable")
        self.assertIsNone(self.catalog.get_artist_detail("Claude Monet"))

    def test_artwork_detail(self):
        self.mock_session.run.return_value = [{
            "artwork": {"id": "1042", "title": "Olympia", "picture data": "Oil on canvas, 130 x 190 cm"},
            "creator": {"name": "Edouard Manet", "nationality": "French"},
        }]

        detail = self.catalog.get_artwork_detail("1042")

        self.assertEqual(detail.meta_data, "Oil on canvas, 130 x 190 cm")
        self.assertEqual(detail.artist.name, "Edouard Manet")
        self.assertEqual(detail.url, "")

    def test_artwork_without_creator(self):
        self.mock_session.run.return_value = [{"artwork": {"id": "7", "title": "Untitled"}, "creator": None}]
        self.assertIsNone(self.catalog.get_artwork_detail("7").artist)


class TestRawConsole(unittest.TestCase):

    def setUp(self):
        self.mock_db_client = MagicMock()
        self.mock_session = self.mock_db_client.session.return_value.__enter__.return_value

    def test_empty_query(self):
        result = execute_raw_query(self.mock_db_client, "  ")
        self.assertTrue(result.error)
        self.assertEqual(result.message, "Query cannot be empty.")
        self.mock_db_client.session.assert_not_called()

    def test_success(self):
        self.mock_session.run.return_value = [{"n": {"name": "Claude Monet", "_id": "4:x:1", "_labels": ["Artist"]}}]

        result = execute_raw_query(self.mock_db_client, "MATCH (n:Artist) RETURN n LIMIT 1")

        self.assertTrue(result.success)
        self.assertEqual(result.summary, "Query executed successfully. Found 1 records.")
        self.assertEqual(result.records[0]["n"]["_labels"], ["Artist"])

    def test_upstream_error_is_verbatim(self):
        self.mock_session.run.side_effect = RuntimeError("Invalid input 'MATC': expected ...")

        result = execute_raw_query(self.mock_db_client, "MATC (n) RETURN n")

        self.assertTrue(result.error)
        self.assertFalse(result.success)
        self.assertEqual(result.message, "Invalid input 'MATC': expected ...")


if __name__ == '__main__':
    unittest.main()
