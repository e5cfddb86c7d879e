# /tests/test_ingestion.py

import unittest
from unittest.mock import MagicMock
import sys
import os
import tempfile

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from core.models import ArtworkEmbeddingRow
from ingestion.embedding_indexer import (
    PENDING_ARTWORKS_QUERY,
    SAVE_EMBEDDING_QUERY,
    EmbeddingIndexer,
    build_embedding_text,
)
from ingestion.engine import IngestionEngine
from ingestion.sources import ArtistInfoCsvSource, ArtistsCsvSource, ArtworkCsvSource

def write_csv(content):
    handle = tempfile.NamedTemporaryFile("w", suffix=".csv", delete=False, encoding="utf-8")
    handle.write(content)
    handle.close()
    return handle.name


class TestCsvSources(unittest.TestCase):

    def setUp(self):
        self.paths = []

    def tearDown(self):
        for path in self.paths:
            os.remove(path)

    def _csv(self, content):
        path = write_csv(content)
        self.paths.append(path)
        return path

    def test_missing_file_is_rejected(self):
        with self.assertRaises(ValueError):
            ArtistsCsvSource("/nonexistent/artists.csv")

    def test_artists_rows(self):
        source = ArtistsCsvSource(self._csv(
            "name,years,genre,nationality,bio,wikipedia,paintings\n"
            "Claude Monet,1840 - 1926,Impressionism,French,French painter.,http://en.wikipedia.org/wiki/Claude_Monet,73\n"
            '"  ",,,,,,\n'
        ))

        params = [source.to_params(record) for record in source.load_records()]

        self.assertEqual(params[0]["name"], "Claude Monet")
        self.assertEqual(params[0]["paintings_count"], 73)
        self.assertIsNone(params[1])

    def test_info_rows_are_normalized(self):
        source = ArtistInfoCsvSource(self._csv(
            "artist,born-died,period,school,url,base,nationality\n"
            '"AACHEN, Hans von","(b. 1552, Köln, d. 1615, Praha)",Mannerism,German,https://www.wga.hu/a,Prague,German\n'
            "\"ABBATE, Niccolò dell'\",,,Italian,,,\n"
        ))

        params = [source.to_params(record) for record in source.load_records()]

        self.assertEqual(params[0]["name"], "Hans Von Aachen")
        self.assertEqual(params[0]["period"], "Mannerism")
        self.assertEqual(params[1]["name"], "Niccolò Dell Abbate")
        self.assertIsNone(params[1]["period"])

    def test_artwork_rows_need_id_and_artist(self):
        source = ArtworkCsvSource(self._csv(
            "ID,artist,title,picture data,file info,jpg url\n"
            "1,\"AACHEN, Hans von\",Allegory,\"Oil on copper, 56 x 47 cm\",info,https://www.wga.hu/a.jpg\n"
            ",Someone,No id,,,\n"
        ))

        params = [source.to_params(record) for record in source.load_records()]

        self.assertEqual(params[0]["artist_name"], "Hans Von Aachen")
        self.assertEqual(params[0]["meta_data"], "Oil on copper, 56 x 47 cm")
        self.assertIsNone(params[1])

    def test_catalog_sources_adopt_relation_stubs(self):
        for source_cls in (ArtistsCsvSource, ArtistInfoCsvSource, ArtworkCsvSource):
            self.assertIn("REMOVE a.is_stub", source_cls.cypher, source_cls.__name__)


class TestIngestionEngine(unittest.TestCase):

    def test_run_loads_each_source(self):
        mock_db_client = MagicMock()
        mock_session = mock_db_client.session.return_value.__enter__.return_value
        source = MagicMock()
        source.name = "artists"
        source.cypher = "MERGE (a:Artist {name: $name})"
        source.load_records.return_value = [{"name": "a"}, {"name": ""}, {"name": "b"}]
        source.to_params.side_effect = lambda r: {"name": r["name"]} if r["name"] else None

        counts = IngestionEngine(mock_db_client, [source]).run(reset=True)

        self.assertEqual(counts, {"artists": 2})
        mock_db_client.ensure_constraints.assert_called_once()
        mock_db_client.execute_query.assert_called_once_with("MATCH (n) DETACH DELETE n")
        self.assertEqual(mock_session.run.call_count, 2)


class TestEmbeddingIndexer(unittest.TestCase):

    def setUp(self):
        self.mock_db_client = MagicMock()
        self.mock_session = self.mock_db_client.session.return_value.__enter__.return_value
        self.mock_embedder = MagicMock()
        self.indexer = EmbeddingIndexer(self.mock_db_client, self.mock_embedder, batch_size=2, max_chars=1000)

    def test_embedding_text(self):
        row = ArtworkEmbeddingRow(id="1", title="Water Lilies", meta="Oil on canvas", artist_name="Claude Monet")
        self.assertEqual(build_embedding_text(row, 1000),
                         "Title: Water Lilies\nArtist: Claude Monet\nDetails: Oil on canvas")
        self.assertEqual(len(build_embedding_text(row, 10)), 10)

    def test_failed_artworks_are_excluded_and_loop_ends(self):
        pending = [
            {"id": "1", "title": "Water Lilies", "meta": None, "artist_name": "Claude Monet"},
            {"id": "2", "title": "Broken", "meta": None, "artist_name": None},
        ]
        excludes = []

        def run(query, params=None):
            if query == PENDING_ARTWORKS_QUERY:
                excludes.append(list(params["exclude"]))
                # The saved artwork drops out of the pending set.
                remaining = [r for r in pending if r["id"] not in params["exclude"] and r["id"] != "1"]
                return pending if len(excludes) == 1 else remaining
            if query == SAVE_EMBEDDING_QUERY:
                return [{"updated": 1}]
            return []
        self.mock_session.run.side_effect = run
        self.mock_embedder.embed.side_effect = lambda text: [] if "Broken" in text else [0.6, 0.8]

        processed = self.indexer.run()

        self.assertEqual(processed, 1)
        self.assertEqual(excludes, [[], ["2"]])
        self.mock_db_client.ensure_vector_index.assert_called_once()


if __name__ == '__main__':
    unittest.main()
