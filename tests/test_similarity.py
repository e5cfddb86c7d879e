# /tests/test_similarity.py

import unittest
from unittest.mock import MagicMock
import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from core.similarity import SimilarityScorer, cosine_similarity, l2_normalize

class TestVectorMath(unittest.TestCase):

    def test_l2_normalize_unit_length(self):
        vec = l2_normalize([3.0, 4.0])
        self.assertAlmostEqual(vec[0], 0.6, places=5)
        self.assertAlmostEqual(vec[1], 0.8, places=5)

    def test_l2_normalize_empty_and_zero(self):
        self.assertEqual(l2_normalize([]), [])
        self.assertEqual(l2_normalize([0.0, 0.0]), [0.0, 0.0])

    def test_cosine_similarity(self):
        self.assertAlmostEqual(cosine_similarity([1, 0], [1, 0]), 1.0, places=5)
        self.assertAlmostEqual(cosine_similarity([1, 0], [0, 1]), 0.0, places=5)
        self.assertAlmostEqual(cosine_similarity([1, 1], [-1, -1]), -1.0, places=5)

    def test_cosine_similarity_degenerate_inputs(self):
        self.assertEqual(cosine_similarity([], [1.0]), 0.0)
        self.assertEqual(cosine_similarity([1.0, 2.0], [1.0]), 0.0)
        self.assertEqual(cosine_similarity([0.0, 0.0], [1.0, 1.0]), 0.0)


class TestSimilarityScorer(unittest.TestCase):

    def setUp(self):
        self.mock_embedder = MagicMock()
        self.scorer = SimilarityScorer(self.mock_embedder)

    def test_rerank_orders_by_similarity(self):
        self.mock_embedder.embed.return_value = [1.0, 0.0]
        self.mock_embedder.embed_many.return_value = [[0.0, 1.0], [1.0, 0.0], [0.7, 0.7]]

        ranked = self.scorer.rerank("sunflowers", ["far", "exact", "close"], text_of=lambda s: s)

        self.assertEqual(ranked, ["exact", "close", "far"])

    def test_rerank_keeps_order_on_failure(self):
        self.mock_embedder.embed.side_effect = RuntimeError("quota exceeded")

        ranked = self.scorer.rerank("q", ["a", "b", "c"], text_of=lambda s: s)

        self.assertEqual(ranked, ["a", "b", "c"])

    def test_rerank_ties_are_stable(self):
        self.mock_embedder.embed.return_value = [1.0, 0.0]
        self.mock_embedder.embed_many.return_value = [[0.0, 1.0], [0.0, 1.0]]

        self.assertEqual(self.scorer.rerank("q", ["first", "second"], text_of=lambda s: s), ["first", "second"])

    def test_single_item_skips_embedding(self):
        self.assertEqual(self.scorer.rerank("q", ["only"], text_of=lambda s: s), ["only"])
        self.mock_embedder.embed.assert_not_called()

    def test_scores_empty_inputs(self):
        self.assertEqual(self.scorer.scores("", ["a"]), [])
        self.assertEqual(self.scorer.scores("q", []), [])


if __name__ == '__main__':
    unittest.main()
