import unittest

from pytzline.catalog import CityCatalog, CityRecord, load_catalog
from pytzline.search import MAX_RESULTS, rank, score_city, search


class TestSearchRankingContract(unittest.TestCase):
    def setUp(self) -> None:
        self.catalog = load_catalog()

    def test_empty_query_returns_nothing(self) -> None:
        self.assertEqual(search("", self.catalog), [])
        self.assertEqual(search("   ", self.catalog), [])

    def test_no_match_returns_nothing(self) -> None:
        self.assertEqual(search("atlantis", self.catalog), [])

    def test_shared_name_is_disambiguated(self) -> None:
        results = rank("London", self.catalog)
        labels = [r.display_label for r in results]
        self.assertEqual(labels[:2], ["London, United Kingdom", "London, Canada"])
        self.assertEqual(len(labels), len(set(labels)))
        # exact name + timezone id + major city vs exact name + major city
        self.assertEqual([r.score for r in results[:2]], [1075, 1025])

    def test_alias_match(self) -> None:
        top = rank("bombay", self.catalog)[0]
        self.assertEqual(top.display_label, "Mumbai")
        self.assertEqual(top.score, 825)

    def test_results_truncated_and_ordered(self) -> None:
        results = rank("a", self.catalog)
        self.assertEqual(len(results), MAX_RESULTS)
        self.assertEqual(results, sorted(results, key=lambda r: (-r.score, r.display_label)))

    def test_ties_break_alphabetically(self) -> None:
        catalog = CityCatalog([
            CityRecord("Bxa", "BBB", "UTC", "Nowhere"),
            CityRecord("Axb", "AAA", "UTC", "Nowhere"),
        ])
        self.assertEqual(search("x", catalog), ["Axb", "Bxa"])

    def test_major_bonus_needs_a_match(self) -> None:
        city = CityRecord("Tokyo", "TYO", "Asia/Tokyo", "Japan")
        self.assertEqual(score_city(city, "tyo", major=True), 1025)
        self.assertEqual(score_city(city, "zzz", major=True), 0)
        self.assertEqual(score_city(city, "japan"), 100)
        self.assertEqual(score_city(city, "asia"), 50)


if __name__ == "__main__":
    unittest.main(verbosity=2)
