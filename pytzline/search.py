"""City search for the add-zone prompt.

Every catalog city is scored against the query; the best eight labels
come back, highest score first, ties in alphabetical order.
"""

from __future__ import annotations

from dataclasses import dataclass

from .catalog import CityCatalog, CityRecord, load_catalog

MAX_RESULTS = 8

SCORE_EXACT = 1000
SCORE_ALIAS_EXACT = 800
SCORE_PREFIX = 500
SCORE_ALIAS_PREFIX = 400
SCORE_CONTAINS = 200
SCORE_ALIAS_CONTAINS = 150
SCORE_COUNTRY = 100
SCORE_TIMEZONE = 50
SCORE_MAJOR = 25


@dataclass(frozen=True)
class SearchResult:
    display_label: str
    score: int
    city: CityRecord


def score_city(city: CityRecord, query: str, major: bool = False) -> int:
    """Score one city; ``query`` must already be lower-cased and stripped."""
    score = 0
    name = city.name.lower()
    code = city.code.lower()

    if query in (name, code):
        score += SCORE_EXACT
    elif name.startswith(query) or code.startswith(query):
        score += SCORE_PREFIX
    elif query in name or query in code:
        score += SCORE_CONTAINS

    for alias in city.aliases:
        alias = alias.lower()
        if alias == query:
            score += SCORE_ALIAS_EXACT
        elif alias.startswith(query):
            score += SCORE_ALIAS_PREFIX
        elif query in alias:
            score += SCORE_ALIAS_CONTAINS

    if query in city.country.lower():
        score += SCORE_COUNTRY

    if query in city.timezone_id.lower():
        score += SCORE_TIMEZONE

    if score > 0 and major:
        score += SCORE_MAJOR

    return score


def rank(query: str, catalog: CityCatalog | None = None, limit: int = MAX_RESULTS) -> list[SearchResult]:
    q = query.strip().lower()
    if not q:
        return []
    catalog = catalog or load_catalog()

    best: dict[str, SearchResult] = {}
    for city in catalog:
        score = score_city(city, q, catalog.is_major(city.name))
        if score <= 0:
            continue
        label = catalog.label_for(city)
        seen = best.get(label)
        if seen is None or score > seen.score:
            best[label] = SearchResult(label, score, city)

    results = sorted(best.values(), key=lambda r: (-r.score, r.display_label))
    return results[:limit]


def search(query: str, catalog: CityCatalog | None = None, limit: int = MAX_RESULTS) -> list[str]:
    return [r.display_label for r in rank(query, catalog, limit)]
