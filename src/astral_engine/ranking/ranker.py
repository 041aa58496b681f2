"""Search & Ranker: ranked full-text, tag and property matching.

Filtering precedes scoring.  An object must first pass the type, tag,
inline-property and "blocks only" filters; it is then scored term by
term.  For every query term only the best single field counts, and the
per-term weights are summed.  A term that matches no field excludes the
object, so terms combine with AND semantics.

Weights are policy, not magic numbers, and live in ``SearchWeights``:

    title match            10  (+2 when the title starts with the term)
    tag match               6
    property value match    4
    content match           2  (markup stripped)

Results are sorted by score descending, ties broken by ``updated_at``
descending, and truncated to ``limit``.  With no free-text terms every
filtered object passes with the same score in input order.

Usage
-----
::

    from astral_engine.ranking import SearchEngine, SearchOptions

    engine = SearchEngine()
    results = engine.search(objects, types, SearchOptions(query="pan #compras"))
"""
from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from astral_engine.model.objects import AstralObject, ObjectType, TypeCatalog
from astral_engine.model.results import MatchField, SearchMatch, SearchResult
from astral_engine.model.text import fold_text, fold_with_map, strip_html
from astral_engine.model.values import value_to_text
from astral_engine.ranking.syntax import ParsedQuery, parse_query_syntax

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SearchWeights:
    """Per-field scoring weights and snippet width."""

    title: float = 10.0
    title_prefix_bonus: float = 2.0
    tag: float = 6.0
    property: float = 4.0
    content: float = 2.0
    context_width: int = 40


@dataclass(frozen=True, slots=True)
class SearchOptions:
    """Parameters for a single search call.

    Parameters
    ----------
    query:
        Free text, optionally with ``/type``, ``#tag`` and ``prop:value``
        filters (see ``astral_engine.ranking.syntax``).
    type_filters:
        Object type ids (or names) to keep; empty keeps all.
    tag_filters:
        Tags every result must carry.
    property_filters:
        Property name to value-substring filters, ANDed.
    show_blocks_only:
        Keep only content-bearing objects.
    limit:
        Maximum number of results; ``None`` for no limit.
    parse_syntax:
        When ``False``, ``query`` is treated purely as free text.
    """

    query: str = ""
    type_filters: tuple[str, ...] = ()
    tag_filters: tuple[str, ...] = ()
    property_filters: Mapping[str, str] = field(default_factory=dict)
    show_blocks_only: bool = False
    limit: int | None = 50
    parse_syntax: bool = True


@dataclass(frozen=True, slots=True)
class _Hit:
    field: MatchField
    weight: float
    match: SearchMatch


class SearchEngine:
    """Ranked search over an object snapshot.

    Parameters
    ----------
    weights:
        Scoring policy.  Defaults to ``SearchWeights()``.
    content_bearing_types:
        Type ids treated as content-bearing by ``show_blocks_only``.  When
        ``None``, an object is content-bearing if its content has any text
        once markup is stripped.
    """

    def __init__(
        self,
        weights: SearchWeights | None = None,
        content_bearing_types: Iterable[str] | None = None,
    ) -> None:
        self._weights = weights or SearchWeights()
        self._content_bearing_types = (
            frozenset(content_bearing_types) if content_bearing_types is not None else None
        )

    @property
    def weights(self) -> SearchWeights:
        return self._weights

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def search(
        self,
        objects: Sequence[AstralObject],
        types: Sequence[ObjectType],
        options: SearchOptions | str,
    ) -> list[SearchResult]:
        """Return ranked results for ``options`` over ``objects``."""
        if isinstance(options, str):
            options = SearchOptions(query=options)
        catalog = TypeCatalog(types)

        if options.parse_syntax:
            parsed = parse_query_syntax(options.query)
        else:
            parsed = ParsedQuery(text=options.query)

        type_filters = tuple(options.type_filters) + parsed.type_filters
        tag_filters = tuple(fold_text(t) for t in (*options.tag_filters, *parsed.tag_filters))
        property_filters = {**options.property_filters, **parsed.property_filters}
        terms = [t for t in (fold_text(raw) for raw in parsed.terms) if t]

        results: list[SearchResult] = []
        for obj in objects:
            if type_filters and not self._matches_type(obj, type_filters, catalog):
                continue
            if tag_filters and not self._has_tags(obj, tag_filters):
                continue
            if property_filters and not self._matches_properties(obj, property_filters, catalog):
                continue
            if options.show_blocks_only and not self._is_content_bearing(obj):
                continue

            if not terms:
                results.append(SearchResult(object=obj, score=0.0))
                continue

            scored = self._score(obj, terms)
            if scored is not None:
                results.append(scored)

        if terms:
            results.sort(key=lambda r: r.object.updated_at, reverse=True)
            results.sort(key=lambda r: r.score, reverse=True)

        if options.limit is not None:
            results = results[: max(options.limit, 0)]

        logger.debug(
            "Search %r over %d object(s): %d result(s)",
            options.query,
            len(objects),
            len(results),
        )
        return results

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def _matches_type(
        self,
        obj: AstralObject,
        type_filters: tuple[str, ...],
        catalog: TypeCatalog,
    ) -> bool:
        object_type = catalog.get(obj.type)
        for wanted in type_filters:
            if wanted == obj.type or fold_text(wanted) == fold_text(obj.type):
                return True
            if object_type is not None and object_type.matches(wanted):
                return True
        return False

    def _has_tags(self, obj: AstralObject, tag_filters: tuple[str, ...]) -> bool:
        folded_tags = {fold_text(tag) for tag in obj.tags}
        return all(tag in folded_tags for tag in tag_filters)

    def _matches_properties(
        self,
        obj: AstralObject,
        property_filters: Mapping[str, str],
        catalog: TypeCatalog,
    ) -> bool:
        object_type = catalog.get(obj.type)
        for name, expected in property_filters.items():
            wanted = fold_text(expected)
            found = False
            for key, value in obj.properties.items():
                definition = object_type.property_by_id(key) if object_type else None
                named = definition.matches(name) if definition else fold_text(key) == fold_text(name)
                if named and wanted in fold_text(value_to_text(value)):
                    found = True
                    break
            if not found:
                return False
        return True

    def _is_content_bearing(self, obj: AstralObject) -> bool:
        if self._content_bearing_types is not None:
            return obj.type in self._content_bearing_types
        return strip_html(obj.content) != ""

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def _score(self, obj: AstralObject, terms: list[str]) -> SearchResult | None:
        plain_content = strip_html(obj.content)
        score = 0.0
        matches: list[SearchMatch] = []
        snippet: SearchMatch | None = None

        for term in terms:
            hits = [
                hit
                for hit in (
                    self._match_title(obj.title, term),
                    self._match_tags(obj.tags, term),
                    self._match_properties(obj, term),
                    self._match_content(plain_content, term),
                )
                if hit is not None
            ]
            if not hits:
                return None
            best = max(hits, key=lambda h: h.weight)
            score += best.weight
            matches.append(best.match)
            if snippet is None:
                content_hit = next((h for h in hits if h.field is MatchField.CONTENT), None)
                if content_hit is not None:
                    snippet = content_hit.match

        if snippet is not None and snippet not in matches:
            matches.append(snippet)
        return SearchResult(object=obj, score=score, matches=tuple(matches))

    def _locate(self, text: str, term: str) -> tuple[int, int] | None:
        """Find ``term`` in folded ``text``; return original-text offsets."""
        folded, index_map = fold_with_map(text)
        idx = folded.find(term)
        if idx < 0:
            return None
        start = index_map[idx]
        end = index_map[idx + len(term) - 1] + 1
        return start, end

    def _match_title(self, title: str, term: str) -> _Hit | None:
        title = title.strip()
        located = self._locate(title, term)
        if located is None:
            return None
        weight = self._weights.title
        if located[0] == 0:
            weight += self._weights.title_prefix_bonus
        match = SearchMatch(MatchField.TITLE, term, title, located[0], located[1])
        return _Hit(MatchField.TITLE, weight, match)

    def _match_tags(self, tags: Iterable[str], term: str) -> _Hit | None:
        for tag in tags:
            located = self._locate(tag, term)
            if located is not None:
                match = SearchMatch(MatchField.TAG, term, tag, located[0], located[1])
                return _Hit(MatchField.TAG, self._weights.tag, match)
        return None

    def _match_properties(self, obj: AstralObject, term: str) -> _Hit | None:
        for key, value in obj.properties.items():
            text = value_to_text(value)
            located = self._locate(text, term)
            if located is not None:
                match = SearchMatch(
                    MatchField.PROPERTY, term, text, located[0], located[1], property_id=key
                )
                return _Hit(MatchField.PROPERTY, self._weights.property, match)
        return None

    def _match_content(self, plain: str, term: str) -> _Hit | None:
        located = self._locate(plain, term)
        if located is None:
            return None
        start, end = located
        width = self._weights.context_width
        centre = (start + end) // 2
        window_start = max(0, centre - width // 2)
        window_end = min(len(plain), max(window_start + width, end))
        window_start = max(0, min(window_start, window_end - width))

        prefix = "…" if window_start > 0 else ""
        suffix = "…" if window_end < len(plain) else ""
        context = prefix + plain[window_start:window_end] + suffix
        offset = len(prefix) - window_start
        match = SearchMatch(MatchField.CONTENT, term, context, start + offset, end + offset)
        return _Hit(MatchField.CONTENT, self._weights.content, match)


# ---------------------------------------------------------------------------
# Grouping and tag inventory
# ---------------------------------------------------------------------------


def group_results_by_type(
    results: Sequence[SearchResult],
    types: Sequence[ObjectType],
) -> dict[str, list[SearchResult]]:
    """Partition ``results`` by object type id.

    Groups are ordered by type display name; each group keeps the
    results' original relative rank.  Every input result lands in exactly
    one group.
    """
    catalog = TypeCatalog(types)
    groups: dict[str, list[SearchResult]] = {}
    for result in results:
        groups.setdefault(result.object.type, []).append(result)
    ordered = sorted(groups, key=lambda type_id: (fold_text(catalog.display(type_id).name), type_id))
    return {type_id: groups[type_id] for type_id in ordered}


def get_all_tags(objects: Iterable[AstralObject]) -> list[str]:
    """Return distinct tags, most frequent first, then alphabetically.

    Tags that differ only by case or accents count as one; the most common
    spelling (first seen on ties) represents the group.
    """
    counts: Counter[str] = Counter()
    spellings: dict[str, Counter[str]] = {}
    first_seen: dict[str, int] = {}
    for obj in objects:
        for tag in obj.tags:
            key = fold_text(tag)
            if not key:
                continue
            counts[key] += 1
            spellings.setdefault(key, Counter())[tag.strip()] += 1
            first_seen.setdefault(tag.strip(), len(first_seen))

    def representative(key: str) -> str:
        variants = spellings[key]
        return min(variants, key=lambda s: (-variants[s], first_seen[s]))

    ordered = sorted(counts, key=lambda key: (-counts[key], key))
    return [representative(key) for key in ordered]


def search(
    objects: Sequence[AstralObject],
    types: Sequence[ObjectType],
    options: SearchOptions | str,
) -> list[SearchResult]:
    """Convenience function: run ``options`` with a default ``SearchEngine``."""
    return SearchEngine().search(objects, types, options)
