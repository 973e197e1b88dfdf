# /app/services/genre_helpers/aggregation.py

"""
Aggregated book counts for advanced genres.

A genre's count is the number of distinct books tagged with it or with any of
its descendants. Books are only ever tagged directly, so the totals are derived
here by folding each genre's book set into its parent, children first.
"""

import logging
from types import MappingProxyType
from typing import Callable, Dict, Iterable, Mapping, Optional, Set

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import DBAPIError, DisconnectionError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.genre_model import GenreAggregationFilter
from ..database_helpers.genre_repository_sql import GenreRepositorySQL
from .hierarchy import HierarchyMap

logger = logging.getLogger(__name__)


class AggregationCache:
    """
    Holds the unfiltered aggregated counts for one snapshot generation.
    Readers get a read-only view; the stored dict is never mutated after it
    is set, only replaced or dropped.
    """

    def __init__(self):
        self._counts: Optional[Dict[str, int]] = None

    def get(self) -> Optional[Mapping[str, int]]:
        if self._counts is None:
            return None
        return MappingProxyType(self._counts)

    def set(self, counts: Mapping[str, int]) -> None:
        self._counts = dict(counts)

    def invalidate(self) -> None:
        self._counts = None


def is_transient_connectivity_error(exc: BaseException) -> bool:
    """True for failures that mean "the database could not be reached"."""
    if isinstance(exc, (OperationalError, DisconnectionError)):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


def build_direct_book_sets(books: Iterable[Dict]) -> Dict[str, Set[str]]:
    genre_to_books: Dict[str, Set[str]] = {}
    for book in books:
        for genre_id in book["advanced_genre_ids"]:
            genre_to_books.setdefault(genre_id, set()).add(book["id"])
    return genre_to_books


def aggregate_book_sets(
    direct_books: Mapping[str, Set[str]], hierarchy: HierarchyMap
) -> Dict[str, Set[str]]:
    """
    Returns genre id -> union of its direct books and every descendant's books.
    Tags on genres outside the hierarchy are ignored.
    """
    aggregated = {genre_id: set(direct_books.get(genre_id, ())) for genre_id in hierarchy.children_of}
    # post_order guarantees each child's set is final before it is folded.
    for genre_id in hierarchy.post_order:
        books = aggregated[genre_id]
        for child_id in hierarchy.children_of[genre_id]:
            books |= aggregated[child_id]
    return aggregated


class GenreAggregationEngine:
    def __init__(self, store, session_factory: Callable[[], Session]):
        self.store = store
        self._session_factory = session_factory

    def _fetch_books(self, filters: Optional[GenreAggregationFilter]):
        with self._session_factory() as db:
            return GenreRepositorySQL(db).get_books_with_genres(filters)

    async def calculate_counts(self, filters: Optional[GenreAggregationFilter] = None) -> Mapping[str, int]:
        """
        Aggregated book count per genre, optionally scoped by `filters`.

        Unfiltered results are cached for the current snapshot generation.
        Filtered calls always recompute and never touch that cache.

        If the book query cannot reach the database, the last cached unfiltered
        counts are returned, or zero for every genre when there are none. Any
        other failure propagates.
        """
        await self.store.ensure_populated()

        unfiltered = filters is None or filters.is_empty
        cache = self.store.aggregation_cache

        if unfiltered:
            cached = cache.get()
            if cached is not None:
                return cached

        generation = self.store.generation
        try:
            books = await run_in_threadpool(self._fetch_books, None if unfiltered else filters)
        except SQLAlchemyError as e:
            if not is_transient_connectivity_error(e):
                raise
            logger.warning("Database connection error, using cached data or returning empty counts: %s", e)
            cached = cache.get()
            if cached is not None:
                return cached
            return MappingProxyType({genre_id: 0 for genre_id in self.store.genre_ids})

        aggregated = aggregate_book_sets(build_direct_book_sets(books), self.store.hierarchy)
        counts = {genre_id: len(book_ids) for genre_id, book_ids in aggregated.items()}

        # Skip the write if populate() replaced the snapshot while we were querying.
        if unfiltered and self.store.generation == generation:
            cache.set(counts)
        return MappingProxyType(counts)
