# /tests/test_aggregation.py

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import OperationalError, ProgrammingError

from app.db.models.book_models import Book
from app.db.models.genre_models import AdvancedGenre
from app.models.genre_model import GenreAggregationFilter, GenreRecord
from app.services.database_helpers.genre_repository_sql import GenreRepositorySQL
from app.services.genre_helpers.aggregation import (
    AggregationCache,
    aggregate_book_sets,
    build_direct_book_sets,
    is_transient_connectivity_error,
)
from app.services.genre_helpers.hierarchy import build_hierarchy


def connection_refused():
    return OperationalError("SELECT books", {}, Exception("could not connect to server: Connection refused"))


# --- Pure folding ---

def test_aggregate_book_sets_unions_children_without_double_counting():
    records = [
        GenreRecord(id="A", slug="a"),
        GenreRecord(id="B1", slug="b1", parent_genre_id="A"),
        GenreRecord(id="B2", slug="b2", parent_genre_id="A"),
    ]
    direct = build_direct_book_sets([
        {"id": "b1", "advanced_genre_ids": ["B1", "B2"]},
        {"id": "b2", "advanced_genre_ids": ["B2"]},
    ])
    aggregated = aggregate_book_sets(direct, build_hierarchy(records))
    assert aggregated["A"] == {"b1", "b2"}
    assert aggregated["B1"] == {"b1"}
    assert aggregated["B2"] == {"b1", "b2"}


def test_aggregate_book_sets_ignores_tags_on_unknown_genres():
    direct = {"ghost": {"b1"}}
    aggregated = aggregate_book_sets(direct, build_hierarchy([GenreRecord(id="A", slug="a")]))
    assert aggregated == {"A": set()}


def test_aggregation_cache_returns_read_only_view():
    cache = AggregationCache()
    assert cache.get() is None
    cache.set({"A": 1})
    view = cache.get()
    with pytest.raises(TypeError):
        view["A"] = 2
    cache.invalidate()
    assert cache.get() is None


def test_transient_error_classification():
    assert is_transient_connectivity_error(connection_refused())
    assert not is_transient_connectivity_error(ProgrammingError("SELECT", {}, Exception("syntax error")))
    assert not is_transient_connectivity_error(ValueError("nope"))


# --- Engine against the database ---

@pytest.mark.asyncio
async def test_three_level_tree_counts_flow_to_every_ancestor(seed, genre_service):
    seed(genres=[("A", None), ("B", "A"), ("C", "B")], books=[("b1", "au1", ["C"])])
    counts = await genre_service.engine.calculate_counts()
    assert dict(counts) == {"A": 1, "B": 1, "C": 1}


@pytest.mark.asyncio
async def test_sibling_books_are_unioned_at_the_parent(seed, genre_service):
    seed(
        genres=[("A", None), ("B1", "A"), ("B2", "A")],
        books=[("b1", "au1", ["B1"]), ("b2", "au1", ["B2"]), ("b3", "au1", ["B1", "B2"])],
    )
    counts = await genre_service.engine.calculate_counts()
    assert counts["A"] == 3
    assert counts["B1"] == 2
    assert counts["B2"] == 2


@pytest.mark.asyncio
async def test_monotonic_and_leaf_correct(seed, genre_service, session_factory):
    seed(
        genres=[("A", None), ("B", "A"), ("C", "B"), ("D", "A"), ("E", None)],
        books=[
            ("b1", "au1", ["A"]),
            ("b2", "au1", ["C"]),
            ("b3", "au1", ["D", "C"]),
            ("b4", "au1", ["E"]),
        ],
    )
    await genre_service.store.ensure_populated()
    hierarchy = genre_service.store.hierarchy
    with session_factory() as db:
        books = GenreRepositorySQL(db).get_books_with_genres()
    direct = build_direct_book_sets(books)
    aggregated = aggregate_book_sets(direct, hierarchy)

    for genre_id, descendants in hierarchy.descendants_of.items():
        for descendant_id in descendants:
            assert aggregated[genre_id] >= aggregated[descendant_id]
        if not hierarchy.children_of[genre_id]:
            assert aggregated[genre_id] == direct.get(genre_id, set())
    assert aggregated["A"] == {"b1", "b2", "b3"}


@pytest.mark.asyncio
async def test_filters_scope_the_book_set(seed, genre_service):
    seed(
        genres=[("A", None), ("B", "A"), ("C", None)],
        authors=[("au1", 300, ["iraq"]), ("au2", 700, ["egypt", "syria"])],
        books=[("b1", "au1", ["B"]), ("b2", "au2", ["B"]), ("b3", "au2", ["C"])],
    )
    engine = genre_service.engine

    by_author = await engine.calculate_counts(GenreAggregationFilter(author_id="au1"))
    assert dict(by_author) == {"A": 1, "B": 1, "C": 0}

    by_region = await engine.calculate_counts(GenreAggregationFilter(region_id="syria"))
    assert dict(by_region) == {"A": 1, "B": 1, "C": 1}

    by_years = await engine.calculate_counts(GenreAggregationFilter(year_range=(600, 800)))
    assert dict(by_years) == {"A": 1, "B": 1, "C": 1}

    by_books = await engine.calculate_counts(GenreAggregationFilter(book_ids=["b1", "b3"]))
    assert dict(by_books) == {"A": 1, "B": 1, "C": 1}

    combined = await engine.calculate_counts(GenreAggregationFilter(author_id="au2", year_range=(100, 400)))
    assert dict(combined) == {"A": 0, "B": 0, "C": 0}


@pytest.mark.asyncio
async def test_unfiltered_result_is_cached_and_filtered_calls_bypass_cache(seed, genre_service, mocker):
    seed(genres=[("A", None), ("B", "A")], books=[("b1", "au1", ["B"]), ("b2", "au2", ["A"])])
    engine = genre_service.engine
    spy = mocker.spy(GenreRepositorySQL, "get_books_with_genres")

    first = await engine.calculate_counts()
    second = await engine.calculate_counts()
    assert dict(first) == dict(second) == {"A": 2, "B": 1}
    assert spy.call_count == 1

    filtered = await engine.calculate_counts(GenreAggregationFilter(author_id="au1"))
    assert dict(filtered) == {"A": 1, "B": 1}
    assert spy.call_count == 2
    assert dict(genre_service.store.aggregation_cache.get()) == {"A": 2, "B": 1}

    # An empty filter is the unfiltered case.
    await engine.calculate_counts(GenreAggregationFilter())
    assert spy.call_count == 2


@pytest.mark.asyncio
async def test_filtered_call_does_not_populate_the_cache(seed, genre_service):
    seed(genres=[("A", None)], books=[("b1", "au1", ["A"])])
    await genre_service.engine.calculate_counts(GenreAggregationFilter(author_id="au1"))
    assert genre_service.store.aggregation_cache.get() is None


@pytest.mark.asyncio
async def test_repopulate_invalidates_cached_counts(seed, genre_service, session_factory):
    seed(genres=[("A", None)], books=[("b1", "au1", ["A"])])
    assert (await genre_service.engine.calculate_counts())["A"] == 1

    with session_factory() as db:
        book = Book(id="b2", slug="b2", author_id="au1")
        book.advanced_genres = [db.get(AdvancedGenre, "A")]
        db.add(book)
        db.commit()

    # Still cached until the store is repopulated.
    assert (await genre_service.engine.calculate_counts())["A"] == 1
    await genre_service.store.populate()
    assert genre_service.store.aggregation_cache.get() is None
    assert (await genre_service.engine.calculate_counts())["A"] == 2


@pytest.mark.asyncio
async def test_connectivity_failure_falls_back_to_cached_counts(seed, genre_service, mocker):
    seed(genres=[("A", None)])
    await genre_service.store.ensure_populated()
    genre_service.store.aggregation_cache.set({"A": 5})
    mocker.patch.object(GenreRepositorySQL, "get_books_with_genres", side_effect=connection_refused())

    assert dict(await genre_service.engine.calculate_counts()) == {"A": 5}
    filtered = await genre_service.engine.calculate_counts(GenreAggregationFilter(author_id="au1"))
    assert dict(filtered) == {"A": 5}


@pytest.mark.asyncio
async def test_connectivity_failure_without_cache_returns_zero_counts(seed, genre_service, mocker):
    seed(genres=[("A", None), ("B", "A")], books=[("b1", "au1", ["B"])])
    await genre_service.store.ensure_populated()
    mocker.patch.object(GenreRepositorySQL, "get_books_with_genres", side_effect=connection_refused())

    counts = await genre_service.engine.calculate_counts()
    assert dict(counts) == {"A": 0, "B": 0}
    assert genre_service.store.aggregation_cache.get() is None


@pytest.mark.asyncio
async def test_other_database_errors_propagate(seed, genre_service, mocker):
    seed(genres=[("A", None)])
    await genre_service.store.ensure_populated()
    genre_service.store.aggregation_cache.set({"A": 5})
    mocker.patch.object(
        GenreRepositorySQL,
        "get_books_with_genres",
        side_effect=ProgrammingError("SELECT", {}, Exception("relation does not exist")),
    )
    with pytest.raises(ProgrammingError):
        await genre_service.engine.calculate_counts(GenreAggregationFilter(author_id="au1"))


@pytest.mark.asyncio
async def test_result_from_superseded_generation_is_not_cached(seed, genre_service, mocker):
    seed(genres=[("A", None)], books=[("b1", "au1", ["A"])])
    store = genre_service.store
    await store.ensure_populated()

    original = GenreRepositorySQL.get_books_with_genres

    def fetch_then_bump_generation(self, filters=None):
        rows = original(self, filters)
        store.generation += 1
        return rows

    mocker.patch.object(GenreRepositorySQL, "get_books_with_genres", fetch_then_bump_generation)
    counts = await genre_service.engine.calculate_counts()
    assert counts["A"] == 1
    assert store.aggregation_cache.get() is None


def test_year_range_filter_parses_numbers_and_rejects_non_finite():
    assert GenreAggregationFilter(year_range="100.5, 200").year_range == (100.5, 200.0)
    assert GenreAggregationFilter(year_range=(300, 400)).year_range == (300.0, 400.0)
    for bad in ("inf,5", "5,nan", "1,2,3", "a,b"):
        with pytest.raises(ValidationError):
            GenreAggregationFilter(year_range=bad)
