# /app/services/genre_service.py

"""
The public read API for advanced genres. Composes the snapshot store, the
hierarchy and the aggregation engine, and projects records into locale-aware
DTOs for the router layer.
"""

from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from fastapi import Request
from sqlalchemy.orm import Session

from ..models.genre_model import (
    AdvancedGenreDto,
    GenreAggregationFilter,
    GenreRecord,
    GenreTreeNode,
    HomepageGenre,
    PathLocale,
)
from .genre_helpers.aggregation import GenreAggregationEngine
from .genre_helpers.snapshot_store import GenreSnapshotStore
from .localization import get_primary_localized_text, get_secondary_localized_text

Locale = Union[PathLocale, str]

# Featured genres on the home page, in display order.
HOMEPAGE_GENRES = [
    {"id": "prophetic-biography", "color": "yellow", "pattern": 1},
    {"id": "spiritual-reflections-and-etiquettes-with-remembrances-and-purification", "color": "red", "pattern": 2},
    {"id": "hadith-and-its-sciences", "color": "green", "pattern": 3},
    {"id": "doctrines-and-sects", "color": "gray", "pattern": 5},
    {"id": "jurisprudence-and-its-principles", "color": "indigo", "pattern": 4},
    {"id": "quranic-sciences-and-exegesis", "color": "green", "pattern": 7},
    {"id": "philosophy-and-logic", "color": "gray", "pattern": 9},
    {"id": "islamic-banking", "color": "yellow", "pattern": 1},
    {"id": "the-other-sciences", "color": "red", "pattern": 2},
    {"id": "human-sciences", "color": "green", "pattern": 3},
    {"id": "arabic-language", "color": "indigo", "pattern": 5},
    {"id": "compilations-essays-and-various-studies", "color": "yellow", "pattern": 4},
    {"id": "orientalism-and-orientalists", "color": "gray", "pattern": 7},
    {"id": "biographies-and-classes-and-virtues", "color": "indigo", "pattern": 9},
]


def make_genre_dto(genre: GenreRecord, number_of_books: int, locale: Locale) -> AdvancedGenreDto:
    return AdvancedGenreDto(
        id=genre.id,
        slug=genre.slug,
        numberOfBooks=number_of_books,
        name=get_primary_localized_text(genre.name_translations, locale, genre.transliteration),
        secondaryName=get_secondary_localized_text(genre.name_translations, locale, genre.transliteration),
    )


class GenreService:
    def __init__(self, store: GenreSnapshotStore, engine: GenreAggregationEngine):
        self.store = store
        self.engine = engine

    @classmethod
    def create(
        cls,
        session_factory: Callable[[], Session],
        snapshot_path: Optional[Path] = None,
        use_snapshot_file: bool = False,
    ) -> "GenreService":
        store = GenreSnapshotStore(session_factory, snapshot_path=snapshot_path, use_snapshot_file=use_snapshot_file)
        return cls(store, GenreAggregationEngine(store, session_factory))

    # --- Single Genre ---

    async def _with_aggregated_count(self, genre: Optional[GenreRecord], locale: Locale) -> Optional[AdvancedGenreDto]:
        if genre is None:
            return None
        # Aggregation is tree-wide; there is no single-genre shortcut.
        counts = await self.engine.calculate_counts()
        return make_genre_dto(genre, counts.get(genre.id, 0), locale)

    async def get_by_id(self, genre_id: str, locale: Locale = PathLocale.en) -> Optional[AdvancedGenreDto]:
        return await self._with_aggregated_count(await self.store.get_by_id(genre_id), locale)

    async def get_by_slug(self, slug: str, locale: Locale = PathLocale.en) -> Optional[AdvancedGenreDto]:
        return await self._with_aggregated_count(await self.store.get_by_slug(slug), locale)

    # --- Collections ---

    async def list_all(
        self, locale: Locale = PathLocale.en, filters: Optional[GenreAggregationFilter] = None
    ) -> List[AdvancedGenreDto]:
        """
        Every genre with its aggregated count, largest first. When a filter is
        in effect, genres with no books in scope are left out.
        """
        counts = await self.engine.calculate_counts(filters)
        filtered = filters is not None and not filters.is_empty

        genres = self.store.records
        if filtered:
            genres = [genre for genre in genres if counts.get(genre.id, 0) > 0]

        # sorted() is stable, so ties keep snapshot order.
        genres = sorted(genres, key=lambda genre: counts.get(genre.id, 0), reverse=True)
        return [make_genre_dto(genre, counts.get(genre.id, 0), locale) for genre in genres]

    async def get_hierarchy_tree(self, locale: Locale = PathLocale.en) -> List[GenreTreeNode]:
        counts = await self.engine.calculate_counts()
        hierarchy = self.store.hierarchy
        records = self.store.records

        nodes: Dict[str, GenreTreeNode] = {}
        for genre in records:
            primary_name = get_primary_localized_text(genre.name_translations, locale, genre.transliteration)
            nodes[genre.id] = GenreTreeNode(
                id=genre.id,
                slug=genre.slug,
                primaryName=primary_name or genre.transliteration or genre.slug,
                secondaryName=get_secondary_localized_text(genre.name_translations, locale, genre.transliteration),
                numberOfBooks=counts.get(genre.id, 0),
            )

        for genre in records:
            child_ids = hierarchy.children_of[genre.id]
            if child_ids:
                nodes[genre.id].children = [nodes[child_id] for child_id in child_ids]

        return [
            nodes[genre.id]
            for genre in records
            if genre.parent_genre_id is None or genre.parent_genre_id not in nodes
        ]

    async def get_homepage_genres(self, locale: Locale = PathLocale.en) -> List[HomepageGenre]:
        featured = []
        for entry in HOMEPAGE_GENRES:
            dto = await self.get_by_id(entry["id"], locale)
            details = dto.model_dump() if dto is not None else {}
            featured.append(HomepageGenre(**{**entry, **details}))
        return featured

    async def get_count(self) -> int:
        return await self.store.count()

    async def get_genre_ids_with_descendants(self, genre_ids: List[str]) -> List[str]:
        """Expands genre ids for "this genre or anything under it" book searches."""
        if not genre_ids:
            return []
        await self.store.ensure_populated()
        return self.store.hierarchy.genre_ids_with_descendants(genre_ids)


# --- DEPENDENCY PROVIDER ---
def get_genre_service(request: Request) -> GenreService:
    """
    FastAPI dependency returning the process-wide GenreService built in the
    application lifespan.
    """
    return request.app.state.genre_service
