# /app/services/genre_helpers/snapshot_store.py

"""
In-process snapshot of every advanced genre, keyed by id and by slug.

The store is populated lazily on first use and replaced wholesale on every
`populate()`. Each population starts a new "generation": the cached hierarchy
and the cached unfiltered aggregation belong to a generation and are dropped
when it ends.

In development the raw rows are also mirrored to a JSON file so restarts do
not have to hit the database.
"""

import json
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional

from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.models.genre_model import GenreRecord
from ..database_helpers.genre_repository_sql import GenreRepositorySQL
from .aggregation import AggregationCache
from .hierarchy import HierarchyMap, build_hierarchy

logger = logging.getLogger(__name__)


class GenreSnapshotStore:
    name = "advanced-genres"

    def __init__(
        self,
        session_factory: Callable[[], Session],
        snapshot_path: Optional[Path] = None,
        use_snapshot_file: bool = False,
    ):
        self._session_factory = session_factory
        self.snapshot_path = Path(snapshot_path) if snapshot_path else None
        self.use_snapshot_file = use_snapshot_file and self.snapshot_path is not None
        self.aggregation_cache = AggregationCache()
        self.generation = 0

        self._by_id: Optional[Dict[str, GenreRecord]] = None
        self._by_slug: Optional[Dict[str, GenreRecord]] = None
        self._hierarchy: Optional[HierarchyMap] = None

    # --- Population ---

    def _fetch_rows(self) -> List[Dict]:
        with self._session_factory() as db:
            return GenreRepositorySQL(db).get_all_genres()

    def _count_rows(self) -> int:
        with self._session_factory() as db:
            return GenreRepositorySQL(db).count_genres()

    def _read_snapshot(self) -> Optional[List[GenreRecord]]:
        if not self.snapshot_path.exists():
            return None
        try:
            rows = json.loads(self.snapshot_path.read_text(encoding="utf-8"))
            if not isinstance(rows, list):
                raise ValueError("snapshot root is not a list")
            return [GenreRecord.model_validate(row) for row in rows]
        except (OSError, ValueError, ValidationError) as e:
            logger.warning("Ignoring unreadable genre snapshot at %s: %s", self.snapshot_path, e)
            return None

    def _write_snapshot(self, rows: List[Dict]) -> None:
        try:
            self.snapshot_path.parent.mkdir(parents=True, exist_ok=True)
            self.snapshot_path.write_text(json.dumps(rows), encoding="utf-8")
        except (OSError, TypeError) as e:
            logger.warning("Could not write genre snapshot to %s: %s", self.snapshot_path, e)

    async def populate(self) -> None:
        records = None
        source = "snapshot file"
        if self.use_snapshot_file:
            records = await run_in_threadpool(self._read_snapshot)

        if records is None:
            source = "database"
            rows = await run_in_threadpool(self._fetch_rows)
            records = [GenreRecord.model_validate(row) for row in rows]
            if self.use_snapshot_file:
                await run_in_threadpool(self._write_snapshot, rows)

        by_id: Dict[str, GenreRecord] = {}
        by_slug: Dict[str, GenreRecord] = {}
        for record in records:
            by_id[record.id] = record
            by_slug[record.slug] = record

        self._by_id = by_id
        self._by_slug = by_slug
        self._hierarchy = None
        self.generation += 1
        self.aggregation_cache.invalidate()

        logger.info("Loaded %d advanced genres from %s (generation %d)", len(by_id), source, self.generation)

    async def ensure_populated(self) -> None:
        if self._by_id is None:
            await self.populate()

    # --- Lookups ---

    @property
    def is_populated(self) -> bool:
        return self._by_id is not None

    @property
    def records(self) -> List[GenreRecord]:
        return list((self._by_id or {}).values())

    @property
    def genre_ids(self) -> List[str]:
        return list(self._by_id or {})

    @property
    def hierarchy(self) -> HierarchyMap:
        if self._hierarchy is None:
            self._hierarchy = build_hierarchy(self.records)
        return self._hierarchy

    async def get_by_id(self, genre_id: str) -> Optional[GenreRecord]:
        await self.ensure_populated()
        return self._by_id.get(genre_id)

    async def get_by_slug(self, slug: str) -> Optional[GenreRecord]:
        await self.ensure_populated()
        return self._by_slug.get(slug)

    async def count(self) -> int:
        """Number of genres, without forcing a population."""
        if self._by_id is not None:
            return len(self._by_id)
        return await run_in_threadpool(self._count_rows)
