# /app/services/database_helpers/genre_repository_sql.py

"""
This module contains the raw SQLAlchemy queries that feed the advanced genre
subsystem. It is the only place that knows how genres, books, authors and
regions are laid out in the relational store.
"""

from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from app.db.models.book_models import Author, AuthorLocation, Book
from app.db.models.genre_models import AdvancedGenre
from app.models.genre_model import GenreAggregationFilter


class GenreRepositorySQL:
    def __init__(self, db_session: Session):
        self.db = db_session

    def get_all_genres(self) -> List[Dict]:
        """
        Full snapshot of the taxonomy, one plain dictionary per genre with its
        localized names inlined. The dictionaries are JSON-serializable so the
        same rows can be written to the development snapshot file.
        """
        genres = (
            self.db.query(AdvancedGenre)
            .options(selectinload(AdvancedGenre.name_translations))
            .all()
        )
        return [
            {
                "id": genre.id,
                "slug": genre.slug,
                "transliteration": genre.transliteration,
                "parent_genre_id": genre.parent_genre,
                "number_of_books": genre.number_of_books or 0,
                "name_translations": [
                    {"locale": name.locale, "text": name.text} for name in genre.name_translations
                ],
            }
            for genre in genres
        ]

    def get_books_with_genres(self, filters: Optional[GenreAggregationFilter] = None) -> List[Dict]:
        """
        Returns `{"id": book_id, "advanced_genre_ids": [...]}` for every book
        matching the filter (all books when no filter is given). Only direct
        genre tags are returned.
        """
        query = self.db.query(Book).options(selectinload(Book.advanced_genres))

        if filters is not None:
            if filters.author_id is not None:
                query = query.filter(Book.author_id == filters.author_id)
            if filters.book_ids is not None:
                query = query.filter(Book.id.in_(filters.book_ids))
            if filters.region_id is not None:
                query = query.filter(
                    Book.author.has(Author.locations.any(AuthorLocation.region_id == filters.region_id))
                )
            if filters.year_range is not None:
                min_year, max_year = filters.year_range
                query = query.filter(Book.author.has(Author.year.between(min_year, max_year)))

        return [
            {"id": book.id, "advanced_genre_ids": [genre.id for genre in book.advanced_genres]}
            for book in query.all()
        ]

    def count_genres(self) -> int:
        return self.db.query(func.count(AdvancedGenre.id)).scalar() or 0
