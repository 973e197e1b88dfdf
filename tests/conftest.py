# /tests/conftest.py

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.db.models.book_models import Author, AuthorLocation, Book, Region
from app.db.models.genre_models import AdvancedGenre, AdvancedGenreName
from app.services.genre_service import GenreService


@pytest.fixture
def session_factory():
    """
    A fresh in-memory SQLite database per test, shared across threads so the
    threadpool-offloaded queries see the same data.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def seed(session_factory):
    """
    Returns a helper that writes genres, authors and books in one go.

        seed(
            genres=[("A", None), ("B", "A")],
            books=[("b1", "author-1", ["B"])],
            authors=[("author-1", 850, ["region-1"])],
        )
    """
    def _seed(genres=(), books=(), authors=(), names=None):
        names = names or {}
        with session_factory() as db:
            region_ids = {region_id for _, _, regions in authors for region_id in regions}
            for region_id in sorted(region_ids):
                db.add(Region(id=region_id, slug=region_id))

            for author_id, year, regions in authors:
                author = Author(id=author_id, slug=author_id, year=year)
                author.locations = [AuthorLocation(region_id=region_id) for region_id in regions]
                db.add(author)

            genre_objects = {}
            for genre_id, parent_id in genres:
                genre = AdvancedGenre(id=genre_id, slug=f"{genre_id.lower()}-slug", parent_genre=parent_id)
                genre.name_translations = [
                    AdvancedGenreName(locale=locale, text=text)
                    for locale, text in names.get(genre_id, {"en": f"Genre {genre_id}"}).items()
                ]
                genre_objects[genre_id] = genre
                db.add(genre)

            known_authors = {author_id for author_id, _, _ in authors}
            for book_id, author_id, genre_ids in books:
                if author_id not in known_authors:
                    db.add(Author(id=author_id, slug=author_id))
                    known_authors.add(author_id)
                book = Book(id=book_id, slug=book_id, author_id=author_id)
                book.advanced_genres = [genre_objects[genre_id] for genre_id in genre_ids]
                db.add(book)

            db.commit()

    return _seed


@pytest.fixture
def genre_service(session_factory):
    return GenreService.create(session_factory)
