# /app/db/models/genre_models.py

"""
This module defines the SQLAlchemy ORM models for the advanced genre taxonomy:
the genre itself, its per-locale names, and the many-to-many table that tags
books with genres.

The schema is owned by the upstream sync/migration process. These models only
describe the shape this service reads.
"""

from sqlalchemy import Column, String, Integer, ForeignKey, Table
from sqlalchemy.orm import relationship

from ..base_class import Base


# A book is tagged directly with zero or more advanced genres. Ancestor genres
# are never stored here; their totals are derived at read time.
book_advanced_genres = Table(
    "book_advanced_genres",
    Base.metadata,
    Column("book_id", String, ForeignKey("books.id", ondelete="CASCADE"), primary_key=True),
    Column("advanced_genre_id", String, ForeignKey("advanced_genres.id", ondelete="CASCADE"), primary_key=True),
)


class AdvancedGenre(Base):
    """
    SQLAlchemy model representing a node of the hierarchical genre taxonomy.
    """
    __tablename__ = "advanced_genres"

    id = Column(String, primary_key=True, index=True)
    slug = Column(String, unique=True, index=True, nullable=False)
    transliteration = Column(String, nullable=True)

    # Plain column rather than a foreign key: the sync process may write a
    # parent id before (or without) the parent row, and a dangling value is
    # read as "root".
    parent_genre = Column(String, nullable=True, index=True)

    # Denormalized by the sync process. Recomputed by aggregation at read time.
    number_of_books = Column(Integer, nullable=False, default=0)

    name_translations = relationship(
        "AdvancedGenreName", back_populates="genre", cascade="all, delete-orphan"
    )
    books = relationship("Book", secondary=book_advanced_genres, back_populates="advanced_genres")


class AdvancedGenreName(Base):
    """
    SQLAlchemy model for a single localized name of an advanced genre.
    """
    __tablename__ = "advanced_genre_names"

    id = Column(Integer, primary_key=True, autoincrement=True)
    genre_id = Column(String, ForeignKey("advanced_genres.id", ondelete="CASCADE"), nullable=False, index=True)
    locale = Column(String, nullable=False)
    text = Column(String, nullable=False)

    genre = relationship("AdvancedGenre", back_populates="name_translations")
