# /app/db/models/book_models.py

"""
The slice of the library catalogue that genre aggregation filters on: books,
their authors, and the regions authors are associated with.
"""

from sqlalchemy import Column, String, Integer, ForeignKey
from sqlalchemy.orm import relationship

from ..base_class import Base
from .genre_models import book_advanced_genres


class Region(Base):
    id = Column(String, primary_key=True, index=True)
    slug = Column(String, unique=True, index=True, nullable=False)


class Author(Base):
    """
    SQLAlchemy model representing a book author.
    `year` is the author's (death) year used by the year-range filter.
    """
    id = Column(String, primary_key=True, index=True)
    slug = Column(String, unique=True, index=True, nullable=False)
    year = Column(Integer, nullable=True, index=True)

    books = relationship("Book", back_populates="author")
    locations = relationship("AuthorLocation", back_populates="author", cascade="all, delete-orphan")


class AuthorLocation(Base):
    """
    Links an author to a region they were active in. An author can have
    several locations, each pointing at one region.
    """
    id = Column(Integer, primary_key=True, autoincrement=True)
    author_id = Column(String, ForeignKey("authors.id", ondelete="CASCADE"), nullable=False, index=True)
    region_id = Column(String, ForeignKey("regions.id"), nullable=False, index=True)
    type = Column(String, nullable=True)

    author = relationship("Author", back_populates="locations")
    region = relationship("Region")


class Book(Base):
    id = Column(String, primary_key=True, index=True)
    slug = Column(String, unique=True, index=True, nullable=False)
    author_id = Column(String, ForeignKey("authors.id"), nullable=False, index=True)

    author = relationship("Author", back_populates="books")
    advanced_genres = relationship("AdvancedGenre", secondary=book_advanced_genres, back_populates="books")
