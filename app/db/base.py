# /app/db/base.py

# Central registry for all SQLAlchemy models. Importing them here ensures the
# Base metadata knows about every table (used by `Base.metadata.create_all`
# in tests and local development).

from .base_class import Base

from .models.genre_models import AdvancedGenre, AdvancedGenreName, book_advanced_genres
from .models.book_models import Author, AuthorLocation, Book, Region
