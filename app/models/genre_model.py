# /app/models/genre_model.py

# --- Core Imports ---
import math
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PathLocale(str, Enum):
    """The locales the public site is served in."""
    en = "en"
    ar = "ar"
    bn = "bn"
    de = "de"
    es = "es"
    fa = "fa"
    fr = "fr"
    ha = "ha"
    hi = "hi"
    id = "id"
    ms = "ms"
    ps = "ps"
    ru = "ru"
    so = "so"
    sw = "sw"
    tr = "tr"
    ur = "ur"
    uz = "uz"


# --- Internal Records ---

class LocalizedEntry(BaseModel):
    """A single per-locale text variant."""
    model_config = ConfigDict(from_attributes=True)

    locale: str
    text: str


class GenreRecord(BaseModel):
    """
    One advanced genre exactly as held by the snapshot store (and as written to
    the development snapshot file).
    """
    model_config = ConfigDict(from_attributes=True)

    id: str
    slug: str
    transliteration: Optional[str] = None
    parent_genre_id: Optional[str] = None
    number_of_books: int = 0
    name_translations: List[LocalizedEntry] = Field(default_factory=list)


class GenreAggregationFilter(BaseModel):
    """
    Optional scoping for aggregated book counts. Every field that is set
    narrows the book set (AND semantics).
    """
    author_id: Optional[str] = None
    book_ids: Optional[List[str]] = None
    year_range: Optional[Tuple[float, float]] = None
    region_id: Optional[str] = None

    @field_validator("book_ids", mode="before")
    @classmethod
    def _split_book_ids(cls, value):
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @field_validator("year_range", mode="before")
    @classmethod
    def _split_year_range(cls, value):
        if value is None:
            return value
        if isinstance(value, str):
            parts = [part.strip() for part in value.split(",")]
        elif isinstance(value, (list, tuple)):
            parts = list(value)
        else:
            raise ValueError("yearRange must contain exactly two comma-separated numbers")
        if len(parts) != 2:
            raise ValueError("yearRange must contain exactly two comma-separated numbers")
        try:
            bounds = tuple(float(part) for part in parts)
        except (TypeError, ValueError):
            raise ValueError("yearRange bounds must be numbers")
        if not all(math.isfinite(bound) for bound in bounds):
            raise ValueError("yearRange bounds must be finite numbers")
        return bounds

    @property
    def is_empty(self) -> bool:
        return (
            self.author_id is None
            and self.book_ids is None
            and self.year_range is None
            and self.region_id is None
        )


# --- API Contracts ---

class AdvancedGenreDto(BaseModel):
    """
    The public representation of an advanced genre. `numberOfBooks` is the
    aggregated count (the genre plus all of its descendants, deduplicated).
    """
    id: str
    slug: str
    numberOfBooks: int = Field(..., description="Aggregated number of books under this genre.", example=42)
    name: Optional[str] = Field(default=None, description="Name in the requested locale.")
    secondaryName: Optional[str] = Field(default=None, description="Alternate-locale name.")


class GenreTreeNode(BaseModel):
    id: str
    slug: str
    primaryName: str
    secondaryName: Optional[str] = None
    numberOfBooks: int
    children: Optional[List["GenreTreeNode"]] = None


class HomepageGenre(BaseModel):
    """
    A featured genre tile. The DTO fields are absent when the featured id is
    not (or no longer) in the taxonomy.
    """
    id: str
    color: str
    pattern: int
    slug: Optional[str] = None
    numberOfBooks: Optional[int] = None
    name: Optional[str] = None
    secondaryName: Optional[str] = None


class GenreCount(BaseModel):
    total: int = Field(..., description="Total number of advanced genres.", example=120)


GenreTreeNode.model_rebuild()
