# /app/routers/genre_router.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError

from ..models.genre_model import (
    AdvancedGenreDto,
    GenreAggregationFilter,
    GenreCount,
    GenreTreeNode,
    HomepageGenre,
    PathLocale,
)
from ..services.genre_service import GenreService, get_genre_service

router = APIRouter()


# --- GENRE COLLECTION ENDPOINTS (/genre) ---

@router.get("", response_model=List[AdvancedGenreDto], summary="List Advanced Genres with Aggregated Book Counts")
async def list_genres(
    locale: PathLocale = Query(PathLocale.en),
    bookIds: Optional[str] = Query(None, description="Comma-separated book ids."),
    yearRange: Optional[str] = Query(None, description="Comma-separated `min,max` author years (inclusive)."),
    authorId: Optional[str] = Query(None),
    regionId: Optional[str] = Query(None),
    service: GenreService = Depends(get_genre_service),
):
    try:
        filters = GenreAggregationFilter(
            author_id=authorId, book_ids=bookIds, year_range=yearRange, region_id=regionId
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.errors(include_url=False, include_context=False))
    return await service.list_all(locale, filters)


@router.get("/hierarchy", response_model=List[GenreTreeNode], response_model_exclude_none=True, summary="Get the Genre Tree")
async def get_genre_hierarchy(
    locale: PathLocale = Query(PathLocale.en),
    service: GenreService = Depends(get_genre_service),
):
    return await service.get_hierarchy_tree(locale)


@router.get("/count", response_model=GenreCount, summary="Count Advanced Genres")
async def get_genre_count(service: GenreService = Depends(get_genre_service)):
    return GenreCount(total=await service.get_count())


@router.get("/homepage", response_model=List[HomepageGenre], summary="Get Featured Home Page Genres")
async def get_homepage_genres(
    locale: PathLocale = Query(PathLocale.en),
    service: GenreService = Depends(get_genre_service),
):
    return await service.get_homepage_genres(locale)


# --- INDIVIDUAL GENRE RESOURCE ENDPOINT (/genre/{slug}) ---

@router.get("/{slug}", response_model=AdvancedGenreDto, summary="Get a Single Genre by Slug")
async def get_genre_by_slug(
    slug: str,
    locale: PathLocale = Query(PathLocale.en),
    service: GenreService = Depends(get_genre_service),
):
    genre = await service.get_by_slug(slug, locale)
    if genre is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Genre not found")
    return genre
