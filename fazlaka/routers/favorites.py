"""Favorites router."""

import logging

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fazlaka.database import get_db
from fazlaka.dependencies.auth import get_current_user
from fazlaka.errors import NotFoundError
from fazlaka.models import User
from fazlaka.schemas.common import MessageResponse
from fazlaka.schemas.favorite import (
    ContentType,
    FavoriteListResponse,
    FavoriteRequest,
    FavoriteStatus,
)
from fazlaka.services.repositories import FavoriteRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/favorites", tags=["favorites"])


def _already_favorited() -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_200_OK, content={"message": "Already in favorites"})


@router.get("", response_model=FavoriteStatus)
def favorite_status(
    content_id: str = Query(..., min_length=1),
    content_type: ContentType = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    """Whether the caller has favorited a piece of content."""
    favorite = FavoriteRepository(db).find(current_user.id, content_type, content_id)
    return {"is_favorite": favorite is not None}


@router.get("/list", response_model=FavoriteListResponse)
def list_favorites(
    content_type: ContentType | None = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    return {"favorites": FavoriteRepository(db).find_for_user(current_user.id, content_type)}


@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def add_favorite(
    data: FavoriteRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Add to favorites. Adding twice is not an error."""
    favorites = FavoriteRepository(db)
    if favorites.find(current_user.id, data.content_type, data.content_id):
        return _already_favorited()

    try:
        favorites.create(current_user.id, data.content_type, data.content_id)
        db.commit()
    except IntegrityError:
        # A concurrent request added the same favorite first
        db.rollback()
        return _already_favorited()

    logger.info(f"User {current_user.id} favorited {data.content_type} {data.content_id}")
    return {"message": "Added to favorites"}


@router.delete("", response_model=MessageResponse)
def remove_favorite(
    content_id: str = Query(..., min_length=1),
    content_type: ContentType = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    favorites = FavoriteRepository(db)
    favorite = favorites.find(current_user.id, content_type, content_id)
    if favorite is None:
        raise NotFoundError("Favorite not found")

    favorites.delete(favorite)
    db.commit()
    return {"message": "Removed from favorites"}
