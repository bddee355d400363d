# app/apis/v1/endpoints/hoardings.py
from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from app import schemas, models
from app.database import get_db
from app.dependencies import get_current_user
from app.services import listing_service

router = APIRouter()

# Payloads are taken raw so role and ownership are decided before the body
# is validated; listing_service raises the matching domain error.


@router.post("/add", response_model=schemas.Hoarding, status_code=status.HTTP_201_CREATED)
def add_hoarding(
    draft: Any = Body(None),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> Any:
    return listing_service.add_listing(db, draft, current_user)


@router.get("/nearby", response_model=List[schemas.Hoarding])
def nearby_hoardings(
    lat: Optional[str] = None,
    lng: Optional[str] = None,
    radius: Optional[str] = None,
    db: Session = Depends(get_db),
) -> Any:
    return listing_service.list_nearby(db, lat=lat, lng=lng, radius=radius)


@router.get("", response_model=List[schemas.Hoarding])
def read_hoardings(db: Session = Depends(get_db)) -> Any:
    return listing_service.list_all(db)


@router.get("/{hoarding_id}", response_model=schemas.Hoarding)
def read_hoarding(hoarding_id: int, db: Session = Depends(get_db)) -> Any:
    return listing_service.get_listing(db, hoarding_id)


@router.put("/{hoarding_id}", response_model=schemas.Hoarding)
def update_hoarding(
    hoarding_id: int,
    patch: Any = Body(None),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> Any:
    return listing_service.update_listing(db, hoarding_id, patch, current_user)


@router.delete("/{hoarding_id}", response_model=schemas.DeleteConfirmation)
def delete_hoarding(
    hoarding_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> Any:
    return listing_service.delete_listing(db, hoarding_id, current_user)
