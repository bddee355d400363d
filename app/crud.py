# app/crud.py

import logging
from contextlib import contextmanager
from typing import List, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from . import models, schemas
from .core.exceptions import StoreError
from .core.geo import bounding_box, haversine_meters, validate_coordinates, validate_radius
from .core.security import get_password_hash

logger = logging.getLogger(__name__)


@contextmanager
def store_errors(db: Session, action: str):
    """Roll back and re-raise any database failure as :class:`StoreError`."""
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Store failure while trying to %s", action)
        raise StoreError(f"Could not {action}.") from e


def _commit(db: Session, action: str):
    with store_errors(db, action):
        db.commit()


# --- User CRUD ---

def get_user_by_email(db: Session, email: str):
    with store_errors(db, "load user"):
        return db.query(models.User).filter(models.User.email == email).first()


def create_user(db: Session, user: schemas.UserCreate):
    hashed_password = get_password_hash(user.password)
    db_user = models.User(email=user.email, hashed_password=hashed_password, role=user.role)
    db.add(db_user)
    _commit(db, "create user")
    db.refresh(db_user)
    return db_user


# --- Hoarding store ---

def insert_listing(db: Session, listing: schemas.HoardingCreate, user_id: int):
    longitude, latitude = listing.location.coordinates
    db_listing = models.Hoarding(
        **listing.model_dump(exclude={"location"}),
        longitude=longitude,
        latitude=latitude,
        created_by=user_id,
    )
    db.add(db_listing)
    _commit(db, "save hoarding")
    db.refresh(db_listing)
    return db_listing


def get_listing_by_id(db: Session, listing_id: int):
    with store_errors(db, "load hoarding"):
        return db.query(models.Hoarding).filter(models.Hoarding.id == listing_id).first()


def find_all(db: Session) -> List[models.Hoarding]:
    with store_errors(db, "list hoardings"):
        return (
            db.query(models.Hoarding)
            .options(joinedload(models.Hoarding.owner))
            .order_by(models.Hoarding.id)
            .all()
        )


def find_near(
    db: Session,
    longitude: float,
    latitude: float,
    max_distance: float,
) -> List[Tuple[models.Hoarding, float]]:
    """Hoardings within ``max_distance`` meters of the point, nearest first.

    The latitude/longitude index narrows the scan to a bounding box; exact
    great-circle distance decides membership and order.
    """
    longitude, latitude = validate_coordinates(longitude, latitude)
    max_distance = validate_radius(max_distance)

    min_lon, min_lat, max_lon, max_lat = bounding_box(longitude, latitude, max_distance)
    with store_errors(db, "search nearby hoardings"):
        query = (
            db.query(models.Hoarding)
            .options(joinedload(models.Hoarding.owner))
            .filter(models.Hoarding.latitude.between(min_lat, max_lat))
        )
        if min_lon is not None:
            query = query.filter(models.Hoarding.longitude.between(min_lon, max_lon))
        candidates = query.all()

    results = []
    for listing in candidates:
        distance = haversine_meters(longitude, latitude, listing.longitude, listing.latitude)
        if distance <= max_distance:
            results.append((listing, distance))

    results.sort(key=lambda pair: (pair[1], pair[0].id))
    return results


def update_listing_by_id(db: Session, listing_id: int, values: dict):
    listing = get_listing_by_id(db, listing_id)
    if not listing:
        return None

    for k, v in values.items():
        setattr(listing, k, v)

    with store_errors(db, "update hoarding"):
        db.commit()
        db.refresh(listing)
    return listing


def delete_listing_by_id(db: Session, listing_id: int) -> bool:
    listing = get_listing_by_id(db, listing_id)
    if not listing:
        return False
    db.delete(listing)
    _commit(db, "delete hoarding")
    return True
