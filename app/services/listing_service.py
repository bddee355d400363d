# app/services/listing_service.py
"""Hoarding operations with role, ownership and validation rules applied.

Route handlers stay thin: they resolve the acting user and hand the raw
request payload here. Everything raises domain errors from
``app.core.exceptions``; nothing in this module knows about HTTP.
"""
import logging
from typing import Any, List, Optional

import pydantic
from sqlalchemy.orm import Session

from app import crud, models, schemas
from app.core.config import settings
from app.core.exceptions import AuthorizationError, NotFoundError, OwnershipError, ValidationError
from app.core.geo import validate_coordinates, validate_radius

logger = logging.getLogger(__name__)


def _field_errors(exc: pydantic.ValidationError) -> List[dict]:
    errors = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "body"
        errors.append({"field": field, "message": err["msg"]})
    return errors


def parse_payload(model, payload: Any, action: str):
    if isinstance(payload, model):
        return payload
    if not isinstance(payload, dict):
        raise ValidationError(f"Invalid {action} payload. Expected a JSON object.")
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as e:
        errors = _field_errors(e)
        fields = ", ".join(sorted({err["field"] for err in errors}))
        raise ValidationError(f"Invalid {action}: {fields}", errors=errors) from e


def _attach_creator(listing: models.Hoarding, distance: Optional[float] = None) -> models.Hoarding:
    # plain attributes on identity-mapped rows, so always overwrite both
    listing.created_by_email = listing.owner.email if listing.owner else None
    listing.distance = distance
    return listing


def _load_owned(db: Session, listing_id: int, acting_user: models.User, action: str) -> models.Hoarding:
    listing = crud.get_listing_by_id(db, listing_id)
    if not listing:
        raise NotFoundError("Hoarding not found", id=listing_id)
    # TODO: fold the owner check into the UPDATE/DELETE statement to close the read-then-write gap
    if listing.created_by != acting_user.id:
        raise OwnershipError(f"Not authorized to {action} this hoarding", id=listing_id)
    return listing


def add_listing(db: Session, draft: Any, acting_user: models.User) -> models.Hoarding:
    if acting_user.role != models.UserRoleEnum.authorized:
        raise AuthorizationError("Only authorized users can add hoardings")

    listing_in = parse_payload(schemas.HoardingCreate, draft, "hoarding")
    listing = crud.insert_listing(db, listing_in, user_id=acting_user.id)
    logger.info(
        "Hoarding %s added by user %s at %s",
        listing.id, acting_user.id, listing.location["coordinates"],
    )
    return _attach_creator(listing)


def list_nearby(db: Session, lat: Any, lng: Any, radius: Any = None) -> List[models.Hoarding]:
    if lat is None or lng is None or lat == "" or lng == "":
        raise ValidationError(
            "Latitude and longitude are required",
            errors=[
                {"field": name, "message": "is required"}
                for name, value in (("lat", lat), ("lng", lng))
                if value is None or value == ""
            ],
        )
    longitude, latitude = validate_coordinates(lng, lat)
    if radius is None:
        radius = settings.DEFAULT_NEARBY_RADIUS_M
    radius = validate_radius(radius, max_radius=settings.MAX_NEARBY_RADIUS_M)

    results = crud.find_near(db, longitude, latitude, radius)
    logger.debug("Nearby (%s, %s) r=%s -> %d hoardings", latitude, longitude, radius, len(results))
    return [_attach_creator(listing, distance) for listing, distance in results]


def list_all(db: Session) -> List[models.Hoarding]:
    return [_attach_creator(listing) for listing in crud.find_all(db)]


def get_listing(db: Session, listing_id: int) -> models.Hoarding:
    listing = crud.get_listing_by_id(db, listing_id)
    if not listing:
        raise NotFoundError("Hoarding not found", id=listing_id)
    return _attach_creator(listing)


def update_listing(db: Session, listing_id: int, patch: Any, acting_user: models.User) -> models.Hoarding:
    _load_owned(db, listing_id, acting_user, "update")

    listing_in = parse_payload(schemas.HoardingUpdate, patch, "hoarding update")
    listing = crud.update_listing_by_id(db, listing_id, listing_in.to_columns())
    if not listing:
        # removed between the ownership check and the write
        raise NotFoundError("Hoarding not found", id=listing_id)
    logger.info("Hoarding %s updated by user %s", listing_id, acting_user.id)
    return _attach_creator(listing)


def delete_listing(db: Session, listing_id: int, acting_user: models.User) -> dict:
    _load_owned(db, listing_id, acting_user, "delete")

    if not crud.delete_listing_by_id(db, listing_id):
        raise NotFoundError("Hoarding not found", id=listing_id)
    logger.info("Hoarding %s removed by user %s", listing_id, acting_user.id)
    return {"message": "Hoarding removed", "id": listing_id}
