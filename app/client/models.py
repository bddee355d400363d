# app/client/models.py
"""Typed views of API responses.

Shapes are checked here, once, at the trust boundary. Coordinates are only
shape-checked (a two-item list); range checks happen where markers are built
so one bad record cannot take down a whole result set.
"""
from datetime import datetime
from typing import Any, List, Optional

import pydantic
from pydantic import BaseModel, ConfigDict, TypeAdapter

from app.core.exceptions import ValidationError


class Location(BaseModel):
    type: str = "Point"
    coordinates: List[Any]

    @pydantic.field_validator("coordinates")
    @classmethod
    def pair(cls, value):
        if len(value) != 2:
            raise ValueError("coordinates must be [longitude, latitude]")
        return value


class Listing(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    title: str
    description: str = ""
    size: str = ""
    price: float
    location: Location
    address: Optional[str] = None
    availability: bool = True
    created_by: Optional[int] = None
    created_by_email: Optional[str] = None
    created_at: Optional[datetime] = None
    distance: Optional[float] = None

    @property
    def longitude(self):
        return self.location.coordinates[0]

    @property
    def latitude(self):
        return self.location.coordinates[1]


class User(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    email: str
    role: str


class AuthResult(BaseModel):
    token: str
    user: User


_listings_adapter = TypeAdapter(List[Listing])


def _shape_error(what: str, exc: pydantic.ValidationError) -> ValidationError:
    errors = [
        {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
        for err in exc.errors()
    ]
    return ValidationError(f"Malformed {what} in server response", errors=errors)


def parse_listings(payload: Any) -> List[Listing]:
    try:
        return _listings_adapter.validate_python(payload)
    except pydantic.ValidationError as e:
        raise _shape_error("listings", e) from e


def parse_listing(payload: Any) -> Listing:
    try:
        return Listing.model_validate(payload)
    except pydantic.ValidationError as e:
        raise _shape_error("listing", e) from e


def parse_auth(payload: Any) -> AuthResult:
    try:
        return AuthResult.model_validate(payload)
    except pydantic.ValidationError as e:
        raise _shape_error("auth response", e) from e


def dump_listings(listings: List[Listing]) -> List[dict]:
    return [listing.model_dump(mode="json") for listing in listings]
