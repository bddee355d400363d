# app/schemas.py
from pydantic import (
    BaseModel, BeforeValidator, ConfigDict, EmailStr, Field, field_validator, model_validator
)
from typing import Annotated, Optional, List, Any, Literal
from datetime import datetime
from .models import UserRoleEnum
from .core.exceptions import CoordinateError
from .core.geo import validate_coordinates

# --- User Schemas ---


class UserBase(BaseModel):
    email: EmailStr


class UserCreate(UserBase):
    password: str = Field(..., min_length=8)
    role: UserRoleEnum = UserRoleEnum.viewer


class LoginRequest(UserBase):
    password: str


class User(UserBase):
    id: int
    role: UserRoleEnum
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True

# --- Token Schemas (for JWT) ---


class TokenData(BaseModel):
    email: Optional[str] = None


class AuthResponse(BaseModel):
    token: str
    user: User


# --- Hoarding Schemas ---


class GeoPoint(BaseModel):
    """GeoJSON point, ``coordinates`` is ``[longitude, latitude]``."""

    type: Literal["Point"] = "Point"
    coordinates: List[Any]

    @model_validator(mode="after")
    def check_coordinates(self):
        if len(self.coordinates) != 2:
            raise ValueError(
                'Invalid location format. Expected {type: "Point", coordinates: [longitude, latitude]}'
            )
        try:
            self.coordinates = list(validate_coordinates(*self.coordinates))
        except CoordinateError as e:
            raise ValueError(e.message)
        return self

    @property
    def longitude(self) -> float:
        return self.coordinates[0]

    @property
    def latitude(self) -> float:
        return self.coordinates[1]


def _strip_required(value):
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
    return value


def _strip_optional(value):
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


RequiredText = Annotated[str, BeforeValidator(_strip_required)]
OptionalText = Annotated[Optional[str], BeforeValidator(_strip_optional)]
Price = Annotated[float, Field(gt=0, allow_inf_nan=False)]


class HoardingCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: RequiredText
    description: RequiredText
    size: RequiredText
    price: Price
    location: GeoPoint
    address: OptionalText = None
    availability: bool = True


class HoardingUpdate(BaseModel):
    # owner and timestamps are never patchable
    model_config = ConfigDict(extra="forbid")

    title: Optional[RequiredText] = None
    description: Optional[RequiredText] = None
    size: Optional[RequiredText] = None
    price: Optional[Price] = None
    location: Optional[GeoPoint] = None
    address: OptionalText = None
    availability: Optional[bool] = None

    @field_validator("title", "description", "size", "price", "location", "availability")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value

    def to_columns(self) -> dict:
        data = self.model_dump(exclude_unset=True, exclude={"location"})
        if "location" in self.model_fields_set:
            data["longitude"], data["latitude"] = self.location.coordinates
        return data


class Hoarding(BaseModel):
    id: int
    title: str
    description: str
    size: str
    price: float
    location: GeoPoint
    address: Optional[str] = None
    availability: bool
    created_by: int
    created_by_email: Optional[EmailStr] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    distance: Optional[float] = None

    class Config:
        from_attributes = True


class DeleteConfirmation(BaseModel):
    message: str
    id: int
