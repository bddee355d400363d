# app/client/markers.py
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from app.core.geo import is_valid_coordinate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Marker:
    id: int
    title: str
    latitude: float
    longitude: float
    price: Optional[float] = None
    address: Optional[str] = None


def _coordinates(listing):
    location = listing.get("location") if isinstance(listing, dict) else getattr(listing, "location", None)
    if location is None:
        return None
    coords = location.get("coordinates") if isinstance(location, dict) else getattr(location, "coordinates", None)
    if not isinstance(coords, (list, tuple)) or len(coords) != 2:
        return None
    return coords


def _field(listing, name):
    if isinstance(listing, dict):
        return listing.get(name)
    return getattr(listing, name, None)


def build_markers(listings: Iterable) -> List[Marker]:
    """Map markers for ``listings``; records without a usable point are skipped."""
    markers = []
    for listing in listings:
        coords = _coordinates(listing)
        if coords is None or not is_valid_coordinate(coords[0], coords[1]):
            logger.debug("Skipping hoarding %s with unusable location %r", _field(listing, "id"), coords)
            continue
        markers.append(Marker(
            id=_field(listing, "id"),
            title=_field(listing, "title") or "",
            latitude=float(coords[1]),
            longitude=float(coords[0]),
            price=_field(listing, "price"),
            address=_field(listing, "address"),
        ))
    return markers
