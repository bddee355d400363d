# app/client/nearby.py
"""Cache-first nearby lookups for the mobile client.

A query first looks in the cache under a key built from the rounded point
and radius. A fresh entry (younger than the TTL) is returned as is. A
missing or stale entry triggers a fetch; a successful fetch always
overwrites the entry. When the fetch fails with a network error the stale
entry, if any, is returned instead of the error.
"""
import logging
import math
import time
from typing import Any, Callable, List, Optional

from app.core.exceptions import NetworkError, ValidationError
from app.core.geo import is_valid_coordinate, validate_coordinates, validate_radius
from .api import HoardingApi
from .cache import CacheBackend
from .config import ClientSettings
from .markers import Marker, build_markers
from .models import Listing, dump_listings, parse_listings
from .session import AuthSession

logger = logging.getLogger(__name__)

NEARBY_CACHE_PREFIX = "nearby_hoardings_"


def _rounded(value: float) -> str:
    # 3 decimals is ~111m; "+ 0.0" folds -0.000 into 0.000
    return f"{round(value, 3) + 0.0:.3f}"


def _radius_token(radius: float) -> str:
    return str(int(radius)) if float(radius).is_integer() else str(radius)


def nearby_cache_key(latitude: float, longitude: float, radius: float) -> str:
    return f"{NEARBY_CACHE_PREFIX}{_rounded(latitude)}_{_rounded(longitude)}_{_radius_token(radius)}"


def epoch_ms() -> int:
    return int(time.time() * 1000)


def build_draft(
    title: str,
    description: str,
    size: str,
    price: Any,
    latitude: float,
    longitude: float,
    address: Optional[str] = None,
    availability: bool = True,
) -> dict:
    """Request body for a new hoarding, location in GeoJSON order."""
    return {
        "title": title,
        "description": description,
        "size": size,
        "price": price,
        "location": {"type": "Point", "coordinates": [longitude, latitude]},
        "address": address,
        "availability": availability,
    }


def validate_draft(draft: dict) -> None:
    """Pre-submit checks mirroring the server's; raises ValidationError listing every bad field."""
    errors = []
    for name in ("title", "description", "size"):
        value = draft.get(name)
        if not isinstance(value, str) or not value.strip():
            errors.append({"field": name, "message": f"Please enter a {name}"})

    price = draft.get("price")
    try:
        price_ok = not isinstance(price, bool) and math.isfinite(float(price)) and float(price) > 0
    except (TypeError, ValueError, OverflowError):
        price_ok = False
    if not price_ok:
        errors.append({"field": "price", "message": "Please enter a valid price"})

    location = draft.get("location")
    coords = location.get("coordinates") if isinstance(location, dict) else None
    if not isinstance(coords, (list, tuple)) or len(coords) != 2:
        errors.append({"field": "location", "message": "Please select a location on the map"})
    elif not is_valid_coordinate(coords[0], coords[1]):
        errors.append({"field": "location", "message": f"Invalid coordinates {list(coords)}"})

    if errors:
        fields = ", ".join(err["field"] for err in errors)
        raise ValidationError(f"Invalid hoarding: {fields}", errors=errors)


class NearbyQueryClient:
    def __init__(
        self,
        api: HoardingApi,
        cache: CacheBackend,
        ttl_ms: Optional[int] = None,
        clock: Callable[[], int] = epoch_ms,
        settings: Optional[ClientSettings] = None,
    ):
        settings = settings or ClientSettings()
        self.api = api
        self.cache = cache
        self.ttl_ms = ttl_ms or settings.NEARBY_CACHE_TTL_MS
        self.default_radius = settings.DEFAULT_RADIUS_M
        self.clock = clock
        # "cache", "network" or "stale" for the last get_nearby call
        self.last_source: Optional[str] = None

    def _read_entry(self, key: str) -> Optional[dict]:
        entry = self.cache.get(key)
        if not isinstance(entry, dict):
            return None
        if not isinstance(entry.get("data"), list) or not isinstance(entry.get("timestamp"), (int, float)):
            logger.warning("Ignoring malformed cache entry %s", key)
            return None
        try:
            entry["listings"] = parse_listings(entry["data"])
        except ValidationError:
            logger.warning("Ignoring cache entry %s with malformed listings", key)
            return None
        return entry

    def is_fresh(self, entry: dict) -> bool:
        return self.clock() - entry["timestamp"] < self.ttl_ms

    def get_nearby(self, latitude: float, longitude: float, radius: Optional[float] = None) -> List[Listing]:
        longitude, latitude = validate_coordinates(longitude, latitude)
        radius = validate_radius(self.default_radius if radius is None else radius)
        key = nearby_cache_key(latitude, longitude, radius)

        entry = self._read_entry(key)
        if entry is not None and self.is_fresh(entry):
            logger.debug("Nearby cache hit %s", key)
            self.last_source = "cache"
            return entry["listings"]

        try:
            listings = self.api.get_nearby(latitude, longitude, radius)
        except NetworkError as e:
            if entry is None:
                raise
            logger.warning("Nearby fetch failed (%s); serving stale entry %s", e.message, key)
            self.last_source = "stale"
            return entry["listings"]

        self.cache.set(key, {"data": dump_listings(listings), "timestamp": self.clock()})
        self.last_source = "network"
        return listings

    def nearby_markers(self, latitude: float, longitude: float, radius: Optional[float] = None) -> List[Marker]:
        return build_markers(self.get_nearby(latitude, longitude, radius))

    def get_all(self) -> List[Listing]:
        return self.api.get_all()

    def invalidate(self) -> int:
        removed = self.cache.invalidate_prefix(NEARBY_CACHE_PREFIX)
        logger.debug("Cleared %d nearby cache entries", removed)
        return removed

    def add_listing(self, draft: dict, session: AuthSession) -> Listing:
        """Submit a new hoarding, then drop every cached nearby result.

        Never retried: a network failure propagates so the caller can decide,
        rather than risking a duplicate listing.
        """
        session.require_add_capability()
        validate_draft(draft)
        listing = self.api.add(draft)
        self.invalidate()
        logger.info("Hoarding %s added", listing.id)
        return listing
