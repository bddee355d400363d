"""Nearby Query Client: cache freshness, stale fallback and invalidation."""
import pytest

from app.client import MemoryCache, NearbyQueryClient, build_draft, nearby_cache_key
from app.client.models import AuthResult, Listing
from app.client.session import AuthSession
from app.core.exceptions import AuthorizationError, NetworkError, ValidationError

TTL_MS = 2 * 60 * 1000


def make_listing(listing_id, lon=77.209, lat=28.612, **extra) -> Listing:
    body = {
        "id": listing_id,
        "title": f"Hoarding {listing_id}",
        "description": "Roadside",
        "size": "20x10",
        "price": 5000,
        "location": {"type": "Point", "coordinates": [lon, lat]},
        "created_by": 1,
    }
    body.update(extra)
    return Listing.model_validate(body)


class FakeApi:
    def __init__(self):
        self.token = None
        self.nearby_calls = []
        self.add_calls = []
        self.nearby_result = [make_listing(1)]
        self.fail_with = None
        self.role = "authorized"

    def get_nearby(self, latitude, longitude, radius):
        self.nearby_calls.append((latitude, longitude, radius))
        if self.fail_with:
            raise self.fail_with
        return list(self.nearby_result)

    def add(self, draft):
        self.add_calls.append(draft)
        if self.fail_with:
            raise self.fail_with
        return make_listing(99)

    def login(self, email, password):
        return AuthResult.model_validate(
            {"token": "tok", "user": {"id": 1, "email": email, "role": self.role}}
        )


class Clock:
    def __init__(self, now=1_700_000_000_000):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


@pytest.fixture
def api():
    return FakeApi()


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def cache():
    return MemoryCache()


@pytest.fixture
def nearby(api, cache, clock):
    return NearbyQueryClient(api, cache, ttl_ms=TTL_MS, clock=clock)


def logged_in(api, role="authorized"):
    api.role = role
    session = AuthSession(api)
    session.login("someone@example.com", "password123")
    return session


def test_cache_key_rounds_to_three_decimals():
    assert nearby_cache_key(28.61234, 77.20911, 5000) == "nearby_hoardings_28.612_77.209_5000"
    assert nearby_cache_key(-0.0001, 0.0004, 5000.0) == "nearby_hoardings_0.000_0.000_5000"


def test_near_identical_queries_share_an_entry(nearby, api, clock):
    first = nearby.get_nearby(28.61231, 77.20911)
    clock.advance(60_000)
    second = nearby.get_nearby(28.61234, 77.20914)

    assert len(api.nearby_calls) == 1
    assert nearby.last_source == "cache"
    assert [l.id for l in second] == [l.id for l in first]


def test_entry_expires_after_two_minutes(nearby, api, clock):
    nearby.get_nearby(28.61231, 77.20911)
    clock.advance(TTL_MS + 1000)
    nearby.get_nearby(28.61234, 77.20914)

    assert len(api.nearby_calls) == 2
    assert nearby.last_source == "network"


def test_different_radius_is_a_different_entry(nearby, api):
    nearby.get_nearby(28.6, 77.2, 5000)
    nearby.get_nearby(28.6, 77.2, 1000)
    assert len(api.nearby_calls) == 2


def test_fresh_entry_is_served_even_when_network_is_down(nearby, api, clock):
    first = nearby.get_nearby(28.6, 77.2)
    api.fail_with = NetworkError("down")
    clock.advance(TTL_MS - 1)

    again = nearby.get_nearby(28.6, 77.2)
    assert again == first
    assert nearby.last_source == "cache"
    assert len(api.nearby_calls) == 1


def test_stale_entry_is_fallback_on_network_failure(nearby, api, clock):
    first = nearby.get_nearby(28.6, 77.2)
    clock.advance(TTL_MS)
    api.fail_with = NetworkError("Request timed out")

    result = nearby.get_nearby(28.6, 77.2)
    assert result == first
    assert nearby.last_source == "stale"
    assert len(api.nearby_calls) == 2


def test_network_failure_without_entry_propagates(nearby, api):
    api.fail_with = NetworkError("Cannot connect to server")
    with pytest.raises(NetworkError):
        nearby.get_nearby(28.6, 77.2)


def test_non_network_errors_are_not_masked_by_stale_entry(nearby, api, clock):
    nearby.get_nearby(28.6, 77.2)
    clock.advance(TTL_MS)
    api.fail_with = ValidationError("Malformed listings in server response")
    with pytest.raises(ValidationError):
        nearby.get_nearby(28.6, 77.2)


def test_fresh_success_overwrites_stale_entry(nearby, api, cache, clock):
    nearby.get_nearby(28.6, 77.2)
    clock.advance(TTL_MS + 5)
    api.nearby_result = [make_listing(2), make_listing(3)]

    result = nearby.get_nearby(28.6, 77.2)
    assert [l.id for l in result] == [2, 3]

    entry = cache.get(nearby_cache_key(28.6, 77.2, 5000))
    assert entry["timestamp"] == clock.now
    assert [item["id"] for item in entry["data"]] == [2, 3]


def test_cached_coordinates_survive_unchanged(nearby, api, clock):
    api.nearby_result = [make_listing(7, lon=77.1, lat=28.2)]
    nearby.get_nearby(28.2, 77.1)
    [cached] = nearby.get_nearby(28.2, 77.1)
    assert cached.location.coordinates == [77.1, 28.2]


def test_invalid_query_point_never_reaches_network(nearby, api):
    with pytest.raises(ValidationError):
        nearby.get_nearby(95, 77.2)
    assert api.nearby_calls == []


def test_malformed_cache_entry_is_treated_as_miss(nearby, api, cache):
    cache.set(nearby_cache_key(28.6, 77.2, 5000), {"data": "garbage", "timestamp": "x"})
    nearby.get_nearby(28.6, 77.2)
    assert len(api.nearby_calls) == 1


def test_add_listing_invalidates_every_nearby_entry(nearby, api, cache):
    nearby.get_nearby(28.6, 77.2)
    nearby.get_nearby(19.07, 72.87, 2000)
    cache.set("token", "keep-me")

    nearby.add_listing(build_draft("Flyover", "Lit", "30x10", 12000, 28.6, 77.2), logged_in(api))

    assert cache.keys() == ["token"]
    nearby.get_nearby(28.6, 77.2)
    nearby.get_nearby(19.07, 72.87, 2000)
    assert len(api.nearby_calls) == 4


def test_build_draft_uses_geojson_order():
    body = build_draft("t", "d", "s", 1, latitude=28.6, longitude=77.2)
    assert body["location"] == {"type": "Point", "coordinates": [77.2, 28.6]}


def test_add_listing_requires_authorized_session(nearby, api):
    with pytest.raises(AuthorizationError):
        nearby.add_listing(build_draft("t", "d", "s", 1, 28.6, 77.2), AuthSession(api))
    with pytest.raises(AuthorizationError):
        nearby.add_listing(build_draft("t", "d", "s", 1, 28.6, 77.2), logged_in(api, role="viewer"))
    assert api.add_calls == []


def test_add_listing_validates_before_submitting(nearby, api):
    bad = build_draft(" ", "d", "s", "abc", latitude=28.6, longitude=200)
    with pytest.raises(ValidationError) as exc_info:
        nearby.add_listing(bad, logged_in(api))
    assert exc_info.value.fields == ["title", "price", "location"]
    assert api.add_calls == []


def test_add_listing_network_failure_is_not_retried(nearby, api, cache):
    nearby.get_nearby(28.6, 77.2)
    api.fail_with = NetworkError("Request timed out")

    with pytest.raises(NetworkError):
        nearby.add_listing(build_draft("t", "d", "s", 1, 28.6, 77.2), logged_in(api))
    assert len(api.add_calls) == 1
    # nothing was written, so cached results are still valid
    assert cache.get(nearby_cache_key(28.6, 77.2, 5000)) is not None


def test_session_logout_drops_capability(api):
    session = logged_in(api)
    assert session.can_add_listings
    assert api.token == "tok"

    session.logout()
    assert not session.is_logged_in
    assert not session.can_add_listings
    assert api.token is None


def test_add_listing_rejects_price_too_large_for_float(nearby, api):
    with pytest.raises(ValidationError) as exc_info:
        nearby.add_listing(build_draft("t", "d", "s", 10 ** 400, 28.6, 77.2), logged_in(api))
    assert exc_info.value.fields == ["price"]
    assert api.add_calls == []


def test_nearby_markers_skip_unusable_locations(nearby, api):
    api.nearby_result = [
        make_listing(1),
        make_listing(2, lon=200, lat=28.6),
        make_listing(3, lon=77.21, lat=28.613),
    ]
    markers = nearby.nearby_markers(28.6, 77.2)

    assert [m.id for m in markers] == [1, 3]
    assert (markers[1].longitude, markers[1].latitude) == (77.21, 28.613)
    assert markers[0].title == "Hoarding 1"
    assert nearby.last_source == "network"
