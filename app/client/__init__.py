from .api import HoardingApi
from .cache import CacheBackend, MemoryCache, RedisCache
from .config import ClientSettings
from .markers import Marker, build_markers
from .nearby import NearbyQueryClient, build_draft, nearby_cache_key
from .session import AuthSession


def get_cache_backend(name: str, settings: ClientSettings = None) -> CacheBackend:
    settings = settings or ClientSettings()
    if name == "memory":
        return MemoryCache()
    if name == "redis":
        if not settings.REDIS_URL:
            raise ValueError("HOARDINGS_REDIS_URL must be set for the redis cache backend")
        return RedisCache.from_url(settings.REDIS_URL)
    raise ValueError(f"Unknown cache backend: {name}")


def create_client(settings: ClientSettings = None):
    """Wire an API wrapper, session and nearby client from settings."""
    settings = settings or ClientSettings()
    api = HoardingApi(settings=settings)
    session = AuthSession(api)
    nearby = NearbyQueryClient(api, get_cache_backend(settings.CACHE_BACKEND, settings), settings=settings)
    return session, nearby
