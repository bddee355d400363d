# app/client/api.py
import logging
from typing import Any, List, Optional

import requests

from app.core.exceptions import (
    AuthorizationError,
    HoardingError,
    NetworkError,
    NotFoundError,
    OwnershipError,
    ValidationError,
)
from .config import ClientSettings
from .models import AuthResult, Listing, parse_auth, parse_listing, parse_listings

logger = logging.getLogger(__name__)


def _error_body(response: requests.Response) -> dict:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def error_for_response(response: requests.Response) -> HoardingError:
    """Turn an API error response back into the domain error it came from."""
    status = response.status_code
    body = _error_body(response)
    detail = body.get("detail")
    message = detail if isinstance(detail, str) else (response.reason or f"HTTP {status}")
    code = body.get("code")

    if status >= 500:
        return NetworkError(f"Server error ({status}): {message}")
    if status in (400, 422):
        return ValidationError(message, errors=body.get("errors") or [])
    if status == 401:
        return AuthorizationError(message)
    if status == 403:
        # 403 covers both role and ownership refusals
        if code == OwnershipError.code:
            return OwnershipError(message)
        return AuthorizationError(message)
    if status == 404:
        return NotFoundError(message)
    return HoardingError(message)


class HoardingApi:
    """Thin HTTP wrapper over the hoardings API.

    Every call carries a timeout; timeouts and connection failures surface as
    :class:`NetworkError`. Nothing here retries.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http: Optional[requests.Session] = None,
        settings: Optional[ClientSettings] = None,
    ):
        settings = settings or ClientSettings()
        self.base_url = (base_url or settings.API_URL).rstrip("/")
        self.timeout = timeout or settings.REQUEST_TIMEOUT_SECONDS
        self.http = http or requests.Session()
        self.http.headers.update({"Content-Type": "application/json"})
        self.token: Optional[str] = None

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        logger.debug("%s %s", method, url)
        try:
            response = self.http.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.Timeout as e:
            logger.warning("%s %s timed out after %ss", method, url, self.timeout)
            raise NetworkError(
                "Request timed out. Please check your internet connection and try again."
            ) from e
        except requests.ConnectionError as e:
            logger.warning("%s %s unreachable: %s", method, url, e)
            raise NetworkError(
                "Cannot connect to server. Please check if the server is running and try again."
            ) from e
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise NetworkError("Network error. Please check your internet connection.") from e

        if response.status_code >= 400:
            raise error_for_response(response)
        try:
            return response.json()
        except ValueError as e:
            raise ValidationError("Server response is not valid JSON") from e

    # --- auth ---

    def login(self, email: str, password: str) -> AuthResult:
        return parse_auth(self._request("POST", "/auth/login", json={"email": email, "password": password}))

    def register(self, email: str, password: str, role: str) -> AuthResult:
        payload = {"email": email, "password": password, "role": role}
        return parse_auth(self._request("POST", "/auth/register", json=payload))

    # --- hoardings ---

    def add(self, draft: dict) -> Listing:
        return parse_listing(self._request("POST", "/hoardings/add", json=draft))

    def get_nearby(self, latitude: float, longitude: float, radius: float) -> List[Listing]:
        params = {"lat": latitude, "lng": longitude, "radius": radius}
        return parse_listings(self._request("GET", "/hoardings/nearby", params=params))

    def get_all(self) -> List[Listing]:
        return parse_listings(self._request("GET", "/hoardings"))

    def update(self, hoarding_id: int, patch: dict) -> Listing:
        return parse_listing(self._request("PUT", f"/hoardings/{hoarding_id}", json=patch))

    def delete(self, hoarding_id: int) -> dict:
        return self._request("DELETE", f"/hoardings/{hoarding_id}")
