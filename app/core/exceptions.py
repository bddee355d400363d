# app/core/exceptions.py
"""Domain errors shared by the API server and the client library.

Each error carries the HTTP status the API answers with, so route handlers
never have to translate them one by one.
"""
from typing import Any, List, Optional


class HoardingError(Exception):
    status_code: int = 500
    code: str = "error"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"detail": self.message, "code": self.code}
        body.update(self.details)
        return body


class ValidationError(HoardingError):
    status_code = 400
    code = "validation_error"

    def __init__(self, message: str, errors: Optional[List[dict]] = None, **details: Any):
        if errors:
            details["errors"] = errors
        super().__init__(message, **details)
        self.errors = errors or []

    @property
    def fields(self) -> List[str]:
        return [e["field"] for e in self.errors if "field" in e]


class CoordinateError(ValidationError):
    """A longitude/latitude pair failed one of the validation rules."""

    code = "coordinate_error"

    def __init__(self, message: str, rule: str, **details: Any):
        super().__init__(message, rule=rule, **details)
        self.rule = rule


class AuthorizationError(HoardingError):
    status_code = 403
    code = "authorization_error"


class OwnershipError(HoardingError):
    status_code = 403
    code = "ownership_error"


class NotFoundError(HoardingError):
    status_code = 404
    code = "not_found"


class NetworkError(HoardingError):
    status_code = 503
    code = "network_error"


class StoreError(HoardingError):
    status_code = 500
    code = "store_error"
