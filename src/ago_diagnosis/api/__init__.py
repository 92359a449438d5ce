"""HTTP API."""

from ago_diagnosis.api.app import BANNER, create_app, validate_target_url
from ago_diagnosis.api.errors import InvalidRequestError


__all__ = ["BANNER", "InvalidRequestError", "create_app", "validate_target_url"]
