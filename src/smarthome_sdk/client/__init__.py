"""HTTP client for the Smarthome API."""

from .request import build_request, resolve_url
from .rest_client import USER_AGENT, Session, SmarthomeClient

__all__ = ["USER_AGENT", "Session", "SmarthomeClient", "build_request", "resolve_url"]
