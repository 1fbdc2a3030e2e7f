"""
Construction of outgoing requests.

Every request to the Smarthome server is shaped by the client's
authentication strategy: query strategies attach their credentials as query
parameters, all other strategies attach nothing.
"""

import logging
from typing import Any

import httpx
from pydantic import BaseModel

from ..auth import AuthStrategy, query_params
from ..errors import UrlParseError

logger = logging.getLogger(__name__)


def resolve_url(base_url: httpx.URL, path: str) -> httpx.URL:
    """Resolve `path` against `base_url`, replacing any path the base has."""
    try:
        return base_url.join(path)
    except httpx.InvalidURL as e:
        raise UrlParseError(path, str(e)) from e


def build_request(
    http_client: httpx.AsyncClient,
    base_url: httpx.URL,
    method: str,
    path: str,
    auth: AuthStrategy,
    body: Any = None,
) -> httpx.Request:
    """
    Build a request which handles authentication and body attachment.

    Args:
        http_client: Client whose headers and cookies the request inherits
        base_url: Server URL the path is resolved against
        method: HTTP method (GET, POST, etc.)
        path: Absolute API path, e.g. '/api/power/set'
        auth: Authentication strategy of the client
        body: Optional JSON payload; pydantic models are dumped by alias

    Returns:
        The request, ready to be sent

    Raises:
        UrlParseError: The path could not be joined onto the base URL
    """
    url = resolve_url(base_url, path)

    kwargs: dict[str, Any] = {}
    params = query_params(auth)
    if params:
        kwargs["params"] = params
    if body is not None:
        if isinstance(body, BaseModel):
            body = body.model_dump(mode="json", by_alias=True)
        kwargs["json"] = body

    logger.debug(f"Building {method} request for {url.path}")
    return http_client.build_request(method, url, **kwargs)
