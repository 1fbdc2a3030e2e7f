"""
Smarthome HTTP client with authentication and error handling.

A client is only obtainable through the bootstrap protocol in
SmarthomeClient.connect():

    Created -> VersionChecked -> (LoggingIn) -> Ready

Any failing step raises a SmarthomeError and no client is produced. Once
ready, the client is immutable and may be shared by concurrent tasks.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar, assert_never
from urllib.parse import quote

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from .. import __version__
from ..auth import (
    AuthStrategy,
    NoAuth,
    QueryPassword,
    QueryToken,
    SessionPassword,
    SessionToken,
    auth_mode,
)
from ..errors import (
    DecodeError,
    IncompatibleVersionError,
    SmarthomeStatusError,
    UrlParseError,
    classify_transport_error,
)
from ..homescript.models import (
    ExecHomescriptByIdRequest,
    ExecHomescriptCodeRequest,
    ExecutionResult,
    HomescriptArg,
)
from ..models import (
    DebugInfo,
    DeleteHomescriptRequest,
    HomescriptData,
    PowerDrawPoint,
    PowerRequest,
    Room,
    VersionInfo,
)
from ..version import SERVER_VERSION_REQUIREMENT, is_server_compatible
from .request import build_request

logger = logging.getLogger(__name__)

USER_AGENT = f"smarthome-sdk/{__version__}"
DEFAULT_TIMEOUT = 30

T = TypeVar("T")

# Only connect() holds this key, so only connect() can create clients
_CONNECT_KEY = object()


@dataclass(frozen=True)
class Session:
    """Server-side session established by a session-based login."""

    cookies: Mapping[str, str] = field(default_factory=dict, repr=False)


class _TokenLoginResponse(BaseModel):
    username: str


def parse_base_url(url: str) -> httpx.URL:
    """Parse the server URL, which must be an absolute http(s) URL."""
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as e:
        raise UrlParseError(url, str(e)) from e
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise UrlParseError(url, "expected an absolute http:// or https:// URL")
    return parsed


async def _send(http_client: httpx.AsyncClient, request: httpx.Request) -> httpx.Response:
    try:
        return await http_client.send(request)
    except httpx.HTTPError as e:
        raise classify_transport_error(e) from e


def _status_error(response: httpx.Response) -> SmarthomeStatusError:
    try:
        error_data = response.json()
    except ValueError:
        error_data = {"message": response.text}
    return SmarthomeStatusError(response.status_code, response_data=error_data)


def _decode(response: httpx.Response, type_: type[T]) -> T:
    try:
        return TypeAdapter(type_).validate_json(response.content)
    except ValidationError as e:
        raise DecodeError(f"Invalid {getattr(type_, '__name__', type_)} response: {e}") from e


class SmarthomeClient:
    """Authenticated HTTP client for the Smarthome API."""

    def __init__(
        self,
        *,
        key: object,
        http_client: httpx.AsyncClient,
        base_url: httpx.URL,
        auth: AuthStrategy,
        version_info: VersionInfo,
        username: str | None,
        session: Session | None,
    ):
        if key is not _CONNECT_KEY:
            raise TypeError(
                "SmarthomeClient instances are created with 'await SmarthomeClient.connect(...)'"
            )
        self._http = http_client
        self._base_url = base_url
        self._auth = auth
        self._version_info = version_info
        self._username = username
        self._session = session

    @classmethod
    async def connect(
        cls,
        url: str,
        auth: AuthStrategy | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "SmarthomeClient":
        """
        Create a client: check the server version, then log in if needed.

        Args:
            url: Smarthome server URL, e.g. 'http://smarthome.local:8082'
            auth: Authentication strategy (defaults to NoAuth)
            timeout: Request timeout in seconds (defaults to 30)
            transport: Custom httpx transport, mainly for testing

        Returns:
            A ready-to-use client

        Raises:
            UrlParseError: The URL is invalid
            TransportError: A request failed below the HTTP layer
            SmarthomeStatusError: The version or login endpoint returned an unexpected status
            DecodeError: A response body was malformed
            VersionParseError: The server reported an unparseable version
            IncompatibleVersionError: The server version is not supported
        """
        auth = auth if auth is not None else NoAuth()
        base_url = parse_base_url(url)
        http_client = httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            timeout=httpx.Timeout(timeout if timeout is not None else DEFAULT_TIMEOUT),
            transport=transport,
        )
        logger.info(
            f"Connecting to Smarthome server at {base_url} (auth: {auth_mode(auth)})"
        )

        try:
            version_info = await _fetch_version(http_client, base_url)
            if not is_server_compatible(version_info.version):
                raise IncompatibleVersionError(
                    version_info.version, SERVER_VERSION_REQUIREMENT
                )

            if isinstance(auth, NoAuth):
                username, session = None, None
            else:
                username, session = await _login(http_client, base_url, auth)
        except BaseException:
            await http_client.aclose()
            raise

        logger.info(
            f"Connected to Smarthome server {base_url} (version {version_info.version})"
        )
        return cls(
            key=_CONNECT_KEY,
            http_client=http_client,
            base_url=base_url,
            auth=auth,
            version_info=version_info,
            username=username,
            session=session,
        )

    async def __aenter__(self) -> "SmarthomeClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Close HTTP client."""
        await self._http.aclose()
        logger.debug("Closed Smarthome client")

    @property
    def base_url(self) -> str:
        return str(self._base_url)

    @property
    def auth(self) -> AuthStrategy:
        return self._auth

    @property
    def version_info(self) -> VersionInfo:
        """Version information the server reported during bootstrap."""
        return self._version_info

    @property
    def username(self) -> str | None:
        """User resolved at login, None for unauthenticated clients."""
        return self._username

    @property
    def session(self) -> Session | None:
        """Session established at login, only for session-based strategies."""
        return self._session

    def build_request(self, method: str, path: str, body: Any = None) -> httpx.Request:
        """Build a request carrying this client's authentication."""
        return build_request(self._http, self._base_url, method, path, self._auth, body)

    async def _request(
        self,
        method: str,
        path: str,
        body: Any = None,
        expected: tuple[int, ...] = (200,),
    ) -> httpx.Response:
        """
        Send one authenticated request and check its status.

        Raises:
            UrlParseError: The path could not be joined onto the base URL
            TransportError: The request failed below the HTTP layer
            SmarthomeStatusError: The status code is not in `expected`
        """
        response = await _send(self._http, self.build_request(method, path, body))
        if response.status_code not in expected:
            raise _status_error(response)
        return response

    # Rooms and cameras

    async def personal_rooms(self) -> list[Room]:
        """Returns a list containing the personal rooms of the current user."""
        logger.debug("Fetching personal rooms")
        response = await self._request("GET", "/api/room/list/personal")
        return _decode(response, list[Room])

    async def camera_feed(self, camera_id: str) -> bytes:
        """Fetch the current image of a camera."""
        logger.debug(f"Fetching camera feed: {camera_id}")
        response = await self._request(
            "GET", f"/api/camera/feed/{quote(camera_id, safe='')}"
        )
        return response.content

    # Power

    async def set_power(self, switch: str, power_on: bool) -> None:
        """Turn a switch on or off."""
        logger.debug(f"Setting power of switch {switch} to {power_on}")
        await self._request(
            "POST", "/api/power/set", PowerRequest(switch=switch, power_on=power_on)
        )

    async def power_usage(self, fetch_all: bool = False) -> list[PowerDrawPoint]:
        """
        Get power draw records.

        Args:
            fetch_all: Return every record instead of only the last 24 hours
        """
        path = "/api/power/usage/all" if fetch_all else "/api/power/usage/day"
        response = await self._request("GET", path)
        return _decode(response, list[PowerDrawPoint])

    # System

    async def export_config(self) -> str:
        """Fetches the `export.json` configuration of the server."""
        logger.debug("Exporting server configuration")
        response = await self._request("GET", "/api/system/config/export")
        return response.text

    async def debug_info(self) -> DebugInfo:
        response = await self._request("GET", "/api/debug")
        return _decode(response, DebugInfo)

    # Homescript

    async def create_homescript(self, data: HomescriptData) -> None:
        """Creates a new Homescript on the target server."""
        logger.debug(f"Creating Homescript {data.id}")
        await self._request("POST", "/api/homescript/add", data)

    async def delete_homescript(self, homescript_id: str) -> None:
        """Deletes a Homescript from the target server."""
        logger.debug(f"Deleting Homescript {homescript_id}")
        await self._request(
            "DELETE", "/api/homescript/delete", DeleteHomescriptRequest(id=homescript_id)
        )

    async def exec_homescript_code(
        self,
        code: str,
        args: list[HomescriptArg] | None = None,
        lint: bool = False,
    ) -> ExecutionResult:
        """
        Execute (or lint) Homescript code on the target server.

        A failing script is not an SDK error: the server answers with status
        500 and an ExecutionResult listing the errors.

        Args:
            code: Homescript source code
            args: Arguments passed to the script
            lint: Only lint the code instead of executing it
        """
        path = "/api/homescript/lint/live" if lint else "/api/homescript/run/live"
        response = await self._request(
            "POST",
            path,
            ExecHomescriptCodeRequest(code=code, args=args or []),
            expected=(200, 500),
        )
        return _decode(response, ExecutionResult)

    async def exec_homescript(
        self,
        homescript_id: str,
        args: list[HomescriptArg] | None = None,
        lint: bool = False,
    ) -> ExecutionResult:
        """
        Execute (or lint) a Homescript which already exists on the server.

        Args:
            homescript_id: ID of the stored Homescript
            args: Arguments passed to the script
            lint: Only lint the script instead of executing it
        """
        path = "/api/homescript/lint" if lint else "/api/homescript/run"
        response = await self._request(
            "POST",
            path,
            ExecHomescriptByIdRequest(id=homescript_id, args=args or []),
            expected=(200, 500),
        )
        return _decode(response, ExecutionResult)


async def _fetch_version(http_client: httpx.AsyncClient, base_url: httpx.URL) -> VersionInfo:
    """Query the unauthenticated version endpoint."""
    request = build_request(http_client, base_url, "GET", "/api/version", NoAuth())
    response = await _send(http_client, request)
    if not response.is_success:
        raise _status_error(response)
    return _decode(response, VersionInfo)


async def _login(
    http_client: httpx.AsyncClient, base_url: httpx.URL, auth: AuthStrategy
) -> tuple[str, Session | None]:
    """
    Log in once with the strategy's credentials.

    Returns:
        The resolved username and, for session strategies, the session the
        server established
    """
    match auth:
        case QueryPassword(username=username, password=password) | SessionPassword(
            username=username, password=password
        ):
            path = "/api/login"
            body: dict[str, str] = {"username": username, "password": password}
        case QueryToken(token=token) | SessionToken(token=token):
            path = "/api/login/token"
            body = {"token": token}
        case NoAuth():
            raise AssertionError("login attempted without credentials")
        case _:
            assert_never(auth)

    logger.debug(f"Logging in via {path}")
    request = build_request(http_client, base_url, "POST", path, auth, body)
    response = await _send(http_client, request)
    if response.status_code not in (200, 204):
        logger.warning(f"Login rejected with status {response.status_code}")
        raise _status_error(response)

    match auth:
        case QueryPassword() | SessionPassword():
            resolved = auth.username
        case _:
            resolved = _decode(response, _TokenLoginResponse).username

    session = None
    if isinstance(auth, SessionPassword | SessionToken):
        # A name may be set for several paths, the jar keeps the last one
        session = Session(
            cookies={cookie.name: cookie.value for cookie in response.cookies.jar}
        )
    logger.info(f"Logged in as {resolved}")
    return resolved, session
