"""
Error taxonomy for the Smarthome SDK.

Every failure the SDK raises derives from SmarthomeError and belongs to one of
a closed set of kinds:

- UrlParseError: a URL could not be parsed or joined
- TransportError: the request failed below the HTTP layer (DNS, TLS, timeout...)
- SmarthomeStatusError: the server answered with an unexpected status code
- DecodeError: the server answered, but the body was not what we expected
- VersionParseError: a semantic version could not be parsed
- IncompatibleVersionError: the server version is outside the supported range

Status codes are additionally classified into a StatusClass. The
classification is advisory and only feeds the human-readable explanation;
callers always get the raw status code as well.
"""

from enum import StrEnum
from typing import Any

import httpx


class StatusClass(StrEnum):
    """Advisory meaning of an unexpected HTTP status code."""

    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    FORBIDDEN = "FORBIDDEN"
    CONFLICT = "CONFLICT"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    UNEXPECTED = "UNEXPECTED"


_STATUS_CLASSES: dict[int, StatusClass] = {
    401: StatusClass.INVALID_CREDENTIALS,
    403: StatusClass.FORBIDDEN,
    409: StatusClass.CONFLICT,
    503: StatusClass.SERVICE_UNAVAILABLE,
}

STATUS_ADVICE: dict[StatusClass, str] = {
    StatusClass.INVALID_CREDENTIALS: (
        "Invalid credentials: the username, password or token was rejected by the server"
    ),
    StatusClass.FORBIDDEN: (
        "Forbidden: the authenticated user lacks the permission required for this action"
    ),
    StatusClass.CONFLICT: (
        "Conflict: the request conflicts with the current state of the server"
    ),
    StatusClass.SERVICE_UNAVAILABLE: (
        "Service unavailable: the Smarthome server is not ready, possibly because its "
        "database is offline"
    ),
    StatusClass.UNEXPECTED: (
        "Unexpected status: the server returned a status code the SDK does not know how "
        "to handle, please report this issue"
    ),
}


def classify_status(status_code: int) -> StatusClass:
    """Map an HTTP status code onto its advisory class."""
    return _STATUS_CLASSES.get(status_code, StatusClass.UNEXPECTED)


class SmarthomeError(Exception):
    """Base exception for all Smarthome SDK errors."""


class UrlParseError(SmarthomeError):
    """A URL could not be parsed and thus is invalid."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Invalid URL '{url}': {reason}")
        self.url = url
        self.reason = reason


class TransportError(SmarthomeError):
    """The request itself failed, mostly due to network errors."""

    def __init__(self, message: str, timeout: bool = False):
        super().__init__(message)
        self.timeout = timeout


class SmarthomeStatusError(SmarthomeError):
    """The Smarthome server responded with an unexpected status code."""

    def __init__(self, status_code: int, response_data: Any = None):
        self.status_code = status_code
        self.classification = classify_status(status_code)
        self.response_data = response_data
        super().__init__(f"Smarthome server responded with status {status_code}")


class DecodeError(SmarthomeError):
    """The response body could not be decoded into the expected record."""


class VersionParseError(SmarthomeError):
    """A semantic version or version range could not be parsed."""

    def __init__(self, value: str, reason: str):
        super().__init__(f"Could not parse version '{value}': {reason}")
        self.value = value
        self.reason = reason


class IncompatibleVersionError(SmarthomeError):
    """The SDK cannot connect to a server which is incompatible."""

    def __init__(self, reported: str, required: str):
        super().__init__(
            f"Smarthome server version {reported} does not satisfy {required}"
        )
        self.reported = reported
        self.required = required


def classify_transport_error(error: httpx.HTTPError) -> TransportError:
    """Wrap an httpx failure below the HTTP layer into a TransportError."""
    if isinstance(error, httpx.TimeoutException):
        return TransportError(f"Request timeout: {error}", timeout=True)
    if isinstance(error, httpx.ConnectError):
        return TransportError(f"Failed to connect to Smarthome server: {error}")
    return TransportError(f"HTTP error: {error}")


def explain(error: SmarthomeError) -> str:
    """
    Produce a one-paragraph human-readable explanation of an SDK error.

    Args:
        error: Any member of the SDK error taxonomy

    Returns:
        Explanation text suitable for showing to an end user

    Raises:
        TypeError: The error is not one of the known taxonomy members
    """
    match error:
        case UrlParseError():
            return f"The URL '{error.url}' is invalid and could not be parsed: {error.reason}"
        case TransportError(timeout=True):
            return f"The request to the Smarthome server timed out. {error}"
        case TransportError():
            return f"The request to the Smarthome server failed. {error}"
        case SmarthomeStatusError():
            return (
                f"The Smarthome server responded with status {error.status_code}. "
                f"{STATUS_ADVICE[error.classification]}"
            )
        case DecodeError():
            return f"The response of the Smarthome server could not be decoded: {error}"
        case VersionParseError():
            return (
                f"The version '{error.value}' is not a valid semantic version: "
                f"{error.reason}"
            )
        case IncompatibleVersionError():
            return (
                f"The Smarthome server runs version {error.reported}, but this SDK "
                f"requires a server version matching {error.required}. Upgrade the "
                "server or use a compatible SDK release."
            )
        case _:
            raise TypeError(f"Unhandled Smarthome error kind: {type(error).__name__}")
