"""
Smarthome SDK

An asynchronous client for the Smarthome server's HTTP API, including
Homescript execution and diagnostic rendering.
"""

__version__ = "0.5.0"
__license__ = "MIT"

from .auth import (
    AuthMode,
    AuthStrategy,
    NoAuth,
    QueryPassword,
    QueryToken,
    SessionPassword,
    SessionToken,
)
from .client.rest_client import Session, SmarthomeClient
from .config import Settings
from .errors import (
    DecodeError,
    IncompatibleVersionError,
    SmarthomeError,
    SmarthomeStatusError,
    StatusClass,
    TransportError,
    UrlParseError,
    VersionParseError,
    classify_status,
    explain,
)
from .homescript import ExecutionError, ExecutionResult, HomescriptArg, render
from .version import SERVER_VERSION_REQUIREMENT, is_compatible, is_server_compatible

__all__ = [
    "Settings",
    "SmarthomeClient",
    "Session",
    # Authentication
    "AuthMode",
    "AuthStrategy",
    "NoAuth",
    "QueryPassword",
    "QueryToken",
    "SessionPassword",
    "SessionToken",
    # Error handling exports
    "SmarthomeError",
    "UrlParseError",
    "TransportError",
    "SmarthomeStatusError",
    "DecodeError",
    "VersionParseError",
    "IncompatibleVersionError",
    "StatusClass",
    "classify_status",
    "explain",
    # Versions
    "SERVER_VERSION_REQUIREMENT",
    "is_compatible",
    "is_server_compatible",
    # Homescript
    "ExecutionError",
    "ExecutionResult",
    "HomescriptArg",
    "render",
]
