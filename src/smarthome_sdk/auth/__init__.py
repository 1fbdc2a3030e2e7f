"""Authentication strategies."""

from .strategy import (
    AuthMode,
    AuthStrategy,
    NoAuth,
    QueryPassword,
    QueryToken,
    SessionPassword,
    SessionToken,
    auth_mode,
    query_params,
)

__all__ = [
    "AuthMode",
    "AuthStrategy",
    "NoAuth",
    "QueryPassword",
    "QueryToken",
    "SessionPassword",
    "SessionToken",
    "auth_mode",
    "query_params",
]
