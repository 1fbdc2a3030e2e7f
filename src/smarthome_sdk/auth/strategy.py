"""
Authentication strategies for the Smarthome server.

A client uses exactly one strategy for its whole lifetime:

- NoAuth: nothing is attached to any request
- QueryPassword / QueryToken: credentials travel as query parameters on every
  request, including the login request
- SessionPassword / SessionToken: credentials are sent once to the login
  endpoint; the server then identifies the client through its session cookie
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import assert_never


@dataclass(frozen=True)
class NoAuth:
    """No credentials attached to any request."""


@dataclass(frozen=True)
class QueryPassword:
    """Username and password sent as query parameters on every request."""

    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class SessionPassword:
    """Username and password used once to log in and establish a session."""

    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class QueryToken:
    """Authentication token sent as a query parameter on every request."""

    token: str = field(repr=False)


@dataclass(frozen=True)
class SessionToken:
    """Authentication token used once to log in and establish a session."""

    token: str = field(repr=False)


AuthStrategy = NoAuth | QueryPassword | SessionPassword | QueryToken | SessionToken


class AuthMode(StrEnum):
    """Names of the authentication strategies, as used in configuration."""

    NONE = "none"
    QUERY_PASSWORD = "query-password"
    SESSION_PASSWORD = "session-password"
    QUERY_TOKEN = "query-token"
    SESSION_TOKEN = "session-token"


def auth_mode(auth: AuthStrategy) -> AuthMode:
    """Return the configuration name of a strategy."""
    match auth:
        case NoAuth():
            return AuthMode.NONE
        case QueryPassword():
            return AuthMode.QUERY_PASSWORD
        case SessionPassword():
            return AuthMode.SESSION_PASSWORD
        case QueryToken():
            return AuthMode.QUERY_TOKEN
        case SessionToken():
            return AuthMode.SESSION_TOKEN
        case _:
            assert_never(auth)


def query_params(auth: AuthStrategy) -> dict[str, str]:
    """
    Query parameters a strategy attaches to every request.

    Session strategies attach nothing: after login the server recognizes the
    client through the session cookie held by the transport.
    """
    match auth:
        case QueryPassword(username=username, password=password):
            return {"username": username, "password": password}
        case QueryToken(token=token):
            return {"token": token}
        case NoAuth() | SessionPassword() | SessionToken():
            return {}
        case _:
            assert_never(auth)
