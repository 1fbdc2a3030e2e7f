"""
Semantic version compatibility checks against the Smarthome server.

Versions are strict SemVer 2.0 and parsed with the ``semver`` library. Ranges
are sets of comparators separated by commas or whitespace, all of which must
match:

    >=0.4.0          at least 0.4.0
    >=0.4, <0.6      at least 0.4.0 and below 0.6.0
    ^0.4.2           compatible updates: >=0.4.2, <0.5.0
    ~1.2             patch updates: >=1.2.0, <1.3.0
    1.2.3            same as ^1.2.3
    =1.2.3           exactly 1.2.3
    *                anything

Comparator versions may leave out minor and patch. A pre-release version only
matches when one of the comparators names a pre-release of the same
major.minor.patch, so ``>=0.4.0`` does not accept ``0.5.0-beta.1``.
"""

import logging
import re
from dataclasses import dataclass

import semver

from .errors import VersionParseError

logger = logging.getLogger(__name__)

# This specifies the version constraints which are validated on a client's creation
SERVER_VERSION_REQUIREMENT = ">=0.4.0"

_COMPARATOR_RE = re.compile(
    r"^(?P<op>>=|<=|>|<|=|\^|~)?\s*v?"
    r"(?P<major>\d+)(?:\.(?P<minor>\d+)(?:\.(?P<patch>\d+)"
    r"(?:-(?P<prerelease>[0-9A-Za-z.-]+))?(?:\+(?P<build>[0-9A-Za-z.-]+))?)?)?$"
)
_SEPARATOR_RE = re.compile(r"\s*,\s*|\s+(?![\d.])")


@dataclass(frozen=True)
class _Bound:
    op: str
    version: semver.Version

    def matches(self, version: semver.Version) -> bool:
        cmp = version.compare(self.version)
        match self.op:
            case ">=":
                return cmp >= 0
            case ">":
                return cmp > 0
            case "<=":
                return cmp <= 0
            case "<":
                return cmp < 0
            case "=":
                return cmp == 0
        raise AssertionError(f"unknown bound operator {self.op!r}")


@dataclass(frozen=True)
class Comparator:
    """A single comparator of a range, compiled down to primitive bounds."""

    text: str
    version: semver.Version
    bounds: tuple[_Bound, ...]

    def matches(self, version: semver.Version) -> bool:
        return all(bound.matches(version) for bound in self.bounds)

    @classmethod
    def parse(cls, text: str) -> "Comparator":
        m = _COMPARATOR_RE.match(text)
        if m is None:
            raise VersionParseError(text, "invalid comparator")

        op = m.group("op") or "^"
        major = int(m.group("major"))
        minor = int(m.group("minor")) if m.group("minor") is not None else None
        patch = int(m.group("patch")) if m.group("patch") is not None else None

        if patch is not None:
            version_text = text.lstrip("<>=^~ v")
            try:
                version = semver.Version.parse(version_text)
            except ValueError as e:
                raise VersionParseError(text, str(e)) from e
        else:
            version = semver.Version(major, minor or 0, 0)

        return cls(text=text, version=version, bounds=_compile(op, version, minor, patch))


def _compile(
    op: str, version: semver.Version, minor: int | None, patch: int | None
) -> tuple[_Bound, ...]:
    major = version.major
    lower = _Bound(">=", version)

    match op:
        case "=":
            if patch is not None:
                return (_Bound("=", version),)
            if minor is not None:
                return (lower, _Bound("<", semver.Version(major, minor + 1, 0)))
            return (lower, _Bound("<", semver.Version(major + 1, 0, 0)))
        case ">=":
            return (lower,)
        case ">":
            if patch is not None:
                return (_Bound(">", version),)
            if minor is not None:
                return (_Bound(">=", semver.Version(major, minor + 1, 0)),)
            return (_Bound(">=", semver.Version(major + 1, 0, 0)),)
        case "<":
            return (_Bound("<", version),)
        case "<=":
            if patch is not None:
                return (_Bound("<=", version),)
            if minor is not None:
                return (_Bound("<", semver.Version(major, minor + 1, 0)),)
            return (_Bound("<", semver.Version(major + 1, 0, 0)),)
        case "~":
            if minor is None:
                return (lower, _Bound("<", semver.Version(major + 1, 0, 0)))
            return (lower, _Bound("<", semver.Version(major, minor + 1, 0)))
        case "^":
            if major > 0 or minor is None:
                return (lower, _Bound("<", semver.Version(major + 1, 0, 0)))
            if minor > 0 or patch is None:
                return (lower, _Bound("<", semver.Version(0, minor + 1, 0)))
            return (lower, _Bound("<", semver.Version(0, 0, patch + 1)))
    raise AssertionError(f"unknown comparator operator {op!r}")


@dataclass(frozen=True)
class VersionRange:
    """A parsed version requirement such as ``>=0.4.0``."""

    text: str
    comparators: tuple[Comparator, ...]

    @classmethod
    def parse(cls, text: str) -> "VersionRange":
        """
        Parse a version range.

        Raises:
            VersionParseError: The range or one of its comparators is malformed
        """
        stripped = text.strip()
        if stripped in ("", "*"):
            return cls(text=text, comparators=())
        parts = [p for p in _SEPARATOR_RE.split(stripped) if p]
        # Operators may be separated from their version by whitespace ("> 1.0")
        merged: list[str] = []
        for part in parts:
            if merged and merged[-1] in (">=", "<=", ">", "<", "=", "^", "~"):
                merged[-1] += part
            else:
                merged.append(part)
        return cls(text=text, comparators=tuple(Comparator.parse(p) for p in merged))

    def matches(self, version: semver.Version) -> bool:
        if version.prerelease and not any(
            c.version.prerelease
            and c.version.finalize_version() == version.finalize_version()
            for c in self.comparators
        ):
            return False
        return all(c.matches(version) for c in self.comparators)

    def __str__(self) -> str:
        return self.text


def parse_version(value: str) -> semver.Version:
    """Parse a strict semantic version, raising VersionParseError on failure."""
    try:
        return semver.Version.parse(value.strip())
    except (ValueError, TypeError) as e:
        raise VersionParseError(str(value), str(e)) from e


def is_compatible(required_range: str, server_version: str) -> bool:
    """
    Check whether a server version satisfies a version range.

    Args:
        required_range: Version requirement, e.g. '>=0.4.0'
        server_version: Version reported by the server, e.g. '0.4.1'

    Returns:
        True if the version satisfies the range

    Raises:
        VersionParseError: Either string is not a valid range / version
    """
    return VersionRange.parse(required_range).matches(parse_version(server_version))


# Parsed once at import: a malformed requirement is a bug in this library
SERVER_VERSION_RANGE = VersionRange.parse(SERVER_VERSION_REQUIREMENT)


def is_server_compatible(server_version: str) -> bool:
    """Check a server version against SERVER_VERSION_REQUIREMENT."""
    compatible = SERVER_VERSION_RANGE.matches(parse_version(server_version))
    if not compatible:
        logger.warning(
            f"Server version {server_version} does not satisfy {SERVER_VERSION_REQUIREMENT}"
        )
    return compatible
