"""
Human-readable rendering of Homescript execution errors.

An error is rendered as a header naming its severity and location, up to
three lines of source context with line numbers, a marker row underlining the
offending code, and finally the message:

    Warning at live:1:5
       1 | let x =
               ~

    expected expression

Errors without a meaningful location (span (0, 0)-(0, 0), e.g. for empty
input) collapse to two lines: ``Warning in live`` followed by the message.

With ``color=True`` the severity label, markers and message are wrapped in
ANSI escape codes and line numbers are dimmed.
"""

from dataclasses import dataclass
from typing import assert_never

from .models import (
    DiagnosticLevel,
    DiagnosticPayload,
    ErrorPayload,
    ExecutionError,
    RuntimeErrorPayload,
    SourceSpan,
    SyntaxErrorPayload,
)

# Width of the " nnn | " prefix in front of every source line
GUTTER_WIDTH = 7

_RESET = "\x1b[0m"
_RESET_FOREGROUND = "\x1b[39m"
_DIM = "\x1b[90m"


@dataclass(frozen=True)
class Severity:
    """How an error presents itself: label, marker character and ANSI color."""

    label: str
    marker: str
    color: int

    def paint(self, text: str) -> str:
        return f"\x1b[1;3{self.color}m{text}{_RESET}"


ERROR = Severity("Error", "^", 1)

DIAGNOSTIC_SEVERITIES: dict[DiagnosticLevel, Severity] = {
    DiagnosticLevel.HINT: Severity("Hint", "~", 4),
    DiagnosticLevel.INFO: Severity("Info", "~", 6),
    DiagnosticLevel.WARNING: Severity("Warning", "~", 3),
    DiagnosticLevel.ERROR: ERROR,
}


def severity_of(payload: ErrorPayload) -> Severity:
    match payload:
        case SyntaxErrorPayload() | RuntimeErrorPayload():
            return ERROR
        case DiagnosticPayload():
            return DIAGNOSTIC_SEVERITIES[payload.level]
        case _:
            assert_never(payload)


def message_of(payload: ErrorPayload) -> str:
    match payload:
        case SyntaxErrorPayload():
            return f"SyntaxError: {payload.message}"
        case RuntimeErrorPayload():
            return f"{payload.kind}: {payload.message}"
        case DiagnosticPayload():
            return "\n".join([payload.message, *(f"note: {note}" for note in payload.notes)])
        case _:
            assert_never(payload)


def marker_width(span: SourceSpan) -> int:
    """
    Number of marker characters for a span.

    Same-line spans are underlined from start to end column inclusive (never
    less than one character); multi-line spans get a single marker.
    """
    if span.start.line != span.end.line:
        return 1
    return max(span.end.column - span.start.column + 1, 1)


def _source_line(lines: list[str], line: int) -> str:
    if 1 <= line <= len(lines):
        return lines[line - 1]
    return ""


def _gutter(line: int, color: bool) -> str:
    prefix = f" {line:>3} | "
    if color:
        return f"{_DIM}{prefix}{_RESET}"
    return prefix


def render(error: ExecutionError, source_text: str, *, color: bool = False) -> str:
    """
    Render an execution error against the source it refers to.

    Args:
        error: The error to render
        source_text: Contents of the file named by the error's span
        color: Emit ANSI color codes

    Returns:
        The formatted report, without a trailing newline
    """
    severity = severity_of(error.payload)
    message = message_of(error.payload)
    span = error.span

    def paint(text: str) -> str:
        return severity.paint(text) if color else text

    if span.is_degenerate:
        return f"{paint(severity.label)} in {span.filename}\n{paint(message)}"

    location = f"{span.filename}:{span.start.line}:{span.start.column}"
    if color:
        header = (
            f"\x1b[1;3{severity.color}m{severity.label}{_RESET_FOREGROUND}"
            f" at {location}{_RESET}"
        )
    else:
        header = f"{severity.label} at {location}"

    lines = source_text.split("\n")
    line = span.start.line
    rows = [header]

    if line > 1:
        previous = _source_line(lines, line - 1)
        if previous.strip():
            rows.append(_gutter(line - 1, color) + previous)

    rows.append(_gutter(line, color) + _source_line(lines, line))

    indent = " " * (GUTTER_WIDTH - 1 + max(span.start.column, 1))
    rows.append(indent + paint(severity.marker * marker_width(span)))

    if 1 <= line < len(lines):
        following = lines[line]
        if following.strip():
            rows.append(_gutter(line + 1, color) + following)

    rows.append("")
    rows.append(paint(message))
    return "\n".join(rows)
