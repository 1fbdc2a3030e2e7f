"""
Records for Homescript execution and linting.

A run or lint returns an ExecutionResult holding an ordered tuple of
ExecutionError. Each error carries exactly one payload (syntax, diagnostic or
runtime) and the SourceSpan it refers to. On the wire the payloads arrive as
three nullable keys; they are folded into a single tagged union on decode so
that "no payload" and "several payloads" are rejected up front.
"""

from collections.abc import Mapping
from enum import StrEnum
from types import MappingProxyType
from typing import Annotated, Any, Literal, assert_never

from pydantic import Field, field_serializer, field_validator, model_validator

from ..models import SmarthomeModel

_PAYLOAD_KEYS = (
    ("syntaxError", "syntax"),
    ("diagnosticError", "diagnostic"),
    ("runtimeError", "runtime"),
)


class DiagnosticLevel(StrEnum):
    """Severity of a static-analysis finding."""

    HINT = "Hint"
    INFO = "Info"
    WARNING = "Warning"
    ERROR = "Error"


# The server encodes diagnostic levels as integers
_LEVELS_BY_CODE = {
    0: DiagnosticLevel.HINT,
    1: DiagnosticLevel.INFO,
    2: DiagnosticLevel.WARNING,
    3: DiagnosticLevel.ERROR,
}


class SourceLocation(SmarthomeModel):
    """A position in a script: 1-based line and column, 0-based offset."""

    line: int
    column: int
    index: int = 0


class SourceSpan(SmarthomeModel):
    start: SourceLocation
    end: SourceLocation
    filename: str

    @property
    def is_degenerate(self) -> bool:
        """True when the span points nowhere, e.g. for empty input."""
        return (
            self.start.line == 0
            and self.start.column == 0
            and self.end.line == 0
            and self.end.column == 0
        )


class SyntaxErrorPayload(SmarthomeModel):
    type: Literal["syntax"] = "syntax"
    message: str


class DiagnosticPayload(SmarthomeModel):
    type: Literal["diagnostic"] = "diagnostic"
    level: DiagnosticLevel = Field(alias="kind")
    message: str
    notes: tuple[str, ...] = ()

    @field_validator("level", mode="before")
    @classmethod
    def validate_level(cls, v: Any) -> Any:
        """Accept the numeric level codes used by the server."""
        if isinstance(v, int) and not isinstance(v, bool):
            if v not in _LEVELS_BY_CODE:
                raise ValueError(f"Unknown diagnostic level code {v}")
            return _LEVELS_BY_CODE[v]
        return v


class RuntimeErrorPayload(SmarthomeModel):
    type: Literal["runtime"] = "runtime"
    kind: str
    message: str


ErrorPayload = Annotated[
    SyntaxErrorPayload | DiagnosticPayload | RuntimeErrorPayload,
    Field(discriminator="type"),
]


class ExecutionError(SmarthomeModel):
    """One syntax, diagnostic or runtime error of a Homescript run."""

    payload: ErrorPayload
    span: SourceSpan

    @model_validator(mode="before")
    @classmethod
    def select_payload(cls, data: Any) -> Any:
        """Fold the three nullable wire keys into one tagged payload."""
        if not isinstance(data, dict) or "payload" in data:
            return data

        present = [
            (tag, data[key]) for key, tag in _PAYLOAD_KEYS if data.get(key) is not None
        ]
        if len(present) != 1:
            raise ValueError(
                "Expected exactly one of syntaxError, diagnosticError, runtimeError, "
                f"got {len(present)}"
            )
        tag, payload = present[0]
        if not isinstance(payload, dict):
            raise ValueError(f"Error payload must be an object, got {type(payload).__name__}")
        return {"payload": {**payload, "type": tag}, "span": data.get("span")}

    @property
    def message(self) -> str:
        return self.payload.message

    @property
    def kind(self) -> str:
        """Short name of the error, e.g. 'SyntaxError' or 'Warning'."""
        match self.payload:
            case SyntaxErrorPayload():
                return "SyntaxError"
            case RuntimeErrorPayload(kind=kind):
                return kind
            case DiagnosticPayload(level=level):
                return level.value
            case _:
                assert_never(self.payload)

    def __str__(self) -> str:
        start = self.span.start
        return f"{self.kind} at {start.line}:{start.column}\n  {self.message}"


class ExecutionResult(SmarthomeModel):
    """Outcome of running or linting a Homescript."""

    id: str = ""
    success: bool
    exit_code: int | None = None
    output: str = ""
    file_contents: Mapping[str, str] = Field(default_factory=lambda: MappingProxyType({}))
    errors: tuple[ExecutionError, ...] = ()

    @field_validator("file_contents", mode="after")
    @classmethod
    def freeze_file_contents(cls, v: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(v))

    @field_serializer("file_contents")
    def serialize_file_contents(self, v: Mapping[str, str]) -> dict[str, str]:
        return dict(v)

    def source_for(self, error: ExecutionError) -> str:
        """Source text the span of `error` refers to, empty if unknown."""
        return self.file_contents.get(error.span.filename, "")

    def render_errors(self, color: bool = False) -> list[str]:
        """Render every error against its own source file."""
        from .diagnostics import render

        return [render(error, self.source_for(error), color=color) for error in self.errors]


class HomescriptArg(SmarthomeModel):
    key: str
    value: str


class ExecHomescriptCodeRequest(SmarthomeModel):
    code: str
    args: list[HomescriptArg] = Field(default_factory=list)


class ExecHomescriptByIdRequest(SmarthomeModel):
    id: str
    args: list[HomescriptArg] = Field(default_factory=list)
