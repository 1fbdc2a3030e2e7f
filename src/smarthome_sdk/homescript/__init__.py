"""Homescript execution records and diagnostic rendering."""

from .diagnostics import marker_width, render
from .models import (
    DiagnosticLevel,
    DiagnosticPayload,
    ExecHomescriptByIdRequest,
    ExecHomescriptCodeRequest,
    ExecutionError,
    ExecutionResult,
    HomescriptArg,
    RuntimeErrorPayload,
    SourceLocation,
    SourceSpan,
    SyntaxErrorPayload,
)

__all__ = [
    "DiagnosticLevel",
    "DiagnosticPayload",
    "ExecHomescriptByIdRequest",
    "ExecHomescriptCodeRequest",
    "ExecutionError",
    "ExecutionResult",
    "HomescriptArg",
    "RuntimeErrorPayload",
    "SourceLocation",
    "SourceSpan",
    "SyntaxErrorPayload",
    "marker_width",
    "render",
]
