"""
Lumos Errors
============
Error hierarchy shared by every stage of the engine.

Four disjoint kinds are surfaced to callers and never conflated:

  - LexError               malformed character in the source text
  - ParseError             grammar violation (expected vs actual token)
  - LumosRuntimeError      evaluation-time failure
  - UnsupportedTargetError compile target not in the supported list
"""
from __future__ import annotations

from typing import Optional


class LumosError(Exception):
    """Base class for all errors the engine reports to its callers."""

    kind = "Error"

    def __init__(self, message: str, *, line: Optional[int] = None,
                 column: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def format(self) -> str:
        if self.line is not None and self.column is not None:
            return f"{self.kind}: {self.message} (L{self.line}:{self.column})"
        if self.line is not None:
            return f"{self.kind}: {self.message} (L{self.line})"
        return f"{self.kind}: {self.message}"

    def __str__(self) -> str:
        return self.format()


class LexError(LumosError):
    """A character that starts no valid token."""

    kind = "LexError"

    def __init__(self, char: str, line: int, column: int) -> None:
        super().__init__(f"Unexpected character {char!r}", line=line, column=column)
        self.char = char


class ParseError(LumosError):
    """A required token did not match what the grammar expected."""

    kind = "ParseError"

    def __init__(self, expected_kind: str, actual_kind: str, actual_text: Optional[str],
                 line: int, column: int, expected_text: Optional[str] = None) -> None:
        expected = expected_kind if expected_text is None else f"{expected_kind} {expected_text!r}"
        actual = actual_kind if actual_text is None else f"{actual_kind} {actual_text!r}"
        super().__init__(f"Expected {expected} but got {actual}", line=line, column=column)
        self.expected_kind = expected_kind
        self.expected_text = expected_text
        self.actual_kind = actual_kind
        self.actual_text = actual_text


class LumosRuntimeError(LumosError):
    """Evaluation-time failure: undefined name, type misuse, bad call, unknown class."""

    kind = "RuntimeError"


class UnsupportedTargetError(LumosError):
    """Compile target not in the fixed list of supported languages."""

    kind = "UnsupportedTargetError"

    def __init__(self, target: str) -> None:
        super().__init__(f"Unsupported target language: {target}")
        self.target = target
