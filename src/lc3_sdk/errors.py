"""
LC-3 SDK Error Hierarchy
========================

This module defines the diagnostics model and the exception hierarchy for
the LC-3 SDK.

Diagnostics vs Exceptions
-------------------------
Mistakes in the assembly source are never raised. They are recorded as
``Diagnostic`` entries in a ``DiagnosticCollector`` and assembly carries on
with a safe default (the offending field encodes as 0, or the line is
skipped). This lets a single run report every mistake in a program.

Exceptions are reserved for conditions outside the source text:

Exception Hierarchy
-------------------
LC3Error (base)
├── AssemblerError (assembler-related)
│   └── AssemblyFailedError - raised on request when diagnostics exist
└── OutputError - writing output before anything was assembled

Diagnostic Format
-----------------
Diagnostics render as:
    filename:line: error: description
    hint: suggestion for fixing (when available)

Line numbers are 0-based, exactly as recorded during assembly.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class LC3Error(Exception):
    """
    Base exception for all LC-3 SDK errors.

    Callers can catch every SDK-related error with a single except clause:

        try:
            assembler.assemble_file("program.asm").raise_for_errors()
        except LC3Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Diagnostics
# =============================================================================

class DiagnosticKind(Enum):
    """
    Categories of assembly diagnostics.

    The value is the name shown to users and used in tests.
    """
    UNKNOWN_INSTRUCTION = "UnknownInstruction"
    ARITY_MISMATCH = "ArityMismatch"
    INVALID_REGISTER = "InvalidRegister"
    UNPARSABLE_OFFSET = "UnparsableOffset"
    OFFSET_OUT_OF_RANGE = "OffsetOutOfRange"
    UNKNOWN_LABEL = "UnknownLabel"
    DUPLICATE_LABEL = "DuplicateLabel"
    INVALID_LABEL_NAME = "InvalidLabelName"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Diagnostic:
    """
    A single problem found in the assembly source.

    Attributes:
        line: Source line number (0-based)
        message: The error description
        kind: Diagnostic category
        hint: A suggestion for fixing the error (optional)
    """
    line: int
    message: str
    kind: DiagnosticKind
    hint: Optional[str] = None

    def format(self, filename: Optional[str] = None) -> str:
        """
        Format the diagnostic with location and hint.

        Example output:
            loop.asm:4: error: undefined label 'lop'
            hint: did you mean 'loop'?
        """
        prefix = f"{filename}:{self.line}" if filename else f"line {self.line}"
        text = f"{prefix}: error: {self.message}"
        if self.hint:
            text += f"\nhint: {self.hint}"
        return text

    def __str__(self) -> str:
        return self.format()


class DiagnosticCollector:
    """
    Append-only collection of diagnostics for one assembly run.

    The assembler records every problem here and keeps going, so users see
    all their mistakes at once instead of fixing them one run at a time.
    The collector never raises.

    Example:
        diagnostics = DiagnosticCollector()

        if diagnostics.check(reg > 7, DiagnosticKind.INVALID_REGISTER,
                             f"invalid register 'r{reg}'", line):
            reg = 0

        if diagnostics.has_errors():
            print(diagnostics.report())
    """

    def __init__(self) -> None:
        self._diagnostics: list[Diagnostic] = []

    def add(self, diagnostic: Diagnostic) -> None:
        """Append a diagnostic."""
        self._diagnostics.append(diagnostic)

    def check(
        self,
        invalid: bool,
        kind: DiagnosticKind,
        message: str,
        line: int,
        hint: Optional[str] = None,
    ) -> bool:
        """
        Record a diagnostic if a validation condition failed.

        Args:
            invalid: True when the checked construct is bad
            kind: Diagnostic category to record
            message: Error description
            line: Source line number (0-based)
            hint: Optional suggestion for fixing

        Returns:
            ``invalid``, so call sites can short-circuit on failure
        """
        if invalid:
            self._diagnostics.append(Diagnostic(line, message, kind, hint))
        return invalid

    def has_errors(self) -> bool:
        """Return True if any diagnostics have been collected."""
        return len(self._diagnostics) > 0

    def error_count(self) -> int:
        """Return the number of collected diagnostics."""
        return len(self._diagnostics)

    def count(self, kind: DiagnosticKind) -> int:
        """Return how many diagnostics of one kind were collected."""
        return sum(1 for d in self._diagnostics if d.kind is kind)

    def as_tuple(self) -> tuple[Diagnostic, ...]:
        """Return an immutable snapshot in recording order."""
        return tuple(self._diagnostics)

    def report(self, filename: Optional[str] = None) -> str:
        """
        Format all diagnostics for display.

        Args:
            filename: Source name to prefix each location with (optional)

        Returns:
            Formatted string with every diagnostic and a summary line
        """
        return format_report(self._diagnostics, filename)

    def clear(self) -> None:
        """Remove all collected diagnostics."""
        self._diagnostics.clear()

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._diagnostics)

    def __len__(self) -> int:
        return len(self._diagnostics)


def format_report(diagnostics, filename: Optional[str] = None) -> str:
    """Format a sequence of diagnostics followed by an error count summary."""
    lines = [d.format(filename) for d in diagnostics]
    count = len(lines)
    error_word = "error" if count == 1 else "errors"
    lines.append(f"{count} {error_word}")
    return "\n".join(lines)


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(LC3Error):
    """
    Base exception for assembler-related errors.

    Attributes:
        message: The error description
        line: Source line the error refers to (optional, 0-based)
        hint: A suggestion for fixing the error (optional)
    """

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        hint: Optional[str] = None,
    ):
        self.message = message
        self.line = line
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = []
        if self.line is not None:
            parts.append(f"line {self.line}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")
        if self.hint:
            parts.append(f"hint: {self.hint}")
        return "\n".join(parts)


class AssemblyFailedError(AssemblerError):
    """
    Assembly produced diagnostics.

    Never raised by the assembler itself; callers who prefer exceptions
    opt in through ``AssemblyResult.raise_for_errors()``.

    Attributes:
        diagnostics: Every diagnostic from the failed run, in order
    """

    def __init__(self, diagnostics: tuple[Diagnostic, ...], filename: Optional[str] = None):
        self.diagnostics = diagnostics
        self.filename = filename
        count = len(diagnostics)
        super().__init__(
            f"assembly failed with {count} error{'s' if count != 1 else ''}:\n\n"
            f"{format_report(diagnostics, filename)}"
        )


class OutputError(LC3Error):
    """
    Output could not be produced.

    Raised when a writer such as ``Assembler.write_hex`` is called before
    any source has been assembled.
    """
    pass
