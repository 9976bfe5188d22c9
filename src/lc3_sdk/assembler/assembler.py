"""
LC-3 Assembler - Main Interface
===============================

This module provides the main Assembler class, which is the primary
interface for assembling LC-3 source code. It coordinates the line parser,
the encoder and the forward-reference resolver to produce 16-bit words.

Example Usage
-------------
>>> from lc3_sdk.assembler import Assembler
>>>
>>> asm = Assembler()
>>> result = asm.assemble_string('''
... LOOP    ADD r1, r1, -1
...         BRp LOOP
...         HALT
... ''')
>>> result.ok
True
>>> result.hex_lines()
['127F', '03FE', 'F025']
>>>
>>> asm.write_hex("loop.hex")

Assembly Pipeline
-----------------
1. Pass 1: every line is parsed and encoded in order. Labels are bound as
   they are declared; references to labels not yet declared are deferred.
2. Pass 2: deferred references are resolved and patched into the words
   emitted in pass 1.

Mistakes in the source never stop the run. They are collected as
diagnostics on the returned ``AssemblyResult``; an empty diagnostics tuple
means the program assembled cleanly.

Command-Line Usage
------------------
    $ lc3asm program.asm -o program.hex -l program.lst -s program.sym
"""

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Optional
import logging

from lc3_sdk.errors import (
    AssemblyFailedError,
    Diagnostic,
    DiagnosticCollector,
    OutputError,
    format_report,
)
from lc3_sdk.assembler.encoder import Encoder
from lc3_sdk.assembler.parser import LineParser
from lc3_sdk.assembler.symbols import DeferredReference, SymbolTable, resolve_references
from lc3_sdk.assembler.word import Word

logger = logging.getLogger(__name__)


# =============================================================================
# Assembly Result
# =============================================================================

@dataclass(frozen=True)
class ListingLine:
    """
    Listing entry for one source line.

    Attributes:
        line_number: Source line number (0-based)
        address: Address of the first word the line emitted (or would have)
        count: Number of words emitted
        source: Source text without the line terminator
    """
    line_number: int
    address: int
    count: int
    source: str


@dataclass(frozen=True)
class AssemblyResult:
    """
    Everything produced by one assembly run.

    Attributes:
        words: Assembled program; index = word address from the load origin
        diagnostics: Every problem found, in the order it was recorded
        symbols: Read-only label to address mapping
        listing: One entry per source line
        filename: Source name used when formatting diagnostics
    """
    words: tuple[Word, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()
    symbols: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))
    listing: tuple[ListingLine, ...] = ()
    filename: Optional[str] = None

    @property
    def ok(self) -> bool:
        """True when assembly produced no diagnostics."""
        return not self.diagnostics

    def hex_lines(self) -> list[str]:
        """Render each word as 4 uppercase hex digits."""
        return [word.to_hex() for word in self.words]

    def to_bytes(self) -> bytes:
        """Concatenate the words as big-endian 16-bit values."""
        return b"".join(word.to_bytes() for word in self.words)

    def error_report(self) -> str:
        """Format the diagnostics with a summary line."""
        return format_report(self.diagnostics, self.filename)

    def raise_for_errors(self) -> "AssemblyResult":
        """
        Raise if assembly produced diagnostics.

        Returns:
            This result, so calls can be chained

        Raises:
            AssemblyFailedError: If there is at least one diagnostic
        """
        if self.diagnostics:
            raise AssemblyFailedError(self.diagnostics, self.filename)
        return self

    def render_listing(self) -> str:
        """
        Render the assembly listing.

        Each emitted word gets its own row; the first row of a source line
        carries the line number and source text. Lines that emit nothing
        show no address.
        """
        lines = []
        lines.append("LC-3 Assembler Listing")
        lines.append("=" * 60)
        lines.append("")
        lines.append("Addr   Code  Line  Source")
        lines.append("-" * 60)
        for entry in self.listing:
            if entry.count == 0:
                lines.append(f"             {entry.line_number:4d}  {entry.source}")
                continue
            words = self.words[entry.address:entry.address + entry.count]
            for offset, word in enumerate(words):
                address = entry.address + offset
                if offset == 0:
                    lines.append(f"x{address:04X}  {word}  {entry.line_number:4d}  {entry.source}")
                else:
                    lines.append(f"x{address:04X}  {word}")
        lines.append("")
        lines.append("Symbol Table")
        lines.append("-" * 30)
        for name, address in sorted(self.symbols.items()):
            lines.append(f"{name:20s} = x{address:04X}")
        return "\n".join(lines)


# =============================================================================
# Assembler
# =============================================================================

class Assembler:
    """
    Main LC-3 assembler class.

    Each call to ``assemble`` (or ``assemble_string``/``assemble_file``)
    starts from a fresh symbol table, diagnostics collector and word list,
    so one instance can be reused for many independent programs. The most
    recent result is kept for the ``get_*`` accessors and ``write_*``
    output methods.

    An instance is not meant to be shared between threads.
    """

    def __init__(self) -> None:
        self._result: Optional[AssemblyResult] = None

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble(self, lines: Iterable[str], filename: str = "<input>") -> AssemblyResult:
        """
        Assemble a sequence of source lines.

        Args:
            lines: Source lines in order; line terminators are ignored
            filename: Source name used when formatting diagnostics

        Returns:
            The words, diagnostics, symbols and listing of this run
        """
        symbols = SymbolTable()
        diagnostics = DiagnosticCollector()
        deferred: list[DeferredReference] = []

        parser = LineParser(symbols, diagnostics)
        encoder = Encoder(symbols, diagnostics, deferred)

        words: list[Word] = []
        listing: list[ListingLine] = []

        for line_number, raw in enumerate(lines):
            text = raw.rstrip("\r\n")
            address = len(words)
            parsed = parser.parse(text, line_number, address)
            emitted = encoder.encode(parsed, address) if parsed.emits else []
            words.extend(emitted)
            listing.append(ListingLine(line_number, address, len(emitted), text))

        logger.debug(
            "Pass 1: %d line(s), %d word(s), %d label(s), %d deferred reference(s)",
            len(listing), len(words), len(symbols), len(deferred),
        )

        words = resolve_references(words, deferred, symbols, diagnostics)

        if diagnostics.has_errors():
            logger.debug("%s: %d diagnostic(s)", filename, diagnostics.error_count())

        self._result = AssemblyResult(
            words=tuple(words),
            diagnostics=diagnostics.as_tuple(),
            symbols=symbols.as_mapping(),
            listing=tuple(listing),
            filename=filename,
        )
        return self._result

    def assemble_string(self, source: str, filename: str = "<input>") -> AssemblyResult:
        """
        Assemble source code from a string.

        Args:
            source: Assembly source code
            filename: Virtual filename for diagnostics

        Returns:
            The assembly result
        """
        return self.assemble(source.split("\n"), filename)

    def assemble_file(self, filepath: str | Path) -> AssemblyResult:
        """
        Assemble source code from a file.

        Args:
            filepath: Path to assembly source file

        Returns:
            The assembly result

        Raises:
            FileNotFoundError: If source file not found
            UnicodeDecodeError: If the file is not valid UTF-8
        """
        filepath = Path(filepath)
        logger.debug("Assembling %s", filepath)
        source = filepath.read_text(encoding="utf-8")
        return self.assemble_string(source, str(filepath))

    # =========================================================================
    # Output Methods
    # =========================================================================

    def get_result(self) -> AssemblyResult:
        """
        Get the result of the most recent assembly.

        Raises:
            OutputError: If nothing has been assembled yet
        """
        if self._result is None:
            raise OutputError("nothing has been assembled yet")
        return self._result

    def get_words(self) -> tuple[Word, ...]:
        """Get the assembled words."""
        return self.get_result().words

    def get_symbols(self) -> Mapping[str, int]:
        """Get the read-only symbol table."""
        return self.get_result().symbols

    def get_diagnostics(self) -> tuple[Diagnostic, ...]:
        """Get the diagnostics of the most recent run."""
        return self.get_result().diagnostics

    def get_listing(self) -> str:
        """
        Get the assembly listing as a string.

        Returns:
            Assembly listing with addresses, words, source and symbols
        """
        return self.get_result().render_listing()

    def write_hex(self, filepath: str | Path) -> None:
        """
        Write the program as text, one 4-digit hex word per line.

        Args:
            filepath: Output file path
        """
        lines = self.get_result().hex_lines()
        Path(filepath).write_text("".join(f"{line}\n" for line in lines))
        logger.debug("Wrote %d word(s) to %s", len(lines), filepath)

    def write_binary(self, filepath: str | Path) -> None:
        """
        Write the program as raw big-endian 16-bit words.

        Args:
            filepath: Output file path
        """
        code = self.get_result().to_bytes()
        Path(filepath).write_bytes(code)
        logger.debug("Wrote %d bytes to %s", len(code), filepath)

    def write_listing(self, filepath: str | Path) -> None:
        """
        Write assembly listing file.

        The listing file shows:
        - Addresses
        - Assembled words
        - Source lines
        - Symbol table

        Args:
            filepath: Output file path
        """
        with open(filepath, "w") as f:
            f.write(self.get_listing())
        logger.debug("Wrote listing to %s", filepath)

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write symbol table file.

        Format: name xADDR (one per line, sorted by name)
        """
        symbols = self.get_result().symbols
        with open(filepath, "w") as f:
            f.write("; Symbol table\n")
            f.write("; Generated by lc3asm\n")
            for name, address in sorted(symbols.items()):
                f.write(f"{name} x{address:04X}\n")
        logger.debug("Wrote %d symbol(s) to %s", len(symbols), filepath)

    # =========================================================================
    # Error Handling
    # =========================================================================

    def has_errors(self) -> bool:
        """
        Check if the most recent assembly produced diagnostics.

        Returns:
            True if errors occurred (False if nothing was assembled)
        """
        return self._result is not None and not self._result.ok

    def get_error_report(self) -> str:
        """
        Get formatted error report.

        Returns:
            Error report string
        """
        return self.get_result().error_report()


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, filename: str = "<input>") -> AssemblyResult:
    """
    Convenience function to assemble source code.

    Args:
        source: Assembly source code
        filename: Virtual filename for diagnostics

    Returns:
        The assembly result
    """
    return Assembler().assemble_string(source, filename)


def assemble_file(filepath: str | Path) -> AssemblyResult:
    """
    Convenience function to assemble a file.

    Args:
        filepath: Path to source file

    Returns:
        The assembly result

    Raises:
        FileNotFoundError: If source file not found
    """
    return Assembler().assemble_file(filepath)
