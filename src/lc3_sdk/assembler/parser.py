"""
LC-3 Assembly Line Parser
=========================

This module turns one line of LC-3 assembly source into a ``ParsedLine``:
an optional label plus an ordered token set (mnemonic followed by
operands) and the matching instruction descriptor.

Line Syntax
-----------
```asm
LOOP    ADD R1, R1, -1      ; label, mnemonic, operands, comment
        BRp LOOP            ; BR shorthand: condition letters in the mnemonic
MSG     .STRINGZ "Hi; there"
```

Processing Steps
----------------
1. Strip the comment (``;`` to end of line, ignoring ``;`` inside a string)
2. Tokenize: lower-case, split on commas/whitespace, drop empty tokens.
   The ``.STRINGZ`` operand is extracted verbatim from between its quotes
   instead, since it is character data rather than code.
3. Detect a leading label and bind it to the current word address
4. Expand BR shorthand (``BRzp x`` becomes ``br zp x``, ``BR x`` becomes
   ``br nzp x``)
5. Look up the mnemonic and check the operand count

A line that fails a check records a diagnostic and produces no words; the
assembler then moves on to the next line.

Label Rules
-----------
The first token is a label when it is not a mnemonic and does not start
with ``x``, ``-`` or a digit (which would make it look like a number).
Register names ``r0``-``r7`` cannot be labels. A label may stand alone on
its line or be followed by an instruction.
"""

from dataclasses import dataclass
from typing import Optional
import re

from lc3_sdk.errors import DiagnosticCollector, DiagnosticKind
from lc3_sdk.assembler.opcodes import (
    INSTRUCTION_TABLE,
    InstructionDescriptor,
    get_descriptor,
    is_branch_form,
    is_mnemonic,
    split_branch,
)
from lc3_sdk.assembler.symbols import SymbolTable, find_similar, suggestion_hint


STRINGZ = ".stringz"

REGISTER_NAMES = frozenset(f"r{n}" for n in range(8))

# Characters that make a leading token look like a number rather than a label
NUMERIC_START = frozenset("x-0123456789")

# Real instructions, used for "did you mean" hints
INSTRUCTION_NAMES = [name for name, desc in INSTRUCTION_TABLE.items() if not desc.is_pseudo_op]

_SEPARATORS = re.compile(r"[,\s]+")

# .STRINGZ as a whole token: preceded by start/separator, followed by
# separator, quote or end of line
_STRINGZ_TOKEN = re.compile(r'(?:^|(?<=[\s,]))\.stringz(?=[\s,"]|$)', re.IGNORECASE)

# Escape sequences in string literals
ESCAPE_SEQUENCES = {
    "n": "\n",      # Newline
    "r": "\r",      # Carriage return
    "t": "\t",      # Tab
    "\\": "\\",     # Backslash
    '"': '"',       # Double quote
    "'": "'",       # Single quote
    "0": "\0",      # Null
}


# =============================================================================
# Parsed Line
# =============================================================================

@dataclass(frozen=True)
class ParsedLine:
    """
    Result of parsing one source line.

    Attributes:
        line_number: Source line number (0-based)
        label: Label declared on this line, if any
        tokens: Mnemonic followed by operands (lowercase except the
                .STRINGZ literal); empty for blank and label-only lines
        descriptor: Instruction descriptor when the line is ready to
                    encode, None when the line emits nothing
    """
    line_number: int
    label: Optional[str] = None
    tokens: tuple[str, ...] = ()
    descriptor: Optional[InstructionDescriptor] = None

    @property
    def mnemonic(self) -> Optional[str]:
        return self.tokens[0] if self.tokens else None

    @property
    def operands(self) -> tuple[str, ...]:
        return self.tokens[1:]

    @property
    def emits(self) -> bool:
        """True when the line passed every check and should be encoded."""
        return self.descriptor is not None


# =============================================================================
# Text Helpers
# =============================================================================

def strip_comment(text: str) -> str:
    """
    Remove a trailing ``;`` comment.

    A semicolon inside a double-quoted string does not start a comment;
    inside a string, a backslash escapes the following character.
    """
    in_string = False
    escaped = False
    for i, char in enumerate(text):
        if escaped:
            escaped = False
        elif in_string:
            if char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == ";":
            return text[:i]
    return text


def split_tokens(text: str) -> list[str]:
    """Lower-case and split on commas/whitespace, dropping empty tokens."""
    return [token for token in _SEPARATORS.split(text.lower()) if token]


def extract_string_literal(text: str) -> Optional[str]:
    """
    Extract the quoted operand of ``.STRINGZ``.

    Args:
        text: Everything after the ``.STRINGZ`` token

    Returns:
        The decoded string, or None if the operand is not exactly one
        terminated double-quoted string
    """
    text = text.strip().lstrip(",").strip()
    if not text.startswith('"'):
        return None

    chars = []
    i = 1
    while i < len(text):
        char = text[i]
        if char == "\\" and i + 1 < len(text):
            following = text[i + 1]
            chars.append(ESCAPE_SEQUENCES.get(following, char + following))
            i += 2
            continue
        if char == '"':
            # Nothing may follow the closing quote
            if text[i + 1:].strip():
                return None
            return "".join(chars)
        chars.append(char)
        i += 1

    return None


# =============================================================================
# Line Parser
# =============================================================================

class LineParser:
    """
    Parses source lines for one assembly run.

    Labels are bound into the shared symbol table as they are declared and
    problems are recorded in the shared diagnostics collector.

    Usage:
        parser = LineParser(symbols, diagnostics)
        parsed = parser.parse("LOOP ADD r0, r0, 1", line_number=0, address=0)
    """

    def __init__(self, symbols: SymbolTable, diagnostics: DiagnosticCollector):
        self._symbols = symbols
        self._diagnostics = diagnostics

    def parse(self, text: str, line_number: int, address: int) -> ParsedLine:
        """
        Parse one line.

        Args:
            text: Raw source line
            line_number: 0-based line number for diagnostics
            address: Word address of the next word to be emitted

        Returns:
            The parsed line; ``parsed.emits`` tells whether to encode it
        """
        code = strip_comment(text)
        if not code.strip():
            return ParsedLine(line_number)

        literal: Optional[str] = None
        match = _STRINGZ_TOKEN.search(code)
        if match:
            tokens = split_tokens(code[:match.start()]) + [STRINGZ]
            literal = extract_string_literal(code[match.end():])
        else:
            tokens = split_tokens(code)
            if not tokens:
                return ParsedLine(line_number)

        label, rest = self._take_label(tokens, line_number, address)
        if not rest:
            return ParsedLine(line_number, label)

        mnemonic = rest[0]
        if is_branch_form(mnemonic):
            rest = [*split_branch(mnemonic), *rest[1:]]
            mnemonic = rest[0]

        descriptor = get_descriptor(mnemonic)
        if self._diagnostics.check(
            descriptor is None,
            DiagnosticKind.UNKNOWN_INSTRUCTION,
            f"unknown instruction '{mnemonic.upper()}'",
            line_number,
            hint=self._unknown_hint(mnemonic, label),
        ):
            return ParsedLine(line_number, label, tuple(rest))

        if mnemonic == STRINGZ:
            if self._diagnostics.check(
                literal is None,
                DiagnosticKind.ARITY_MISMATCH,
                ".STRINGZ needs exactly one quoted string operand",
                line_number,
            ):
                return ParsedLine(line_number, label, tuple(rest))
            rest = [STRINGZ, literal]

        count = len(rest) - 1
        expected = descriptor.operand_count
        if self._diagnostics.check(
            count != expected,
            DiagnosticKind.ARITY_MISMATCH,
            f"{mnemonic.upper()} needs {expected} operand{'s' if expected != 1 else ''}, got {count}",
            line_number,
        ):
            return ParsedLine(line_number, label, tuple(rest))

        return ParsedLine(line_number, label, tuple(rest), descriptor)

    def _take_label(
        self, tokens: list[str], line_number: int, address: int
    ) -> tuple[Optional[str], list[str]]:
        """
        Split off and bind a leading label.

        Returns:
            (label or None, remaining tokens). Remaining tokens are empty
            when the line should be skipped.
        """
        first = tokens[0]
        if is_mnemonic(first):
            return None, tokens

        if self._diagnostics.check(
            first in REGISTER_NAMES,
            DiagnosticKind.INVALID_LABEL_NAME,
            f"invalid label name '{first}'",
            line_number,
            hint="register names cannot be used as labels",
        ):
            return None, []

        if first[0] in NUMERIC_START:
            # Only a label when an instruction follows; otherwise treat the
            # token as a misspelt mnemonic
            if self._diagnostics.check(
                len(tokens) > 1 and is_mnemonic(tokens[1]),
                DiagnosticKind.INVALID_LABEL_NAME,
                f"invalid label name '{first}'",
                line_number,
                hint="labels cannot start with 'x', '-' or a digit",
            ):
                return None, []
            return None, tokens

        existing = self._symbols.define(first, address, line_number)
        if existing is not None:
            self._diagnostics.check(
                True,
                DiagnosticKind.DUPLICATE_LABEL,
                f"duplicate label '{first}'",
                line_number,
                hint=f"'{first}' was first defined at line {existing.line}",
            )
        return first, tokens[1:]

    @staticmethod
    def _unknown_hint(mnemonic: str, label: Optional[str]) -> Optional[str]:
        # A misspelt mnemonic in first position is read as a label
        if label is not None:
            similar = find_similar(label, INSTRUCTION_NAMES, limit=1)
            if similar:
                return f"'{label}' was read as a label; did you mean '{similar[0].upper()}'?"
        return suggestion_hint(mnemonic, INSTRUCTION_NAMES)
