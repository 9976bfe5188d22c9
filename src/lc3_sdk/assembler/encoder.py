"""
LC-3 Instruction Encoder
========================

This module turns a parsed line into 16-bit words. Each mnemonic has an
encoding method that assembles the exact LC-3 bit layout:

```
         15  12 11  9 8   6 5 4       0
ADD/AND | op   | DR  | SR1 |0|00| SR2  |   register form
ADD/AND | op   | DR  | SR1 |1|  imm5   |   immediate form
NOT     | 1001 | DR  | SR  | 111111    |
BR      | 0000 |n z p|   PCoffset9     |
JMP     | 1100 | 000 |BaseR| 000000    |   RET = JMP R7
JSR     | 0100 |1|      PCoffset11     |
JSRR    | 0100 |0|00 |BaseR| 000000    |
LD etc. | op   | DR  |   PCoffset9     |
LDR/STR | op   | DR  |BaseR| offset6   |
TRAP    | 1111 | 0000 |   trapvect8    |
RTI     | 1000 | 000000000000          |
```

Operands
--------
- Registers are ``r0``-``r7``
- Numbers are decimal (``12``, ``-3``) or hex with a bare ``x`` (``x1F``)
- Labels encode as ``target - (address + 1)`` for PC-relative fields and
  as the absolute address for ``.FILL``

A label that is not bound yet is recorded as a deferred reference and
encoded as 0; the resolver patches it after the last line. Invalid
operands record a diagnostic and encode as 0, so encoding always produces
its words.
"""

from typing import Callable, Optional
import re

from lc3_sdk.errors import DiagnosticCollector, DiagnosticKind
from lc3_sdk.assembler.opcodes import (
    BRANCH_CONDITIONS,
    HALT_VECTOR,
    IMMEDIATE_FLAG,
    JSR_LINK_BIT,
    NOT_TRAILER,
    RETURN_REGISTER,
)
from lc3_sdk.assembler.parser import ParsedLine
from lc3_sdk.assembler.symbols import DeferredReference, SymbolTable
from lc3_sdk.assembler.word import ADDRESS_SPACE, WORD_BITS, WORD_MASK, Word, fit_field


# Field widths
IMM5 = 5
OFFSET6 = 6
TRAPVECT8 = 8
PCOFFSET9 = 9
PCOFFSET11 = 11

_HEX_NUMBER = re.compile(r"x[0-9a-f]+")
_DECIMAL_NUMBER = re.compile(r"-?[0-9]+")

Handler = Callable[[int, tuple[str, ...], int, int], list[int]]


def looks_numeric(token: str) -> bool:
    """True if a token is written as a number rather than a label."""
    return token[0] in "x-" or token[0].isdigit()


def looks_like_register(token: str) -> bool:
    """True if a token is written as a register (two characters, 'r' first)."""
    return len(token) == 2 and token[0] == "r"


class Encoder:
    """
    Encodes parsed lines for one assembly run.

    The encoder reads the shared symbol table and appends to the shared
    deferred-reference list and diagnostics collector. Given the same
    inputs and symbol table state it always produces the same words.

    Usage:
        encoder = Encoder(symbols, diagnostics, deferred)
        words = encoder.encode(parsed_line, address=len(program))
    """

    def __init__(
        self,
        symbols: SymbolTable,
        diagnostics: DiagnosticCollector,
        deferred: list[DeferredReference],
    ):
        self._symbols = symbols
        self._diagnostics = diagnostics
        self._deferred = deferred

        self._handlers: dict[str, Handler] = {
            "add": self._encode_operate,
            "and": self._encode_operate,
            "not": self._encode_not,
            "br": self._encode_branch,
            "jmp": self._encode_base_register,
            "jsrr": self._encode_base_register,
            "ret": self._encode_ret,
            "rti": self._encode_opcode_only,
            "jsr": self._encode_jsr,
            "trap": self._encode_trap,
            "halt": self._encode_halt,
            "ld": self._encode_pc_relative,
            "ldi": self._encode_pc_relative,
            "lea": self._encode_pc_relative,
            "st": self._encode_pc_relative,
            "sti": self._encode_pc_relative,
            "ldr": self._encode_base_offset,
            "str": self._encode_base_offset,
            ".fill": self._encode_fill,
            ".blkw": self._encode_blkw,
            ".stringz": self._encode_stringz,
            ".orig": self._encode_nothing,
            ".end": self._encode_nothing,
        }

    def encode(self, parsed: ParsedLine, address: int) -> list[Word]:
        """
        Encode one parsed line.

        Args:
            parsed: A line with ``parsed.emits`` true
            address: Word address of the first word this line emits

        Returns:
            The emitted words (empty for .ORIG/.END)
        """
        handler = self._handlers[parsed.mnemonic]
        bits = handler(parsed.descriptor.opcode, parsed.operands, parsed.line_number, address)
        return [Word(value & WORD_MASK) for value in bits]

    # =========================================================================
    # Instruction Encodings
    # =========================================================================

    def _encode_operate(self, opcode: int, operands: tuple[str, ...], line: int, address: int) -> list[int]:
        dest, source, third = operands
        word = opcode | self._register(dest, line) << 9 | self._register(source, line) << 6
        if looks_like_register(third):
            return [word | self._register(third, line)]
        return [word | IMMEDIATE_FLAG | self._value(third, IMM5, line, address)]

    def _encode_not(self, opcode: int, operands: tuple[str, ...], line: int, address: int) -> list[int]:
        dest, source = operands
        return [opcode | self._register(dest, line) << 9 | self._register(source, line) << 6 | NOT_TRAILER]

    def _encode_branch(self, opcode: int, operands: tuple[str, ...], line: int, address: int) -> list[int]:
        conditions, target = operands
        condition_bits = 0
        for letter in conditions:
            condition_bits |= BRANCH_CONDITIONS[letter]
        return [opcode | condition_bits | self._value(target, PCOFFSET9, line, address)]

    def _encode_base_register(self, opcode: int, operands: tuple[str, ...], line: int, address: int) -> list[int]:
        return [opcode | self._register(operands[0], line) << 6]

    def _encode_ret(self, opcode: int, operands: tuple[str, ...], line: int, address: int) -> list[int]:
        return [opcode | RETURN_REGISTER << 6]

    def _encode_opcode_only(self, opcode: int, operands: tuple[str, ...], line: int, address: int) -> list[int]:
        return [opcode]

    def _encode_jsr(self, opcode: int, operands: tuple[str, ...], line: int, address: int) -> list[int]:
        return [opcode | JSR_LINK_BIT | self._value(operands[0], PCOFFSET11, line, address)]

    def _encode_trap(self, opcode: int, operands: tuple[str, ...], line: int, address: int) -> list[int]:
        return [opcode | self._value(operands[0], TRAPVECT8, line, address)]

    def _encode_halt(self, opcode: int, operands: tuple[str, ...], line: int, address: int) -> list[int]:
        return [opcode | HALT_VECTOR]

    def _encode_pc_relative(self, opcode: int, operands: tuple[str, ...], line: int, address: int) -> list[int]:
        register, target = operands
        return [opcode | self._register(register, line) << 9 | self._value(target, PCOFFSET9, line, address)]

    def _encode_base_offset(self, opcode: int, operands: tuple[str, ...], line: int, address: int) -> list[int]:
        register, base, offset = operands
        return [
            opcode
            | self._register(register, line) << 9
            | self._register(base, line) << 6
            | self._value(offset, OFFSET6, line, address)
        ]

    # =========================================================================
    # Pseudo-ops
    # =========================================================================

    def _encode_fill(self, opcode: int, operands: tuple[str, ...], line: int, address: int) -> list[int]:
        return [self._value(operands[0], WORD_BITS, line, address, pc_relative=False)]

    def _encode_blkw(self, opcode: int, operands: tuple[str, ...], line: int, address: int) -> list[int]:
        token = operands[0]
        if self._diagnostics.check(
            not looks_numeric(token),
            DiagnosticKind.UNPARSABLE_OFFSET,
            f".BLKW count must be a number, got '{token}'",
            line,
        ):
            return []

        count = self._parse_number(token, line)
        if count is None:
            return []

        available = ADDRESS_SPACE - address
        if self._diagnostics.check(
            not 0 <= count <= available,
            DiagnosticKind.OFFSET_OUT_OF_RANGE,
            f".BLKW count {count} out of range",
            line,
            hint=f"count must be between 0 and {available}",
        ):
            return []

        return [0] * count

    def _encode_stringz(self, opcode: int, operands: tuple[str, ...], line: int, address: int) -> list[int]:
        words = []
        for char in operands[0]:
            code = ord(char)
            if self._diagnostics.check(
                code > WORD_MASK,
                DiagnosticKind.OFFSET_OUT_OF_RANGE,
                f"character U+{code:X} does not fit in a 16-bit word",
                line,
            ):
                code = 0
            words.append(code)
        words.append(0)
        return words

    def _encode_nothing(self, opcode: int, operands: tuple[str, ...], line: int, address: int) -> list[int]:
        return []

    # =========================================================================
    # Operand Helpers
    # =========================================================================

    def _register(self, token: str, line: int) -> int:
        """Parse a register operand; invalid registers encode as 0."""
        valid = looks_like_register(token) and token[1] in "01234567"
        if self._diagnostics.check(
            not valid,
            DiagnosticKind.INVALID_REGISTER,
            f"invalid register '{token.upper()}'",
            line,
            hint="registers are R0 through R7",
        ):
            return 0
        return int(token[1])

    def _value(
        self,
        token: str,
        width: int,
        line: int,
        address: int,
        pc_relative: bool = True,
    ) -> int:
        """
        Evaluate a number or label operand into field bits.

        Args:
            token: Operand text
            width: Field width in bits
            line: Source line for diagnostics
            address: Address of the word holding the field
            pc_relative: Encode labels as offsets from the next word

        Returns:
            The field bits, or 0 on any error or unresolved label
        """
        if looks_numeric(token):
            value = self._parse_number(token, line)
            if value is None:
                return 0
            return fit_field(value, width, line, self._diagnostics)

        reference = DeferredReference(address, width, token, line, pc_relative)
        target = self._symbols.lookup(token)
        if target is None:
            self._deferred.append(reference)
            return 0
        return fit_field(reference.value_for(target), width, line, self._diagnostics)

    def _parse_number(self, token: str, line: int) -> Optional[int]:
        """Parse ``x``-prefixed hex or signed decimal; None on failure."""
        if _HEX_NUMBER.fullmatch(token):
            return int(token[1:], 16)
        if _DECIMAL_NUMBER.fullmatch(token):
            return int(token)
        self._diagnostics.check(
            True,
            DiagnosticKind.UNPARSABLE_OFFSET,
            f"cannot parse number '{token}'",
            line,
            hint="use decimal (12, -3) or hex with an x prefix (x1F)",
        )
        return None
