"""
LC-3 Instruction Word
=====================

The ``Word`` value type holds one assembled 16-bit word and exposes the
standard LC-3 field views. Words are immutable; the only "modification"
the assembler performs is building a new word with extra field bits during
forward-reference backpatching (``Word.with_field``).

Field helpers in this module also define how signed fields of a given
width are range-checked and truncated:

| Width | Range           | Used by                     |
|-------|-----------------|-----------------------------|
| 5     | -16 .. 15       | ADD/AND immediate           |
| 6     | -32 .. 31       | LDR/STR offset              |
| 8     | -128 .. 127     | TRAP vector                 |
| 9     | -256 .. 255     | BR, LD, LDI, LEA, ST, STI   |
| 11    | -1024 .. 1023   | JSR                         |
| 16    | -32768 .. 65535 | .FILL (either signedness)   |
"""

from dataclasses import dataclass
from typing import Optional
import string

from lc3_sdk.errors import DiagnosticCollector, DiagnosticKind


WORD_BITS = 16
WORD_MASK = 0xFFFF

# Number of addressable words
ADDRESS_SPACE = 1 << WORD_BITS


# =============================================================================
# Field Helpers
# =============================================================================

def field_mask(width: int) -> int:
    """Return a mask covering the low ``width`` bits."""
    return (1 << width) - 1


def field_range(width: int) -> tuple[int, int]:
    """
    Return the inclusive range of values a field of ``width`` bits accepts.

    Fields narrower than a word are two's complement signed. A full word
    accepts both signed and unsigned 16-bit values.
    """
    low = -(1 << (width - 1))
    if width >= WORD_BITS:
        return low, field_mask(width)
    return low, (1 << (width - 1)) - 1


def fits_field(value: int, width: int) -> bool:
    """Check whether ``value`` can be encoded in a field of ``width`` bits."""
    low, high = field_range(width)
    return low <= value <= high


def to_field(value: int, width: int) -> int:
    """Truncate a value to its two's complement field bits."""
    return value & field_mask(width)


def sign_extend(bits: int, width: int) -> int:
    """Interpret the low ``width`` bits of ``bits`` as a signed number."""
    bits &= field_mask(width)
    if bits & (1 << (width - 1)):
        return bits - (1 << width)
    return bits


def fit_field(value: int, width: int, line: int, diagnostics: DiagnosticCollector) -> int:
    """
    Range-check a value and return its field bits.

    An out-of-range value records an OffsetOutOfRange diagnostic and
    encodes as 0.
    """
    low, high = field_range(width)
    if diagnostics.check(
        not fits_field(value, width),
        DiagnosticKind.OFFSET_OUT_OF_RANGE,
        f"value {value} does not fit in a {width}-bit field",
        line,
        hint=f"range is {low} to {high}",
    ):
        return 0
    return to_field(value, width)


# =============================================================================
# Word Value Type
# =============================================================================

@dataclass(frozen=True, order=True)
class Word:
    """
    One 16-bit LC-3 word.

    Attributes:
        bits: Unsigned word value (0 to 0xFFFF)
    """
    bits: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.bits <= WORD_MASK:
            raise ValueError(f"word value {self.bits} outside 0..0x{WORD_MASK:X}")

    # -------------------------------------------------------------------------
    # Field views
    # -------------------------------------------------------------------------

    @property
    def opcode(self) -> int:
        """Bits 15-12."""
        return (self.bits >> 12) & 0xF

    @property
    def dr(self) -> int:
        """Destination (or source for stores) register, bits 11-9."""
        return (self.bits >> 9) & 0x7

    @property
    def sr1(self) -> int:
        """First source register, bits 8-6."""
        return (self.bits >> 6) & 0x7

    @property
    def base_r(self) -> int:
        """Base register for JMP/JSRR/LDR/STR; same bits as SR1."""
        return self.sr1

    @property
    def sr2(self) -> int:
        """Second source register, bits 2-0."""
        return self.bits & 0x7

    @property
    def nzp(self) -> int:
        """Branch condition bits 11-9 as a 3-bit value."""
        return (self.bits >> 9) & 0x7

    @property
    def is_immediate(self) -> bool:
        """Bit 5, the ADD/AND immediate-mode flag."""
        return self.get(5)

    @property
    def signed(self) -> int:
        """The whole word as a two's complement number."""
        return sign_extend(self.bits, WORD_BITS)

    def get(self, pos: int) -> bool:
        """Return a single bit."""
        return bool(self.bits & (1 << pos))

    def low(self, width: int) -> int:
        """Return the low ``width`` bits, unsigned."""
        return self.bits & field_mask(width)

    def signed_low(self, width: int) -> int:
        """Return the low ``width`` bits, sign-extended."""
        return sign_extend(self.bits, width)

    # -------------------------------------------------------------------------
    # Construction and rendering
    # -------------------------------------------------------------------------

    def with_field(self, field: int) -> "Word":
        """Return a new word with ``field`` OR'd into this word's bits."""
        return Word(self.bits | (field & WORD_MASK))

    def to_hex(self) -> str:
        """Render as 4 uppercase hex digits."""
        return f"{self.bits:04X}"

    def to_bytes(self) -> bytes:
        """Big-endian 2-byte encoding."""
        return self.bits.to_bytes(2, "big")

    @classmethod
    def from_int(cls, value: int) -> "Word":
        """Build a word from any integer, keeping the low 16 bits."""
        return cls(value & WORD_MASK)

    def __str__(self) -> str:
        return self.to_hex()

    def __int__(self) -> int:
        return self.bits

    def __repr__(self) -> str:
        return f"Word(x{self.bits:04X})"


def parse_hex_word(text: str) -> Optional[Word]:
    """
    Parse a rendered word (``"F025"``) back into a Word.

    Returns None if the text is not 1-4 hex digits.
    """
    text = text.strip()
    if not 1 <= len(text) <= 4 or not all(c in string.hexdigits for c in text):
        return None
    return Word(int(text, 16))
