"""
LC-3 Instruction Set Definition
===============================

This module defines the LC-3 instruction descriptor table: for every
mnemonic the assembler understands, how many operands it takes and the
fixed opcode bits of its encoding.

The LC-3 is a 16-bit educational architecture with 16 opcodes. The opcode
occupies the top nibble (bits 15-12) of every instruction word.

Instruction Formats
-------------------
| Mnemonic      | Operands            | Opcode  |
|---------------|---------------------|---------|
| ADD, AND      | DR, SR1, SR2/imm5   | 1, 5    |
| NOT           | DR, SR              | 9       |
| BR[n][z][p]   | PCoffset9           | 0       |
| JMP, JSRR     | BaseR               | C, 4    |
| RET           | (none)              | C       |
| RTI           | (none)              | 8       |
| JSR           | PCoffset11          | 4       |
| TRAP          | trapvect8           | F       |
| LD, LDI, LEA  | DR, PCoffset9       | 2, A, E |
| ST, STI       | SR, PCoffset9       | 3, B    |
| LDR, STR      | DR/SR, BaseR, off6  | 6, 7    |

Pseudo-ops
----------
- ``HALT``       alias for ``TRAP x25``
- ``.FILL v``    one word with value v
- ``.BLKW n``    n zero words
- ``.STRINGZ s`` one word per character plus a terminating zero
- ``.ORIG a``    accepted for line-shape validation, emits nothing
- ``.END``       accepted for line-shape validation, emits nothing

Branch Shorthand
----------------
``BR`` alone means "branch always" (condition nzp). ``BR`` followed by any
combination of the letters n, z, p (``BRz``, ``BRnp``, ``BRpzn``) selects
the condition codes tested. The parser rewrites these into the canonical
token form ``br <conditions> <target>``, which is why the table lists BR
with two operands.

Reference
---------
- Patt & Patel, Introduction to Computing Systems, Appendix A
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Instruction Descriptor
# =============================================================================

@dataclass(frozen=True)
class InstructionDescriptor:
    """
    Static information about one mnemonic.

    This dataclass is immutable (frozen) so the shared table cannot be
    modified at runtime.

    Attributes:
        mnemonic: Lowercase mnemonic as it appears in the token set
        operand_count: Number of operands after the mnemonic
        opcode: Fixed opcode bits of the encoding (0 for most pseudo-ops)
    """
    mnemonic: str
    operand_count: int
    opcode: int

    @property
    def is_pseudo_op(self) -> bool:
        """True for assembler directives (names starting with '.')."""
        return self.mnemonic.startswith(".")

    def __repr__(self) -> str:
        return (
            f"InstructionDescriptor({self.mnemonic!r}, "
            f"operands={self.operand_count}, opcode=x{self.opcode:04X})"
        )


# =============================================================================
# Descriptor Table
# =============================================================================

def _descriptors(*entries: tuple[str, int, int]) -> dict[str, InstructionDescriptor]:
    return {name: InstructionDescriptor(name, count, opcode) for name, count, opcode in entries}


INSTRUCTION_TABLE: dict[str, InstructionDescriptor] = _descriptors(
    # Operate instructions
    ("add", 3, 0x1000),
    ("and", 3, 0x5000),
    ("not", 2, 0x9000),

    # Control instructions
    ("br", 2, 0x0000),      # conditions, PCoffset9 (after shorthand expansion)
    ("jmp", 1, 0xC000),
    ("ret", 0, 0xC000),
    ("jsr", 1, 0x4000),
    ("jsrr", 1, 0x4000),
    ("rti", 0, 0x8000),
    ("trap", 1, 0xF000),

    # Data movement instructions
    ("ld", 2, 0x2000),
    ("ldi", 2, 0xA000),
    ("ldr", 3, 0x6000),
    ("lea", 2, 0xE000),
    ("st", 2, 0x3000),
    ("sti", 2, 0xB000),
    ("str", 3, 0x7000),

    # Pseudo-ops
    ("halt", 0, 0xF000),
    (".fill", 1, 0x0000),
    (".blkw", 1, 0x0000),
    (".stringz", 1, 0x0000),
    (".orig", 1, 0x0000),
    (".end", 0, 0x0000),
)


# =============================================================================
# Instruction Set Reference Lists
# =============================================================================

MNEMONICS = frozenset(INSTRUCTION_TABLE)

PSEUDO_OPS = frozenset(name for name in INSTRUCTION_TABLE if name.startswith("."))

# Condition code letters and their bit positions in a BR instruction
BRANCH_CONDITIONS = {
    "n": 0x0800,
    "z": 0x0400,
    "p": 0x0200,
}

# Condition used when BR is written without a suffix
UNCONDITIONAL = "nzp"

# HALT encodes as TRAP with this vector
HALT_VECTOR = 0x25

# Register number that RET jumps through (JMP R7)
RETURN_REGISTER = 7

# Bit set in JSR to select PC-relative (rather than register) mode
JSR_LINK_BIT = 0x0800

# Bit set in ADD/AND to select the immediate form
IMMEDIATE_FLAG = 0x0020

# NOT carries all ones in bits 5-0
NOT_TRAILER = 0x003F


# =============================================================================
# Lookup Functions
# =============================================================================

def get_descriptor(mnemonic: str) -> Optional[InstructionDescriptor]:
    """
    Look up the descriptor for a mnemonic.

    Args:
        mnemonic: Lowercase mnemonic (BR forms must already be expanded)

    Returns:
        The descriptor, or None if the mnemonic is unknown
    """
    return INSTRUCTION_TABLE.get(mnemonic)


def is_branch_form(token: str) -> bool:
    """
    Check whether a token is BR or a BR shorthand.

    The suffix may hold each of n, z and p at most once, in any order.
    """
    if not token.startswith("br"):
        return False
    suffix = token[2:]
    return set(suffix) <= set(BRANCH_CONDITIONS) and len(set(suffix)) == len(suffix)


def split_branch(token: str) -> tuple[str, str]:
    """
    Split a BR form into mnemonic and condition letters.

    >>> split_branch("brzp")
    ('br', 'zp')
    >>> split_branch("br")
    ('br', 'nzp')
    """
    suffix = token[2:]
    return "br", suffix or UNCONDITIONAL


def is_mnemonic(token: str) -> bool:
    """Return True if the token names an instruction, pseudo-op or BR form."""
    return token in INSTRUCTION_TABLE or is_branch_form(token)
