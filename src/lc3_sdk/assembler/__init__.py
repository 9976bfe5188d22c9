"""
LC-3 Assembler
==============

This module provides a two-pass assembler for the LC-3 educational
instruction set.

Main Components
---------------
- **Assembler**: Main assembler class that runs both passes
- **LineParser**: Splits a source line into label, mnemonic and operands
- **Encoder**: Produces the exact LC-3 bit layout for each instruction
- **SymbolTable**: Label to word address mapping
- **resolve_references**: Pass 2 backpatching of forward references
- **Word**: Immutable 16-bit instruction word with field accessors

Assembly Process
----------------
1. **Pass 1 (LineParser + Encoder)**:
   - Strip comments, fold case, split tokens, expand BR shorthand
   - Bind labels to the current word address
   - Encode each instruction, deferring labels that are not bound yet

2. **Pass 2 (resolve_references)**:
   - Look up each deferred label and patch its field into the emitted word

Example Usage
-------------
>>> from lc3_sdk.assembler import assemble
>>> result = assemble('''
...         LEA r0, MSG
...         TRAP x22
...         HALT
... MSG     .STRINGZ "Hi"
... ''')
>>> result.hex_lines()
['E002', 'F022', 'F025', '0048', '0069', '0000']

Supported Features
------------------
- All LC-3 instructions, including BR shorthand (BRn, BRzp, ...)
- Decimal and x-prefixed hex immediates
- Forward and backward label references
- Pseudo-ops (.FILL, .BLKW, .STRINGZ, .ORIG, .END, HALT)
- Error accumulation: every mistake in a program is reported in one run
- Listing, symbol, hex and binary output
"""

from lc3_sdk.assembler.assembler import (
    Assembler,
    AssemblyResult,
    ListingLine,
    assemble,
    assemble_file,
)
from lc3_sdk.assembler.encoder import Encoder
from lc3_sdk.assembler.parser import LineParser, ParsedLine
from lc3_sdk.assembler.symbols import (
    DeferredReference,
    Symbol,
    SymbolTable,
    resolve_references,
)
from lc3_sdk.assembler.opcodes import (
    InstructionDescriptor,
    INSTRUCTION_TABLE,
    MNEMONICS,
    PSEUDO_OPS,
)
from lc3_sdk.assembler.word import Word

__all__ = [
    # Main class and functions
    "Assembler",
    "AssemblyResult",
    "ListingLine",
    "assemble",
    "assemble_file",
    # Pipeline stages
    "LineParser",
    "ParsedLine",
    "Encoder",
    "SymbolTable",
    "Symbol",
    "DeferredReference",
    "resolve_references",
    # Instruction set
    "InstructionDescriptor",
    "INSTRUCTION_TABLE",
    "MNEMONICS",
    "PSEUDO_OPS",
    # Words
    "Word",
]
