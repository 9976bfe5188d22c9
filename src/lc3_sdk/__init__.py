"""
LC-3 SDK - Assembler Toolchain for the LC-3 Educational Computer
=================================================================

This package assembles LC-3 assembly source into 16-bit machine words.

The LC-3 is a small educational architecture with 16-bit words and 16
opcodes. Assembled programs are consumed by simulators and debuggers; this
package does not execute them.

Main Components
---------------
- **assembler**: Two-pass LC-3 assembler (lc3asm)
    Converts assembly source (.asm) into words, diagnostics and a symbol
    table

- **errors**: Diagnostics model and exception hierarchy

Quick Start
-----------
Assemble a program:
    >>> from lc3_sdk import Assembler
    >>> asm = Assembler()
    >>> result = asm.assemble_file("hello.asm")
    >>> if result.ok:
    ...     asm.write_hex("hello.hex")
    ... else:
    ...     print(result.error_report())

Or use the command-line tool:
    $ lc3asm hello.asm -o hello.hex

Reference Documentation
-----------------------
- Patt & Patel, Introduction to Computing Systems, Appendix A

Version History
---------------
1.0.0 - Initial release with the assembler and lc3asm
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from lc3_sdk.assembler import Assembler, AssemblyResult, Word, assemble, assemble_file
from lc3_sdk.errors import (
    LC3Error,
    AssemblerError,
    AssemblyFailedError,
    OutputError,
    Diagnostic,
    DiagnosticKind,
    DiagnosticCollector,
)

__all__ = [
    # Version
    "__version__",
    # Assembler
    "Assembler",
    "AssemblyResult",
    "Word",
    "assemble",
    "assemble_file",
    # Errors
    "LC3Error",
    "AssemblerError",
    "AssemblyFailedError",
    "OutputError",
    "Diagnostic",
    "DiagnosticKind",
    "DiagnosticCollector",
]
