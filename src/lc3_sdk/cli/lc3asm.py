"""
lc3asm - LC-3 Assembler Command-Line Interface
==============================================

This module implements the command-line interface for the LC-3 assembler.

Usage Examples
--------------
Basic assembly (writes hello.hex):
    $ lc3asm hello.asm

With output file:
    $ lc3asm hello.asm -o out.hex

Raw big-endian binary instead of hex text:
    $ lc3asm hello.asm -b hello.bin

Generate all output files:
    $ lc3asm hello.asm -o hello.hex -l hello.lst -s hello.sym

Verbose mode:
    $ lc3asm -v hello.asm
"""

from pathlib import Path
from typing import Optional
import logging
import sys

import click

from lc3_sdk import __version__
from lc3_sdk.assembler import Assembler
from lc3_sdk.cli.errors import ExitCode, handle_cli_exception


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output hex file (default: input.hex)",
)
@click.option(
    "-b", "--binary",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write raw big-endian 16-bit words instead of hex text",
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate listing file",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="lc3asm")
def main(
    input_file: Path,
    output: Optional[Path],
    binary: Optional[Path],
    listing: Optional[Path],
    symbols: Optional[Path],
    verbose: bool,
) -> None:
    """
    Assemble LC-3 source code.

    INPUT_FILE is the assembly source file (.asm) to assemble.

    Every error in the program is reported in a single run. When any
    error is found, no output files are written.

    \b
    Examples:
        lc3asm hello.asm              # Outputs hello.hex
        lc3asm hello.asm -o out.hex   # Specify output file
        lc3asm hello.asm -b out.bin   # Raw binary output
    """
    if output is not None and binary is not None:
        click.echo("Error: -o/--output and -b/--binary are mutually exclusive", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    setup_logging(verbose)

    asm = Assembler()

    try:
        if verbose:
            click.echo(f"Assembling {input_file}...")

        result = asm.assemble_file(input_file)
        result.raise_for_errors()

        if binary is not None:
            asm.write_binary(binary)
            if verbose:
                click.echo(f"Wrote {len(result.words) * 2} bytes to {binary}")
        else:
            output_file = output if output is not None else input_file.with_suffix(".hex")
            asm.write_hex(output_file)
            if verbose:
                click.echo(f"Wrote {len(result.words)} words to {output_file}")

        if listing:
            asm.write_listing(listing)
            if verbose:
                click.echo(f"Wrote listing to {listing}")

        if symbols:
            asm.write_symbols(symbols)
            if verbose:
                click.echo(f"Wrote symbols to {symbols}")

        if verbose:
            click.echo(f"Assembled {len(result.words)} words, {len(result.symbols)} labels")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
