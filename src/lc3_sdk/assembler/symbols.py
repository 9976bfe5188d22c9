"""
Symbol Table and Forward-Reference Resolution
=============================================

LC-3 programs may reference a label before or after its declaration, with
no pre-declaration rule, so the assembler works in two passes:

Pass 1 (interleaved with parsing and encoding)
----------------------------------------------
- Labels are bound to the current word address as declarations appear
- References to labels that are already bound are encoded directly
- References to labels not yet bound are recorded as ``DeferredReference``
  entries and encoded as 0

Pass 2 (``resolve_references``)
-------------------------------
- Each deferred reference is looked up, in discovery order
- Unknown labels produce an UnknownLabel diagnostic
- Known labels are range-checked and OR'd into the word emitted in pass 1

PC-relative offsets are always ``target - (word_index + 1)``: by the time
the LC-3 adds an offset, the PC already points past the current word.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional
import logging

from lc3_sdk.errors import DiagnosticCollector, DiagnosticKind
from lc3_sdk.assembler.word import Word, fit_field

logger = logging.getLogger(__name__)


# =============================================================================
# Symbol Table
# =============================================================================

@dataclass(frozen=True)
class Symbol:
    """
    Symbol table entry.

    Attributes:
        name: Label name (lowercase)
        address: Word address from the load origin
        line: Source line that declared the label (0-based)
    """
    name: str
    address: int
    line: int


class SymbolTable:
    """
    Label name to word address mapping for one assembly run.

    Names are unique. ``define`` refuses to overwrite an existing label so
    the first declaration always wins.
    """

    def __init__(self) -> None:
        self._symbols: dict[str, Symbol] = {}

    def define(self, name: str, address: int, line: int) -> Optional[Symbol]:
        """
        Bind a label to an address.

        Returns:
            None if the label was bound, or the existing symbol if the
            name was already taken (the table is left unchanged)
        """
        existing = self._symbols.get(name)
        if existing is not None:
            return existing
        self._symbols[name] = Symbol(name, address, line)
        return None

    def lookup(self, name: str) -> Optional[int]:
        """Return the address bound to a label, or None if unbound."""
        symbol = self._symbols.get(name)
        return symbol.address if symbol is not None else None

    def get(self, name: str) -> Optional[Symbol]:
        """Return the full symbol entry, or None if unbound."""
        return self._symbols.get(name)

    def names(self) -> list[str]:
        """Return label names in declaration order."""
        return list(self._symbols)

    def as_mapping(self) -> Mapping[str, int]:
        """Return a read-only name to address view."""
        return MappingProxyType({name: sym.address for name, sym in self._symbols.items()})

    def __contains__(self, name: object) -> bool:
        return name in self._symbols

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self._symbols.values())

    def __len__(self) -> int:
        return len(self._symbols)


# =============================================================================
# Deferred References
# =============================================================================

@dataclass(frozen=True)
class DeferredReference:
    """
    A label operand that could not be resolved when its word was emitted.

    Attributes:
        word_index: Index of the emitted word to patch
        width: Width of the field holding the value
        label: Referenced label name
        line: Source line of the reference (0-based)
        pc_relative: True for offsets, False for absolute addresses (.FILL)
    """
    word_index: int
    width: int
    label: str
    line: int
    pc_relative: bool = True

    def value_for(self, address: int) -> int:
        """Compute the field value once the label's address is known."""
        if self.pc_relative:
            return address - (self.word_index + 1)
        return address


def resolve_references(
    words: list[Word],
    references: Iterable[DeferredReference],
    symbols: SymbolTable,
    diagnostics: DiagnosticCollector,
) -> list[Word]:
    """
    Backpatch deferred label references (pass 2).

    Args:
        words: Words emitted in pass 1
        references: Deferred references in discovery order
        symbols: Completed symbol table
        diagnostics: Collector for UnknownLabel/OffsetOutOfRange

    Returns:
        A new list of words with every resolvable reference patched in
    """
    resolved = list(words)
    patched = 0

    for ref in references:
        address = symbols.lookup(ref.label)
        if diagnostics.check(
            address is None,
            DiagnosticKind.UNKNOWN_LABEL,
            f"undefined label '{ref.label}'",
            ref.line,
            hint=suggestion_hint(ref.label, symbols.names()),
        ):
            continue

        field = fit_field(ref.value_for(address), ref.width, ref.line, diagnostics)
        resolved[ref.word_index] = resolved[ref.word_index].with_field(field)
        patched += 1

    logger.debug("Pass 2: patched %d deferred reference(s)", patched)
    return resolved


# =============================================================================
# Suggestions
# =============================================================================

def find_similar(name: str, candidates: Iterable[str], limit: int = 3) -> list[str]:
    """
    Find names that look like typos of ``name``.

    Uses a simple edit distance heuristic: candidates within two edits and
    at most one character longer or shorter.
    """
    similar = []
    for candidate in candidates:
        if candidate == name:
            continue
        if abs(len(candidate) - len(name)) <= 1 and _edit_distance(name, candidate) <= 2:
            similar.append(candidate)
    return similar[:limit]


def suggestion_hint(name: str, candidates: Iterable[str]) -> Optional[str]:
    """Build a 'did you mean' hint, or None if nothing is close."""
    similar = find_similar(name, candidates)
    if not similar:
        return None
    return "did you mean " + ", ".join(f"'{s}'" for s in similar) + "?"


def _edit_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein edit distance between two strings."""
    if len(s1) < len(s2):
        s1, s2 = s2, s1

    distances = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        new_distances = [i + 1]
        for j, c2 in enumerate(s2):
            if c1 == c2:
                new_distances.append(distances[j])
            else:
                new_distances.append(1 + min(distances[j], distances[j + 1], new_distances[-1]))
        distances = new_distances
    return distances[-1]
