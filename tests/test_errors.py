# =============================================================================
# test_errors.py - Diagnostics and Exception Tests
# =============================================================================
# Tests for the diagnostics collector, diagnostic formatting and the
# exception hierarchy.
# =============================================================================

import pytest

from lc3_sdk.errors import (
    AssemblerError,
    AssemblyFailedError,
    Diagnostic,
    DiagnosticCollector,
    DiagnosticKind,
    LC3Error,
    OutputError,
    format_report,
)


# =============================================================================
# Diagnostic Tests
# =============================================================================

class TestDiagnostic:
    """Test diagnostic formatting."""

    def test_format_without_filename(self):
        diag = Diagnostic(3, "unknown instruction 'MOV'", DiagnosticKind.UNKNOWN_INSTRUCTION)
        assert diag.format() == "line 3: error: unknown instruction 'MOV'"
        assert str(diag) == diag.format()

    def test_format_with_filename_and_hint(self):
        diag = Diagnostic(
            0, "undefined label 'lop'", DiagnosticKind.UNKNOWN_LABEL, hint="did you mean 'loop'?"
        )
        assert diag.format("loop.asm") == (
            "loop.asm:0: error: undefined label 'lop'\n"
            "hint: did you mean 'loop'?"
        )

    def test_kind_names(self):
        assert str(DiagnosticKind.OFFSET_OUT_OF_RANGE) == "OffsetOutOfRange"
        assert str(DiagnosticKind.INVALID_LABEL_NAME) == "InvalidLabelName"
        assert len(DiagnosticKind) == 8


class TestDiagnosticCollector:
    """Test the append-only collector."""

    def test_check_records_when_invalid(self):
        diagnostics = DiagnosticCollector()
        assert diagnostics.check(True, DiagnosticKind.INVALID_REGISTER, "bad", 4)
        assert diagnostics.error_count() == 1
        assert diagnostics.as_tuple()[0] == Diagnostic(4, "bad", DiagnosticKind.INVALID_REGISTER)

    def test_check_passes_when_valid(self):
        diagnostics = DiagnosticCollector()
        assert not diagnostics.check(False, DiagnosticKind.INVALID_REGISTER, "bad", 4)
        assert not diagnostics.has_errors()
        assert len(diagnostics) == 0

    def test_order_preserved_and_not_deduplicated(self):
        diagnostics = DiagnosticCollector()
        for line in (5, 1, 5):
            diagnostics.check(True, DiagnosticKind.UNKNOWN_LABEL, "same", line)
        assert [d.line for d in diagnostics] == [5, 1, 5]

    def test_count_by_kind(self):
        diagnostics = DiagnosticCollector()
        diagnostics.check(True, DiagnosticKind.UNKNOWN_LABEL, "a", 0)
        diagnostics.check(True, DiagnosticKind.DUPLICATE_LABEL, "b", 1)
        diagnostics.check(True, DiagnosticKind.UNKNOWN_LABEL, "c", 2)
        assert diagnostics.count(DiagnosticKind.UNKNOWN_LABEL) == 2
        assert diagnostics.count(DiagnosticKind.ARITY_MISMATCH) == 0

    def test_snapshot_is_independent(self):
        diagnostics = DiagnosticCollector()
        snapshot = diagnostics.as_tuple()
        diagnostics.check(True, DiagnosticKind.UNKNOWN_LABEL, "a", 0)
        assert snapshot == ()

    def test_report(self):
        diagnostics = DiagnosticCollector()
        diagnostics.add(Diagnostic(1, "first", DiagnosticKind.ARITY_MISMATCH))
        diagnostics.add(Diagnostic(2, "second", DiagnosticKind.ARITY_MISMATCH))
        assert diagnostics.report("a.asm") == (
            "a.asm:1: error: first\n"
            "a.asm:2: error: second\n"
            "2 errors"
        )

    def test_clear(self):
        diagnostics = DiagnosticCollector()
        diagnostics.check(True, DiagnosticKind.UNKNOWN_LABEL, "a", 0)
        diagnostics.clear()
        assert not diagnostics.has_errors()


# =============================================================================
# Exception Tests
# =============================================================================

class TestExceptions:
    """Test the exception hierarchy."""

    def test_hierarchy(self):
        assert issubclass(AssemblerError, LC3Error)
        assert issubclass(AssemblyFailedError, AssemblerError)
        assert issubclass(OutputError, LC3Error)

    def test_assembler_error_formatting(self):
        error = AssemblerError("bad thing", line=7, hint="try again")
        assert str(error) == "line 7: error: bad thing\nhint: try again"

    def test_assembler_error_without_line(self):
        assert str(AssemblerError("bad thing")) == "error: bad thing"

    def test_assembly_failed_error(self):
        diags = (Diagnostic(0, "undefined label 'x'", DiagnosticKind.UNKNOWN_LABEL),)
        error = AssemblyFailedError(diags, "prog.asm")
        assert error.diagnostics == diags
        assert error.filename == "prog.asm"
        assert "assembly failed with 1 error:" in str(error)
        assert "prog.asm:0: error: undefined label 'x'" in str(error)

    def test_catch_all(self):
        with pytest.raises(LC3Error):
            raise OutputError("nothing has been assembled yet")

    def test_format_report_empty(self):
        assert format_report(()) == "0 errors"
