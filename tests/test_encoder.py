# =============================================================================
# test_encoder.py - Instruction Encoder Tests
# =============================================================================
# Tests for the exact LC-3 bit layouts, operand parsing and the
# degrade-to-zero error policy of the encoder.
#
# Test coverage includes:
#   - Every instruction format
#   - Field boundaries for each signed field width
#   - Register, number and label operands
#   - Pseudo-op expansion
# =============================================================================

import pytest

from lc3_sdk.errors import DiagnosticCollector, DiagnosticKind
from lc3_sdk.assembler.encoder import Encoder
from lc3_sdk.assembler.parser import LineParser
from lc3_sdk.assembler.symbols import DeferredReference, SymbolTable


class EncoderHarness:
    """Parses and encodes single lines against a shared symbol table."""

    def __init__(self):
        self.symbols = SymbolTable()
        self.diagnostics = DiagnosticCollector()
        self.deferred = []
        self.parser = LineParser(self.symbols, self.diagnostics)
        self.encoder = Encoder(self.symbols, self.diagnostics, self.deferred)

    def encode(self, text, address=0, line_number=0):
        parsed = self.parser.parse(text, line_number, address)
        assert parsed.emits, f"line did not parse: {text!r}"
        return [word.bits for word in self.encoder.encode(parsed, address)]

    def kinds(self):
        return [d.kind for d in self.diagnostics]


@pytest.fixture
def harness():
    return EncoderHarness()


# =============================================================================
# Instruction Layout Tests
# =============================================================================

class TestOperateInstructions:
    """ADD, AND and NOT."""

    def test_add_register_form(self, harness):
        assert harness.encode("ADD r3, r2, r1") == [0x1681]

    def test_add_immediate_form(self, harness):
        assert harness.encode("ADD r1, r1, -1") == [0x127F]

    def test_and_immediate_zero(self, harness):
        assert harness.encode("AND r0, r0, 0") == [0x5020]

    def test_and_register_form(self, harness):
        assert harness.encode("AND r7 r6 r5") == [0x5F85]

    def test_not(self, harness):
        assert harness.encode("NOT r1, r2") == [0x92BF]

    def test_hex_immediate(self, harness):
        assert harness.encode("ADD r0 r0 xF") == [0x102F]
        assert not harness.diagnostics.has_errors()


class TestControlInstructions:
    """BR, JMP, JSR, JSRR, RET, RTI and TRAP."""

    def test_branch_conditions(self, harness):
        assert harness.encode("BRn 0") == [0x0800]
        assert harness.encode("BRz 5") == [0x0405]
        assert harness.encode("BRp 0") == [0x0200]
        assert harness.encode("BRnz 0") == [0x0C00]
        assert harness.encode("BRzp 0") == [0x0600]

    def test_bare_branch_is_nzp(self, harness):
        assert harness.encode("BR -1") == [0x0FFF]
        assert harness.encode("BRnzp -1") == [0x0FFF]

    def test_branch_letter_order_does_not_matter(self, harness):
        assert harness.encode("BRpn 0") == harness.encode("BRnp 0")

    def test_jmp(self, harness):
        assert harness.encode("JMP r2") == [0xC080]

    def test_ret_is_jmp_r7(self, harness):
        assert harness.encode("RET") == [0xC1C0]
        assert harness.encode("JMP r7") == [0xC1C0]

    def test_jsrr(self, harness):
        assert harness.encode("JSRR r3") == [0x40C0]

    def test_jsr(self, harness):
        assert harness.encode("JSR 1023") == [0x4BFF]
        assert harness.encode("JSR -1024") == [0x4C00]

    def test_rti(self, harness):
        assert harness.encode("RTI") == [0x8000]

    def test_trap(self, harness):
        assert harness.encode("TRAP x25") == [0xF025]
        assert harness.encode("TRAP x7F") == [0xF07F]

    def test_halt_matches_trap_x25(self, harness):
        assert harness.encode("HALT") == harness.encode("TRAP x25") == [0xF025]


class TestDataMovement:
    """LD, LDI, LEA, ST, STI, LDR and STR."""

    @pytest.mark.parametrize("text,expected", [
        ("LD r1, 5", 0x2205),
        ("LDI r2, -1", 0xA5FF),
        ("LEA r0, 0", 0xE000),
        ("ST r7, 255", 0x3EFF),
        ("STI r3, -256", 0xB700),
        ("LDR r1, r2, 3", 0x6283),
        ("STR r4, r5, -32", 0x7960),
        ("STR r4, r5, 31", 0x795F),
    ])
    def test_layouts(self, harness, text, expected):
        assert harness.encode(text) == [expected]
        assert not harness.diagnostics.has_errors()


# =============================================================================
# Field Boundary Tests
# =============================================================================

class TestFieldBoundaries:
    """Boundary values assemble cleanly; one beyond is zeroed with a diagnostic."""

    @pytest.mark.parametrize("template,width", [
        ("ADD r0, r0, {}", 5),
        ("LDR r0, r0, {}", 6),
        ("TRAP {}", 8),
        ("BR {}", 9),
        ("LD r0, {}", 9),
        ("JSR {}", 11),
    ])
    def test_boundaries(self, harness, template, width):
        high = (1 << (width - 1)) - 1
        low = -(1 << (width - 1))

        harness.encode(template.format(high))
        harness.encode(template.format(low))
        assert not harness.diagnostics.has_errors()

        base = harness.encode(template.format(0))
        assert harness.encode(template.format(high + 1)) == base
        assert harness.encode(template.format(low - 1)) == base
        assert harness.kinds() == [DiagnosticKind.OFFSET_OUT_OF_RANGE] * 2

    def test_trap_signed_range(self, harness):
        assert harness.encode("TRAP 127") == [0xF07F]
        assert harness.encode("TRAP -128") == [0xF080]
        assert harness.encode("TRAP 0") == [0xF000]
        assert not harness.diagnostics.has_errors()

    def test_hex_is_a_magnitude(self, harness):
        """x1FF is 511, which does not fit a 9-bit signed field."""
        assert harness.encode("BR x1FF") == [0x0E00]
        assert harness.kinds() == [DiagnosticKind.OFFSET_OUT_OF_RANGE]


# =============================================================================
# Operand Error Tests
# =============================================================================

class TestRegisterErrors:
    """Invalid registers encode as R0."""

    def test_register_out_of_range(self, harness):
        assert harness.encode("ADD r8, r0, r0") == [0x1000]
        assert harness.kinds() == [DiagnosticKind.INVALID_REGISTER]

    def test_register_too_long(self, harness):
        assert harness.encode("NOT r0, r10") == [0x903F]
        assert harness.kinds() == [DiagnosticKind.INVALID_REGISTER]

    def test_number_as_register(self, harness):
        assert harness.encode("JMP 5") == [0xC000]
        assert harness.kinds() == [DiagnosticKind.INVALID_REGISTER]

    def test_register_like_third_operand(self, harness):
        """A two-character 'r' token selects the register form."""
        assert harness.encode("ADD r0, r0, r9") == [0x1000]
        assert harness.kinds() == [DiagnosticKind.INVALID_REGISTER]

    def test_message_and_hint(self, harness):
        harness.encode("JMP r8")
        diag = next(iter(harness.diagnostics))
        assert diag.message == "invalid register 'R8'"
        assert diag.hint == "registers are R0 through R7"

    def test_every_bad_operand_reported(self, harness):
        harness.encode("ADD r8, r9, 99")
        assert harness.kinds() == [
            DiagnosticKind.INVALID_REGISTER,
            DiagnosticKind.INVALID_REGISTER,
            DiagnosticKind.OFFSET_OUT_OF_RANGE,
        ]


class TestNumberErrors:
    """Unparsable numbers encode as 0."""

    @pytest.mark.parametrize("text,expected", [
        ("ADD r0, r0, xZZ", 0x1020),
        ("LD r0, 12ab", 0x2000),
        ("BR -", 0x0E00),
        ("TRAP 0x25", 0xF000),
        ("LEA r0, x", 0xE000),
    ])
    def test_unparsable(self, harness, text, expected):
        assert harness.encode(text) == [expected]
        assert harness.kinds() == [DiagnosticKind.UNPARSABLE_OFFSET]

    def test_message(self, harness):
        harness.encode("LD r0, 12ab")
        assert next(iter(harness.diagnostics)).message == "cannot parse number '12ab'"


# =============================================================================
# Label Operand Tests
# =============================================================================

class TestLabelOperands:
    """Bound labels encode directly; unbound labels are deferred."""

    def test_backward_reference(self, harness):
        harness.symbols.define("loop", 0, 0)
        assert harness.encode("BR loop", address=1) == [0x0FFE]
        assert harness.deferred == []

    def test_jsr_to_bound_label(self, harness):
        harness.symbols.define("sub", 10, 10)
        assert harness.encode("JSR sub", address=2) == [0x4807]

    def test_forward_reference_is_deferred(self, harness):
        assert harness.encode("BRz done", address=4, line_number=6) == [0x0400]
        assert harness.deferred == [DeferredReference(4, 9, "done", 6)]
        assert not harness.diagnostics.has_errors()

    def test_ldr_offset_label_uses_six_bits(self, harness):
        harness.encode("LDR r0, r1, later")
        assert harness.deferred[0].width == 6

    def test_bound_label_out_of_range(self, harness):
        harness.symbols.define("far", 300, 300)
        assert harness.encode("LD r0, far") == [0x2000]
        assert harness.kinds() == [DiagnosticKind.OFFSET_OUT_OF_RANGE]

    def test_encoding_is_deterministic(self, harness):
        harness.symbols.define("loop", 3, 3)
        assert harness.encode("BRnp loop", address=9) == harness.encode("BRnp loop", address=9)


# =============================================================================
# Pseudo-op Tests
# =============================================================================

class TestFill:
    """.FILL emits one full-width word."""

    @pytest.mark.parametrize("operand,expected", [
        ("x1234", 0x1234),
        ("-1", 0xFFFF),
        ("65535", 0xFFFF),
        ("-32768", 0x8000),
        ("0", 0x0000),
    ])
    def test_values(self, harness, operand, expected):
        assert harness.encode(f".FILL {operand}") == [expected]
        assert not harness.diagnostics.has_errors()

    @pytest.mark.parametrize("operand", ["65536", "-32769", "x10000"])
    def test_out_of_range(self, harness, operand):
        assert harness.encode(f".FILL {operand}") == [0]
        assert harness.kinds() == [DiagnosticKind.OFFSET_OUT_OF_RANGE]

    def test_bound_label_is_absolute(self, harness):
        harness.symbols.define("data", 5, 5)
        assert harness.encode(".FILL data", address=20) == [5]

    def test_forward_label_is_deferred_absolute(self, harness):
        assert harness.encode(".FILL later", address=2) == [0]
        ref = harness.deferred[0]
        assert ref.width == 16
        assert not ref.pc_relative


class TestBlkw:
    """.BLKW emits a block of zero words."""

    def test_three_zero_words(self, harness):
        assert harness.encode(".BLKW 3") == [0, 0, 0]
        assert len(harness.symbols) == 0

    def test_hex_count(self, harness):
        assert harness.encode(".BLKW x4") == [0, 0, 0, 0]

    def test_zero_count(self, harness):
        assert harness.encode(".BLKW 0") == []

    def test_negative_count(self, harness):
        assert harness.encode(".BLKW -1") == []
        assert harness.kinds() == [DiagnosticKind.OFFSET_OUT_OF_RANGE]

    def test_past_address_space(self, harness):
        assert harness.encode(".BLKW 3", address=0xFFFE) == []
        assert harness.kinds() == [DiagnosticKind.OFFSET_OUT_OF_RANGE]

    def test_label_count_rejected(self, harness):
        harness.symbols.define("size", 2, 0)
        assert harness.encode(".BLKW size") == []
        assert harness.kinds() == [DiagnosticKind.UNPARSABLE_OFFSET]
        assert harness.deferred == []


class TestStringz:
    """.STRINGZ emits one word per character plus a terminator."""

    def test_ab(self, harness):
        assert harness.encode('.STRINGZ "AB"') == [0x41, 0x42, 0]

    def test_empty_string(self, harness):
        assert harness.encode('.STRINGZ ""') == [0]

    def test_escapes(self, harness):
        assert harness.encode(r'.STRINGZ "a\n"') == [0x61, 0x0A, 0]

    def test_unicode_in_bmp(self, harness):
        assert harness.encode('.STRINGZ "é"') == [0xE9, 0]

    def test_character_above_bmp(self, harness):
        assert harness.encode('.STRINGZ "\U0001F600"') == [0, 0]
        assert harness.kinds() == [DiagnosticKind.OFFSET_OUT_OF_RANGE]


class TestOrigAndEnd:
    """.ORIG and .END emit nothing."""

    def test_orig(self, harness):
        assert harness.encode(".ORIG x3000") == []

    def test_end(self, harness):
        assert harness.encode(".END") == []
