"""
Coordinate difference decode / encode tests.

Byte fixtures are worked out by hand from the bit layouts in
voxbot/difference.py.
"""

import itertools

import pytest

from voxbot.difference import (
    Difference, DifferenceKind,
    encode_fd, encode_ld, encode_nd,
    read_fd, read_ld, read_lld, read_nd, read_sld, signed8,
)
from voxbot.faults import ContractFault, DecodeFault

NEAR = DifferenceKind.NEAR
FAR = DifferenceKind.FAR
SHORT = DifferenceKind.SHORT_LINEAR
LONG = DifferenceKind.LONG_LINEAR


class TestNearDifference:
    def test_gfill_opcode_near_field(self):
        """0b01010001 → nd=10 → <0,-1,0>"""
        assert read_nd(0b01010001) == Difference(0, -1, 0, NEAR)

    def test_gvoid_opcode_near_field(self):
        """0b10110000 → nd=22 → <1,0,0>"""
        assert read_nd(0b10110000) == Difference(1, 0, 0, NEAR)

    def test_low_bits_ignored(self):
        assert read_nd(0b01010111) == read_nd(0b01010000)

    def test_all_27_fields_are_distinct_unit_offsets(self):
        seen = set()
        for nd in range(27):
            d = read_nd(nd << 3)
            assert d.kind == NEAR
            assert all(axis in (-1, 0, 1) for axis in d.as_tuple())
            seen.add(d.as_tuple())
        assert seen == set(itertools.product((-1, 0, 1), repeat=3))

    def test_fields_past_domain_fault(self):
        for nd in range(27, 32):
            byte = (nd << 3) | 0b011
            with pytest.raises(DecodeFault) as exc:
                read_nd(byte)
            assert exc.value.byte == byte

    def test_encode_inverts_decode(self):
        for nd in range(27):
            assert encode_nd(read_nd(nd << 3)) == nd

    def test_encode_rejects_long_offsets(self):
        with pytest.raises(ContractFault):
            encode_nd(Difference(2, 0, 0, NEAR))


class TestFarDifference:
    def test_scenario_gfill(self):
        assert read_fd(0b00101000, 0b00001111, 0b00110010) == Difference(10, -15, 20, FAR)

    def test_scenario_gvoid(self):
        assert read_fd(0b00100011, 0b00100011, 0b00011001) == Difference(5, 5, -5, FAR)

    def test_signed_then_reduced(self):
        """Bytes above 127 are read as negative before the -30 reduction."""
        assert read_fd(0xFF, 0x80, 0x7F).as_tuple() == (-31, -158, 97)

    def test_zero_bytes(self):
        assert read_fd(0, 0, 0).as_tuple() == (-30, -30, -30)

    def test_signed8(self):
        assert signed8(0x00) == 0
        assert signed8(0x7F) == 127
        assert signed8(0x80) == -128
        assert signed8(0xFF) == -1

    def test_encode(self):
        assert encode_fd(Difference(10, -15, 20, FAR)) == bytes([40, 15, 50])
        assert encode_fd(Difference(-31, 0, 0, FAR)) == bytes([0xFF, 30, 30])

    def test_encode_out_of_range(self):
        with pytest.raises(ContractFault):
            encode_fd(Difference(98, 0, 0, FAR))


class TestLinearDifference:
    def test_short_axes(self):
        assert read_sld(0b01, 7) == Difference(2, 0, 0, SHORT)
        assert read_sld(0b10, 0) == Difference(0, -5, 0, SHORT)
        assert read_sld(0b11, 15) == Difference(0, 0, 10, SHORT)

    def test_long_axes(self):
        assert read_lld(0b01, 0) == Difference(-15, 0, 0, LONG)
        assert read_lld(0b10, 30) == Difference(0, 15, 0, LONG)
        assert read_lld(0b11, 15) == Difference(0, 0, 0, LONG)

    def test_axis_00_faults(self):
        with pytest.raises(DecodeFault):
            read_sld(0b00, 5)

    def test_axis_fault_reports_source_byte(self):
        with pytest.raises(DecodeFault) as exc:
            read_lld(0b00, 20, source=0x04)
        assert exc.value.byte == 0x04

    def test_non_linear_kind_is_contract_fault(self):
        with pytest.raises(ContractFault):
            read_ld(0b01, 5, NEAR)

    def test_encode(self):
        assert encode_ld(Difference(0, -5, 0, SHORT)) == (0b10, 0)
        assert encode_ld(Difference(0, 0, 15, LONG)) == (0b11, 30)
        assert encode_ld(Difference(0, 0, 0, SHORT)) == (0b01, 5)

    def test_encode_rejects_two_axes(self):
        with pytest.raises(ContractFault):
            encode_ld(Difference(1, 1, 0, SHORT))

    def test_encode_rejects_overrange(self):
        with pytest.raises(ContractFault):
            encode_ld(Difference(11, 0, 0, SHORT))
        with pytest.raises(ContractFault):
            encode_ld(Difference(0, 17, 0, LONG))


class TestLengths:
    def test_manhattan(self):
        assert Difference(1, -2, 3, FAR).mlen == 6
        assert Difference(0, 0, 0, NEAR).mlen == 0

    def test_chebyshev(self):
        assert Difference(1, -2, 3, FAR).clen == 3
        assert Difference(-7, 2, 0, FAR).clen == 7
        assert Difference(0, 0, 0, NEAR).clen == 0
