"""
Coordinate differences — the operand vocabulary of every bot command.

Four encodings share one value type:

  NEAR          5-bit field packed in the opcode byte (bits 7..3),
                read as a base-3 digit triple. Axes in {-1, 0, 1}.
  FAR           three raw operand bytes, each read as a signed 8-bit
                value and reduced by 30.
  SHORT_LINEAR  2-bit axis selector + 4-bit magnitude, bias 5.
  LONG_LINEAR   2-bit axis selector + 5-bit magnitude, bias 15.

Axis selectors:  01 → x   10 → y   11 → z   (00 is not a valid axis)

The FAR reduction is applied after the signed reinterpretation, so a
byte above 127 lands well below -30 (0xFF → -31, 0x80 → -158). Far
values are not range-checked.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .faults import ContractFault, DecodeFault


class DifferenceKind(Enum):
    NEAR = 'NEAR'
    FAR = 'FAR'
    SHORT_LINEAR = 'SHORT_LINEAR'
    LONG_LINEAR = 'LONG_LINEAR'


SHORT_LINEAR_BIAS = 5
LONG_LINEAR_BIAS = 15
FAR_BIAS = 30

# Largest magnitude field each linear encoding can carry
SHORT_LINEAR_MAX_FIELD = 0b1111
LONG_LINEAR_MAX_FIELD = 0b11111

NEAR_DOMAIN = 27              # 3 × 3 × 3 offsets

AXIS_X = 0b01
AXIS_Y = 0b10
AXIS_Z = 0b11


@dataclass(frozen=True)
class Difference:
    """A signed (dx, dy, dz) offset tagged with the encoding it came from."""
    dx: int
    dy: int
    dz: int
    kind: DifferenceKind

    @property
    def mlen(self) -> int:
        """Manhattan length: |dx| + |dy| + |dz|."""
        return abs(self.dx) + abs(self.dy) + abs(self.dz)

    @property
    def clen(self) -> int:
        """Chebyshev length: max(|dx|, |dy|, |dz|)."""
        return max(abs(self.dx), abs(self.dy), abs(self.dz))

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.dx, self.dy, self.dz)

    def __str__(self) -> str:
        return f"<{self.dx},{self.dy},{self.dz}>"


def signed8(value: int) -> int:
    """Reinterpret an unsigned byte as a two's complement signed value."""
    if value & 0x80:
        return value - 256
    return value


# ──────────────────────────────────────────────
# Decoders
# ──────────────────────────────────────────────

def read_nd(current: int) -> Difference:
    """Decode the near difference packed in bits 7..3 of an opcode byte."""
    nd = (current & 0xFF) >> 3
    if nd >= NEAR_DOMAIN:
        raise DecodeFault("near difference field out of range", current)

    dz = nd % 3 - 1
    dy = (nd // 3) % 3 - 1
    dx = nd // 9 - 1
    return Difference(dx, dy, dz, DifferenceKind.NEAR)


def read_fd(b0: int, b1: int, b2: int) -> Difference:
    """Decode a far difference from its three operand bytes."""
    return Difference(
        signed8(b0) - FAR_BIAS,
        signed8(b1) - FAR_BIAS,
        signed8(b2) - FAR_BIAS,
        DifferenceKind.FAR,
    )


def read_ld(a: int, i: int, kind: DifferenceKind,
            source: Optional[int] = None) -> Difference:
    """Decode a linear difference: axis selector `a`, biased magnitude `i`.

    `source` is the opcode byte the selector came from; it is reported in
    the DecodeFault raised for selector 00.
    """
    if kind == DifferenceKind.SHORT_LINEAR:
        delta = i - SHORT_LINEAR_BIAS
    elif kind == DifferenceKind.LONG_LINEAR:
        delta = i - LONG_LINEAR_BIAS
    else:
        raise ContractFault(f"read_ld called with non-linear kind {kind.value}")

    if a == AXIS_X:
        return Difference(delta, 0, 0, kind)
    if a == AXIS_Y:
        return Difference(0, delta, 0, kind)
    if a == AXIS_Z:
        return Difference(0, 0, delta, kind)
    raise DecodeFault(f"invalid linear axis selector {a:02b}",
                      a if source is None else source)


def read_sld(a: int, i: int, source: Optional[int] = None) -> Difference:
    return read_ld(a, i, DifferenceKind.SHORT_LINEAR, source)


def read_lld(a: int, i: int, source: Optional[int] = None) -> Difference:
    return read_ld(a, i, DifferenceKind.LONG_LINEAR, source)


# ──────────────────────────────────────────────
# Encoders (inverse of the above)
# ──────────────────────────────────────────────

def encode_nd(diff: Difference) -> int:
    """Return the 5-bit near field for `diff` (caller shifts it into place)."""
    for axis in diff.as_tuple():
        if axis not in (-1, 0, 1):
            raise ContractFault(f"{diff} is not a near difference")
    return (diff.dx + 1) * 9 + (diff.dy + 1) * 3 + (diff.dz + 1)


def encode_ld(diff: Difference) -> Tuple[int, int]:
    """Return (axis selector, magnitude field) for a linear difference.

    A zero-length difference has no distinguishable axis and is encoded
    on x.
    """
    if diff.kind == DifferenceKind.SHORT_LINEAR:
        bias, limit = SHORT_LINEAR_BIAS, SHORT_LINEAR_MAX_FIELD
    elif diff.kind == DifferenceKind.LONG_LINEAR:
        bias, limit = LONG_LINEAR_BIAS, LONG_LINEAR_MAX_FIELD
    else:
        raise ContractFault(f"{diff} is a {diff.kind.value} difference, not linear")

    nonzero = [(sel, d) for sel, d in zip((AXIS_X, AXIS_Y, AXIS_Z), diff.as_tuple()) if d]
    if len(nonzero) > 1:
        raise ContractFault(f"{diff} moves along more than one axis")
    a, delta = nonzero[0] if nonzero else (AXIS_X, 0)

    i = delta + bias
    if not 0 <= i <= limit:
        raise ContractFault(f"{diff} exceeds the {diff.kind.value} range")
    return a, i


def encode_fd(diff: Difference) -> bytes:
    """Return the three operand bytes of a far difference."""
    out = bytearray()
    for axis in diff.as_tuple():
        value = axis + FAR_BIAS
        if not -128 <= value <= 127:
            raise ContractFault(f"{diff} cannot be encoded as a far difference")
        out.append(value & 0xFF)
    return bytes(out)
