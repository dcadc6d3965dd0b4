"""
Bot command set — opcode decode / encode

Every command starts with one opcode byte, optionally followed by
operand bytes. Three single-byte sentinels are matched first; anything
else is dispatched on the low three bits of the opcode.

    byte          command   operands   layout
    ──────────    ───────   ────────   ──────────────────────────────────
    1111 1111     Halt      0
    1111 1110     Wait      0
    1111 1101     Flip      0
    00aa 0100     SMove     1          000i iiii        lld(a, i)
    bbaa 1100     LMove     1          jjjj iiii        sld(a, i), sld(b, j)
    nnnn n111     FusionP   0                           nd(n)
    nnnn n110     FusionS   0                           nd(n)
    nnnn n101     Fission   1          mmmm mmmm        nd(n), m
    nnnn n011     Fill      0                           nd(n)
    nnnn n010     Void      0                           nd(n)
    nnnn n001     GFill     3          xxxxxxxx ×3      nd(n), fd(x, y, z)
    nnnn n000     GVoid     3          xxxxxxxx ×3      nd(n), fd(x, y, z)

Decoding is split in two so the trace reader can fetch exactly the
operand bytes a command needs: `command_class(opcode)` resolves the
variant (and with it OPERANDS), then `decode_command(opcode, operands)`
builds the value.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import ClassVar, Dict, Type

from .difference import (
    Difference, encode_fd, encode_ld, encode_nd,
    read_fd, read_lld, read_nd, read_sld,
)
from .faults import ContractFault, DecodeFault

__all__ = [
    'Command', 'Halt', 'Wait', 'Flip', 'SMove', 'LMove',
    'FusionP', 'FusionS', 'Fission', 'Fill', 'Void', 'GFill', 'GVoid',
    'COMMAND_TYPES', 'read_bits', 'command_class', 'decode_command',
]


def read_bits(byte: int, bit_count: int) -> int:
    """Return the low `bit_count` bits of `byte`."""
    if bit_count > 8 or bit_count < 0:
        raise ContractFault(f"bit_count must be within 0..8, got {bit_count}")
    mask = (1 << bit_count) - 1
    return byte & mask


# ──────────────────────────────────────────────
# Command variants
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class Command:
    """Base class for all twelve command variants."""
    NAME: ClassVar[str] = ''
    OPERANDS: ClassVar[int] = 0
    BOT_COMMAND: ClassVar[bool] = True

    @property
    def is_bot_command(self) -> bool:
        """False for the global commands (Halt, Wait, Flip)."""
        return self.BOT_COMMAND

    def encode(self) -> bytes:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.NAME


@dataclass(frozen=True)
class Halt(Command):
    NAME: ClassVar[str] = 'Halt'
    BOT_COMMAND: ClassVar[bool] = False
    OPCODE: ClassVar[int] = 0xFF

    def encode(self) -> bytes:
        return bytes([self.OPCODE])


@dataclass(frozen=True)
class Wait(Command):
    NAME: ClassVar[str] = 'Wait'
    BOT_COMMAND: ClassVar[bool] = False
    OPCODE: ClassVar[int] = 0xFE

    def encode(self) -> bytes:
        return bytes([self.OPCODE])


@dataclass(frozen=True)
class Flip(Command):
    NAME: ClassVar[str] = 'Flip'
    BOT_COMMAND: ClassVar[bool] = False
    OPCODE: ClassVar[int] = 0xFD

    def encode(self) -> bytes:
        return bytes([self.OPCODE])


@dataclass(frozen=True)
class SMove(Command):
    """Straight move along one axis, up to 15 cells."""
    lld: Difference

    NAME: ClassVar[str] = 'SMove'
    OPERANDS: ClassVar[int] = 1

    @classmethod
    def read(cls, current: int, operands: bytes) -> SMove:
        a = current >> 4 & 0b11
        i = read_bits(operands[0], 5)
        return cls(read_lld(a, i, current))

    def encode(self) -> bytes:
        a, i = encode_ld(self.lld)
        return bytes([(a << 4) | 0b0100, i])

    def __str__(self) -> str:
        return f"SMove {self.lld}"


@dataclass(frozen=True)
class LMove(Command):
    """Two short straight moves (an L-shaped path)."""
    sld1: Difference
    sld2: Difference

    NAME: ClassVar[str] = 'LMove'
    OPERANDS: ClassVar[int] = 1

    @classmethod
    def read(cls, current: int, operands: bytes) -> LMove:
        a1 = current >> 4 & 0b11
        a2 = current >> 6 & 0b11
        i1 = operands[0] & 0b1111
        i2 = operands[0] >> 4 & 0b1111
        return cls(read_sld(a1, i1, current), read_sld(a2, i2, current))

    def encode(self) -> bytes:
        a1, i1 = encode_ld(self.sld1)
        a2, i2 = encode_ld(self.sld2)
        return bytes([(a2 << 6) | (a1 << 4) | 0b1100, (i2 << 4) | i1])

    def __str__(self) -> str:
        return f"LMove {self.sld1} {self.sld2}"


@dataclass(frozen=True)
class _NearCommand(Command):
    """Shared shape of the single-near-difference commands."""
    nd: Difference

    LOW_BITS: ClassVar[int] = 0

    @classmethod
    def read(cls, current: int, operands: bytes = b""):
        return cls(read_nd(current))

    def encode(self) -> bytes:
        return bytes([(encode_nd(self.nd) << 3) | self.LOW_BITS])

    def __str__(self) -> str:
        return f"{self.NAME} {self.nd}"


@dataclass(frozen=True)
class FusionP(_NearCommand):
    NAME: ClassVar[str] = 'FusionP'
    LOW_BITS: ClassVar[int] = 0b111


@dataclass(frozen=True)
class FusionS(_NearCommand):
    NAME: ClassVar[str] = 'FusionS'
    LOW_BITS: ClassVar[int] = 0b110


@dataclass(frozen=True)
class Fill(_NearCommand):
    NAME: ClassVar[str] = 'Fill'
    LOW_BITS: ClassVar[int] = 0b011


@dataclass(frozen=True)
class Void(_NearCommand):
    NAME: ClassVar[str] = 'Void'
    LOW_BITS: ClassVar[int] = 0b010


@dataclass(frozen=True)
class Fission(Command):
    """Spawn a new bot at nd, handing it m seeds."""
    nd: Difference
    m: int

    NAME: ClassVar[str] = 'Fission'
    OPERANDS: ClassVar[int] = 1
    LOW_BITS: ClassVar[int] = 0b101

    @classmethod
    def read(cls, current: int, operands: bytes) -> Fission:
        return cls(read_nd(current), operands[0])

    def encode(self) -> bytes:
        if not 0 <= self.m <= 0xFF:
            raise ContractFault(f"Fission seed count {self.m} does not fit a byte")
        return bytes([(encode_nd(self.nd) << 3) | self.LOW_BITS, self.m])

    def __str__(self) -> str:
        return f"Fission {self.nd} {self.m}"


@dataclass(frozen=True)
class _RegionCommand(Command):
    """Shared shape of GFill / GVoid: near corner plus far extent."""
    nd: Difference
    fd: Difference

    OPERANDS: ClassVar[int] = 3
    LOW_BITS: ClassVar[int] = 0

    @classmethod
    def read(cls, current: int, operands: bytes):
        return cls(read_nd(current), read_fd(operands[0], operands[1], operands[2]))

    def encode(self) -> bytes:
        return bytes([(encode_nd(self.nd) << 3) | self.LOW_BITS]) + encode_fd(self.fd)

    def __str__(self) -> str:
        return f"{self.NAME} {self.nd} {self.fd}"


@dataclass(frozen=True)
class GFill(_RegionCommand):
    NAME: ClassVar[str] = 'GFill'
    LOW_BITS: ClassVar[int] = 0b001


@dataclass(frozen=True)
class GVoid(_RegionCommand):
    NAME: ClassVar[str] = 'GVoid'
    LOW_BITS: ClassVar[int] = 0b000


# ──────────────────────────────────────────────
# Dispatch tables
# ──────────────────────────────────────────────

SENTINELS: Dict[int, Type[Command]] = {
    Halt.OPCODE: Halt,
    Wait.OPCODE: Wait,
    Flip.OPCODE: Flip,
}

# low 3 bits -> variant; 0b100 is split further on bit 3
LOW_BITS_TABLE: Dict[int, Type[Command]] = {
    0b111: FusionP,
    0b110: FusionS,
    0b101: Fission,
    0b011: Fill,
    0b010: Void,
    0b001: GFill,
    0b000: GVoid,
}

MOVE_TABLE: Dict[int, Type[Command]] = {
    0b0100: SMove,
    0b1100: LMove,
}

COMMAND_TYPES = (Halt, Wait, Flip, SMove, LMove, FusionP, FusionS,
                 Fission, Fill, Void, GFill, GVoid)


def command_class(current: int) -> Type[Command]:
    """Resolve the command variant an opcode byte introduces."""
    if current in SENTINELS:
        return SENTINELS[current]

    simple = read_bits(current, 3)
    if simple == 0b100:
        exact = read_bits(current, 4)
        if exact in MOVE_TABLE:
            return MOVE_TABLE[exact]
    elif simple in LOW_BITS_TABLE:
        return LOW_BITS_TABLE[simple]

    raise DecodeFault("command not recognized", current)


def decode_command(current: int, operands: bytes = b"") -> Command:
    """Decode one command from its opcode byte and operand bytes.

    `operands` must hold exactly command_class(current).OPERANDS bytes.
    """
    cls = command_class(current)
    if len(operands) != cls.OPERANDS:
        raise ContractFault(
            f"{cls.NAME} takes {cls.OPERANDS} operand bytes, got {len(operands)}")
    if cls in (Halt, Wait, Flip):
        return cls()
    return cls.read(current, bytes(operands))
