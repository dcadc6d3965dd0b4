"""
Fault taxonomy for the voxbot decoder and interpreter.

Every fault is fatal to the run that raised it. Nothing in the core
retries or recovers; the caller (normally the voxbotkit CLI) reports
the fault together with the file involved.

    DecodeFault    unrecognized opcode / operand bit pattern
    FormatFault    malformed model file or truncated trace
    BoundsFault    coordinate outside [0, r)
    ContractFault  programming error (bad argument to an internal helper)
    GridMismatch   final grid differs from the target model
"""

from __future__ import annotations
from typing import Optional


class VoxbotError(Exception):
    """Base class for every fault raised by the voxbot package."""
    pass


class DecodeFault(VoxbotError):
    """Raised when a trace byte does not decode to a command."""
    def __init__(self, message: str, byte: int, offset: Optional[int] = None):
        self.reason = message
        self.byte = byte
        self.offset = offset
        where = f" at offset {offset}" if offset is not None else ""
        super().__init__(f"{message}: byte 0b{byte:08b} (0x{byte:02X}){where}")


class FormatFault(VoxbotError):
    """Raised when a persisted model or trace stream is malformed."""
    def __init__(self, message: str, expected: Optional[int] = None,
                 actual: Optional[int] = None):
        self.expected = expected
        self.actual = actual
        if expected is not None:
            message = f"{message}, expected {expected}, got {actual}"
        super().__init__(message)


class BoundsFault(VoxbotError):
    """Raised when a position or grid index leaves the cube [0, r)."""
    def __init__(self, x: int, y: int, z: int, r: int, what: str = "position"):
        self.x = x
        self.y = y
        self.z = z
        self.r = r
        super().__init__(f"{what} ({x}, {y}, {z}) outside grid of resolution {r}")


class ContractFault(VoxbotError):
    """Raised on a violated calling contract; a bug, not bad data."""
    pass


class GridMismatch(VoxbotError):
    """Raised by strict verification when the final grid differs from the target."""
    def __init__(self, verification):
        self.verification = verification
        super().__init__(verification.summary())
