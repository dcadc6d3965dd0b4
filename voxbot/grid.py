"""
Voxel grid + model file reader / writer (.mdl)

The grid is a cube of side r stored flat, one byte per cell
(0 = VOID, 1 = FULL), in x-major / y / z order:

    index = x·r² + y·r + z

    x  near → far
    y  bottom → top   (a "layer" is one y value)
    z  left → right

Model file format:
    byte 0      r (0–255)
    bytes 1..   cell states, 8 cells per byte, low bit first, cell i
                taking bit (i % 8) of byte (i // 8)

r³ need not be a multiple of 8: the last byte may carry zero padding
bits. A set padding bit, or a whole byte past the last cell, is a
"too many cells" FormatFault.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Iterator, List, Tuple, Union

from .faults import BoundsFault, ContractFault, FormatFault

logger = logging.getLogger(__name__)

Coord = Tuple[int, int, int]


class CellState(Enum):
    FULL = 'FULL'
    VOID = 'VOID'


@dataclass(frozen=True)
class Cell:
    """Read-only view of one grid cell."""
    x: int
    y: int
    z: int
    index: int
    state: CellState

    @property
    def is_full(self) -> bool:
        return self.state == CellState.FULL


@dataclass
class Verification:
    """Outcome of comparing a working grid against a target model."""
    r_expected: int
    r_actual: int
    missing: List[Coord] = field(default_factory=list)   # Full in target only
    extra: List[Coord] = field(default_factory=list)     # Full in working grid only

    @property
    def matches(self) -> bool:
        return self.r_expected == self.r_actual and not self.missing and not self.extra

    def summary(self) -> str:
        if self.r_expected != self.r_actual:
            return (f"Resolution mismatch: target r={self.r_expected}, "
                    f"grid r={self.r_actual}")
        if self.matches:
            return f"Grid matches target (r={self.r_expected})"
        return (f"Grid differs from target (r={self.r_expected}): "
                f"{len(self.missing)} missing, {len(self.extra)} extra")


class Grid:
    """Cubic voxel grid of side `r`; every cell starts VOID."""

    def __init__(self, r: int):
        if r < 0:
            raise ContractFault(f"grid resolution must be >= 0, got {r}")
        self.r = r
        self._cells = bytearray(r * r * r)

    # --- Addressing ---

    def in_bounds(self, x: int, y: int, z: int) -> bool:
        r = self.r
        return 0 <= x < r and 0 <= y < r and 0 <= z < r

    def index_of(self, x: int, y: int, z: int) -> int:
        if not self.in_bounds(x, y, z):
            raise BoundsFault(x, y, z, self.r, what="cell")
        return x * self.r * self.r + y * self.r + z

    def coords_of(self, index: int) -> Coord:
        if not 0 <= index < len(self._cells):
            raise ContractFault(f"cell index {index} outside 0..{len(self._cells) - 1}")
        r = self.r
        return index // (r * r), (index // r) % r, index % r

    # --- Cell access ---

    def get(self, x: int, y: int, z: int) -> CellState:
        if self._cells[self.index_of(x, y, z)]:
            return CellState.FULL
        return CellState.VOID

    def set(self, x: int, y: int, z: int, state: CellState):
        self._cells[self.index_of(x, y, z)] = 1 if state == CellState.FULL else 0

    def cell(self, x: int, y: int, z: int) -> Cell:
        index = self.index_of(x, y, z)
        return Cell(x, y, z, index, self._state_at(index))

    def _state_at(self, index: int) -> CellState:
        return CellState.FULL if self._cells[index] else CellState.VOID

    def cells(self) -> Iterator[Cell]:
        """All r³ cells in index order."""
        for index in range(len(self._cells)):
            x, y, z = self.coords_of(index)
            yield Cell(x, y, z, index, self._state_at(index))

    def __iter__(self) -> Iterator[Cell]:
        return self.cells()

    def __len__(self) -> int:
        return len(self._cells)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self.r == other.r and self._cells == other._cells

    def __repr__(self) -> str:
        return f"Grid(r={self.r}, full={self.full_count})"

    # --- Views for renderers / reports ---

    @property
    def full_count(self) -> int:
        return self._cells.count(1)

    def full_cells(self) -> List[Coord]:
        """Coordinates of every FULL cell, in index order."""
        return [self.coords_of(i) for i, v in enumerate(self._cells) if v]

    def layer(self, y: int) -> List[Coord]:
        """FULL cells of the horizontal layer at height y."""
        if not 0 <= y < self.r:
            raise BoundsFault(0, y, 0, self.r, what="layer")
        r = self.r
        out = []
        for x in range(r):
            base = x * r * r + y * r
            for z in range(r):
                if self._cells[base + z]:
                    out.append((x, y, z))
        return out

    def diff(self, target: Grid) -> Verification:
        """Compare this (working) grid against `target`."""
        result = Verification(r_expected=target.r, r_actual=self.r)
        if target.r != self.r:
            return result
        for i, (have, want) in enumerate(zip(self._cells, target._cells)):
            if want and not have:
                result.missing.append(self.coords_of(i))
            elif have and not want:
                result.extra.append(self.coords_of(i))
        return result

    # --- Serialization ---

    def to_bytes(self) -> bytes:
        """Encode in model file format."""
        if self.r > 0xFF:
            raise ContractFault(f"resolution {self.r} does not fit the model header byte")
        packed = bytearray((len(self._cells) + 7) // 8)
        for i, v in enumerate(self._cells):
            if v:
                packed[i >> 3] |= 1 << (i & 7)
        return bytes([self.r]) + bytes(packed)

    def write(self, stream: BinaryIO) -> int:
        data = self.to_bytes()
        stream.write(data)
        return len(data)


# ──────────────────────────────────────────────
# Model file loading
# ──────────────────────────────────────────────

def read_grid(stream: BinaryIO) -> Grid:
    """Parse a model from an open binary stream."""
    header = stream.read(1)
    if len(header) < 1:
        raise FormatFault("Not enough bytes for resolution (insufficient header)")

    r = header[0]
    expected = r * r * r
    grid = Grid(r)
    cells = grid._cells
    data = stream.read()

    processed = 0
    for byte in data:
        if processed == expected:
            raise FormatFault(f"Too many cells in model, r={r}",
                              expected=expected, actual=len(data) * 8)
        for bit in range(8):
            if processed == expected:
                if byte >> bit:
                    raise FormatFault(f"Too many cells in model, r={r}",
                                      expected=expected, actual=len(data) * 8)
                break
            if (byte >> bit) & 1:
                cells[processed] = 1
            processed += 1

    if processed < expected:
        raise FormatFault(f"Too few cells in model, r={r}",
                          expected=expected, actual=processed)
    return grid


def load_grid(path: Union[str, Path]) -> Grid:
    """Open and parse a model file."""
    start = time.perf_counter()
    with open(path, "rb") as f:
        grid = read_grid(f)
    elapsed = time.perf_counter() - start
    logger.info(f"Loaded model {Path(path).name}: r={grid.r}, "
                f"{grid.full_count} full cells in {elapsed:.3f}s")
    return grid
