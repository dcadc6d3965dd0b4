"""
Voxel grid and model file (.mdl) tests.
"""

import io

import pytest

from voxbot.faults import BoundsFault, FormatFault
from voxbot.grid import CellState, Grid, load_grid, read_grid


def _model(r, *data):
    return io.BytesIO(bytes([r, *data]))


class TestGridLayout:
    @pytest.mark.parametrize("r", [0, 1, 2, 3, 5])
    def test_cell_count_and_indices(self, r):
        grid = Grid(r)
        cells = list(grid)
        assert len(cells) == len(grid) == r ** 3
        assert [c.index for c in cells] == list(range(r ** 3))
        for c in cells:
            assert c.index == c.x * r * r + c.y * r + c.z
            assert (c.x, c.y, c.z) == (c.index // (r * r), (c.index // r) % r, c.index % r)
            assert c.state == CellState.VOID

    def test_set_and_get(self):
        grid = Grid(4)
        grid.set(1, 2, 3, CellState.FULL)
        assert grid.get(1, 2, 3) == CellState.FULL
        assert grid.cell(1, 2, 3).index == 1 * 16 + 2 * 4 + 3
        assert grid.cell(1, 2, 3).is_full
        assert grid.full_count == 1
        grid.set(1, 2, 3, CellState.VOID)
        assert grid.full_count == 0

    @pytest.mark.parametrize("coords", [(4, 0, 0), (0, 4, 0), (0, 0, 4), (-1, 0, 0)])
    def test_out_of_bounds(self, coords):
        grid = Grid(4)
        with pytest.raises(BoundsFault):
            grid.set(*coords, CellState.FULL)
        with pytest.raises(BoundsFault):
            grid.get(*coords)

    def test_full_cells_and_layer(self):
        grid = Grid(3)
        for coords in [(0, 0, 0), (2, 1, 0), (1, 1, 2), (0, 2, 2)]:
            grid.set(*coords, CellState.FULL)
        assert grid.full_cells() == [(0, 0, 0), (0, 2, 2), (1, 1, 2), (2, 1, 0)]
        assert grid.layer(1) == [(1, 1, 2), (2, 1, 0)]
        assert grid.layer(0) == [(0, 0, 0)]
        with pytest.raises(BoundsFault):
            grid.layer(3)

    def test_equality(self):
        a, b = Grid(2), Grid(2)
        assert a == b
        a.set(0, 1, 0, CellState.FULL)
        assert a != b
        b.set(0, 1, 0, CellState.FULL)
        assert a == b
        assert Grid(2) != Grid(3)


class TestReadGrid:
    def test_bit_order_low_bit_first(self):
        # r=2: bit 1 → cell 1 (0,0,1); bit 2 → cell 2 (0,1,0); bit 7 → (1,1,1)
        grid = read_grid(_model(2, 0b10000110))
        assert grid.full_cells() == [(0, 0, 1), (0, 1, 0), (1, 1, 1)]

    def test_second_byte_continues_counter(self):
        # r=4: cell 8 is bit 0 of the second data byte → (0, 2, 0)
        data = [0] * 8
        data[1] = 0b00000001
        grid = read_grid(_model(4, *data))
        assert grid.full_cells() == [(0, 2, 0)]

    def test_empty_stream_is_header_fault(self):
        with pytest.raises(FormatFault) as exc:
            read_grid(io.BytesIO(b""))
        assert "header" in str(exc.value)

    def test_too_few_cells(self):
        with pytest.raises(FormatFault) as exc:
            read_grid(_model(4, 0xFF))
        assert exc.value.expected == 64
        assert exc.value.actual == 8
        assert "Too few" in str(exc.value)

    def test_header_only(self):
        with pytest.raises(FormatFault) as exc:
            read_grid(_model(2))
        assert exc.value.actual == 0

    def test_too_many_cells(self):
        with pytest.raises(FormatFault) as exc:
            read_grid(_model(2, 0x00, 0x00))
        assert "Too many" in str(exc.value)
        assert exc.value.expected == 8

    def test_set_padding_bit_is_too_many(self):
        # r=1 holds one cell; bit 1 would be a second cell
        with pytest.raises(FormatFault):
            read_grid(_model(1, 0b11))

    def test_zero_padding_accepted(self):
        grid = read_grid(_model(1, 0b1))
        assert grid.r == 1
        assert grid.get(0, 0, 0) == CellState.FULL

    def test_zero_resolution(self):
        grid = read_grid(_model(0))
        assert grid.r == 0
        assert len(grid) == 0
        with pytest.raises(FormatFault):
            read_grid(_model(0, 0))


class TestWriteGrid:
    @pytest.mark.parametrize("r", [1, 2, 3, 4, 7])
    def test_round_trip(self, r):
        grid = Grid(r)
        for i in range(0, r ** 3, 3):
            grid.set(*grid.coords_of(i), CellState.FULL)
        data = grid.to_bytes()
        assert data[0] == r
        assert len(data) == 1 + (r ** 3 + 7) // 8
        assert read_grid(io.BytesIO(data)) == grid

    def test_write_and_load(self, tmp_path):
        grid = Grid(3)
        grid.set(2, 2, 2, CellState.FULL)
        path = tmp_path / "X_tgt.mdl"
        with open(path, "wb") as f:
            grid.write(f)
        assert load_grid(path) == grid


class TestDiff:
    def test_matches(self):
        assert Grid(3).diff(Grid(3)).matches

    def test_missing_and_extra(self):
        working, target = Grid(3), Grid(3)
        working.set(0, 0, 1, CellState.FULL)
        target.set(1, 0, 0, CellState.FULL)
        v = working.diff(target)
        assert not v.matches
        assert v.missing == [(1, 0, 0)]
        assert v.extra == [(0, 0, 1)]
        assert "1 missing, 1 extra" in v.summary()

    def test_resolution_mismatch(self):
        v = Grid(2).diff(Grid(3))
        assert not v.matches
        assert "Resolution mismatch" in v.summary()
