"""
Bot registry entry and checked position arithmetic.
"""

import pytest

from voxbot.bot import Bot, Position, position_after
from voxbot.difference import Difference, DifferenceKind
from voxbot.faults import BoundsFault, ContractFault

NEAR = DifferenceKind.NEAR
LONG = DifferenceKind.LONG_LINEAR


class TestInitialBot:
    def test_seeds_and_origin(self):
        bot = Bot.initial(10)
        assert bot.index == 1
        assert bot.seeds == [2, 3, 4, 5, 6, 7, 8, 9, 10]
        assert bot.position == Position(0, 0, 0)

    def test_single_bot_has_no_seeds(self):
        assert Bot.initial(1).seeds == []

    def test_zero_bots_is_contract_fault(self):
        with pytest.raises(ContractFault):
            Bot.initial(0)


class TestPositionArithmetic:
    def test_position_after_is_pure(self):
        start = Position(1, 1, 1)
        moved = position_after(start, Difference(1, -1, 0, NEAR), 3)
        assert moved == Position(2, 0, 1)
        assert start == Position(1, 1, 1)

    def test_underflow(self):
        with pytest.raises(BoundsFault) as exc:
            position_after(Position(0, 0, 0), Difference(-1, 0, 0, NEAR), 5)
        assert (exc.value.x, exc.value.r) == (-1, 5)

    def test_overflow(self):
        with pytest.raises(BoundsFault):
            position_after(Position(0, 0, 4), Difference(0, 0, 1, NEAR), 5)

    def test_last_cell_is_inside(self):
        assert position_after(Position(0, 0, 0), Difference(0, 0, 4, LONG), 5) == Position(0, 0, 4)

    def test_apply_position_diff(self):
        bot = Bot.initial(2)
        bot.apply_position_diff(Difference(0, 7, 0, LONG), 20)
        assert bot.position == Position(0, 7, 0)
        assert bot.position_after(Difference(0, -1, 0, NEAR), 20) == Position(0, 6, 0)

    def test_apply_leaves_position_on_fault(self):
        bot = Bot.initial(2)
        with pytest.raises(BoundsFault):
            bot.apply_position_diff(Difference(0, -3, 0, LONG), 20)
        assert bot.position == Position(0, 0, 0)
