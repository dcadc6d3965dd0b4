"""
Interpreter state — bot registry, harmonics, grid and energy ledger.

Execution model (driven by simulation.Simulation):
  1. apply(command)   → mutate registry / grid, charge command energy
  2. end_step()       → charge the per-step overhead

Only registry slot 0 is ever moved or made to touch the grid; the
registry is still a slot-addressed list so a per-bot dispatch rule can
replace that later without reshaping the data.

Several commands are accepted but only partly modeled. apply() reports
that through its Outcome instead of pretending the effect happened:

  APPLIED    full effect modeled
  PARTIAL    energy charged, state change not modeled
  UNMODELED  accepted, nothing changes
  SKIPPED    no bot in slot 0 to carry the command out
"""

import logging
from enum import Enum
from typing import Callable, Dict, List, Optional

from . import config
from .bot import Bot
from .commands import Command
from .faults import ContractFault
from .grid import CellState, Grid

logger = logging.getLogger(__name__)


class Harmonics(Enum):
    LOW = 'LOW'
    HIGH = 'HIGH'


class Outcome(Enum):
    APPLIED = 'APPLIED'
    PARTIAL = 'PARTIAL'
    UNMODELED = 'UNMODELED'
    SKIPPED = 'SKIPPED'


class EnergyLedger:
    """Running energy total with a per-category breakdown. Never decreases."""

    def __init__(self):
        self.total: int = 0
        self.by_category: Dict[str, int] = {}

    def charge(self, category: str, amount: int):
        if amount < 0:
            raise ContractFault(f"negative energy charge {amount} for '{category}'")
        self.total += amount
        self.by_category[category] = self.by_category.get(category, 0) + amount

    def __repr__(self) -> str:
        return f"EnergyLedger(total={self.total}, by_category={self.by_category})"


class State:
    """Interpreter for one replay run."""

    # Effects the interpreter does not model, by command name
    UNMODELED_EFFECTS = {
        'LMove':   'bot position is not updated',
        'Void':    'target cell is not cleared',
        'FusionP': 'bots are not merged',
        'FusionS': 'bots are not merged',
        'Fission': 'no bot is spawned and no seeds are handed over',
        'GFill':   'region is not filled',
        'GVoid':   'region is not cleared',
    }

    def __init__(self, max_bots: int, grid: Grid):
        if max_bots < 1:
            raise ContractFault(f"max_bots must be >= 1, got {max_bots}")
        self.bots: List[Optional[Bot]] = [None] * max_bots
        self.bots[0] = Bot.initial(max_bots)
        self.harmonics = Harmonics.LOW
        self.grid = grid
        self.ledger = EnergyLedger()
        self.active_bot_count = 1

        self._dispatch: Dict[str, Callable[[Command], Outcome]] = self._build_dispatch()

    # --- Convenience views ---

    @property
    def energy(self) -> int:
        return self.ledger.total

    @property
    def energy_by_category(self) -> Dict[str, int]:
        return dict(self.ledger.by_category)

    @property
    def lead_bot(self) -> Optional[Bot]:
        """The bot every positional command acts on (registry slot 0)."""
        return self.bots[0]

    # --- Stepping ---

    def apply(self, command: Command) -> Outcome:
        handler = self._dispatch.get(command.NAME)
        if handler is None:
            raise ContractFault(f"no handler for command {command!r}")
        logger.debug(f"apply {command}")
        return handler(command)

    def end_step(self):
        """Charge the fixed overhead of one processed step."""
        per_cell = (config.LOW_HARMONICS_COST if self.harmonics == Harmonics.LOW
                    else config.HIGH_HARMONICS_COST)
        self.ledger.charge(config.STEP, self.grid.r ** 3 * per_cell)
        self.ledger.charge(config.ACTIVE_BOT, config.ACTIVE_BOT_COST * self.active_bot_count)

    # ══════════════════════════════════════════════
    # Command handlers
    # ══════════════════════════════════════════════

    def _build_dispatch(self) -> Dict[str, Callable[[Command], Outcome]]:
        return {
            'Halt':    self._op_nop,
            'Wait':    self._op_nop,
            'Flip':    self._op_flip,
            'SMove':   self._op_smove,
            'LMove':   self._op_lmove,
            'FusionP': self._op_unmodeled,
            'FusionS': self._op_unmodeled,
            'Fission': self._op_unmodeled,
            'Fill':    self._op_fill,
            'Void':    self._op_void,
            'GFill':   self._op_unmodeled,
            'GVoid':   self._op_unmodeled,
        }

    def _op_nop(self, command) -> Outcome:
        return Outcome.APPLIED

    def _op_flip(self, command) -> Outcome:
        if self.harmonics == Harmonics.LOW:
            self.harmonics = Harmonics.HIGH
        else:
            self.harmonics = Harmonics.LOW
        logger.info(f"harmonics flip to {self.harmonics.value}")
        return Outcome.APPLIED

    def _op_smove(self, command) -> Outcome:
        bot = self.lead_bot
        if bot is None:
            logger.warning(f"{command} skipped: registry slot 0 is empty")
            return Outcome.SKIPPED
        bot.apply_position_diff(command.lld, self.grid.r)
        self.ledger.charge(config.SMOVE, config.SMOVE_COST_PER_STEP * command.lld.mlen)
        return Outcome.APPLIED

    def _op_lmove(self, command) -> Outcome:
        cost = config.LMOVE_COST_PER_STEP * (
            command.sld1.mlen + config.LMOVE_TURN_COST + command.sld2.mlen)
        self.ledger.charge(config.LMOVE, cost)
        return Outcome.PARTIAL

    def _op_fill(self, command) -> Outcome:
        bot = self.lead_bot
        if bot is None:
            logger.warning(f"{command} skipped: registry slot 0 is empty")
            return Outcome.SKIPPED
        place = bot.position_after(command.nd, self.grid.r)
        self.grid.set(place.x, place.y, place.z, CellState.FULL)
        self.ledger.charge(config.FILL, config.FILL_COST)
        return Outcome.APPLIED

    def _op_void(self, command) -> Outcome:
        self.ledger.charge(config.FILL, config.VOID_COST)
        return Outcome.PARTIAL

    def _op_unmodeled(self, command) -> Outcome:
        return Outcome.UNMODELED
