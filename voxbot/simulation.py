"""
Trace replay driver.

    trace bytes ──> commands ──> Simulation.run ──> RunResult
                                      │
    model file ──> target grid ──> Simulation.verify ──> Verification

One step is one processed command: apply it, then charge the step
overhead. Faults raised while applying propagate unchanged and abort
the run; the partially updated state stays inspectable on the
Simulation for diagnostics.
"""

from __future__ import annotations

import errno
import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .commands import Command
from .config import RunConfig, TARGET_MODEL_SUFFIX, TRACE_SUFFIX
from .faults import ContractFault, GridMismatch
from .grid import Grid, Verification, load_grid
from .state import Outcome, State
from .trace import load_trace

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    steps: int = 0
    energy: int = 0
    energy_by_category: Dict[str, int] = field(default_factory=dict)
    outcomes: Counter = field(default_factory=Counter)
    unmodeled: Counter = field(default_factory=Counter)   # command name -> count
    verification: Optional[Verification] = None

    @property
    def fully_modeled(self) -> bool:
        """True when every command's effect was modeled in full."""
        return not self.unmodeled

    def to_dict(self) -> dict:
        out = {
            "steps": self.steps,
            "energy": self.energy,
            "energy_by_category": dict(self.energy_by_category),
            "outcomes": {k.value: v for k, v in self.outcomes.items()},
            "unmodeled": dict(self.unmodeled),
        }
        if self.verification is not None:
            out["matches_target"] = self.verification.matches
            out["missing"] = len(self.verification.missing)
            out["extra"] = len(self.verification.extra)
        return out


class Simulation:
    """Replays a command sequence on an empty grid of resolution r.

    Usage:
        sim = Simulation(target.r)
        result = sim.run(load_trace('FA001.nbt'))
        print(result.energy, sim.verify(target).matches)
    """

    def __init__(self, r: int, run_config: Optional[RunConfig] = None):
        self.config = run_config or RunConfig()
        self.state = State(self.config.max_bots, Grid(r))

    @property
    def grid(self) -> Grid:
        return self.state.grid

    def run(self, commands: Iterable[Command]) -> RunResult:
        result = RunResult()
        for command in commands:
            outcome = self.state.apply(command)
            self.state.end_step()

            result.steps += 1
            result.outcomes[outcome] += 1
            if outcome in (Outcome.PARTIAL, Outcome.UNMODELED):
                result.unmodeled[command.NAME] += 1

        result.energy = self.state.energy
        result.energy_by_category = self.state.energy_by_category
        logger.info(f"Replayed {result.steps} steps, energy {result.energy}")
        if result.unmodeled:
            logger.debug(f"Not fully modeled: {dict(result.unmodeled)}")
        return result

    def verify(self, target: Grid) -> Verification:
        verification = self.grid.diff(target)
        logger.info(verification.summary())
        return verification

    def run_and_verify(self, commands: Iterable[Command], target: Grid,
                       strict: Optional[bool] = None) -> RunResult:
        """Replay, then compare against `target`.

        When strict (default: the RunConfig setting) a mismatch raises
        GridMismatch instead of only being recorded on the result.
        """
        if strict is None:
            strict = self.config.strict
        result = self.run(commands)
        result.verification = self.verify(target)
        if strict and not result.verification.matches:
            raise GridMismatch(result.verification)
        return result


# ──────────────────────────────────────────────
# File-level helpers
# ──────────────────────────────────────────────

def replay_files(trace_path: Union[str, Path],
                 model_path: Optional[Union[str, Path]] = None,
                 r: Optional[int] = None,
                 run_config: Optional[RunConfig] = None) -> Tuple[Simulation, RunResult]:
    """Replay a trace file, sizing the grid from the model (or from `r`)."""
    if model_path is None and r is None:
        raise ContractFault("replay_files needs a model path or a resolution")

    target = load_grid(model_path) if model_path is not None else None
    commands = load_trace(trace_path)
    sim = Simulation(target.r if target is not None else r, run_config)
    if target is None:
        return sim, sim.run(commands)
    return sim, sim.run_and_verify(commands, target)


def find_pairs(folder: Union[str, Path]) -> List[Tuple[Path, Path]]:
    """Pair every <stem>.nbt in `folder` with its <stem>_tgt.mdl, sorted by name.

    Traces without a matching target model are left out. A missing folder
    raises FileNotFoundError rather than yielding no pairs.
    """
    folder = Path(folder)
    if not folder.is_dir():
        raise FileNotFoundError(errno.ENOENT, "No such folder", str(folder))
    pairs = []
    for trace_path in sorted(folder.glob(f"*{TRACE_SUFFIX}")):
        model_path = folder / f"{trace_path.stem}{TARGET_MODEL_SUFFIX}"
        if model_path.exists():
            pairs.append((trace_path, model_path))
        else:
            logger.debug(f"No target model for {trace_path.name}")
    return pairs
