"""
voxbot — voxel-assembly bot trace decoder and replay interpreter
================================================================
Decodes .nbt command traces for a swarm of voxel-assembly bots,
replays them against a cubic grid while keeping an energy ledger, and
checks the result against a .mdl target model.

Architecture:
    ┌───────────┐    ┌───────────┐    ┌────────────┐    ┌────────────┐
    │ .nbt file │───>│  trace    │───>│ simulation │───>│ RunResult  │
    │ (bytes)   │    │ (decoder) │    │  (State)   │    │ + energy   │
    └───────────┘    └───────────┘    └────────────┘    └────────────┘
                                            │
    ┌───────────┐    ┌───────────┐          v
    │ .mdl file │───>│   grid    │───> Verification
    └───────────┘    └───────────┘

    - difference.py: near / far / linear coordinate differences
    - commands.py:   opcode table, the twelve command variants
    - trace.py:      byte stream <-> command list
    - grid.py:       voxel grid, model reader/writer
    - bot.py:        bot identity, seeds, checked position arithmetic
    - state.py:      interpreter (registry, harmonics, energy ledger)
    - simulation.py: apply / end-step loop, verification
"""

import io

__version__ = "0.2.0"

from .faults import (
    VoxbotError, DecodeFault, FormatFault, BoundsFault, ContractFault, GridMismatch,
)
from .difference import Difference, DifferenceKind
from .commands import *
from .trace import (
    read_commands, decode_trace, load_trace, encode_trace, write_trace, command_counts,
)
from .grid import Grid, Cell, CellState, Verification, read_grid, load_grid
from .bot import Bot, Position
from .state import State, Harmonics, Outcome, EnergyLedger
from .simulation import Simulation, RunResult, replay_files, find_pairs
from .config import RunConfig, DEFAULT_MAX_BOTS


def replay(trace: bytes, model: bytes, *, max_bots: int = DEFAULT_MAX_BOTS,
           strict: bool = False) -> RunResult:
    """Replay in-memory trace bytes against in-memory model bytes.

    Full pipeline: decode trace -> load target -> Simulation.run -> verify.

    Args:
        trace: raw .nbt bytes.
        model: raw .mdl bytes; sets the grid resolution and the target.
        max_bots: bot registry capacity.
        strict: raise GridMismatch if the final grid differs from the model.

    Returns:
        RunResult with energy breakdown and verification attached.
    """
    target = read_grid(io.BytesIO(model))
    commands = decode_trace(trace)
    sim = Simulation(target.r, RunConfig(max_bots=max_bots, strict=strict))
    return sim.run_and_verify(commands, target)
