"""
Run configuration and energy constants.

All cost figures are in abstract energy units. Changing one changes
every energy total the simulator reports.
"""

from dataclasses import dataclass


# ──────────────────────────────────────────────
# Energy costs
# ──────────────────────────────────────────────

SMOVE_COST_PER_STEP = 2       # × Manhattan length of the move
LMOVE_COST_PER_STEP = 2       # × (mlen1 + LMOVE_TURN_COST + mlen2)
LMOVE_TURN_COST = 2
FILL_COST = 12                # flat, regardless of the cell's prior state
VOID_COST = 12                # flat; booked under FILL

LOW_HARMONICS_COST = 3        # per cell of the grid, per step
HIGH_HARMONICS_COST = 30      # per cell of the grid, per step
ACTIVE_BOT_COST = 20          # per active bot, per step

# Ledger category labels
STEP = "step"
ACTIVE_BOT = "active_bot"
SMOVE = "smove"
LMOVE = "lmove"
FILL = "fill"


# ──────────────────────────────────────────────
# Defaults / file naming
# ──────────────────────────────────────────────

DEFAULT_MAX_BOTS = 10
TRACE_SUFFIX = ".nbt"
TARGET_MODEL_SUFFIX = "_tgt.mdl"


@dataclass(frozen=True)
class RunConfig:
    """Options for a single replay.

    max_bots: capacity of the bot registry; the initial bot is seeded
              with spawn identifiers 2..max_bots.
    strict:   raise GridMismatch when the final grid differs from the
              target instead of only reporting it.
    """
    max_bots: int = DEFAULT_MAX_BOTS
    strict: bool = False
