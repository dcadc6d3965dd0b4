#!/usr/bin/env python3
"""
voxbotkit — Voxel bot trace toolkit
===================================

One CLI for everything:
    voxbotkit decode  — Decode a trace and print a command histogram / listing
    voxbotkit model   — Summarize a target model file
    voxbotkit run     — Replay a trace, print the energy ledger, verify the grid
    voxbotkit batch   — Replay every <stem>.nbt / <stem>_tgt.mdl pair in a folder

Usage:
    python voxbotkit.py <command> [options]
    python voxbotkit.py <command> --help

Examples:
    python voxbotkit.py decode FA001.nbt --list
    python voxbotkit.py model FA001_tgt.mdl
    python voxbotkit.py run FA001.nbt --model FA001_tgt.mdl
    python voxbotkit.py run FA001.nbt --resolution 20 --json
    python voxbotkit.py batch problemsF/ -v

Exit codes: 0 success, 1 bad data or grid mismatch, 2 internal error.
"""

import argparse
import json
import logging
import sys
import time
from pathlib import Path

from voxbot import __version__
from voxbot.config import DEFAULT_MAX_BOTS, RunConfig
from voxbot.faults import VoxbotError
from voxbot.grid import load_grid
from voxbot.simulation import find_pairs, replay_files
from voxbot.trace import command_counts, load_trace

logger = logging.getLogger("voxbotkit")


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="voxbotkit",
        description="Voxel bot toolkit — decode, replay and verify .nbt traces",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""commands:
  decode     Decode a trace and print a command histogram
  model      Summarize a target model file
  run        Replay a trace and print the energy ledger
  batch      Replay every trace/model pair in a folder
""",
    )
    parser.add_argument("--version", action="version", version=f"voxbotkit {__version__}")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="Increase verbosity (-v, -vv)")
    parser.add_argument("--quiet", "-q", action="store_true",
                        help="Suppress all output except errors")
    parser.add_argument("--log-file", type=str, help="Write log to file")

    sub = parser.add_subparsers(dest="command", metavar="command")

    p_dec = sub.add_parser("decode", help="Decode a trace and print a command histogram")
    p_dec.add_argument("trace", help="Trace file (.nbt)")
    p_dec.add_argument("--list", action="store_true", help="Print every command")

    p_mdl = sub.add_parser("model", help="Summarize a target model file")
    p_mdl.add_argument("model", help="Model file (.mdl)")

    p_run = sub.add_parser("run", help="Replay a trace and print the energy ledger")
    p_run.add_argument("trace", help="Trace file (.nbt)")
    src = p_run.add_mutually_exclusive_group(required=True)
    src.add_argument("--model", "-m", help="Target model (.mdl); sets resolution and verifies")
    src.add_argument("--resolution", "-r", type=int, help="Grid resolution when no model is given")
    p_run.add_argument("--max-bots", type=int, default=DEFAULT_MAX_BOTS,
                       help=f"Bot registry capacity (default: {DEFAULT_MAX_BOTS})")
    p_run.add_argument("--json", action="store_true", help="Print the result as JSON")

    p_bat = sub.add_parser("batch", help="Replay every trace/model pair in a folder")
    p_bat.add_argument("folder", help="Folder holding <stem>.nbt and <stem>_tgt.mdl files")
    p_bat.add_argument("--max-bots", type=int, default=DEFAULT_MAX_BOTS,
                       help=f"Bot registry capacity (default: {DEFAULT_MAX_BOTS})")

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    setup_logging(args)

    handlers = {
        "decode": cmd_decode,
        "model": cmd_model,
        "run": cmd_run,
        "batch": cmd_batch,
    }
    try:
        return handlers[args.command](args)
    except FileNotFoundError as e:
        logger.error(f"File not found: {e.filename}")
        return 1
    except VoxbotError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1
    except Exception as e:
        logger.error(f"Internal error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 2


def setup_logging(args):
    """Configure logging from -v / -q / --log-file."""
    if args.quiet:
        level = logging.ERROR
    elif args.verbose == 0:
        level = logging.WARNING
    elif args.verbose == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    handlers = []
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    handlers.append(console)

    if args.log_file:
        log_path = Path(args.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        handlers.append(file_handler)

    logging.basicConfig(
        level=logging.DEBUG if args.log_file else level,
        handlers=handlers,
        force=True
    )


# ══════════════════════════════════════════════
# Subcommands
# ══════════════════════════════════════════════

def cmd_decode(args):
    commands = load_trace(args.trace)
    if args.list:
        for i, cmd in enumerate(commands):
            print(f"{i:6d}  {cmd}")
        return 0

    counts = command_counts(commands)
    print(f"Trace: {args.trace}")
    print(f"Commands: {len(commands)}")
    for name, count in counts.most_common():
        print(f"  {name:8s} {count:8d}")
    return 0


def cmd_model(args):
    grid = load_grid(args.model)
    print(f"Model: {args.model}")
    print(f"Resolution: {grid.r}")
    print(f"Cells: {len(grid)}")
    print(f"Full: {grid.full_count}")
    return 0


def cmd_run(args):
    run_config = RunConfig(max_bots=args.max_bots)
    sim, result = replay_files(args.trace, model_path=args.model,
                               r=args.resolution, run_config=run_config)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        _print_result(args.trace, result)
        print(f"Lead bot: {sim.state.lead_bot}")

    if result.verification is not None and not result.verification.matches:
        return 1
    return 0


def cmd_batch(args):
    pairs = find_pairs(args.folder)
    if not pairs:
        logger.warning(f"No <stem>.nbt / <stem>_tgt.mdl pairs in {args.folder}")
        return 0

    start = time.perf_counter()
    run_config = RunConfig(max_bots=args.max_bots)
    failures = 0
    for trace_path, model_path in pairs:
        try:
            _, result = replay_files(trace_path, model_path=model_path,
                                     run_config=run_config)
        except (VoxbotError, OSError) as e:
            failures += 1
            print(f"FAIL   {trace_path.name}: {type(e).__name__}: {e}")
            continue
        status = "OK" if result.verification.matches else "DIFF"
        if status != "OK":
            failures += 1
        print(f"{status:6s} {trace_path.name}: energy {result.energy}, "
              f"{result.verification.summary()}")

    elapsed = time.perf_counter() - start
    print(f"{len(pairs) - failures}/{len(pairs)} matched in {elapsed:.2f}s")
    return 1 if failures else 0


def _print_result(trace, result):
    print(f"Trace: {trace}")
    print(f"Steps: {result.steps}")
    print("Energy by category:")
    for category, amount in sorted(result.energy_by_category.items()):
        print(f"  {category:12s} {amount:14d}")
    print(f"Energy: {result.energy}")
    if result.unmodeled:
        print("Not fully modeled: " + ", ".join(
            f"{name} x{count}" for name, count in sorted(result.unmodeled.items())))
    if result.verification is not None:
        print(result.verification.summary())


if __name__ == "__main__":
    sys.exit(main())
