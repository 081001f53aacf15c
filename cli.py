"""Command-line entry point: count the regions of a puzzle file that can be packed."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from config import CFG
from io_files import write_results
from solver.board import BoardCapacityError
from solver.orchestrator import solve_puzzle

EXIT_PARSE_ERROR = 2
EXIT_CAPACITY_ERROR = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser("region-packer")
    parser.add_argument("puzzle", help="Puzzle text file (shape diagrams followed by WxH: counts lines)")
    parser.add_argument("--workers", type=int, default=CFG.WORKERS, help="Worker processes for independent regions")
    parser.add_argument("--node-limit", type=int, default=None, help="Backtracking node budget per region (0 = unlimited)")
    parser.add_argument("--time-limit", type=float, default=None, help="Backtracking seconds per region (0 = unlimited)")
    parser.add_argument("--no-cp-sat", action="store_true", help="Leave budget-exhausted regions undetermined")
    parser.add_argument("--no-block-fill", action="store_true", help="Skip the slot-grid constructive shortcut")
    parser.add_argument("--results", default=None, help="Also write per-region verdicts to this file")
    parser.add_argument("--quiet", action="store_true", help="Only print the feasible count")
    parser.add_argument("--verbose", action="store_true", help="Debug logging to stderr")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    text = Path(args.puzzle).read_text(encoding="utf-8")
    overrides = {
        "node_limit": args.node_limit,
        "max_seconds": args.time_limit,
    }
    if args.no_cp_sat:
        overrides["cp_sat"] = False
    if args.no_block_fill:
        overrides["block_fill"] = False

    try:
        report = solve_puzzle(text, workers=args.workers, **overrides)
    except BoardCapacityError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_CAPACITY_ERROR

    if not report.ok:
        print(f"error: {report.error}", file=sys.stderr)
        return EXIT_PARSE_ERROR

    if not args.quiet:
        for res in report.results:
            print(res.summary())
    print(report.feasible)
    if report.undetermined:
        print(f"undetermined: {report.undetermined}", file=sys.stderr)

    if args.results:
        target = os.path.abspath(args.results)
        CFG.RESULTS_OUT = target
        write_results(report.results, os.path.dirname(target))
    return 0


if __name__ == "__main__":
    sys.exit(main())
