"""Command-line entry point for running batches and self-tests."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Iterable
from dataclasses import replace

from .api import run_batch
from .data import (
    DEFAULT_FROM_LEVEL,
    DEFAULT_HISTOGRAM_BIN_WIDTH,
    DEFAULT_SEED,
    DEFAULT_TRIAL_COUNT,
    default_configuration,
    load_configuration_presets,
    resize_stage_probabilities,
)
from .diagnostics import diagnostics_passed, run_diagnostics
from .errors import EnhancementError
from .models import Configuration
from .reporting import format_result_tables

EXIT_OK = 0
EXIT_DIAGNOSTICS_FAILED = 1
EXIT_INVALID_INPUT = 2


def _parse_probabilities(text: str) -> list[float]:
    try:
        return [float(part) for part in text.split(",") if part.strip()]
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"expected comma-separated probabilities, received {text!r}"
        ) from exc


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Simulate building stages with pity and landing the final upgrade."
    )
    parser.add_argument(
        "--level",
        type=int,
        default=DEFAULT_FROM_LEVEL,
        help="Upgrade level used to pick the suggested stage count (default: %(default)s).",
    )
    parser.add_argument("--stages", type=int, default=None, help="Number of stages to build.")
    parser.add_argument(
        "--stage-prob",
        type=_parse_probabilities,
        default=None,
        help="Stage success probability, or one comma-separated value per stage.",
    )
    parser.add_argument("--final-prob", type=float, default=None, help="Final upgrade success probability.")
    parser.add_argument("--cost", type=float, default=None, help="Resource cost per attempt.")
    parser.add_argument("--stage-pity", type=int, default=None, help="Stage pity threshold.")
    parser.add_argument("--final-pity", type=int, default=None, help="Final pity threshold.")
    parser.add_argument(
        "--reset-pity-on-fail",
        action="store_true",
        help="Wipe every stage pity counter whenever any attempt fails.",
    )
    parser.add_argument(
        "--preset-file",
        default=None,
        help="JSON file of named configurations (requires --preset).",
    )
    parser.add_argument("--preset", default=None, help="Name of the configuration to load from --preset-file.")
    parser.add_argument(
        "--trials",
        type=int,
        default=DEFAULT_TRIAL_COUNT,
        help="Number of Monte Carlo trials (default: %(default)s).",
    )
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Random seed (default: %(default)s).")
    parser.add_argument(
        "--bin-width",
        type=int,
        default=DEFAULT_HISTOGRAM_BIN_WIDTH,
        help="Histogram bin width in attempts (default: %(default)s).",
    )
    parser.add_argument(
        "--format",
        choices=("table", "json"),
        default="table",
        help="Output format (default: %(default)s).",
    )
    parser.add_argument(
        "--diagnostics",
        action="store_true",
        help="Run the built-in self-tests instead of a batch.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args(list(argv) if argv is not None else None)
    if args.preset_file and not args.preset:
        parser.error("--preset-file requires --preset")
    return args


def build_configuration(args: argparse.Namespace) -> Configuration:
    """Return the configuration described by the parsed arguments.

    Explicit options override the selected preset (or the level defaults). When
    only the stage count changes, the existing probabilities are resized to fit.
    """

    if args.preset:
        presets = load_configuration_presets(args.preset_file)
        if args.preset not in presets:
            raise EnhancementError(f"Preset {args.preset!r} not found in {args.preset_file!r}")
        base = presets[args.preset]
    else:
        base = default_configuration(args.level)

    stage_count = args.stages if args.stages is not None else base.stage_count
    if args.stage_prob is None:
        probabilities = resize_stage_probabilities(base.stage_probabilities, stage_count)
    elif len(args.stage_prob) == 1:
        probabilities = args.stage_prob * stage_count
    else:
        probabilities = args.stage_prob

    overrides: dict[str, object] = {
        "stage_count": stage_count,
        "stage_probabilities": tuple(probabilities),
    }
    if args.final_prob is not None:
        overrides["final_probability"] = args.final_prob
    if args.cost is not None:
        overrides["cost_per_attempt"] = args.cost
    if args.stage_pity is not None:
        overrides["stage_pity_threshold"] = args.stage_pity
    if args.final_pity is not None:
        overrides["final_pity_threshold"] = args.final_pity
    if args.reset_pity_on_fail:
        overrides["reset_all_stage_pity_on_any_failure"] = True
    return replace(base, **overrides)


def _run_diagnostics(output_format: str) -> int:
    results = run_diagnostics()
    if output_format == "json":
        print(json.dumps([result.__dict__ for result in results], indent=2))
    else:
        for result in results:
            status = "PASS" if result.passed else "FAIL"
            print(f"[{status}] {result.name}: {result.detail}")
    return EXIT_OK if diagnostics_passed(results) else EXIT_DIAGNOSTICS_FAILED


def main(argv: Iterable[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.diagnostics:
        return _run_diagnostics(args.format)

    try:
        config = build_configuration(args)
        result = run_batch(config, trial_count=args.trials, seed=args.seed, bin_width=args.bin_width)
    except EnhancementError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_INVALID_INPUT

    if args.format == "json":
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(format_result_tables(result))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
