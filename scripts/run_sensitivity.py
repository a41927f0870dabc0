#!/usr/bin/env python3
"""
Sensitivity Analysis Utility
Runs the Monte Carlo sensitivity analysis for a set of baselines and prints
the Markdown report, optionally followed by a one-at-a-time tornado ranking.
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from strategy_engine.core.config import (
    SENSITIVITY_DEFAULT_PERTURBATIONS,
    VERSION,
    debug_enabled,
    get_sensitivity_seed,
    validate_config,
)
from strategy_engine.core.sensitivity import PARAMETER_RANGES, SensitivityAnalyzer, render_sensitivity_report
from strategy_engine.util.logging import logger


def build_parser():
    parser = argparse.ArgumentParser(description="Run sensitivity analysis on strategic parameters.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("--analysis-id", default="local", help="identifier shown in the report")
    parser.add_argument("--perturbations", type=int, default=SENSITIVITY_DEFAULT_PERTURBATIONS)
    parser.add_argument("--seed", type=int, default=None, help="seed for reproducible sampling")
    parser.add_argument("--tornado", action="store_true", help="also print a one-at-a-time ranking")
    for name in PARAMETER_RANGES:
        parser.add_argument(f"--{name.replace('_', '-')}", dest=name, type=float, default=None)
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    if debug_enabled():
        logger.logger.setLevel(logging.DEBUG)

    issues = validate_config()
    if issues:
        logger.log_config_issues(issues)
        return 1

    base_params = {name: getattr(args, name) for name in PARAMETER_RANGES if getattr(args, name) is not None}
    seed = args.seed if args.seed is not None else get_sensitivity_seed()
    analyzer = SensitivityAnalyzer(seed=seed)

    result = analyzer.analyze(base_params, args.perturbations)
    print(render_sensitivity_report(args.analysis_id, result))

    if args.tornado:
        tornado = analyzer.tornado(base_params)
        print("\n## One-at-a-time Ranking")
        for entry in tornado.entries:
            print(f"- {entry.param}: range {entry.range_delta:.4f} (avg {entry.avg_outcome:.3f})")

    return 0


if __name__ == "__main__":
    sys.exit(main())
