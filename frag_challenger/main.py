"""
Command-line interface for the fragmentation challenger.

Runs the CASMI-style benchmark over a corpus directory and reports the
top-1/5/10 accuracy per ionization mode.
"""

import argparse
import sys
import time
import traceback
from typing import List, Optional

from .challenger import run_challenger
from .config import ChallengerConfig, load_or_create_config
from .exceptions import ChallengerError
from .utils import setup_logging


def build_config(args: argparse.Namespace) -> ChallengerConfig:
    """Configuration from the optional config file with command line overrides applied."""
    config = load_or_create_config(args.config) if args.config else ChallengerConfig()

    if args.data_dir is not None:
        config.data_dir = args.data_dir
    if args.results_dir is not None:
        config.results_dir = args.results_dir
    if args.reaction_db is not None:
        config.reaction_db_path = args.reaction_db
    if args.n_proc is not None:
        config.n_proc = args.n_proc
    if args.test:
        config.test_mode = True

    config.validate()
    return config


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Rank candidate molecules against experimental MS/MS spectra "
                    "by predicted fragment masses and report top-k accuracy.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        "--data-dir",
        help="Corpus directory (candidates, peaklists, solutions)"
    )
    parser.add_argument(
        "--results-dir",
        help="Directory to save per-challenge results and summaries"
    )
    parser.add_argument(
        "--reaction-db",
        help="Reaction database file (defaults to a file next to the data directory)"
    )
    parser.add_argument(
        "--config",
        help="Path to configuration file (JSON format), created with defaults if missing"
    )
    parser.add_argument(
        "--n-proc",
        type=int,
        help="Number of worker processes (default: half of the available cores)"
    )
    parser.add_argument(
        "--test",
        action="store_true",
        help="Reduced run: 2 challenges per mode, 5 candidates each, nothing written"
    )
    parser.add_argument(
        "--report",
        action="store_true",
        help="Also write a PDF rank report"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose output"
    )
    parser.add_argument(
        "--create-config",
        metavar="PATH",
        help="Write a default configuration file to PATH and exit"
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main execution function."""
    args = parse_args(argv)
    setup_logging(args.verbose)

    if args.create_config:
        ChallengerConfig().save_to_file(args.create_config)
        print(f"Created default configuration file: {args.create_config}")
        return 0

    start_time = time.time()
    try:
        config = build_config(args)
        run = run_challenger(config, report=args.report)
    except (ChallengerError, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            traceback.print_exc()
        return 1

    print(f"\nChallenge run complete! ({time.time() - start_time:.1f}s)")
    for ion_mode, summary in run.summary.items():
        print(f"  {ion_mode}: {summary.total_challenges} challenges, "
              f"top1 {summary.top1_accuracy_pct:.1f}%, "
              f"top5 {summary.top5_accuracy_pct:.1f}%, "
              f"top10 {summary.top10_accuracy_pct:.1f}%")
    if not config.test_mode:
        print(f"Results saved to {config.results_dir}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
