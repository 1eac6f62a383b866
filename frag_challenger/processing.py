"""
Group processing: run every challenge of one ionization mode.

The dispatcher yields results in completion order; this module is the
single place where they are logged, written to disk and collected.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

from .config import ChallengerConfig
from .models import Challenge, ChallengeResult
from .parallel import ChallengeDispatcher
from .utils import format_elapsed


logger = logging.getLogger(__name__)


def save_challenge_result(result: ChallengeResult, output_dir) -> Path:
    """Write one challenge result as <output_dir>/<challenge name>.json."""
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    result_file = output_path / f"{result.challenge_name}.json"
    with open(result_file, "w", encoding="utf-8") as f:
        json.dump(result.to_dict(), f, indent=2)
    return result_file


def process_group(challenges: List[Challenge], config: ChallengerConfig,
                  output_dir=None,
                  dispatcher: Optional[ChallengeDispatcher] = None) -> List[ChallengeResult]:
    """
    Run all challenges of a group and collect their results.

    Args:
        challenges: Challenges of one ionization mode, in discovery order
        config: Run configuration
        output_dir: Where to write per-challenge JSON (ignored in test mode)
        dispatcher: Dispatcher to use; a default one is built from config

    Returns:
        List[ChallengeResult]: One result per challenge, in completion order

    Raises:
        ChallengeFailedError: If any challenge fails; results written so far stay on disk
    """
    if not challenges:
        return []

    dispatcher = dispatcher or ChallengeDispatcher(config)
    allow_writes = not config.test_mode and output_dir is not None

    results = []
    for challenge, result in dispatcher.dispatch(challenges):
        results.append(result)

        if allow_writes:
            save_challenge_result(result, output_dir)

        logger.info(
            f"Finished {challenge.name}: rank={result.correct_rank}/{result.total_candidates}, "
            f"top1={result.in_top1}, top5={result.in_top5}, top10={result.in_top10} | "
            f"elapsed={format_elapsed(dispatcher.start_time)}"
        )

    return results
