"""
Benchmark driver.

Discovers the challenges of the corpus, splits them by ionization mode,
runs the positive group to completion and then the negative group, and
writes per-challenge results plus one summary per mode.
"""

import json
import logging
import time
import zipfile
from pathlib import Path
from typing import Callable, Dict, List, NamedTuple

from .config import ChallengerConfig, ION_MODES
from .exceptions import DataNotFoundError, PeaklistNotFoundError
from .fragmentation import fragment_masses
from .metrics import rankings_table, summarize
from .models import Challenge, ChallengeResult, Summary
from .parallel import ChallengeDispatcher
from .processing import process_group
from .runner import run_challenge


logger = logging.getLogger(__name__)


class ChallengerRun(NamedTuple):
    summary: Dict[str, Summary]
    results: Dict[str, List[ChallengeResult]]


def ensure_data(config: ChallengerConfig) -> None:
    """
    Make sure the corpus directory exists, extracting the archive next to it if needed.

    Raises:
        DataNotFoundError: If neither the directory nor the archive exist
    """
    data_dir = Path(config.data_dir)
    if data_dir.exists():
        return

    data_zip = config.data_zip
    if not data_zip.exists():
        raise DataNotFoundError(
            f'Data directory "{data_dir}" is missing and no archive found at "{data_zip}". '
            f'Place {data_zip.name} next to the data directory or restore it manually.'
        )

    logger.info(f"{data_dir.name}/ folder not found - extracting {data_zip.name} ...")
    with zipfile.ZipFile(data_zip) as archive:
        archive.extractall(data_zip.parent)
    logger.info(f"{data_dir.name}/ extracted successfully.")


def challenge_name_from_file(file_name: str) -> str:
    if file_name.lower().endswith(".csv"):
        return file_name[:-4]
    return file_name


def resolve_peaklist_path(challenge_name: str, config: ChallengerConfig):
    """
    Find the peaklist of a challenge, trying the positive directory first.

    Returns:
        Tuple of the peaklist path and the ionization mode it was found under

    Raises:
        PeaklistNotFoundError: If neither directory has the file
    """
    for ion_mode in ION_MODES:
        path = config.peaklist_dir(ion_mode) / f"{challenge_name}.txt"
        if path.exists():
            return path, ion_mode
    raise PeaklistNotFoundError(f"Peaklist not found for {challenge_name}")


def discover_challenges(config: ChallengerConfig) -> Dict[str, List[Challenge]]:
    """Challenges of the corpus grouped by ionization mode, sorted by file name."""
    candidates_dir = config.candidates_dir
    if not candidates_dir.is_dir():
        raise DataNotFoundError(f"Candidates directory not found: {candidates_dir}")

    candidate_files = sorted(
        path.name for path in candidates_dir.iterdir()
        if path.is_file() and path.name.lower().endswith(".csv")
    )

    grouped = {ion_mode: [] for ion_mode in ION_MODES}
    for file_name in candidate_files:
        name = challenge_name_from_file(file_name)
        spectrum_path, ion_mode = resolve_peaklist_path(name, config)
        grouped[ion_mode].append(Challenge(
            name=name,
            ion_mode=ion_mode,
            spectrum_path=spectrum_path,
            candidates_path=candidates_dir / file_name,
            candidates_file=file_name,
        ))

    if config.test_mode:
        grouped = {mode: challenges[:config.test_challenges] for mode, challenges in grouped.items()}

    return grouped


def save_summary(summary: Summary, results: List[ChallengeResult], output_dir) -> None:
    """Write summary.json and rankings.csv of one mode."""
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    with open(output_path / "summary.json", "w", encoding="utf-8") as f:
        json.dump(summary.to_dict(), f, indent=2)

    rankings_table(results).to_csv(output_path / "rankings.csv", index=False)


def run_challenger(config: ChallengerConfig, report: bool = False,
                   runner: Callable = run_challenge,
                   fragmenter: Callable = fragment_masses) -> ChallengerRun:
    """
    Run the full benchmark.

    Args:
        config: Run configuration
        report: Also write rank_report.pdf (ignored in test mode)
        runner: Single-challenge runner executed by the workers
        fragmenter: Fragmentation engine handed to the runner

    Returns:
        ChallengerRun: Summary and results per ionization mode

    Raises:
        ChallengerError: On missing data or when a challenge fails
    """
    start_time = time.time()
    ensure_data(config)

    allow_writes = not config.test_mode
    logger.debug(f"Configuration: {config.get_summary()}")

    grouped = discover_challenges(config)
    dispatcher = ChallengeDispatcher(config, runner=runner, fragmenter=fragmenter,
                                     start_time=start_time)

    results = {}
    for ion_mode in ION_MODES:
        output_dir = config.results_mode_dir(ion_mode) if allow_writes else None
        results[ion_mode] = process_group(grouped[ion_mode], config, output_dir, dispatcher)

    summary = {ion_mode: summarize(results[ion_mode]) for ion_mode in ION_MODES}

    if allow_writes:
        for ion_mode in ION_MODES:
            save_summary(summary[ion_mode], results[ion_mode], config.results_mode_dir(ion_mode))

        if report:
            from .report import generate_rank_report
            generate_rank_report(results, config.results_dir)

    for ion_mode in ION_MODES:
        logger.info(f"Summary ({ion_mode}): {summary[ion_mode].to_dict()}")

    return ChallengerRun(summary=summary, results=results)
