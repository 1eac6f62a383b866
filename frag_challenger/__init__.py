"""
Fragmentation Challenger

Benchmark candidate-molecule identification against experimental MS/MS
spectra: predict fragment masses for every candidate of a challenge, score
them against the measured spectrum, rank the candidates and report how
often the correct one lands in the top 1/5/10.

Main modules:
- config: Run configuration
- reaction_db: Reaction database splitting and adduct resolution
- fragmentation: Structure parsing and fragment mass prediction
- scoring: Spectral similarity and best-adduct selection
- runner: Single-challenge runner
- parallel: Worker pool dispatcher
- processing: Per-mode group processing and persistence
- metrics: Accuracy summaries
- challenger: Corpus discovery and the full benchmark run
- main: Command-line interface
"""

from .config import ChallengerConfig, load_or_create_config
from .exceptions import (
    ChallengerError,
    ChallengeFailedError,
    DataNotFoundError,
    MalformedDatabaseError,
    PeaklistNotFoundError,
    SolutionNotFoundError,
)
from .models import (
    Candidate,
    CandidateResult,
    Challenge,
    ChallengeResult,
    SimilarityScore,
    Solution,
    Spectrum,
    Summary,
)
from .reaction_db import filter_by_label, get_ionization_labels, resolve_adducts
from .scoring import SpectrumComparator, score_candidate
from .runner import run_challenge
from .parallel import ChallengeDispatcher
from .processing import process_group
from .metrics import summarize
from .challenger import run_challenger

__version__ = "1.0.0"

__all__ = [
    "ChallengerConfig",
    "load_or_create_config",
    "ChallengerError",
    "ChallengeFailedError",
    "DataNotFoundError",
    "MalformedDatabaseError",
    "PeaklistNotFoundError",
    "SolutionNotFoundError",
    "Candidate",
    "CandidateResult",
    "Challenge",
    "ChallengeResult",
    "SimilarityScore",
    "Solution",
    "Spectrum",
    "Summary",
    "filter_by_label",
    "get_ionization_labels",
    "resolve_adducts",
    "SpectrumComparator",
    "score_candidate",
    "run_challenge",
    "ChallengeDispatcher",
    "process_group",
    "summarize",
    "run_challenger",
]
