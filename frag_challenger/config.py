"""
Configuration management for the fragmentation challenger.

This module holds every path and tuning knob the benchmark needs in a
single dataclass that is passed explicitly to each entry point, including
the worker processes, instead of being read from module-level constants.
"""

import json
import logging
import os
from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Dict, Any, List, Optional


logger = logging.getLogger(__name__)

# Directory and file names of the CASMI 2016 category 2/3 corpus
CANDIDATES_DIRNAME = "CASMI2016_Cat2and3_Challenge_Candidates"
POSITIVE_DIRNAME = "CASMI2016_Cat2and3_Challenge_positive_peaklist"
NEGATIVE_DIRNAME = "CASMI2016_Cat2and3_Challenge_negative_peaklist"
SOLUTIONS_FILENAME = "solutions_casmi2016_cat2and3.csv"
REACTION_DB_FILENAME = "ReactionMassFragmentation.dwar"

ION_MODES = ("positive", "negative")

# Ionization labels never handed to the scorer
DEFAULT_EXCLUDED_LABELS = ["Ionization-K"]


def default_concurrency() -> int:
    """Half of the available cores, never less than one worker."""
    return max(1, (os.cpu_count() or 2) // 2)


@dataclass
class ChallengerConfig:
    """
    Configuration for a benchmark run.

    Attributes:
        data_dir: Root of the challenge corpus
        results_dir: Where per-challenge JSON files and summaries are written
        reaction_db_path: Reaction database file; defaults to a file next to data_dir
        n_proc: Number of worker processes (None = half of the available cores)
        test_mode: Reduced run without any writes to disk
        mass_power: Exponent applied to m/z when weighting peaks
        intensity_power: Exponent applied to intensities when weighting peaks
        precision: Peak matching tolerance in ppm
        exclude_labels: Ionization labels that are never scored
        test_challenges: Challenges per ionization group in test mode
        test_candidates: Candidates per challenge in test mode
    """

    data_dir: str = "data"
    results_dir: str = "results"
    reaction_db_path: Optional[str] = None
    n_proc: Optional[int] = None
    test_mode: bool = False

    mass_power: float = 3.0
    intensity_power: float = 0.6
    precision: float = 20.0
    exclude_labels: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDED_LABELS))

    test_challenges: int = 2
    test_candidates: int = 5

    def __post_init__(self):
        """Validate parameters after initialization."""
        self.validate()

    def validate(self) -> None:
        """Validate that all parameters are within acceptable ranges."""
        if self.n_proc is not None and self.n_proc < 1:
            raise ValueError(f"n_proc must be at least 1, got {self.n_proc}")

        if self.precision <= 0:
            raise ValueError(f"precision must be positive, got {self.precision}")

        if self.mass_power < 0 or self.intensity_power < 0:
            raise ValueError(
                f"mass_power and intensity_power must be non-negative, "
                f"got {self.mass_power} and {self.intensity_power}"
            )

        if self.test_challenges < 1 or self.test_candidates < 1:
            raise ValueError("test_challenges and test_candidates must be positive")

    @property
    def concurrency(self) -> int:
        """Number of worker processes to run a group with."""
        return self.n_proc if self.n_proc is not None else default_concurrency()

    @property
    def candidates_dir(self) -> Path:
        return Path(self.data_dir) / CANDIDATES_DIRNAME

    @property
    def positive_dir(self) -> Path:
        return Path(self.data_dir) / POSITIVE_DIRNAME

    @property
    def negative_dir(self) -> Path:
        return Path(self.data_dir) / NEGATIVE_DIRNAME

    @property
    def solutions_path(self) -> Path:
        return Path(self.data_dir) / SOLUTIONS_FILENAME

    @property
    def data_zip(self) -> Path:
        data_dir = Path(self.data_dir)
        return data_dir.parent / f"{data_dir.name}.zip"

    @property
    def reaction_db(self) -> Path:
        if self.reaction_db_path:
            return Path(self.reaction_db_path)
        return Path(self.data_dir).parent / REACTION_DB_FILENAME

    def peaklist_dir(self, ion_mode: str) -> Path:
        return self.positive_dir if ion_mode == "positive" else self.negative_dir

    def results_mode_dir(self, ion_mode: str) -> Path:
        return Path(self.results_dir) / ion_mode

    def to_dict(self) -> Dict[str, Any]:
        """Convert the dataclass to a dictionary with on-disk key names."""
        data = asdict(self)
        key_mapping = {
            'data_dir': 'Data_dir',
            'results_dir': 'Results_dir',
            'reaction_db_path': 'Reaction_db',
            'n_proc': 'N_proc',
            'test_mode': 'Test_mode',
            'mass_power': 'Mass_power',
            'intensity_power': 'Intensity_power',
            'precision': 'Precision',
            'exclude_labels': 'Exclude_labels',
            'test_challenges': 'Test_challenges',
            'test_candidates': 'Test_candidates',
        }
        return {key_mapping[k]: v for k, v in data.items()}

    def save_to_file(self, filename: str = "challenger.json") -> None:
        """
        Save the configuration to a JSON file.

        Args:
            filename: Path to save the configuration file
        """
        filepath = Path(filename)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=4)

    @classmethod
    def load_from_file(cls, filename: str = "challenger.json") -> "ChallengerConfig":
        """
        Load configuration from a JSON file.

        Args:
            filename: Path to the configuration file

        Returns:
            ChallengerConfig: Loaded configuration object

        Raises:
            FileNotFoundError: If the configuration file doesn't exist
            ValueError: If the configuration file is invalid
        """
        filepath = Path(filename)
        if not filepath.exists():
            raise FileNotFoundError(f"Configuration file not found: {filename}")

        try:
            with open(filepath, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file: {e}")

        reverse_mapping = {
            'Data_dir': 'data_dir',
            'Results_dir': 'results_dir',
            'Reaction_db': 'reaction_db_path',
            'N_proc': 'n_proc',
            'Test_mode': 'test_mode',
            'Mass_power': 'mass_power',
            'Intensity_power': 'intensity_power',
            'Precision': 'precision',
            'Exclude_labels': 'exclude_labels',
            'Test_challenges': 'test_challenges',
            'Test_candidates': 'test_candidates',
        }

        kwargs = {reverse_mapping[k]: v for k, v in data.items() if k in reverse_mapping}

        # Missing keys keep their defaults
        instance = cls()
        for key, value in kwargs.items():
            setattr(instance, key, value)

        instance.validate()
        return instance

    def get_summary(self) -> Dict[str, Any]:
        """Short description of the run, logged at startup."""
        return {
            'data_dir': str(self.data_dir),
            'results_dir': str(self.results_dir),
            'reaction_db': str(self.reaction_db),
            'workers': self.concurrency,
            'test_mode': self.test_mode,
            'scoring': {
                'mass_power': self.mass_power,
                'intensity_power': self.intensity_power,
                'precision_ppm': self.precision,
            },
            'excluded_labels': list(self.exclude_labels),
        }


def load_or_create_config(config_path: str = "challenger.json") -> ChallengerConfig:
    """
    Load configuration from file, or create default if file doesn't exist.

    Args:
        config_path: Path to the configuration file

    Returns:
        ChallengerConfig: Loaded or created configuration
    """
    try:
        return ChallengerConfig.load_from_file(config_path)
    except FileNotFoundError:
        logger.info(f"Configuration file not found at {config_path}. Creating default configuration.")
        config = ChallengerConfig()
        config.save_to_file(config_path)
        return config
