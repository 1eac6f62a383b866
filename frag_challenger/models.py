"""
Data models for the fragmentation challenger.

This module defines the records that flow through a benchmark run: the
challenge descriptors, the parsed inputs (candidates, solutions, spectra)
and the scored results that are written to disk and aggregated.
"""

import numpy as np
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional


@dataclass(frozen=True)
class Challenge:
    """
    One benchmark unit discovered in the corpus.

    Attributes:
        name: Challenge name, e.g. "Challenge-082"
        ion_mode: "positive" or "negative"
        spectrum_path: Peaklist file of the experimental spectrum
        candidates_path: CSV file with the candidate molecules
        candidates_file: File name of the candidate list
    """
    name: str
    ion_mode: str
    spectrum_path: Path
    candidates_path: Path
    candidates_file: str = ""


@dataclass(frozen=True)
class Candidate:
    identifier: str
    compound_name: str
    monoisotopic_mass: float
    molecular_formula: str
    smiles: str
    inchi: str
    inchikey: str

    def to_dict(self) -> dict:
        return {
            'Identifier': self.identifier,
            'CompoundName': self.compound_name,
            'MonoisotopicMass': self.monoisotopic_mass,
            'MolecularFormula': self.molecular_formula,
            'SMILES': self.smiles,
            'InChI': self.inchi,
            'InChIKey': self.inchikey,
        }


@dataclass(frozen=True)
class Solution:
    """A record of the solutions file: the known answer of one challenge."""
    source_file: str
    challenge_name: str
    precursor_mz: float
    ion_mode: str
    rt: float
    n_peaks: int
    name: str
    smiles: str
    inchi: str
    inchikey: str
    csid: str
    pc_cid: str


@dataclass(frozen=True)
class Spectrum:
    """
    Experimental spectrum as paired m/z (x) and intensity (y) arrays.

    The arrays always have the same length and x is ascending.
    """
    x: np.ndarray
    y: np.ndarray

    def __post_init__(self):
        if len(self.x) != len(self.y):
            raise ValueError(
                f"Spectrum x and y must have the same length, got {len(self.x)} and {len(self.y)}"
            )

    @property
    def num_peaks(self) -> int:
        return len(self.x)


@dataclass(frozen=True)
class SimilarityScore:
    """Agreement between an experimental spectrum and one predicted mass list."""
    cosine: float
    tanimoto: float
    nb_common_peaks: int
    nb_peaks1: int
    nb_peaks2: int

    @classmethod
    def zero(cls) -> "SimilarityScore":
        return cls(cosine=0.0, tanimoto=0.0, nb_common_peaks=0, nb_peaks1=0, nb_peaks2=0)

    def to_dict(self) -> dict:
        return {
            'cosine': self.cosine,
            'tanimoto': self.tanimoto,
            'nbCommonPeaks': self.nb_common_peaks,
            'nbPeaks1': self.nb_peaks1,
            'nbPeaks2': self.nb_peaks2,
        }


@dataclass(frozen=True)
class CandidateResult:
    """
    Outcome of one candidate within a challenge.

    Attributes:
        candidate: The scored candidate
        similarity: Best score over all adducts
        best_adduct: Label that produced the best score ("" if none scored)
        adduct_scores: Score of every adduct label, in label order
        error: Why the candidate could not be scored, if it could not
    """
    candidate: Candidate
    similarity: SimilarityScore
    best_adduct: str = ""
    adduct_scores: Dict[str, SimilarityScore] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def cosine_similarity(self) -> float:
        return self.similarity.cosine

    @classmethod
    def failed(cls, candidate: Candidate, error: str) -> "CandidateResult":
        """Zero-similarity result for a candidate that could not be processed."""
        return cls(candidate=candidate, similarity=SimilarityScore.zero(), error=error)

    def to_dict(self) -> dict:
        data = {
            'candidate': self.candidate.to_dict(),
            'similarity': self.similarity.to_dict(),
            'cosineSimilarity': self.cosine_similarity,
            'bestAdduct': self.best_adduct,
            'adductScores': {label: score.to_dict() for label, score in self.adduct_scores.items()},
        }
        if self.error is not None:
            data['error'] = self.error
        return data


@dataclass(frozen=True)
class ChallengeResult:
    """
    Ranked outcome of one challenge.

    results are ordered by descending best cosine; correct_rank is the
    1-based position of the solution among them, or 0 when it is absent.
    """
    challenge_name: str
    ion_mode: str
    solution_name: str
    solution_inchikey: str
    total_candidates: int
    correct_rank: int
    in_top1: bool
    in_top5: bool
    in_top10: bool
    adduct_labels: List[str]
    results: List[CandidateResult]

    @property
    def correct_result(self) -> Optional[CandidateResult]:
        if not 1 <= self.correct_rank <= len(self.results):
            return None
        return self.results[self.correct_rank - 1]

    def to_dict(self) -> dict:
        return {
            'challengeName': self.challenge_name,
            'ionMode': self.ion_mode,
            'solution': {
                'NAME': self.solution_name,
                'INCHIKEY': self.solution_inchikey,
            },
            'totalCandidates': self.total_candidates,
            'correctRank': self.correct_rank,
            'inTop1': self.in_top1,
            'inTop5': self.in_top5,
            'inTop10': self.in_top10,
            'adductLabels': list(self.adduct_labels),
            'results': [result.to_dict() for result in self.results],
        }


@dataclass(frozen=True)
class Summary:
    """Top-k accuracy of one ionization group."""
    total_challenges: int
    top1_hits: int
    top5_hits: int
    top10_hits: int
    top1_accuracy_pct: float
    top5_accuracy_pct: float
    top10_accuracy_pct: float

    def to_dict(self) -> dict:
        return {
            'totalChallenges': self.total_challenges,
            'top1Hits': self.top1_hits,
            'top5Hits': self.top5_hits,
            'top10Hits': self.top10_hits,
            'top1AccuracyPct': self.top1_accuracy_pct,
            'top5AccuracyPct': self.top5_accuracy_pct,
            'top10AccuracyPct': self.top10_accuracy_pct,
        }
