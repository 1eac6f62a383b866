"""
Spectral similarity scoring.

SpectrumComparator compares an experimental spectrum with a list of
predicted fragment masses. Experimental peaks that have a predicted mass
within a ppm tolerance are the "common" peaks; the cosine is computed on
peak weights mz**mass_power * intensity**intensity_power between the full
experimental spectrum and its explained part, and the Tanimoto
coefficient on the peak counts.

score_candidate reduces the per-adduct scores of one candidate to its
best adduct.
"""

from functools import reduce
from typing import Dict, Mapping, Sequence, Tuple

import numpy as np

from .models import SimilarityScore, Spectrum


class SpectrumComparator:
    """Scores predicted masses against an experimental spectrum."""

    def __init__(self, mass_power: float = 3.0, intensity_power: float = 0.6,
                 precision: float = 20.0):
        """
        Args:
            mass_power: Exponent applied to m/z values in peak weights
            intensity_power: Exponent applied to intensities in peak weights
            precision: Matching tolerance in ppm of the experimental m/z
        """
        self.mass_power = mass_power
        self.intensity_power = intensity_power
        self.precision = precision

    @classmethod
    def from_config(cls, config) -> "SpectrumComparator":
        return cls(
            mass_power=config.mass_power,
            intensity_power=config.intensity_power,
            precision=config.precision,
        )

    def delta(self, mz: np.ndarray) -> np.ndarray:
        return mz * 1e-6 * self.precision

    def matched_peaks(self, spectrum: Spectrum, masses: Sequence[float]) -> np.ndarray:
        """Boolean mask of the experimental peaks explained by at least one mass."""
        x = np.asarray(spectrum.x, dtype=float)
        masses = np.sort(np.asarray(masses, dtype=float))
        if len(x) == 0 or len(masses) == 0:
            return np.zeros(len(x), dtype=bool)

        # Nearest predicted mass on either side of every experimental peak
        right = np.clip(np.searchsorted(masses, x), 0, len(masses) - 1)
        left = np.clip(right - 1, 0, len(masses) - 1)
        distance = np.minimum(np.abs(masses[right] - x), np.abs(masses[left] - x))
        return distance <= self.delta(x)

    def similarity_to_masses(self, spectrum: Spectrum, masses: Sequence[float]) -> SimilarityScore:
        x = np.asarray(spectrum.x, dtype=float)
        y = np.asarray(spectrum.y, dtype=float)
        matched = self.matched_peaks(spectrum, masses)

        nb_peaks1 = int(len(x))
        nb_common = int(matched.sum())
        if nb_common == 0:
            return SimilarityScore(cosine=0.0, tanimoto=0.0, nb_common_peaks=0,
                                   nb_peaks1=nb_peaks1, nb_peaks2=0)

        weights = np.power(x, self.mass_power) * np.power(np.clip(y, 0, None), self.intensity_power)
        total = float(np.sum(weights ** 2))
        explained = float(np.sum(weights[matched] ** 2))
        cosine = float(np.sqrt(explained / total)) if total > 0 else 0.0

        # The explained spectrum is a subset of the experimental one
        nb_peaks2 = nb_common
        tanimoto = nb_common / (nb_peaks1 + nb_peaks2 - nb_common)

        return SimilarityScore(
            cosine=cosine,
            tanimoto=tanimoto,
            nb_common_peaks=nb_common,
            nb_peaks1=nb_peaks1,
            nb_peaks2=nb_peaks2,
        )


def _keep_best(best: Tuple[SimilarityScore, str],
               scored: Tuple[str, SimilarityScore]) -> Tuple[SimilarityScore, str]:
    # Strictly greater: on equal cosine the earlier label stays
    label, score = scored
    if score.cosine > best[0].cosine:
        return score, label
    return best


def score_candidate(masses_by_adduct: Mapping[str, Sequence[float]], spectrum: Spectrum,
                    comparator: SpectrumComparator
                    ) -> Tuple[SimilarityScore, str, Dict[str, SimilarityScore]]:
    """
    Score every adduct of a candidate and select the best one.

    Args:
        masses_by_adduct: Sorted predicted m/z values per adduct label
        spectrum: Experimental spectrum of the challenge
        comparator: Similarity function

    Returns:
        Tuple of the best score, the label that achieved it ("" when no
        adduct matched anything) and the score of every label.
    """
    adduct_scores = {
        label: comparator.similarity_to_masses(spectrum, masses)
        for label, masses in masses_by_adduct.items()
    }
    best_score, best_label = reduce(_keep_best, adduct_scores.items(), (SimilarityScore.zero(), ""))
    return best_score, best_label, adduct_scores
