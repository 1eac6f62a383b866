"""
Single-challenge runner.

run_challenge reads one challenge's inputs, predicts fragment masses for
every candidate under every usable adduct, scores them against the
experimental spectrum and ranks the candidates. It keeps no state between
calls and is the function the worker processes execute.
"""

import logging
from typing import Callable, List, Optional, Sequence

from .config import ChallengerConfig
from .fragmentation import fragment_masses, parse_structure
from .models import Candidate, CandidateResult, Challenge, ChallengeResult, Spectrum
from .parsers import find_solution, read_candidates, read_peaklist, read_solutions
from .reaction_db import read_reaction_database, resolve_adducts
from .scoring import SpectrumComparator, score_candidate


logger = logging.getLogger(__name__)

TOP_K = (1, 5, 10)


def rank_results(results: Sequence[CandidateResult]) -> List[CandidateResult]:
    """Order by descending best cosine; equal scores keep their input order."""
    return sorted(results, key=lambda r: r.cosine_similarity, reverse=True)


def find_rank(results: Sequence[CandidateResult], inchikey: str) -> int:
    """1-based position of the first result for the given InChIKey, 0 if absent."""
    for position, result in enumerate(results, 1):
        if result.candidate.inchikey == inchikey:
            return position
    return 0


def in_top(rank: int, k: int) -> bool:
    return 1 <= rank <= k


def score_one_candidate(candidate: Candidate, spectrum: Spectrum, adduct_views: dict, mode: str,
                        comparator: SpectrumComparator, fragmenter: Callable,
                        structure_parser: Callable) -> CandidateResult:
    """
    Fragment and score a candidate under every adduct.

    A failure to parse or fragment the candidate does not propagate: the
    candidate gets a zero-similarity result carrying the error message.
    """
    try:
        mol = structure_parser(candidate.smiles)
        masses_by_adduct = {
            label: sorted(fragmenter(mol, view, mode))
            for label, view in adduct_views.items()
        }
    except Exception as e:
        logger.debug(f"Candidate {candidate.identifier} could not be processed: {e}")
        return CandidateResult.failed(candidate, str(e) or type(e).__name__)

    best, best_adduct, adduct_scores = score_candidate(masses_by_adduct, spectrum, comparator)
    return CandidateResult(
        candidate=candidate,
        similarity=best,
        best_adduct=best_adduct,
        adduct_scores=adduct_scores,
    )


def run_challenge(challenge: Challenge, config: ChallengerConfig,
                  fragmenter: Callable = fragment_masses,
                  structure_parser: Callable = parse_structure,
                  comparator: Optional[SpectrumComparator] = None) -> ChallengeResult:
    """
    Run one challenge and rank its candidates.

    Args:
        challenge: The challenge to run
        config: Run configuration (solutions file, reaction database, test mode)
        fragmenter: fragmenter(molecule, reaction_db_view, mode) -> m/z list
        structure_parser: structure_parser(smiles) -> molecule
        comparator: Similarity function; built from config when omitted

    Returns:
        ChallengeResult: Ranked candidates and hit flags

    Raises:
        SolutionNotFoundError: If the solutions file has no record for the challenge
        MalformedDatabaseError: If the reaction database cannot be split
    """
    mode = challenge.ion_mode.lower()
    comparator = comparator or SpectrumComparator.from_config(config)

    spectrum = read_peaklist(challenge.spectrum_path)
    candidates = read_candidates(challenge.candidates_path)
    solution = find_solution(read_solutions(config.solutions_path), challenge.name)

    # Filtered once per challenge and shared by all candidates
    database = read_reaction_database(config.reaction_db)
    adduct_views = resolve_adducts(database, mode, config.exclude_labels)
    labels = list(adduct_views)

    if config.test_mode:
        candidates = candidates[:config.test_candidates]

    logger.debug(
        f"{challenge.name}: {len(candidates)} candidates, {spectrum.num_peaks} peaks, "
        f"adducts {', '.join(labels) or 'none'}"
    )

    results = [
        score_one_candidate(candidate, spectrum, adduct_views, mode,
                            comparator, fragmenter, structure_parser)
        for candidate in candidates
    ]
    results = rank_results(results)

    correct_rank = find_rank(results, solution.inchikey)
    in_top1, in_top5, in_top10 = (in_top(correct_rank, k) for k in TOP_K)

    return ChallengeResult(
        challenge_name=challenge.name,
        ion_mode=mode,
        solution_name=solution.name,
        solution_inchikey=solution.inchikey,
        total_candidates=len(candidates),
        correct_rank=correct_rank,
        in_top1=in_top1,
        in_top5=in_top5,
        in_top10=in_top10,
        adduct_labels=labels,
        results=results,
    )
