"""
Accuracy summaries over challenge results.
"""

from typing import Iterable

import pandas as pd

from .models import ChallengeResult, Summary


def _accuracy(hits: int, total: int) -> float:
    return hits / total * 100 if total > 0 else 0.0


def summarize(results: Iterable[ChallengeResult]) -> Summary:
    """
    Top-1/5/10 hit counts and accuracies of a group.

    An empty group gives zero hits and zero accuracy.
    """
    results = list(results)
    total = len(results)
    top1 = sum(1 for r in results if r.in_top1)
    top5 = sum(1 for r in results if r.in_top5)
    top10 = sum(1 for r in results if r.in_top10)

    return Summary(
        total_challenges=total,
        top1_hits=top1,
        top5_hits=top5,
        top10_hits=top10,
        top1_accuracy_pct=_accuracy(top1, total),
        top5_accuracy_pct=_accuracy(top5, total),
        top10_accuracy_pct=_accuracy(top10, total),
    )


def rankings_table(results: Iterable[ChallengeResult]) -> pd.DataFrame:
    """One row per challenge, sorted by challenge name."""
    rows = []
    for result in results:
        correct = result.correct_result
        rows.append({
            'challenge': result.challenge_name,
            'ion_mode': result.ion_mode,
            'solution': result.solution_name,
            'total_candidates': result.total_candidates,
            'correct_rank': result.correct_rank,
            'in_top1': result.in_top1,
            'in_top5': result.in_top5,
            'in_top10': result.in_top10,
            'best_adduct': correct.best_adduct if correct else '',
            'cosine': correct.cosine_similarity if correct else 0.0,
        })

    columns = ['challenge', 'ion_mode', 'solution', 'total_candidates', 'correct_rank',
               'in_top1', 'in_top5', 'in_top10', 'best_adduct', 'cosine']
    df = pd.DataFrame(rows, columns=columns)
    return df.sort_values('challenge').reset_index(drop=True)
