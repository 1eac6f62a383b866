"""
PDF report of the ranking results.

One page per ionization mode: a histogram of the rank of the correct
candidate on the left and a top-k accuracy table on the right.
"""

import logging
from pathlib import Path
from typing import Dict, List

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.backends.backend_pdf import PdfPages

from .metrics import summarize
from .models import ChallengeResult


logger = logging.getLogger(__name__)

RANK_BINS = ["1", "2-5", "6-10", "11-50", ">50", "missing"]


def rank_bin_counts(results: List[ChallengeResult]) -> List[int]:
    """Number of challenges per rank bin, in RANK_BINS order."""
    ranks = np.array([r.correct_rank for r in results], dtype=int)
    return [
        int(np.sum(ranks == 1)),
        int(np.sum((ranks >= 2) & (ranks <= 5))),
        int(np.sum((ranks >= 6) & (ranks <= 10))),
        int(np.sum((ranks >= 11) & (ranks <= 50))),
        int(np.sum(ranks > 50)),
        int(np.sum(ranks == 0)),
    ]


def _plot_rank_histogram(ax, results: List[ChallengeResult], ion_mode: str) -> None:
    counts = rank_bin_counts(results)
    positions = np.arange(len(RANK_BINS))

    ax.bar(positions, counts, color='#40466e')
    for x, count in zip(positions, counts):
        ax.text(x, count, str(count), ha='center', va='bottom', fontsize=9)

    ax.set_xticks(positions)
    ax.set_xticklabels(RANK_BINS)
    ax.set_xlabel('Rank of the correct candidate')
    ax.set_ylabel('Challenges')
    ax.set_title(f'{ion_mode} mode - rank distribution', size=12, fontweight='bold')


def _plot_accuracy_table(ax, results: List[ChallengeResult]) -> None:
    summary = summarize(results)
    headers = ['Top-k', 'Hits', 'Accuracy']
    table_data = [
        ['Top 1', f"{summary.top1_hits}/{summary.total_challenges}", f"{summary.top1_accuracy_pct:.1f}%"],
        ['Top 5', f"{summary.top5_hits}/{summary.total_challenges}", f"{summary.top5_accuracy_pct:.1f}%"],
        ['Top 10', f"{summary.top10_hits}/{summary.total_challenges}", f"{summary.top10_accuracy_pct:.1f}%"],
    ]

    ax.axis('off')
    table = ax.table(cellText=table_data, colLabels=headers,
                     cellLoc='center', loc='upper center',
                     colWidths=[0.3, 0.3, 0.3])
    table.auto_set_font_size(False)
    table.set_fontsize(10)
    table.scale(1.0, 1.8)

    for i in range(len(headers)):
        table[(0, i)].set_facecolor('#40466e')
        table[(0, i)].set_text_props(weight='bold', color='white')

    ax.set_title('Accuracy summary', fontsize=12, fontweight='bold', pad=5)


def generate_rank_report(results_by_mode: Dict[str, List[ChallengeResult]],
                         output_dir="results") -> Path:
    """
    Write rank_report.pdf with one page per ionization mode that has results.

    Returns:
        Path: The report file (not created when there are no results)
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    report_file = output_path / "rank_report.pdf"

    modes = {mode: results for mode, results in results_by_mode.items() if results}
    if not modes:
        logger.info("No challenge results found. Skipping rank report generation.")
        return report_file

    with PdfPages(report_file) as pdf:
        for ion_mode, results in modes.items():
            fig = plt.figure(figsize=(14, 6))
            _plot_rank_histogram(plt.subplot(121), results, ion_mode)
            _plot_accuracy_table(plt.subplot(122), results)
            plt.tight_layout()
            pdf.savefig(fig)
            plt.close(fig)

    logger.info(f"Saved rank report to {report_file}")
    return report_file
