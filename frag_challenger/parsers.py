"""
Readers for the challenge corpus files.

- candidate lists: CSV with a header and seven columns per candidate
- peaklists: whitespace separated "mz intensity" lines, '#' comments
- solutions: CSV with a header and twelve columns per challenge
"""

import csv
from pathlib import Path
from typing import List

import numpy as np
import pandas as pd

from .exceptions import SolutionNotFoundError
from .models import Candidate, Solution, Spectrum


CANDIDATE_COLUMNS = 7
SOLUTION_COLUMNS = 12


def _read_table(path, n_columns: int) -> pd.DataFrame:
    """
    Read a CSV keeping every cell as text.

    The header line is skipped. Rows with fewer than n_columns fields are
    dropped and longer rows are cut to their first n_columns fields.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with open(path, "r", newline="", encoding="utf-8") as f:
        reader = csv.reader(f)
        next(reader, None)
        rows = [row[:n_columns] for row in reader if len(row) >= n_columns]

    return pd.DataFrame(rows, columns=range(n_columns), dtype=str)


def read_candidates(path) -> List[Candidate]:
    """
    Read the candidate list of a challenge.

    Args:
        path: Candidate CSV file

    Returns:
        List[Candidate]: Candidates in file order
    """
    df = _read_table(path, CANDIDATE_COLUMNS)
    masses = pd.to_numeric(df.iloc[:, 2], errors="coerce") if len(df) else []

    candidates = []
    for i, row in enumerate(df.itertuples(index=False, name=None)):
        candidates.append(Candidate(
            identifier=row[0].strip(),
            compound_name=row[1],
            monoisotopic_mass=float(masses[i]),
            molecular_formula=row[3],
            smiles=row[4].strip(),
            inchi=row[5],
            inchikey=row[6].strip(),
        ))
    return candidates


def read_solutions(path) -> List[Solution]:
    """Read all records of the solutions file."""
    df = _read_table(path, SOLUTION_COLUMNS)

    solutions = []
    for row in df.itertuples(index=False, name=None):
        precursor_mz = pd.to_numeric(row[2], errors="coerce")
        rt = pd.to_numeric(row[4], errors="coerce")
        n_peaks = pd.to_numeric(row[5], errors="coerce")
        solutions.append(Solution(
            source_file=row[0],
            challenge_name=row[1].strip(),
            precursor_mz=float(precursor_mz),
            ion_mode=row[3].strip(),
            rt=float(rt),
            n_peaks=int(n_peaks) if not pd.isna(n_peaks) else 0,
            name=row[6],
            smiles=row[7],
            inchi=row[8],
            inchikey=row[9].strip(),
            csid=row[10],
            pc_cid=row[11],
        ))
    return solutions


def find_solution(solutions: List[Solution], challenge_name: str) -> Solution:
    """
    Look up the solution of a challenge.

    Raises:
        SolutionNotFoundError: If no record carries the challenge name
    """
    for solution in solutions:
        if solution.challenge_name == challenge_name:
            return solution
    raise SolutionNotFoundError(f"Solution not found for {challenge_name}")


def read_peaklist(path) -> Spectrum:
    """
    Read an experimental peaklist.

    Lines that are empty, start with '#' or lack an intensity are skipped.
    The returned spectrum is sorted by m/z.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Peaklist not found: {path}")

    x = []
    y = []
    with open(path, "r") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            parts = line.split()
            if len(parts) < 2:
                continue
            x.append(float(parts[0]))
            y.append(float(parts[1]))

    x = np.array(x, dtype=float)
    y = np.array(y, dtype=float)
    order = np.argsort(x, kind="stable")
    return Spectrum(x=x[order], y=y[order])
