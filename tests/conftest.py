import csv
from pathlib import Path

import pytest

from frag_challenger.config import (
    CANDIDATES_DIRNAME,
    NEGATIVE_DIRNAME,
    POSITIVE_DIRNAME,
    REACTION_DB_FILENAME,
    SOLUTIONS_FILENAME,
    ChallengerConfig,
)

REACTION_DB = "\n".join([
    "<datawarrior-fileinfo>",
    '<version="3.3">',
    '<rowcount="7">',
    "</datawarrior-fileinfo>",
    "<column properties>",
    '<columnName="label">',
    "</column properties>",
    "label\tkind\tmode\trxnCode",
    "Ionization-H\tionization\tpositive negative\tq1",
    "Ionization-Na\tionization\tpositive\tq2",
    "Ionization-K\tionization\tpositive\tq3",
    "Ionization-Radical\tionization\tpositive\tq4",
    "Ionization-Cl\tionization\tnegative\tq5",
    "Alpha cleavage\treaction\tpositive negative\tr1",
    "Retro Diels-Alder\treaction\tpositive\tr2",
    "<datawarrior properties>",
    '<axisColumn_2D View_0="label">',
    "</datawarrior properties>",
])

SPECTRUM_LINES = [
    "# mz intensity",
    "100.0 10",
    "150.0 20",
    "200.0 30",
    "250.0 40",
]

CANDIDATE_HEADER = ["Identifier", "CompoundName", "MonoisotopicMass", "MolecularFormula",
                    "SMILES", "InChI", "InChIKey"]

SOLUTION_HEADER = ["SourceFile", "ChallengeName", "PRECURSOR_MZ", "ION_MODE", "RT", "nPeaks",
                   "NAME", "SMILES", "INCHI", "INCHIKEY", "CSID", "PC_CID"]


def candidate_row(identifier, smiles, inchikey, name=None):
    return [identifier, name or f"compound {identifier}", "100.0", "CxHy", smiles,
            f"InChI=1S/{identifier},x", inchikey]


def solution_row(challenge, smiles, inchikey, ion_mode="POSITIVE"):
    return [f"{challenge}.mgf", challenge, "101.0", ion_mode, "5.2", "4",
            f"solution of {challenge}", smiles, f"InChI=1S/{challenge}", inchikey, "123", "456"]


def write_csv(path: Path, header, rows):
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        writer.writerows(rows)


# Scenario corpus: in Challenge-001 the correct candidate ranks first,
# in Challenge-002 it ranks second. Masses are served by fakes.table_fragmenter.
POSITIVE_CHALLENGES = {
    "Challenge-001": [
        candidate_row("1", "CCO", "KEY-ETHANOL"),
        candidate_row("2", "CCC", "KEY-PROPANE"),
        candidate_row("3", "CCCC", "KEY-BUTANE"),
    ],
    "Challenge-002": [
        candidate_row("4", "CCN", "KEY-ETHYLAMINE"),
        candidate_row("5", "CCCl", "KEY-CHLOROETHANE"),
        candidate_row("6", "CCCCC", "KEY-PENTANE"),
    ],
}

SOLUTIONS = [
    solution_row("Challenge-001", "CCO", "KEY-ETHANOL"),
    solution_row("Challenge-002", "CCCl", "KEY-CHLOROETHANE"),
    solution_row("Challenge-101", "CC(=O)O", "KEY-ACETIC", ion_mode="NEGATIVE"),
]


@pytest.fixture
def reaction_db():
    return REACTION_DB


@pytest.fixture
def corpus(tmp_path):
    """A small corpus with two positive challenges and no negative ones."""
    data_dir = tmp_path / "data"
    for name, rows in POSITIVE_CHALLENGES.items():
        write_csv(data_dir / CANDIDATES_DIRNAME / f"{name}.csv", CANDIDATE_HEADER, rows)
        peaklist = data_dir / POSITIVE_DIRNAME / f"{name}.txt"
        peaklist.parent.mkdir(parents=True, exist_ok=True)
        peaklist.write_text("\n".join(SPECTRUM_LINES) + "\n")
    (data_dir / NEGATIVE_DIRNAME).mkdir(parents=True, exist_ok=True)

    write_csv(data_dir / SOLUTIONS_FILENAME, SOLUTION_HEADER, SOLUTIONS)
    (tmp_path / REACTION_DB_FILENAME).write_text(REACTION_DB)
    return data_dir


@pytest.fixture
def config(corpus, tmp_path):
    return ChallengerConfig(
        data_dir=str(corpus),
        results_dir=str(tmp_path / "results"),
        n_proc=1,
    )
