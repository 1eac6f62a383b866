"""
Stand-ins for the fragmentation engine and the challenge runner.

They live in their own module, at module level, so that worker processes
can unpickle them.
"""

import os
import time
from pathlib import Path

from rdkit import Chem

from frag_challenger.exceptions import SolutionNotFoundError
from frag_challenger.fragmentation import ionization_label
from frag_challenger.models import ChallengeResult
from frag_challenger.runner import run_challenge


# canonical SMILES -> adduct label -> predicted m/z
PREDICTED = {
    Chem.CanonSmiles("CCO"): {"Ionization-H": [100.0, 150.0, 200.0, 250.0]},
    Chem.CanonSmiles("CCC"): {"Ionization-H": [100.0], "Ionization-Radical": [150.0]},
    Chem.CanonSmiles("CCN"): {"Ionization-Na": [250.0]},
    Chem.CanonSmiles("CCCl"): {"Ionization-H": [200.0]},
}

fragmenter_calls = []
runner_calls = []


def table_fragmenter(mol, reaction_db, mode):
    label = ionization_label(reaction_db, mode)
    return list(PREDICTED.get(Chem.MolToSmiles(mol), {}).get(label, []))


def same_for_every_adduct(mol, reaction_db, mode):
    return [100.0, 250.0]


def recording_fragmenter(mol, reaction_db, mode):
    fragmenter_calls.append(Chem.MolToSmiles(mol))
    return table_fragmenter(mol, reaction_db, mode)


def exploding_fragmenter(mol, reaction_db, mode):
    if Chem.MolToSmiles(mol) == Chem.CanonSmiles("CCC"):
        raise RuntimeError("no reaction applies")
    return table_fragmenter(mol, reaction_db, mode)


def recording_runner(challenge, config, fragmenter=None):
    runner_calls.append(challenge.name)
    return run_challenge(challenge, config, fragmenter=table_fragmenter)


def failing_runner(challenge, config, fragmenter=None):
    runner_calls.append(challenge.name)
    if challenge.name == "Challenge-001":
        raise SolutionNotFoundError(f"Solution not found for {challenge.name}")
    return run_challenge(challenge, config, fragmenter=table_fragmenter)


def crashing_runner(challenge, config, fragmenter=None):
    os._exit(3)


def stalling_runner(challenge, config, fragmenter=None):
    """Logs every start to results_dir/started.log; Challenge-001 fails, the rest take a while."""
    with open(Path(config.results_dir) / "started.log", "a") as f:
        f.write(challenge.name + "\n")
    if challenge.name == "Challenge-001":
        raise SolutionNotFoundError(f"Solution not found for {challenge.name}")

    time.sleep(1.5)
    return ChallengeResult(
        challenge_name=challenge.name,
        ion_mode=challenge.ion_mode,
        solution_name="",
        solution_inchikey="",
        total_candidates=0,
        correct_rank=0,
        in_top1=False,
        in_top5=False,
        in_top10=False,
        adduct_labels=[],
        results=[],
    )
