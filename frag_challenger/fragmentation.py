"""
Structure parsing and fragment mass prediction.

The challenge runner only relies on two callables:

    parse_structure(smiles) -> molecule
    fragmenter(molecule, reaction_db, mode) -> sorted list of m/z

where reaction_db is a database view holding a single ionization label.
The defaults below use RDKit: the molecule is parsed from SMILES and every
acyclic single bond is cleaved once; the precursor and both pieces of each
cleavage are then ionized with the mass shift of the view's adduct.
Any engine with the same signature can be passed instead.
"""

from typing import List, Optional

from rdkit import Chem, RDLogger
from rdkit.Chem import Descriptors

from .reaction_db import parse_row, split_database


RDLogger.DisableLog("rdApp.*")

PROTON_MASS = 1.007276
ELECTRON_MASS = 0.000549

# m/z shift of each ionization label for a singly charged ion
ADDUCT_MASS_SHIFTS = {
    "positive": {
        "Ionization-H": PROTON_MASS,
        "Ionization-Na": 22.989218,
        "Ionization-K": 38.963158,
        "Ionization-Radical": -ELECTRON_MASS,
    },
    "negative": {
        "Ionization-H": -PROTON_MASS,
        "Ionization-Cl": 34.969402,
        "Ionization-Radical": ELECTRON_MASS,
    },
}

MASS_DECIMALS = 4


def parse_structure(smiles: str) -> Chem.Mol:
    """
    Parse a SMILES string into an RDKit molecule.

    Raises:
        ValueError: If the SMILES string is invalid
    """
    mol = Chem.MolFromSmiles(smiles) if smiles else None
    if mol is None:
        raise ValueError(f"Invalid SMILES: {smiles}")
    return mol


def ionization_label(reaction_db: str, mode: str) -> Optional[str]:
    """Label of the first ionization row of a database view that applies to mode."""
    sections = split_database(reaction_db)
    for row in sections.rows:
        record = parse_row(row, sections.column_names)
        if record.get("kind") == "ionization" and mode in record.get("mode", ""):
            return record.get("label") or None
    return None


def _neutral_masses(mol: Chem.Mol) -> List[float]:
    """
    Monoisotopic masses of the molecule and of both pieces of every
    acyclic single-bond cleavage. Cleavage is homolytic: each atom keeps
    the hydrogens it carries in the intact molecule.
    """
    table = Chem.GetPeriodicTable()
    hydrogen = table.GetMostCommonIsotopeMass(1)
    atom_masses = [
        table.GetMostCommonIsotopeMass(atom.GetAtomicNum()) + atom.GetTotalNumHs() * hydrogen
        for atom in mol.GetAtoms()
    ]

    masses = [Descriptors.ExactMolWt(mol)]
    for bond in mol.GetBonds():
        if bond.IsInRing() or bond.GetBondType() != Chem.BondType.SINGLE:
            continue

        rwmol = Chem.RWMol(mol)
        rwmol.RemoveBond(bond.GetBeginAtomIdx(), bond.GetEndAtomIdx())
        for piece in Chem.GetMolFrags(rwmol, asMols=False, sanitizeFrags=False):
            masses.append(sum(atom_masses[idx] for idx in piece))
    return masses


def fragment_masses(mol: Chem.Mol, reaction_db: str, mode: str) -> List[float]:
    """
    Predict the fragment m/z values of a molecule for one adduct.

    Args:
        mol: Parsed molecule
        reaction_db: Database view filtered to a single ionization label
        mode: Ionization mode ("positive" or "negative")

    Returns:
        List[float]: Sorted, de-duplicated m/z values; empty when the
            adduct of the view is unknown
    """
    label = ionization_label(reaction_db, mode)
    shift = ADDUCT_MASS_SHIFTS.get(mode, {}).get(label)
    if shift is None:
        return []

    masses = set()
    for neutral_mass in _neutral_masses(mol):
        mz = neutral_mass + shift
        if mz > 0:
            masses.add(round(mz, MASS_DECIMALS))
    return sorted(masses)
