"""
Reaction database handling and adduct resolution.

The reaction database is a tab-separated text file made of three parts:
a preamble that ends with a ``</column properties>`` line, the data block
(one column-header row followed by the data rows) and a trailing metadata
block that starts at the first line beginning with ``<``. Ionization rows
carry ``kind == "ionization"``, a ``label`` such as ``Ionization-H`` and a
``mode`` field listing the ionization modes they apply to.

Each ionization label gets its own filtered copy of the database so that
the fragments predicted for one adduct do not inflate the score of another.
The database text is never modified in place.
"""

import re
from pathlib import Path
from typing import Dict, Iterable, List, NamedTuple, Optional

from .config import DEFAULT_EXCLUDED_LABELS
from .exceptions import MalformedDatabaseError


COLUMN_PROPERTIES_END = "</column properties>"
ROWCOUNT_PATTERN = re.compile(r'<rowcount="\d+">')


class DatabaseSections(NamedTuple):
    column_names: List[str]
    preamble: List[str]  # includes the column header row
    rows: List[str]
    epilogue: List[str]


def read_reaction_database(path) -> str:
    """Read the reaction database as text."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Reaction database not found: {path}")
    return path.read_text(encoding="utf-8")


def split_database(database: str) -> DatabaseSections:
    """
    Split the database text into preamble, data rows and epilogue.

    Raises:
        MalformedDatabaseError: If the column properties block or the
            column header row is missing
    """
    lines = database.split("\n")

    data_start = None
    for i, line in enumerate(lines):
        if line.startswith(COLUMN_PROPERTIES_END):
            data_start = i + 1
            break
    if data_start is None:
        raise MalformedDatabaseError(f"Could not find {COLUMN_PROPERTIES_END} in reaction database")

    if data_start >= len(lines) or not lines[data_start]:
        raise MalformedDatabaseError("Missing column header row in reaction database")
    column_names = lines[data_start].split("\t")

    data_end = len(lines)
    for i in range(data_start + 1, len(lines)):
        if lines[i].startswith("<"):
            data_end = i
            break

    return DatabaseSections(
        column_names=column_names,
        preamble=lines[:data_start + 1],
        rows=lines[data_start + 1:data_end],
        epilogue=lines[data_end:],
    )


def parse_row(row: str, column_names: List[str]) -> Dict[str, str]:
    """Map a tab-separated data row onto the column names; missing cells are empty."""
    values = row.split("\t")
    return {
        name: values[i] if i < len(values) else ""
        for i, name in enumerate(column_names)
    }


def get_ionization_labels(database: str, mode: str = "positive") -> List[str]:
    """
    Discover the distinct ionization labels available for a mode.

    Args:
        database: Reaction database text
        mode: Ionization mode token ("positive" or "negative")

    Returns:
        List[str]: Labels in the order they first appear
    """
    sections = split_database(database)
    labels = {}

    for row in sections.rows:
        if not row.strip():
            continue
        record = parse_row(row, sections.column_names)
        if record.get("kind") == "ionization" and mode in record.get("mode", "") and record.get("label"):
            labels.setdefault(record["label"], None)

    return list(labels)


def filter_by_label(database: str, label: str) -> str:
    """
    Return a copy of the database keeping a single ionization label.

    Non-ionization rows (the reactions) are kept as they are, ionization
    rows of every other label are dropped, and the row count recorded in
    the preamble is updated to the number of rows left.
    """
    sections = split_database(database)

    kept_rows = []
    for row in sections.rows:
        if not row.strip():
            continue
        record = parse_row(row, sections.column_names)
        if record.get("kind") == "ionization" and record.get("label") != label:
            continue
        kept_rows.append(row)

    preamble = "\n".join(sections.preamble)
    preamble = ROWCOUNT_PATTERN.sub(f'<rowcount="{len(kept_rows)}">', preamble)

    return "\n".join([preamble, *kept_rows, "\n".join(sections.epilogue)])


def resolve_adducts(database: str, mode: str,
                    exclude: Optional[Iterable[str]] = None) -> Dict[str, str]:
    """
    Build one filtered database view per usable ionization label.

    Args:
        database: Reaction database text
        mode: Ionization mode of the challenge
        exclude: Labels to leave out (defaults to the potassium adduct)

    Returns:
        Dict[str, str]: label -> filtered database, in discovery order
    """
    excluded = set(DEFAULT_EXCLUDED_LABELS if exclude is None else exclude)
    labels = [label for label in get_ionization_labels(database, mode) if label not in excluded]
    return {label: filter_by_label(database, label) for label in labels}
