import numpy as np
import pytest

from conftest import CANDIDATE_HEADER, SOLUTION_HEADER, solution_row, write_csv
from frag_challenger.exceptions import SolutionNotFoundError
from frag_challenger.parsers import find_solution, read_candidates, read_peaklist, read_solutions


def test_read_candidates_with_quoted_fields(tmp_path):
    path = tmp_path / "Challenge-082.csv"
    write_csv(path, CANDIDATE_HEADER, [
        ["43550", "Cyromazine", "166.096695", "C6H10N6", "C1CC1Nc2nc(nc(n2)N)N",
         "InChI=1S/C6H10N6/c7-4-10-5(8)12-6(11-4)9-3-1-2-3/h3H,1-2H2,(H5,7,8,9,10,11,12)",
         "LVQDKIWDGQRHTE-UHFFFAOYSA-N"],
        ["15307", "Sodium caprylate [USAN]", "166.09697", "C8H15NaO2", "CCCCCCCC(=O)[O-].[Na+]",
         "InChI=1S/C8H16O2.Na/c1-2-3-4-5-6-7-8(9)10;/h2-7H2,1H3,(H,9,10);/q;+1/p-1",
         "BYKRNSHANADUFY-UHFFFAOYSA-M"],
    ])

    candidates = read_candidates(path)

    assert len(candidates) == 2
    assert candidates[0].identifier == "43550"
    assert candidates[0].monoisotopic_mass == pytest.approx(166.096695)
    assert candidates[0].inchi.startswith("InChI=1S/C6H10N6/c7-4-10-5(8)12-6(11-4)")
    assert candidates[1].compound_name == "Sodium caprylate [USAN]"
    assert candidates[1].inchikey == "BYKRNSHANADUFY-UHFFFAOYSA-M"


def test_read_candidates_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_candidates(tmp_path / "missing.csv")


def test_read_solutions_and_find(tmp_path):
    path = tmp_path / "solutions.csv"
    write_csv(path, SOLUTION_HEADER, [
        solution_row("Challenge-001", "CCO", "KEY-ETHANOL"),
        solution_row("Challenge-101", "CC(=O)O", "KEY-ACETIC", ion_mode="NEGATIVE"),
    ])

    solutions = read_solutions(path)
    solution = find_solution(solutions, "Challenge-101")

    assert len(solutions) == 2
    assert solution.inchikey == "KEY-ACETIC"
    assert solution.ion_mode == "NEGATIVE"
    assert solution.precursor_mz == pytest.approx(101.0)
    assert solution.n_peaks == 4


def test_find_solution_missing():
    with pytest.raises(SolutionNotFoundError, match="Challenge-999"):
        find_solution([], "Challenge-999")


def test_read_peaklist(tmp_path):
    path = tmp_path / "Challenge-001.txt"
    path.write_text("# comment\n\n200.5 30\n100.25\t10\n150.0 20 extra\n300.0\n")

    spectrum = read_peaklist(path)

    np.testing.assert_allclose(spectrum.x, [100.25, 150.0, 200.5])
    np.testing.assert_allclose(spectrum.y, [10, 20, 30])


def test_read_candidates_skips_short_rows(tmp_path):
    path = tmp_path / "Challenge-001.csv"
    path.write_text(
        ",".join(CANDIDATE_HEADER) + "\n"
        "1,one,100.0,CH4,C,InChI=1S/CH4/h1H4,KEY-1\n"
        "3,short,1.0\n"
        "\n"
        "4,four,120.0,C2H6,CC,InChI=1S/C2H6/c1-2/h1-2H3,KEY-4\n"
    )

    assert [c.identifier for c in read_candidates(path)] == ["1", "4"]


def test_read_candidates_keeps_first_fields_of_long_rows(tmp_path):
    path = tmp_path / "Challenge-001.csv"
    path.write_text(
        ",".join(CANDIDATE_HEADER) + "\n"
        "1,one,100.0,CH4,C,InChI=1S/CH4/h1H4,KEY-1\n"
        "2,two,110.0,C2H6,CC,InChI=1S/C2H6/c1-2/h1-2H3,KEY-2,trailing\n"
    )

    candidates = read_candidates(path)

    assert [c.identifier for c in candidates] == ["1", "2"]
    assert candidates[1].inchikey == "KEY-2"
    assert candidates[1].monoisotopic_mass == pytest.approx(110.0)


def test_read_candidates_header_only(tmp_path):
    path = tmp_path / "Challenge-001.csv"
    write_csv(path, CANDIDATE_HEADER, [])
    assert read_candidates(path) == []
