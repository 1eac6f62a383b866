import json
import shutil
import zipfile

import pandas as pd
import pytest

import fakes
from conftest import CANDIDATE_HEADER, candidate_row, write_csv
from frag_challenger.challenger import (
    discover_challenges,
    ensure_data,
    resolve_peaklist_path,
    run_challenger,
)
from frag_challenger.config import CANDIDATES_DIRNAME, NEGATIVE_DIRNAME, POSITIVE_DIRNAME, ChallengerConfig
from frag_challenger.exceptions import ChallengeFailedError, DataNotFoundError, PeaklistNotFoundError


EXPECTED_POSITIVE_SUMMARY = {
    "totalChallenges": 2,
    "top1Hits": 1,
    "top5Hits": 2,
    "top10Hits": 2,
    "top1AccuracyPct": 50.0,
    "top5AccuracyPct": 100.0,
    "top10AccuracyPct": 100.0,
}


def add_negative_challenge(corpus, name="Challenge-101"):
    write_csv(corpus / CANDIDATES_DIRNAME / f"{name}.csv", CANDIDATE_HEADER,
              [candidate_row("9", "CC(=O)O", "KEY-ACETIC")])
    (corpus / NEGATIVE_DIRNAME / f"{name}.txt").write_text("59.01 100\n")


def test_discover_challenges(config, corpus):
    add_negative_challenge(corpus)
    grouped = discover_challenges(config)

    assert [c.name for c in grouped["positive"]] == ["Challenge-001", "Challenge-002"]
    assert [c.name for c in grouped["negative"]] == ["Challenge-101"]
    assert grouped["negative"][0].spectrum_path.parent.name == NEGATIVE_DIRNAME


def test_discover_challenges_test_mode(config, corpus):
    write_csv(corpus / CANDIDATES_DIRNAME / "Challenge-000.csv", CANDIDATE_HEADER, [])
    shutil.copy(corpus / POSITIVE_DIRNAME / "Challenge-001.txt",
                corpus / POSITIVE_DIRNAME / "Challenge-000.txt")
    config.test_mode = True

    grouped = discover_challenges(config)
    assert [c.name for c in grouped["positive"]] == ["Challenge-000", "Challenge-001"]


def test_resolve_peaklist_missing(config):
    with pytest.raises(PeaklistNotFoundError, match="Challenge-404"):
        resolve_peaklist_path("Challenge-404", config)


@pytest.mark.parametrize("n_proc", (1, 2))
def test_scenario_positive_group(config, n_proc):
    config.n_proc = n_proc
    run = run_challenger(config, fragmenter=fakes.table_fragmenter)

    assert run.summary["positive"].to_dict() == EXPECTED_POSITIVE_SUMMARY
    assert run.summary["negative"].total_challenges == 0
    assert run.summary["negative"].top1_accuracy_pct == 0
    assert sorted(r.challenge_name for r in run.results["positive"]) == ["Challenge-001", "Challenge-002"]


def test_results_are_written(config, tmp_path):
    run_challenger(config, fragmenter=fakes.table_fragmenter)
    positive_dir = tmp_path / "results" / "positive"

    with open(positive_dir / "summary.json") as f:
        assert json.load(f) == EXPECTED_POSITIVE_SUMMARY

    with open(positive_dir / "Challenge-002.json") as f:
        result = json.load(f)
    assert result["challengeName"] == "Challenge-002"
    assert result["correctRank"] == 2
    assert result["solution"] == {"NAME": "solution of Challenge-002", "INCHIKEY": "KEY-CHLOROETHANE"}
    assert result["adductLabels"] == ["Ionization-H", "Ionization-Na", "Ionization-Radical"]
    assert result["results"][0]["bestAdduct"] == "Ionization-Na"
    assert set(result["results"][0]["similarity"]) == {"cosine", "tanimoto", "nbCommonPeaks", "nbPeaks1", "nbPeaks2"}

    rankings = pd.read_csv(positive_dir / "rankings.csv")
    assert rankings["correct_rank"].tolist() == [1, 2]

    with open(tmp_path / "results" / "negative" / "summary.json") as f:
        assert json.load(f)["totalChallenges"] == 0


def test_test_mode_writes_nothing(config, tmp_path):
    config.test_mode = True
    run = run_challenger(config, fragmenter=fakes.table_fragmenter)

    assert run.summary["positive"].to_dict() == EXPECTED_POSITIVE_SUMMARY
    assert not (tmp_path / "results").exists()


def test_rank_report(config, tmp_path):
    run_challenger(config, report=True, fragmenter=fakes.table_fragmenter)
    assert (tmp_path / "results" / "rank_report.pdf").stat().st_size > 0


def test_failing_challenge_aborts_group(config, tmp_path):
    with pytest.raises(ChallengeFailedError):
        run_challenger(config, runner=fakes.failing_runner)
    assert not (tmp_path / "results" / "positive" / "summary.json").exists()


def test_missing_data_without_archive(tmp_path):
    config = ChallengerConfig(data_dir=str(tmp_path / "data"), results_dir=str(tmp_path / "results"))
    with pytest.raises(DataNotFoundError):
        run_challenger(config)


def test_data_is_extracted_from_archive(corpus, tmp_path):
    archive = tmp_path / "data.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        for path in corpus.rglob("*"):
            zf.write(path, path.relative_to(tmp_path))
    shutil.rmtree(corpus)

    config = ChallengerConfig(data_dir=str(corpus))
    ensure_data(config)

    assert (corpus / CANDIDATES_DIRNAME / "Challenge-001.csv").exists()
