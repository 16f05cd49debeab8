import pandas as pd

from conftest import make_document, make_record
from traintally.cli import main
from traintally.config import BUNDLED_RULESETS
from traintally.storage import encode_roster


def test_versions_lists_bundled_rule_sets(capsys):
    assert main(["--rules", str(BUNDLED_RULESETS), "versions"]) == 0
    out = capsys.readouterr().out
    assert "usa" in out
    assert "Ticket to Ride: Europe" in out


def test_score_prints_ranking_and_writes_csv(tmp_path, capsys, roster):
    rules = tmp_path / "rules.json"
    rules.write_bytes(make_document(make_record(id="usa")))
    roster_file = tmp_path / "roster.json"
    roster_file.write_bytes(encode_roster(list(reversed(roster))))
    csv_file = tmp_path / "scores.csv"

    assert main(["--rules", str(rules), "score", str(roster_file), "--version", "usa", "--csv", str(csv_file)]) == 0
    out = capsys.readouterr().out
    assert "Winner: Alice (37 points)" in out

    frame = pd.read_csv(csv_file)
    assert frame["player"].tolist() == ["Alice", "Bob"]


def test_score_reports_unknown_version(tmp_path, capsys, roster):
    roster_file = tmp_path / "roster.json"
    roster_file.write_bytes(encode_roster(roster))
    assert main(["--rules", str(BUNDLED_RULESETS), "score", str(roster_file), "--version", "narnia"]) == 1
    assert "Rule set not found: narnia" in capsys.readouterr().err


def test_score_reports_corrupt_roster(tmp_path, capsys):
    roster_file = tmp_path / "roster.json"
    roster_file.write_bytes(b"[{]")
    assert main(["--rules", str(BUNDLED_RULESETS), "score", str(roster_file)]) == 1
    assert "Failed to decode player data" in capsys.readouterr().err
