import pytest

from conftest import make_player, make_rule_set, meeple_rule_set
from traintally.errors import NoPlayers
from traintally.leaderboard import SCORE_COLUMNS, LeaderboardEntry, majority_frame, scores_frame
from traintally.scoring import rank
from traintally.session import GameSession


def test_entry_from_session(registry, roster):
    session = GameSession("usa", roster, registry=registry)
    session.complete_game()
    entry = LeaderboardEntry.from_session(session, user_id="u1")
    assert entry.game_session_id == session.id
    assert entry.game_version_id == "usa"
    assert entry.player_count == 2
    assert (entry.winner_name, entry.winner_score, entry.lowest_score) == ("Alice", 37, 21)
    assert entry.timestamp == session.completed_at
    assert entry.all_scores[0].breakdown == {
        "Routes": 23,
        "Destination Tickets": 4,
        "Bonuses": 10,
        "Stations": 0,
        "Meeples": 0,
        "Total": 37,
    }

    data = entry.to_dict()
    assert data["winnerName"] == "Alice"
    assert data["userId"] == "u1"
    assert data["groupId"] is None
    assert [s["playerName"] for s in data["allScores"]] == ["Alice", "Bob"]


def test_entry_needs_players():
    with pytest.raises(NoPlayers):
        LeaderboardEntry.from_breakdowns([], game_session_id="s", game_version_id="usa")


def test_scores_frame(roster):
    frame = scores_frame(rank(make_rule_set(), roster))
    assert list(frame.columns) == SCORE_COLUMNS
    assert frame["player"].tolist() == ["Alice", "Bob"]
    assert frame["total"].tolist() == [37, 21]
    assert (frame[["routes", "tickets", "bonuses", "stations", "meeples"]].sum(axis=1) == frame["total"]).all()


def test_scores_frame_empty():
    frame = scores_frame([])
    assert frame.empty
    assert list(frame.columns) == SCORE_COLUMNS


def test_majority_frame():
    rule_set = meeple_rule_set(colors=("yellow", "blue"))
    roster = [
        make_player("P1", player_id="p1", collected_by_category={"yellow": 4, "blue": 1}),
        make_player("P2", player_id="p2", collected_by_category={"yellow": 4}),
    ]
    frame = majority_frame(rank(rule_set, roster))
    rows = frame.to_dict("records")
    assert {"player": "P1", "category": "blue", "placement": "1st", "points": 20} in rows
    assert sum(1 for row in rows if row["placement"] == "Tied 1st") == 2
