import pytest

from conftest import make_player
from traintally.errors import ConfigNotFound, DecodingError, NoPlayers, PlayerNotFound
from traintally.session import GameSession
from traintally.storage import encode_roster


def test_players_round_trip_through_blob(registry, roster):
    session = GameSession("usa", roster, registry=registry)
    assert session.player_count == 2
    assert [p.name for p in session.players] == ["Alice", "Bob"]

    session.players = roster[:1]
    assert session.player_count == 1


def test_update_player(registry, roster):
    session = GameSession("usa", roster, registry=registry)
    bob = session.players[1]
    bob.name = "Robert"
    session.update_player(bob)
    assert [p.name for p in session.players] == ["Alice", "Robert"]

    with pytest.raises(PlayerNotFound):
        session.update_player(make_player("Ghost"))


def test_external_blob_change_needs_invalidation(registry, roster):
    session = GameSession("usa", roster, registry=registry)
    session.players_data = encode_roster(roster[1:])
    assert session.player_count == 2
    session.invalidate_player_cache()
    assert session.player_count == 1


def test_corrupt_blob_propagates(registry, roster):
    session = GameSession("usa", roster, registry=registry)
    session.players_data = b"{broken"
    session.invalidate_player_cache()
    with pytest.raises(DecodingError):
        session.players


def test_scores(registry, roster):
    session = GameSession("usa", roster, registry=registry)
    assert [b.total for b in session.final_scores()] == [37, 21]
    assert [b.player.name for b in session.sorted_scores()] == ["Alice", "Bob"]
    assert session.winner().player.name == "Alice"
    assert session.loser().player.name == "Bob"


def test_unknown_rule_set_propagates(registry, roster):
    session = GameSession("narnia", roster, registry=registry)
    with pytest.raises(ConfigNotFound):
        session.final_scores()
    with pytest.raises(ConfigNotFound):
        session.winner()


def test_empty_session_has_no_winner(registry):
    session = GameSession("usa", [], registry=registry)
    assert session.final_scores() == []
    with pytest.raises(NoPlayers):
        session.winner()


def test_complete_and_reopen(registry, roster):
    session = GameSession("usa", roster, registry=registry)
    assert session.duration is None
    session.complete_game()
    assert session.is_completed
    assert session.duration is not None
    assert session.duration.total_seconds() >= 0
    session.reopen_game()
    assert not session.is_completed
    assert session.completed_at is None
