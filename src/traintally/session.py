"""In-memory game session: rule-set id, roster blob and lifecycle timestamps."""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

from traintally.players import PlayerRecord
from traintally.rulesets import RuleConfigRegistry, RuleSet, default_registry
from traintally.scoring import ScoreBreakdown, compute_breakdowns, loser, rank, winner
from traintally.storage import SessionCache


def _now() -> datetime:
    return datetime.now(timezone.utc)


class GameSession:
    """
    One game being scored.

    The roster lives in ``players_data`` as an encoded blob; reads and
    writes go through a SessionCache. Completing a game does not freeze the
    roster, callers are expected to stop editing it.
    """

    def __init__(
        self,
        game_version_id: str,
        players: Sequence[PlayerRecord],
        registry: Optional[RuleConfigRegistry] = None,
    ) -> None:
        self.id: str = str(uuid.uuid4())
        self.game_version_id: str = game_version_id
        self.started_at: datetime = _now()
        self.completed_at: Optional[datetime] = None
        self.is_completed: bool = False
        self._registry = registry or default_registry()
        self._storage = SessionCache()
        self.players_data: bytes = self._storage.save(players)

    @property
    def players(self) -> List[PlayerRecord]:
        return self._storage.get(self.players_data)

    @players.setter
    def players(self, roster: Sequence[PlayerRecord]) -> None:
        self.players_data = self._storage.save(roster)

    def update_player(self, updated: PlayerRecord) -> None:
        self.players_data = self._storage.update_player(updated, self.players_data)

    def invalidate_player_cache(self) -> None:
        self._storage.invalidate()

    @property
    def player_count(self) -> int:
        return len(self.players)

    @property
    def rule_set(self) -> RuleSet:
        return self._registry.get_by_id(self.game_version_id)

    @property
    def duration(self) -> Optional[timedelta]:
        if self.completed_at is None:
            return None
        return self.completed_at - self.started_at

    def complete_game(self) -> None:
        self.is_completed = True
        self.completed_at = _now()

    def reopen_game(self) -> None:
        self.is_completed = False
        self.completed_at = None

    # Final scoring

    def final_scores(self) -> List[ScoreBreakdown]:
        return compute_breakdowns(self.rule_set, self.players)

    def sorted_scores(self) -> List[ScoreBreakdown]:
        return rank(self.rule_set, self.players)

    def winner(self) -> ScoreBreakdown:
        return winner(self.rule_set, self.players)

    def loser(self) -> ScoreBreakdown:
        return loser(self.rule_set, self.players)
