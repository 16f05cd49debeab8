"""
Leaderboard snapshots and tabular exports of final scores.

A LeaderboardEntry is a flat, serializable projection of a ranked game.
Sending it anywhere is left to the caller.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from traintally.errors import NoPlayers
from traintally.scoring import ScoreBreakdown
from traintally.session import GameSession

SCORE_COLUMNS = [
    "player",
    "color",
    "routes",
    "tickets",
    "bonuses",
    "stations",
    "meeples",
    "total",
]


@dataclass(frozen=True)
class PlayerScore:
    player_name: str
    score: int
    breakdown: Dict[str, int]

    def to_dict(self) -> Dict[str, Any]:
        return {"playerName": self.player_name, "score": self.score, "breakdown": dict(self.breakdown)}


@dataclass(frozen=True)
class LeaderboardEntry:
    game_session_id: str
    game_version_id: str
    player_count: int
    winner_name: str
    winner_score: int
    lowest_score: int
    all_scores: List[PlayerScore]
    timestamp: datetime
    user_id: Optional[str] = None
    group_id: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @classmethod
    def from_breakdowns(
        cls,
        ranked: Sequence[ScoreBreakdown],
        *,
        game_session_id: str,
        game_version_id: str,
        timestamp: Optional[datetime] = None,
        user_id: Optional[str] = None,
        group_id: Optional[str] = None,
    ) -> "LeaderboardEntry":
        """
        Build a snapshot from breakdowns already ranked highest first.

        Raises:
            NoPlayers: ``ranked`` is empty
        """
        if not ranked:
            raise NoPlayers()
        return cls(
            game_session_id=game_session_id,
            game_version_id=game_version_id,
            player_count=len(ranked),
            winner_name=ranked[0].player.name,
            winner_score=ranked[0].total,
            lowest_score=ranked[-1].total,
            all_scores=[
                PlayerScore(player_name=b.player.name, score=b.total, breakdown=b.breakdown) for b in ranked
            ],
            timestamp=timestamp or datetime.now(timezone.utc),
            user_id=user_id,
            group_id=group_id,
        )

    @classmethod
    def from_session(
        cls,
        session: GameSession,
        user_id: Optional[str] = None,
        group_id: Optional[str] = None,
    ) -> "LeaderboardEntry":
        return cls.from_breakdowns(
            session.sorted_scores(),
            game_session_id=session.id,
            game_version_id=session.game_version_id,
            timestamp=session.completed_at,
            user_id=user_id,
            group_id=group_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "gameSessionId": self.game_session_id,
            "gameVersionId": self.game_version_id,
            "playerCount": self.player_count,
            "winnerName": self.winner_name,
            "winnerScore": self.winner_score,
            "lowestScore": self.lowest_score,
            "allScores": [score.to_dict() for score in self.all_scores],
            "timestamp": self.timestamp.isoformat(),
            "userId": self.user_id,
            "groupId": self.group_id,
        }


def scores_frame(breakdowns: Sequence[ScoreBreakdown]) -> pd.DataFrame:
    """One row per player with every score component, in the given order."""
    rows = [
        {
            "player": b.player.name,
            "color": b.player.color,
            "routes": b.route_points,
            "tickets": b.ticket_points,
            "bonuses": b.bonus_points,
            "stations": b.station_points,
            "meeples": b.majority_points,
            "total": b.total,
        }
        for b in breakdowns
    ]
    return pd.DataFrame(rows, columns=SCORE_COLUMNS)


def majority_frame(breakdowns: Sequence[ScoreBreakdown]) -> pd.DataFrame:
    """Meeple placements in long format: player, colour, placement, points."""
    rows = [
        {"player": b.player.name, "category": d.category, "placement": d.placement, "points": d.points}
        for b in breakdowns
        for d in b.majority_details
    ]
    return pd.DataFrame(rows, columns=["player", "category", "placement", "points"])
