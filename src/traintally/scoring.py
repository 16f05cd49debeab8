"""
Final score calculation for a game session.

This module composes route, destination ticket, bonus, station and meeple
majority points into one breakdown per player, and ranks the results.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from traintally.constants import BREAKDOWN_LABELS
from traintally.errors import NoPlayers
from traintally.majority import MajorityDetail, majority_points, resolve
from traintally.players import PlayerRecord
from traintally.rulesets import RuleSet


@dataclass(frozen=True)
class BonusDetail:
    name: str
    points: int


@dataclass(frozen=True)
class ScoreBreakdown:
    """
    Breakdown of a player's final score into components.

    Attributes:
        player: The scored player
        route_points: Points from claimed routes (based on length)
        ticket_points: Completed tickets minus failed tickets
        bonus_points: Points from rule-set bonuses
        station_points: Points for unused stations
        majority_points: Points from meeple majorities
        bonus_details: Earned bonuses as (name, points)
        majority_details: Meeple placements as (colour, placement, points)
    """

    player: PlayerRecord
    route_points: int
    ticket_points: int
    bonus_points: int
    station_points: int
    majority_points: int
    bonus_details: Tuple[BonusDetail, ...] = field(default_factory=tuple)
    majority_details: Tuple[MajorityDetail, ...] = field(default_factory=tuple)

    @property
    def total(self) -> int:
        return (
            self.route_points
            + self.ticket_points
            + self.bonus_points
            + self.station_points
            + self.majority_points
        )

    @property
    def breakdown(self) -> Dict[str, int]:
        """Score components keyed by display label."""
        values = (
            self.route_points,
            self.ticket_points,
            self.bonus_points,
            self.station_points,
            self.majority_points,
            self.total,
        )
        return dict(zip(BREAKDOWN_LABELS, values))

    def to_dict(self) -> Dict[str, object]:
        return {
            "playerId": self.player.id,
            "playerName": self.player.name,
            "routePoints": self.route_points,
            "ticketPoints": self.ticket_points,
            "bonusPoints": self.bonus_points,
            "stationPoints": self.station_points,
            "majorityPoints": self.majority_points,
            "total": self.total,
            "bonusDetails": [{"name": d.name, "points": d.points} for d in self.bonus_details],
            "majorityDetails": [
                {"category": d.category, "placement": d.placement, "points": d.points}
                for d in self.majority_details
            ],
        }


def calculate_route_points(rule_set: RuleSet, player: PlayerRecord) -> int:
    return sum(
        count * rule_set.points_for_route_length(length)
        for length, count in player.routes_claimed.items()
    )


def calculate_ticket_points(player: PlayerRecord) -> int:
    return sum(ticket.actual_points for ticket in player.destination_tickets)


def bonus_details(rule_set: RuleSet, player: PlayerRecord) -> List[BonusDetail]:
    """
    List the bonuses a player earned.

    A per-item bonus scores ``points * count``. Any other bonus scores its
    points once, however large the stored counter is.
    """
    details: List[BonusDetail] = []
    for bonus in rule_set.bonuses:
        count = player.bonus_counts.get(bonus.id, 0)
        if count <= 0:
            continue
        points = bonus.points * count if bonus.is_per_item else bonus.points
        details.append(BonusDetail(name=bonus.display_name, points=points))
    return details


def calculate_bonus_points(rule_set: RuleSet, player: PlayerRecord) -> int:
    return sum(detail.points for detail in bonus_details(rule_set, player))


def calculate_station_points(rule_set: RuleSet, player: PlayerRecord) -> int:
    if not rule_set.features.has_stations or rule_set.station_rule is None:
        return 0
    return player.unused_stations * rule_set.station_rule.points_per_unit


def compute_breakdowns(rule_set: RuleSet, roster: Sequence[PlayerRecord]) -> List[ScoreBreakdown]:
    """
    Calculate the final score breakdown of every player.

    Args:
        rule_set: Rule set of the session
        roster: Players in seating order

    Returns:
        One breakdown per player, in roster order
    """
    config = rule_set.majority_scoring
    majority = resolve(config, roster, rule_set.features.has_meeples)

    breakdowns: List[ScoreBreakdown] = []
    for player in roster:
        details = majority.get(player.id, [])
        bonuses = bonus_details(rule_set, player)
        breakdowns.append(
            ScoreBreakdown(
                player=player,
                route_points=calculate_route_points(rule_set, player),
                ticket_points=calculate_ticket_points(player),
                bonus_points=sum(detail.points for detail in bonuses),
                station_points=calculate_station_points(rule_set, player),
                majority_points=majority_points(details),
                bonus_details=tuple(bonuses),
                majority_details=tuple(details),
            )
        )
    return breakdowns


def rank(rule_set: RuleSet, roster: Sequence[PlayerRecord]) -> List[ScoreBreakdown]:
    """Breakdowns from highest to lowest total; equal totals keep roster order."""
    return sorted(compute_breakdowns(rule_set, roster), key=lambda breakdown: -breakdown.total)


def winner(rule_set: RuleSet, roster: Sequence[PlayerRecord]) -> ScoreBreakdown:
    ranked = rank(rule_set, roster)
    if not ranked:
        raise NoPlayers()
    return ranked[0]


def loser(rule_set: RuleSet, roster: Sequence[PlayerRecord]) -> ScoreBreakdown:
    ranked = rank(rule_set, roster)
    if not ranked:
        raise NoPlayers()
    return ranked[-1]
