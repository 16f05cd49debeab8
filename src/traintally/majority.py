"""
Meeple majority scoring.

For every meeple colour the player(s) holding the most meeples take the
first-place award and the next tier takes the second-place award. Scoring
is relational, so it runs once over the whole roster.

Tie policy:
- A tie for first splits ``first + second`` between the tied players and
  nobody scores second place for that colour.
- Splits use integer division; the remainder is not redistributed.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from traintally.constants import FIRST_PLACE, SECOND_PLACE, TIED_FIRST_PLACE, TIED_SECOND_PLACE
from traintally.players import PlayerRecord
from traintally.rulesets import MajorityConfig


@dataclass(frozen=True)
class MajorityDetail:
    category: str
    placement: str
    points: int


def _count_groups(category: str, roster: Sequence[PlayerRecord]) -> List[Tuple[int, List[str]]]:
    """Group player ids by nonzero count, highest count first."""
    groups: Dict[int, List[str]] = {}
    for player in roster:
        count = player.collected_by_category.get(category, 0)
        if count > 0:
            groups.setdefault(count, []).append(player.id)
    return sorted(groups.items(), key=lambda item: item[0], reverse=True)


def resolve_category(
    category: str,
    config: MajorityConfig,
    roster: Sequence[PlayerRecord],
) -> Dict[str, MajorityDetail]:
    """
    Award first and second place for a single meeple colour.

    Args:
        category: Meeple colour to score
        config: Majority parameters of the rule set
        roster: All players of the session

    Returns:
        Player id -> detail, only for players that placed
    """
    groups = _count_groups(category, roster)
    if not groups:
        return {}

    results: Dict[str, MajorityDetail] = {}
    _, first_ids = groups[0]

    if len(first_ids) > 1:
        shared = (config.first_place_points + config.second_place_points) // len(first_ids)
        for player_id in first_ids:
            results[player_id] = MajorityDetail(category, TIED_FIRST_PLACE, shared)
        return results

    results[first_ids[0]] = MajorityDetail(category, FIRST_PLACE, config.first_place_points)
    if len(groups) > 1:
        _, second_ids = groups[1]
        shared = config.second_place_points // len(second_ids)
        placement = TIED_SECOND_PLACE if len(second_ids) > 1 else SECOND_PLACE
        for player_id in second_ids:
            results[player_id] = MajorityDetail(category, placement, shared)
    return results


def resolve(
    config: Optional[MajorityConfig],
    roster: Sequence[PlayerRecord],
    has_meeples: bool = True,
) -> Dict[str, List[MajorityDetail]]:
    """
    Resolve majority scoring for every colour of the rule set.

    Returns:
        Player id -> per-colour details in category order. Players that
        placed nowhere are absent. Empty when the feature is off.
    """
    if config is None or not has_meeples:
        return {}

    details: Dict[str, List[MajorityDetail]] = {}
    for category in config.categories:
        for player_id, detail in resolve_category(category, config, roster).items():
            details.setdefault(player_id, []).append(detail)
    return details


def majority_points(details: Sequence[MajorityDetail]) -> int:
    return sum(detail.points for detail in details)
