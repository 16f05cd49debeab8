"""
Player state tracked during a session.

A PlayerRecord accumulates everything a player scores with: claimed routes
(by length), destination tickets, bonus counters, unused stations and
collected meeples. Scoring never mutates a record.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List

from pydantic import BaseModel, Field, RootModel, ValidationError, field_validator

from traintally.errors import DecodingError, RuleViolation
from traintally.rulesets import Count, Flag, RuleSet, Text, describe_validation_error


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class DestinationTicket:
    point_value: int
    is_completed: bool = False
    description: str = ""
    id: str = field(default_factory=_new_id)

    @property
    def actual_points(self) -> int:
        """Ticket value, negative when the ticket was not completed."""
        return self.point_value if self.is_completed else -self.point_value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "pointValue": self.point_value,
            "isCompleted": self.is_completed,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DestinationTicket":
        try:
            return TicketModel.model_validate(data).to_ticket()
        except ValidationError as exc:
            raise DecodingError(f"ticket: {describe_validation_error(exc)}") from exc


@dataclass
class PlayerRecord:
    """
    One player's accumulated game state.

    Attributes:
        id: Identifier, unique within a roster
        name: Display name
        color: Colour token drawn from the rule set's palette
        routes_claimed: Route length -> number of routes claimed of that length
        destination_tickets: Completed and failed tickets, in the order drawn
        bonus_counts: Bonus id -> count (a flag for exclusive bonuses)
        unused_stations: Stations not placed (station editions only)
        collected_by_category: Meeple colour -> count (meeple editions only)
    """

    name: str
    color: str
    id: str = field(default_factory=_new_id)
    routes_claimed: Dict[int, int] = field(default_factory=dict)
    destination_tickets: List[DestinationTicket] = field(default_factory=list)
    bonus_counts: Dict[str, int] = field(default_factory=dict)
    unused_stations: int = 0
    collected_by_category: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def create(cls, rule_set: RuleSet, name: str, color: str) -> "PlayerRecord":
        """Create a player; the colour is matched case-insensitively and stored as the palette spells it."""
        if not rule_set.has_player_color(color):
            raise RuleViolation(
                f"Colour '{color}' is not available in {rule_set.display_name} "
                f"(palette: {', '.join(rule_set.player_colors)})"
            )
        return cls(name=name, color=rule_set.palette_color(color))

    # Route tracking

    def add_route(self, length: int) -> None:
        self.routes_claimed[length] = self.routes_claimed.get(length, 0) + 1

    def remove_route(self, length: int) -> None:
        current = self.routes_claimed.get(length, 0)
        if current <= 0:
            return
        if current == 1:
            del self.routes_claimed[length]
        else:
            self.routes_claimed[length] = current - 1

    def route_count(self, length: int) -> int:
        return self.routes_claimed.get(length, 0)

    @property
    def total_routes_claimed(self) -> int:
        return sum(self.routes_claimed.values())

    def train_cars_used(self) -> int:
        return sum(length * count for length, count in self.routes_claimed.items())

    def train_cars_remaining(self, max_cars: int) -> int:
        return max_cars - self.train_cars_used()

    # Writes checked against the active rule set

    def claim_route(self, rule_set: RuleSet, length: int) -> None:
        if all(score.length != length for score in rule_set.route_scoring):
            raise RuleViolation(f"{rule_set.display_name} has no routes of length {length}")
        if self.train_cars_used() + length > rule_set.train_cars_per_player:
            raise RuleViolation(
                f"{self.name} has {self.train_cars_remaining(rule_set.train_cars_per_player)} "
                f"train cars left, cannot claim a route of length {length}"
            )
        self.add_route(length)

    def set_bonus(self, rule_set: RuleSet, bonus_id: str, count: int) -> None:
        bonus = rule_set.bonus(bonus_id)
        if bonus is None:
            raise RuleViolation(f"{rule_set.display_name} has no bonus '{bonus_id}'")
        _check_count(count, bonus_id)
        if bonus.max_count is not None and count > bonus.max_count:
            raise RuleViolation(f"Bonus '{bonus_id}' allows at most {bonus.max_count}, got {count}")
        if count == 0:
            self.bonus_counts.pop(bonus_id, None)
        else:
            self.bonus_counts[bonus_id] = count

    def set_unused_stations(self, rule_set: RuleSet, count: int) -> None:
        if not rule_set.features.has_stations:
            raise RuleViolation(f"{rule_set.display_name} does not use stations")
        _check_count(count, "unused stations")
        if rule_set.stations_per_player is not None and count > rule_set.stations_per_player:
            raise RuleViolation(
                f"{rule_set.display_name} gives {rule_set.stations_per_player} stations per player, got {count}"
            )
        self.unused_stations = count

    def set_collected(self, rule_set: RuleSet, category: str, count: int) -> None:
        config = rule_set.majority_scoring
        if config is None:
            raise RuleViolation(f"{rule_set.display_name} does not use meeples")
        if category not in config.categories:
            raise RuleViolation(f"{rule_set.display_name} has no meeple colour '{category}'")
        _check_count(count, category)
        if count == 0:
            self.collected_by_category.pop(category, None)
        else:
            self.collected_by_category[category] = count

    # Serialization contract

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "routesClaimed": {str(length): count for length, count in self.routes_claimed.items()},
            "destinationTickets": [ticket.to_dict() for ticket in self.destination_tickets],
            "bonuses": dict(self.bonus_counts),
            "unusedStations": self.unused_stations,
            "meeplesCollected": dict(self.collected_by_category),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlayerRecord":
        try:
            return PlayerModel.model_validate(data).to_record()
        except ValidationError as exc:
            raise DecodingError(f"player: {describe_validation_error(exc)}") from exc


# ---------------------------------------------------------------------------
# Document models
# ---------------------------------------------------------------------------


class TicketModel(BaseModel):
    id: Text
    point_value: Count = Field(alias="pointValue")
    is_completed: Flag = Field(alias="isCompleted")
    description: Text = ""

    def to_ticket(self) -> DestinationTicket:
        return DestinationTicket(
            id=self.id,
            point_value=self.point_value,
            is_completed=self.is_completed,
            description=self.description,
        )


class PlayerModel(BaseModel):
    id: Text
    name: Text
    color: Text
    routes_claimed: Dict[str, Count] = Field(alias="routesClaimed")
    destination_tickets: List[TicketModel] = Field(alias="destinationTickets")
    bonuses: Dict[str, Count]
    unused_stations: Count = Field(alias="unusedStations")
    meeples_collected: Dict[str, Count] = Field(alias="meeplesCollected")

    @field_validator("routes_claimed")
    @classmethod
    def _integer_lengths(cls, routes: Dict[str, int]) -> Dict[str, int]:
        for key in routes:
            try:
                int(key)
            except ValueError:
                raise ValueError(f"route length '{key}' is not an integer") from None
        return routes

    def to_record(self) -> PlayerRecord:
        return PlayerRecord(
            id=self.id,
            name=self.name,
            color=self.color,
            routes_claimed={int(length): count for length, count in self.routes_claimed.items()},
            destination_tickets=[ticket.to_ticket() for ticket in self.destination_tickets],
            bonus_counts=dict(self.bonuses),
            unused_stations=self.unused_stations,
            collected_by_category=dict(self.meeples_collected),
        )


class RosterModel(RootModel[List[PlayerModel]]):
    """A roster document: a JSON list of players with unique ids."""

    @field_validator("root")
    @classmethod
    def _unique_ids(cls, players: List[PlayerModel]) -> List[PlayerModel]:
        seen: set[str] = set()
        for player in players:
            if player.id in seen:
                raise ValueError(f"duplicate player id '{player.id}'")
            seen.add(player.id)
        return players


def _check_count(count: int, what: str) -> None:
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise RuleViolation(f"Count for '{what}' must be a non-negative integer, got {count!r}")
