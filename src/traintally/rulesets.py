"""
Rule-set definitions and the process-wide registry that indexes them.

A rule set (one edition of the game) declares the route payout table, the
bonuses that can be earned, the player colour palette and the optional
station and meeple-majority features. Rule sets arrive as a JSON document
of raw bytes; acquiring those bytes is the caller's job.
"""
from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass
from typing import Annotated, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from traintally.constants import DEFAULT_MAX_ROUTE_LENGTH, STATION_BONUS_ID
from traintally.errors import ConfigNotFound, ConfigParseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteScore:
    """Points awarded for one claimed route of ``length`` train cars."""

    length: int
    points: int


@dataclass(frozen=True)
class FeatureFlags:
    has_stations: bool = False
    has_meeples: bool = False
    has_ferries: bool = False
    has_ships: bool = False


@dataclass(frozen=True)
class BonusDefinition:
    """
    A scoring item defined by the rule set.

    Attributes:
        id: Identifier, unique within its rule set
        display_name: Name shown in score details
        points: Points per item (per-item bonus) or flat points
        is_exclusive: Only one player can hold the bonus (e.g. longest route)
        is_per_item: Points scale linearly with the player's count
        max_count: Optional cap on the count a player may record
    """

    id: str
    display_name: str
    points: int
    is_exclusive: bool
    is_per_item: bool
    max_count: Optional[int] = None
    description: str = ""


@dataclass(frozen=True)
class MajorityConfig:
    """Parameters of collectible (meeple) majority scoring."""

    categories: Tuple[str, ...]
    first_place_points: int
    second_place_points: int


@dataclass(frozen=True)
class StationRule:
    """Points for every station a player did not place."""

    points_per_unit: int


@dataclass(frozen=True)
class RuleSet:
    id: str
    display_name: str
    min_players: int
    max_players: int
    train_cars_per_player: int
    player_colors: Tuple[str, ...]
    route_scoring: Tuple[RouteScore, ...]
    features: FeatureFlags
    bonuses: Tuple[BonusDefinition, ...] = ()
    stations_per_player: Optional[int] = None
    majority_config: Optional[MajorityConfig] = None
    station_rule: Optional[StationRule] = None

    @property
    def sorted_route_scoring(self) -> List[Tuple[int, int]]:
        return sorted((score.length, score.points) for score in self.route_scoring)

    @property
    def max_route_length(self) -> int:
        if not self.route_scoring:
            return DEFAULT_MAX_ROUTE_LENGTH
        return max(score.length for score in self.route_scoring)

    def points_for_route_length(self, length: int) -> int:
        """
        Get points for a route of given length.

        Args:
            length: Number of train cars in the route

        Returns:
            Points awarded for that route length, or 0 if the table has no entry
        """
        for score in self.route_scoring:
            if score.length == length:
                return score.points
        return 0

    def bonus(self, bonus_id: str) -> Optional[BonusDefinition]:
        for definition in self.bonuses:
            if definition.id == bonus_id:
                return definition
        return None

    def palette_color(self, color: str) -> Optional[str]:
        """The palette entry matching ``color`` case-insensitively, spelled as the palette spells it."""
        for entry in self.player_colors:
            if entry.lower() == color.lower():
                return entry
        return None

    def has_player_color(self, color: str) -> bool:
        return self.palette_color(color) is not None

    @property
    def majority_scoring(self) -> Optional[MajorityConfig]:
        """The majority parameters, or ``None`` unless the meeple feature is on."""
        if not self.features.has_meeples:
            return None
        return self.majority_config


# ---------------------------------------------------------------------------
# Document models
# ---------------------------------------------------------------------------

Count = Annotated[int, Field(strict=True, ge=0)]
Points = Annotated[int, Field(strict=True)]
Text = Annotated[str, Field(strict=True)]
Flag = Annotated[bool, Field(strict=True)]


class RouteScoreModel(BaseModel):
    length: Annotated[int, Field(strict=True, ge=1)]
    points: Count


class FeatureFlagsModel(BaseModel):
    has_stations: Flag = Field(alias="hasStations")
    has_meeples: Flag = Field(alias="hasMeeples")
    has_ferries: Flag = Field(alias="hasFerries")
    has_ships: Flag = Field(alias="hasShips")


class BonusModel(BaseModel):
    id: Text
    display_name: Text = Field(alias="displayName")
    points: Points
    is_exclusive: Flag = Field(alias="isExclusive")
    is_per_item: Flag = Field(alias="isPerItem")
    max_count: Optional[Count] = Field(default=None, alias="maxCount")
    description: Text = ""


class MajorityModel(BaseModel):
    colors: List[Text]
    majority_points: Count = Field(alias="majorityPoints")
    second_place_points: Count = Field(alias="secondPlacePoints")

    @field_validator("colors")
    @classmethod
    def _unique_colors(cls, colors: List[str]) -> List[str]:
        duplicates = sorted({color for color in colors if colors.count(color) > 1})
        if duplicates:
            raise ValueError(f"duplicate category '{duplicates[0]}'")
        return colors


class StationRuleModel(BaseModel):
    points_per_unit: Points = Field(alias="pointsPerUnit")


class RuleSetModel(BaseModel):
    """One edition record of the rule-set document."""

    id: Text
    display_name: Text = Field(alias="displayName")
    min_players: Annotated[int, Field(strict=True, ge=1)] = Field(alias="minPlayers")
    max_players: Annotated[int, Field(strict=True, ge=1)] = Field(alias="maxPlayers")
    train_cars_per_player: Count = Field(alias="trainCarsPerPlayer")
    stations_per_player: Optional[Count] = Field(default=None, alias="stationsPerPlayer")
    player_colors: List[Text] = Field(alias="playerColors", min_length=1)
    route_scoring: List[RouteScoreModel] = Field(alias="routeScoring")
    features: FeatureFlagsModel
    bonuses: List[BonusModel]
    meeple_config: Optional[MajorityModel] = Field(default=None, alias="meepleConfig")
    station_rule: Optional[StationRuleModel] = Field(default=None, alias="stationRule")

    @field_validator("player_colors")
    @classmethod
    def _collapse_colors(cls, colors: List[str]) -> List[str]:
        return list(dict.fromkeys(colors))

    @field_validator("route_scoring")
    @classmethod
    def _unique_lengths(cls, scores: List[RouteScoreModel]) -> List[RouteScoreModel]:
        seen: set[int] = set()
        for score in scores:
            if score.length in seen:
                raise ValueError(f"duplicate route length {score.length}")
            seen.add(score.length)
        return scores

    @field_validator("bonuses")
    @classmethod
    def _unique_bonus_ids(cls, bonuses: List[BonusModel]) -> List[BonusModel]:
        seen: set[str] = set()
        for bonus in bonuses:
            if bonus.id in seen:
                raise ValueError(f"duplicate bonus id '{bonus.id}'")
            seen.add(bonus.id)
        return bonuses

    @model_validator(mode="after")
    def _player_range(self) -> "RuleSetModel":
        if self.min_players > self.max_players:
            raise ValueError(f"minPlayers ({self.min_players}) exceeds maxPlayers ({self.max_players})")
        return self


class RuleSetDocument(BaseModel):
    versions: List[RuleSetModel]

    @field_validator("versions")
    @classmethod
    def _unique_ids(cls, versions: List[RuleSetModel]) -> List[RuleSetModel]:
        seen: set[str] = set()
        for version in versions:
            if version.id in seen:
                raise ValueError(f"duplicate rule set id '{version.id}'")
            seen.add(version.id)
        return versions


def describe_validation_error(exc: ValidationError) -> str:
    """Flatten pydantic errors into ``path: message`` pairs."""
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc']) or 'document'}: {error['msg']}"
        for error in exc.errors()
    )


def _station_rule(model: RuleSetModel) -> Optional[StationRule]:
    if not model.features.has_stations:
        return None
    if model.station_rule is not None:
        return StationRule(points_per_unit=model.station_rule.points_per_unit)
    # Older documents carry the payout on a reserved bonus entry
    for bonus in model.bonuses:
        if bonus.id == STATION_BONUS_ID:
            return StationRule(points_per_unit=bonus.points)
    return None


def _to_rule_set(model: RuleSetModel) -> RuleSet:
    majority = None
    if model.meeple_config is not None:
        majority = MajorityConfig(
            categories=tuple(model.meeple_config.colors),
            first_place_points=model.meeple_config.majority_points,
            second_place_points=model.meeple_config.second_place_points,
        )
    return RuleSet(
        id=model.id,
        display_name=model.display_name,
        min_players=model.min_players,
        max_players=model.max_players,
        train_cars_per_player=model.train_cars_per_player,
        player_colors=tuple(model.player_colors),
        route_scoring=tuple(
            RouteScore(length=score.length, points=score.points)
            for score in sorted(model.route_scoring, key=lambda score: score.length)
        ),
        features=FeatureFlags(
            has_stations=model.features.has_stations,
            has_meeples=model.features.has_meeples,
            has_ferries=model.features.has_ferries,
            has_ships=model.features.has_ships,
        ),
        bonuses=tuple(
            BonusDefinition(
                id=bonus.id,
                display_name=bonus.display_name,
                points=bonus.points,
                is_exclusive=bonus.is_exclusive,
                is_per_item=bonus.is_per_item,
                max_count=bonus.max_count,
                description=bonus.description,
            )
            for bonus in model.bonuses
        ),
        stations_per_player=model.stations_per_player,
        majority_config=majority,
        station_rule=_station_rule(model),
    )


def parse_rule_sets(data: bytes) -> List[RuleSet]:
    """
    Parse and validate a rule-set document.

    Args:
        data: UTF-8 JSON, either ``{"versions": [...]}`` or a bare list

    Returns:
        Rule sets in document order

    Raises:
        ConfigParseError: On malformed JSON or any structural violation
    """
    try:
        document = json.loads(data.decode("utf-8") if isinstance(data, (bytes, bytearray)) else data)
    except UnicodeDecodeError as exc:
        raise ConfigParseError(f"document is not valid UTF-8: {exc}") from exc
    except (json.JSONDecodeError, TypeError) as exc:
        raise ConfigParseError(f"document is not valid JSON: {exc}") from exc

    if isinstance(document, list):
        document = {"versions": document}
    elif not isinstance(document, dict):
        raise ConfigParseError("document root must be a list or an object with 'versions'")

    try:
        parsed = RuleSetDocument.model_validate(document)
    except ValidationError as exc:
        raise ConfigParseError(describe_validation_error(exc)) from exc
    return [_to_rule_set(model) for model in parsed.versions]


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class RuleConfigRegistry:
    """
    Memoized index of loaded rule sets.

    Loading the same bytes twice returns the memo without re-parsing.
    Loading a different document replaces the memo.
    """

    def __init__(self) -> None:
        self._digest: Optional[str] = None
        self._rule_sets: List[RuleSet] = []
        self._by_id: Dict[str, RuleSet] = {}

    def load(self, data: bytes) -> List[RuleSet]:
        if isinstance(data, str):
            data = data.encode("utf-8")
        digest = hashlib.sha256(data).hexdigest()
        if digest == self._digest:
            logger.debug("Rule-set document unchanged, returning %d cached rule set(s)", len(self._rule_sets))
            return list(self._rule_sets)

        rule_sets = parse_rule_sets(data)
        self._rule_sets = rule_sets
        self._by_id = {rule_set.id: rule_set for rule_set in rule_sets}
        self._digest = digest
        logger.info("Loaded %d rule set(s): %s", len(rule_sets), ", ".join(self._by_id))
        return list(rule_sets)

    def get_by_id(self, version_id: str) -> RuleSet:
        try:
            return self._by_id[version_id]
        except KeyError:
            logger.warning(
                "Could not find rule set '%s'. Available: %s",
                version_id,
                ", ".join(self._by_id) or "(none loaded)",
            )
            raise ConfigNotFound(version_id) from None

    def list_all(self) -> List[RuleSet]:
        return list(self._rule_sets)


_REGISTRY = RuleConfigRegistry()


def default_registry() -> RuleConfigRegistry:
    return _REGISTRY


def load(data: bytes) -> List[RuleSet]:
    return _REGISTRY.load(data)


def get_by_id(version_id: str) -> RuleSet:
    return _REGISTRY.get_by_id(version_id)


def list_all() -> List[RuleSet]:
    return _REGISTRY.list_all()
