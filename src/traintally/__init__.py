"""Train Tally: final scoring for Ticket to Ride sessions across editions."""

from traintally.errors import (
    ConfigNotFound,
    ConfigParseError,
    DecodingError,
    EncodingError,
    NoPlayers,
    PlayerNotFound,
    RuleViolation,
    TallyError,
)
from traintally.majority import MajorityDetail, resolve
from traintally.players import DestinationTicket, PlayerRecord
from traintally.rulesets import (
    BonusDefinition,
    FeatureFlags,
    MajorityConfig,
    RouteScore,
    RuleConfigRegistry,
    RuleSet,
    StationRule,
    parse_rule_sets,
)
from traintally.scoring import BonusDetail, ScoreBreakdown, compute_breakdowns, loser, rank, winner
from traintally.storage import SessionCache, decode_roster, encode_roster

__all__ = [
    "ConfigNotFound",
    "ConfigParseError",
    "DecodingError",
    "EncodingError",
    "NoPlayers",
    "PlayerNotFound",
    "RuleViolation",
    "TallyError",
    "MajorityDetail",
    "resolve",
    "DestinationTicket",
    "PlayerRecord",
    "BonusDefinition",
    "FeatureFlags",
    "MajorityConfig",
    "RouteScore",
    "RuleConfigRegistry",
    "RuleSet",
    "StationRule",
    "parse_rule_sets",
    "BonusDetail",
    "ScoreBreakdown",
    "compute_breakdowns",
    "loser",
    "rank",
    "winner",
    "SessionCache",
    "decode_roster",
    "encode_roster",
]
