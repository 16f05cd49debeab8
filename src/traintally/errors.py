"""Exception types raised by the scoring core."""
from __future__ import annotations


class TallyError(Exception):
    """Base class for every failure surfaced by Train Tally."""


class ConfigParseError(TallyError):
    """A rule-set document could not be parsed or failed validation."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class ConfigNotFound(TallyError, LookupError):
    """No rule set is loaded under the requested id."""

    def __init__(self, version_id: str) -> None:
        super().__init__(f"Rule set not found: {version_id}")
        self.version_id = version_id


class DecodingError(TallyError):
    """A serialized roster could not be decoded."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to decode player data: {reason}")
        self.reason = reason


class EncodingError(TallyError):
    """A roster could not be serialized."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to encode player data: {reason}")
        self.reason = reason


class PlayerNotFound(TallyError, LookupError):
    """The roster holds no player with the requested id."""

    def __init__(self, player_id: str) -> None:
        super().__init__(f"Player not found in session: {player_id}")
        self.player_id = player_id


class NoPlayers(TallyError):
    """A winner or loser was requested for an empty roster."""

    def __init__(self) -> None:
        super().__init__("Roster has no players")


class RuleViolation(TallyError, ValueError):
    """A player update is not allowed by the active rule set."""
