"""
Roster encoding and the decoded-roster cache of a session.

The roster is persisted as a JSON blob. SessionCache keeps the decoded
copy next to it so repeated reads do not re-decode, and tracks a version
counter that advances whenever the decoded copy may have changed.

SessionCache is not thread-safe; guard it externally when a roster is
shared between threads.
"""
from __future__ import annotations

import copy
import json
import logging
from typing import List, Optional, Sequence

from pydantic import ValidationError

from traintally.errors import DecodingError, EncodingError, PlayerNotFound
from traintally.players import PlayerRecord, RosterModel
from traintally.rulesets import describe_validation_error

logger = logging.getLogger(__name__)


def encode_roster(roster: Sequence[PlayerRecord]) -> bytes:
    """Serialize a roster to UTF-8 JSON."""
    seen: set[str] = set()
    for player in roster:
        if player.id in seen:
            raise EncodingError(f"duplicate player id '{player.id}'")
        seen.add(player.id)
    try:
        return json.dumps([player.to_dict() for player in roster]).encode("utf-8")
    except (TypeError, ValueError, AttributeError) as exc:
        raise EncodingError(str(exc)) from exc


def decode_roster(blob: bytes) -> List[PlayerRecord]:
    """
    Deserialize a roster blob.

    Raises:
        DecodingError: The blob is not a valid roster. An empty roster is
            never substituted for a broken one.
    """
    try:
        document = json.loads(blob.decode("utf-8") if isinstance(blob, (bytes, bytearray)) else blob)
    except UnicodeDecodeError as exc:
        raise DecodingError(f"not valid UTF-8: {exc}") from exc
    except (json.JSONDecodeError, TypeError) as exc:
        raise DecodingError(f"not valid JSON: {exc}") from exc

    if not isinstance(document, list):
        raise DecodingError(f"roster must be a list, got {type(document).__name__}")

    try:
        roster = RosterModel.model_validate(document)
    except ValidationError as exc:
        raise DecodingError(describe_validation_error(exc)) from exc
    return [player.to_record() for player in roster.root]


class SessionCache:
    def __init__(self) -> None:
        self._players: Optional[List[PlayerRecord]] = None
        self._dirty: bool = False
        self._version: int = 0

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    @property
    def has_cached_roster(self) -> bool:
        return self._players is not None

    @property
    def version(self) -> int:
        """Advances on every decode, save and invalidate."""
        return self._version

    def get(self, blob: bytes, version: Optional[int] = None) -> List[PlayerRecord]:
        """
        Return the roster stored in ``blob``.

        The cached copy is returned when present and clean and, if the
        caller passes the version it last saw, that version is current.
        Otherwise the blob is decoded and becomes the cached copy.
        """
        if self._players is not None and not self._dirty and (version is None or version == self._version):
            logger.debug("Roster cache hit (version %d)", self._version)
            return copy.deepcopy(self._players)

        players = decode_roster(blob)
        self._players = players
        self._dirty = False
        self._version += 1
        logger.debug("Decoded roster of %d player(s) (version %d)", len(players), self._version)
        return copy.deepcopy(players)

    def save(self, roster: Sequence[PlayerRecord]) -> bytes:
        blob = encode_roster(roster)
        self._players = copy.deepcopy(list(roster))
        self._dirty = False
        self._version += 1
        return blob

    def update_player(self, updated: PlayerRecord, blob: bytes) -> bytes:
        """
        Replace the player with ``updated.id`` and re-serialize the roster.

        Raises:
            PlayerNotFound: No player has that id. The cache is untouched.
        """
        if self._players is not None and not self._dirty:
            players = list(self._players)
        else:
            players = decode_roster(blob)

        for index, player in enumerate(players):
            if player.id == updated.id:
                players[index] = updated
                return self.save(players)
        raise PlayerNotFound(updated.id)

    def invalidate(self) -> None:
        """Force the next ``get`` to decode; the cached copy is kept until then."""
        self._dirty = True
        self._version += 1

    def clear(self) -> None:
        self._players = None
        self._dirty = False
