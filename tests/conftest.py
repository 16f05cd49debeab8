import copy
import json

import pytest

from traintally.config import BUNDLED_RULESETS
from traintally.players import DestinationTicket, PlayerRecord
from traintally.rulesets import RuleConfigRegistry, parse_rule_sets

CLASSIC_ROUTES = [
    {"length": 1, "points": 1},
    {"length": 2, "points": 2},
    {"length": 3, "points": 4},
    {"length": 4, "points": 7},
    {"length": 5, "points": 10},
    {"length": 6, "points": 15},
]

BASE_RECORD = {
    "id": "test",
    "displayName": "Test Edition",
    "minPlayers": 2,
    "maxPlayers": 5,
    "trainCarsPerPlayer": 45,
    "playerColors": ["red", "blue", "green", "yellow", "black"],
    "routeScoring": CLASSIC_ROUTES,
    "features": {"hasStations": False, "hasMeeples": False, "hasFerries": False, "hasShips": False},
    "bonuses": [
        {
            "id": "longest_route",
            "displayName": "Longest Route",
            "points": 10,
            "isExclusive": True,
            "isPerItem": False,
        },
        {
            "id": "ferry",
            "displayName": "Ferry",
            "points": 2,
            "isExclusive": False,
            "isPerItem": True,
            "maxCount": 4,
        },
    ],
}


def make_record(**overrides):
    record = copy.deepcopy(BASE_RECORD)
    record.update(overrides)
    return record


def make_document(*records):
    return json.dumps({"versions": list(records) or [make_record()]}).encode("utf-8")


def make_rule_set(**overrides):
    return parse_rule_sets(make_document(make_record(**overrides)))[0]


def meeple_rule_set(first=20, second=10, colors=("yellow", "blue")):
    return make_rule_set(
        id="meeples",
        features={"hasStations": False, "hasMeeples": True, "hasFerries": False, "hasShips": False},
        meepleConfig={"colors": list(colors), "majorityPoints": first, "secondPlacePoints": second},
    )


def make_player(name, color="red", player_id=None, **fields):
    player = PlayerRecord(name=name, color=color, **fields)
    if player_id is not None:
        player.id = player_id
    return player


@pytest.fixture()
def rule_set():
    return make_rule_set()


@pytest.fixture()
def bundled_registry():
    registry = RuleConfigRegistry()
    registry.load(BUNDLED_RULESETS.read_bytes())
    return registry


@pytest.fixture()
def roster():
    alice = make_player(
        "Alice",
        "red",
        player_id="p-alice",
        routes_claimed={6: 1, 3: 2},
        destination_tickets=[DestinationTicket(12, True, "Denver - El Paso"), DestinationTicket(8, False)],
        bonus_counts={"longest_route": 1},
    )
    bob = make_player(
        "Bob",
        "blue",
        player_id="p-bob",
        routes_claimed={4: 3},
        destination_tickets=[],
    )
    return [alice, bob]


@pytest.fixture()
def registry():
    registry = RuleConfigRegistry()
    registry.load(make_document(make_record(id="usa")))
    return registry
