"""
Common constants for Train Tally scoring.

This module defines the reserved identifiers and labels shared across
the rule-set loader, the score engine and the majority resolver.
"""
from __future__ import annotations

# Rule set used when the caller does not pick one
DEFAULT_VERSION_ID: str = "usa"

# Bonus id that older rule-set documents use to carry the station payout
STATION_BONUS_ID: str = "unused_stations"

# Reported when a rule set has no route payouts at all
DEFAULT_MAX_ROUTE_LENGTH: int = 6

# Majority placement labels
FIRST_PLACE: str = "1st"
TIED_FIRST_PLACE: str = "Tied 1st"
SECOND_PLACE: str = "2nd"
TIED_SECOND_PLACE: str = "Tied 2nd"

# Keys of the display breakdown, in presentation order
BREAKDOWN_LABELS: tuple[str, ...] = (
    "Routes",
    "Destination Tickets",
    "Bonuses",
    "Stations",
    "Meeples",
    "Total",
)
