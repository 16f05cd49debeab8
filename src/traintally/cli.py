"""Command line entry-point: list rule sets and score a saved roster."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from traintally.config import Settings, read_rulesets_bytes
from traintally.errors import TallyError
from traintally.leaderboard import majority_frame, scores_frame
from traintally.rulesets import RuleConfigRegistry
from traintally.scoring import rank
from traintally.storage import decode_roster

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    settings = Settings.from_env()
    parser = argparse.ArgumentParser(description="Final scoring for Ticket to Ride sessions")
    parser.add_argument("--rules", type=Path, default=settings.rulesets_path, help="Rule-set document (JSON)")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("versions", help="List the available rule sets")

    score = subparsers.add_parser("score", help="Rank the players of a saved roster")
    score.add_argument("roster", type=Path, help="Roster file (JSON list of players)")
    score.add_argument("--version", dest="version_id", default=settings.default_version_id, help="Rule set id")
    score.add_argument("--csv", type=Path, default=None, help="Write the ranked scores to this CSV file")
    return parser.parse_args(argv)


def _print_versions(registry: RuleConfigRegistry) -> None:
    for rule_set in registry.list_all():
        lengths = ", ".join(f"{length}:{points}" for length, points in rule_set.sorted_route_scoring)
        print(f"{rule_set.id:<12} {rule_set.display_name} ({rule_set.min_players}-{rule_set.max_players} players)")
        print(f"{'':<12} routes {lengths}")


def _print_scores(registry: RuleConfigRegistry, roster_path: Path, version_id: str, csv_path: Optional[Path]) -> None:
    rule_set = registry.get_by_id(version_id)
    roster = decode_roster(roster_path.read_bytes())
    ranked = rank(rule_set, roster)

    print("=" * 70)
    print(f" {rule_set.display_name.upper()} - FINAL SCORES")
    print("=" * 70)
    frame = scores_frame(ranked)
    print(frame.to_string(index=False) if not frame.empty else "(no players)")

    placements = majority_frame(ranked)
    if not placements.empty:
        print()
        print(placements.to_string(index=False))

    if ranked:
        print()
        print(f"Winner: {ranked[0].player.name} ({ranked[0].total} points)")

    if csv_path is not None:
        frame.to_csv(csv_path, index=False)
        logger.info("Scores written to %s", csv_path)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.WARNING))

    registry = RuleConfigRegistry()
    try:
        registry.load(read_rulesets_bytes(args.rules))
        if args.command == "versions":
            _print_versions(registry)
        else:
            _print_scores(registry, args.roster, args.version_id, args.csv)
    except (TallyError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
