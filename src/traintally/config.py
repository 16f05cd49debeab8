"""
Runtime settings and access to the bundled rule-set document.

Settings come from the environment:
- TRAINTALLY_RULESETS: path of a rule-set document replacing the bundled one
- TRAINTALLY_DEFAULT_VERSION: rule set used when none is given
- TRAINTALLY_LOG_LEVEL: logging level of the command line tool
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from traintally.constants import DEFAULT_VERSION_ID
from traintally.rulesets import RuleConfigRegistry, RuleSet, default_registry

DATA_DIR = Path(__file__).parent / "data"
BUNDLED_RULESETS = DATA_DIR / "game-versions.json"


@dataclass(frozen=True)
class Settings:
    rulesets_path: Path = BUNDLED_RULESETS
    default_version_id: str = DEFAULT_VERSION_ID
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "Settings":
        rulesets = os.environ.get("TRAINTALLY_RULESETS")
        return cls(
            rulesets_path=Path(rulesets) if rulesets else BUNDLED_RULESETS,
            default_version_id=os.environ.get("TRAINTALLY_DEFAULT_VERSION", DEFAULT_VERSION_ID),
            log_level=os.environ.get("TRAINTALLY_LOG_LEVEL", "WARNING").upper(),
        )


def read_rulesets_bytes(path: Path | str | None = None) -> bytes:
    """Read a rule-set document; defaults to the configured one."""
    if path is None:
        path = Settings.from_env().rulesets_path
    return Path(path).read_bytes()


def load_bundled_rulesets(
    path: Path | str | None = None,
    registry: Optional[RuleConfigRegistry] = None,
) -> List[RuleSet]:
    """Load the configured rule-set document into ``registry`` (default: process-wide)."""
    registry = registry or default_registry()
    return registry.load(read_rulesets_bytes(path))
