"""Planner configuration loader."""

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Self

from .constants import DEFAULT_RESTARTS
from .models import GeneratorPreferences


@dataclass
class PlannerConfig:
    """Generator settings, optionally read from a JSON file.

    Example file:

        {
          "restarts": 40,
          "seed": 7,
          "preferences": {"preferredShift": "morning", "maxGapMinutes": 60}
        }
    """

    restarts: int = DEFAULT_RESTARTS
    seed: int | None = None
    preferences: GeneratorPreferences = field(default_factory=GeneratorPreferences)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        restarts = data.get("restarts", DEFAULT_RESTARTS)
        seed = data.get("seed")
        return cls(
            restarts=int(restarts) if restarts is not None else DEFAULT_RESTARTS,
            seed=int(seed) if seed is not None else None,
            preferences=GeneratorPreferences.from_dict(data.get("preferences", {})),
        )

    @classmethod
    def load(cls, path: Path | None = None) -> Self:
        """Load configuration from JSON; defaults when the file is absent."""
        if path is None or not Path(path).exists():
            return cls()
        with open(path, encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    def with_overrides(self, **preferences: Any) -> Self:
        """Return a copy with preference fields replaced; None values are ignored."""
        changes = {k: v for k, v in preferences.items() if v is not None}
        return replace(self, preferences=replace(self.preferences, **changes))

    def to_dict(self) -> dict[str, Any]:
        return {
            "restarts": self.restarts,
            "seed": self.seed,
            "preferences": self.preferences.to_dict(),
        }
