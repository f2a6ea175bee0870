"""Verifier configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class VerifierConfig:
    """Tuning knobs for a verification run."""

    # Ignore braces that sit inside string/char literals when matching
    # blocks.  False restores plain character scanning.
    literal_aware_braces: bool = True
    source_suffix: str = ".sjava"
    enforce_suffix: bool = True
    encoding: str = "utf-8"

    def validate(self) -> List[str]:
        """Return a list of problems (empty if the config is usable)."""
        problems: List[str] = []
        if self.enforce_suffix and not self.source_suffix.startswith("."):
            problems.append("source_suffix must start with '.'")
        if not self.encoding:
            problems.append("encoding must not be empty")
        return problems
