"""Field patterns for filtered policy loads."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Filter:
    """Per-section field patterns for a filtered load.

    A non-empty pattern at position *i* requires an exact match on field
    *i*; empty patterns match anything.

    Example:
        Filter(p=["", "domain1"], g=["", "", "domain1"])
    """

    p: list[str] = field(default_factory=list)
    g: list[str] = field(default_factory=list)

    @classmethod
    def coerce(cls, value: Any) -> Filter:
        """Accept a :class:`Filter`, ``None``, or pycasbin's ``Filter`` (``P``/``G``)."""
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        return cls(
            p=list(getattr(value, "P", None) or getattr(value, "p", None) or []),
            g=list(getattr(value, "G", None) or getattr(value, "g", None) or []),
        )

    def patterns_for(self, sec: str) -> list[str]:
        return self.p if sec == "p" else self.g

    def excludes(self, sec: str, fields: list[str]) -> bool:
        """Return ``True`` if the rule must be skipped by a filtered load."""
        for index, pattern in enumerate(self.patterns_for(sec)):
            if not pattern:
                continue
            if index >= len(fields) or fields[index] != pattern:
                return True
        return False
