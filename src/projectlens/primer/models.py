"""Primer data types: candidate items, weight presets, and the result document."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from projectlens.config.models import BudgetUnit, PrimerFormat, PrimerPreset

SectionId = Literal["architecture", "hotpaths", "constraints", "focus"]

# Render order. Architecture is mandatory and always first.
SECTION_ORDER: tuple[SectionId, ...] = ("architecture", "hotpaths", "constraints", "focus")

SECTION_TITLES: dict[SectionId, str] = {
    "architecture": "Architecture",
    "hotpaths": "Hotpaths",
    "constraints": "Blocking constraint violations",
    "focus": "Focus",
}


@dataclass(frozen=True, slots=True)
class PresetWeights:
    """Multipliers for each value dimension.

    ``safety`` scales constraint items, ``efficiency`` hotpaths, ``accuracy``
    the focus neighborhood and ``base`` the architecture summary.
    """

    safety: float
    efficiency: float
    accuracy: float
    base: float

    def for_section(self, section: SectionId) -> float:
        return {
            "architecture": self.base,
            "hotpaths": self.efficiency,
            "constraints": self.safety,
            "focus": self.accuracy,
        }[section]


PRESETS: dict[PrimerPreset, PresetWeights] = {
    "safe": PresetWeights(safety=2.5, efficiency=0.8, accuracy=1.0, base=0.8),
    "efficient": PresetWeights(safety=1.2, efficiency=2.0, accuracy=0.9, base=0.8),
    "accurate": PresetWeights(safety=1.2, efficiency=0.9, accuracy=2.0, base=0.8),
    "balanced": PresetWeights(safety=1.5, efficiency=1.0, accuracy=1.0, base=1.0),
}


@dataclass(frozen=True, slots=True)
class Candidate:
    """One whole, indivisible primer line.

    ``text`` is the markdown/compact line and ``data`` the JSON form.
    ``order`` is the item's position within its section when rendered.
    """

    section: SectionId
    key: str
    order: int
    value: float
    text: str
    data: dict[str, Any]


@dataclass(frozen=True, slots=True)
class Selection:
    """Outcome of greedy selection, before rendering."""

    items: tuple[Candidate, ...]
    excluded: int


@dataclass
class PrimerDocument:
    content: str
    format: PrimerFormat
    unit: BudgetUnit
    budget: int
    used: int
    preset: PrimerPreset
    sections: list[dict[str, Any]] = field(default_factory=list)
    included: int = 0
    excluded: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": self.content,
            "format": self.format,
            "unit": self.unit,
            "budget": self.budget,
            "used": self.used,
            "preset": self.preset,
            "sections": self.sections,
            "included": self.included,
            "excluded": self.excluded,
        }
