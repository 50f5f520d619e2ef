"""Primer renderers.

Each renderer exposes the text pieces the selector charges for optional
items: a fixed ``base``, a ``header`` per opened section (including the
separator that joins it to the previous one), and one ``item`` piece per
line. ``render`` only ever concatenates those pieces, dropping separators
at most, so adding pieces to an already rendered block never grows it by
more than their charged size.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from itertools import groupby

from projectlens.config.models import PrimerFormat
from projectlens.primer.models import SECTION_ORDER, SECTION_TITLES, Candidate, SectionId

Group = tuple[SectionId, Sequence[Candidate]]

_JSON_SEPARATORS = (",", ":")

_SECTION_RANK = {section: i for i, section in enumerate(SECTION_ORDER)}


def group_sections(items: Iterable[Candidate]) -> list[Group]:
    """Items grouped by section, in render order."""
    ordered = sorted(items, key=lambda c: (_SECTION_RANK[c.section], c.order))
    return [(section, list(group)) for section, group in groupby(ordered, key=lambda c: c.section)]


class Renderer:
    def base(self) -> str:
        return ""

    def header(self, section: SectionId) -> str:
        raise NotImplementedError

    def item(self, candidate: Candidate) -> str:
        raise NotImplementedError

    def render(self, groups: Sequence[Group]) -> str:
        raise NotImplementedError


class MarkdownRenderer(Renderer):
    def header(self, section: SectionId) -> str:
        return f"\n## {SECTION_TITLES[section]}\n"

    def item(self, candidate: Candidate) -> str:
        return f"- {candidate.text}\n"

    def render(self, groups: Sequence[Group]) -> str:
        blocks = [
            f"## {SECTION_TITLES[section]}\n" + "".join(self.item(c) for c in items)
            for section, items in groups
        ]
        return "\n".join(blocks)


class CompactRenderer(Renderer):
    def header(self, section: SectionId) -> str:
        return f" | {SECTION_TITLES[section].upper()}: "

    def item(self, candidate: Candidate) -> str:
        return f"{candidate.text}; "

    def render(self, groups: Sequence[Group]) -> str:
        blocks = [
            f"{SECTION_TITLES[section].upper()}: " + "; ".join(c.text for c in items)
            for section, items in groups
        ]
        return " | ".join(blocks)


class JsonRenderer(Renderer):
    def base(self) -> str:
        return "[]"

    def header(self, section: SectionId) -> str:
        return _dumps({"section": section, "items": []}) + ","

    def item(self, candidate: Candidate) -> str:
        return _dumps(candidate.data) + ","

    def render(self, groups: Sequence[Group]) -> str:
        return _dumps([{"section": section, "items": [c.data for c in items]} for section, items in groups])


def _dumps(value: object) -> str:
    return json.dumps(value, separators=_JSON_SEPARATORS)


_RENDERERS: dict[PrimerFormat, type[Renderer]] = {
    "markdown": MarkdownRenderer,
    "compact": CompactRenderer,
    "json": JsonRenderer,
}


def get_renderer(fmt: PrimerFormat) -> Renderer:
    return _RENDERERS[fmt]()
