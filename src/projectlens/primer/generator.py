"""Budgeted primer generation.

A primer is a short digest an AI client can read first: the architecture
summary (mandatory), the hottest symbols, any blocking constraint
violations, and optionally the call-graph neighborhood of a focus symbol.
Every line is a whole unit; selection never truncates.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from projectlens.analysis.constraints import ConstraintEngine
from projectlens.analysis.hotpaths import HotpathAnalyzer
from projectlens.config.models import BudgetUnit, PrimerConfig, PrimerFormat, PrimerPreset
from projectlens.core.errors import ArgumentError
from projectlens.index.store import IndexSnapshot
from projectlens.primer.budget import measure
from projectlens.primer.models import (
    PRESETS,
    SECTION_ORDER,
    Candidate,
    PresetWeights,
    PrimerDocument,
)
from projectlens.primer.rendering import get_renderer, group_sections
from projectlens.primer.selection import Selector

log = structlog.get_logger(__name__)


class PrimerGenerator:
    def __init__(self, snapshot: IndexSnapshot, config: PrimerConfig | None = None) -> None:
        self._snapshot = snapshot
        self._index = snapshot.index
        self._graph = snapshot.graph
        self._config = config or PrimerConfig()

    def generate(
        self,
        budget: int,
        focus: str | None = None,
        *,
        format: PrimerFormat | None = None,
        preset: PrimerPreset | None = None,
        unit: BudgetUnit | None = None,
        max_symbols: int | None = None,
        sections: Sequence[str] | None = None,
        force_include: Sequence[str] = (),
    ) -> PrimerDocument:
        """Build a primer that fits in ``budget`` units.

        Args:
            sections: Optional sections eligible for selection. The
                architecture summary is always included.
            force_include: Section ids or item keys (``hotpaths:<symbol>``)
                taken before density ranking, each still only if it fits.
                Entries matching nothing are ignored.

        Raises:
            ArgumentError: budget or max_symbols is not positive, or a
                section name is unknown.
            NotFoundError: focus is not an indexed symbol.
            BudgetTooSmallError: the architecture summary alone does not fit.
        """
        if budget <= 0:
            raise ArgumentError.invalid("budget", "positive integer", f"got {budget}")
        if max_symbols is not None and max_symbols <= 0:
            raise ArgumentError.invalid("max_symbols", "positive integer", f"got {max_symbols}")
        eligible = set(SECTION_ORDER if sections is None else sections)
        unknown = sorted(eligible - set(SECTION_ORDER))
        if unknown:
            raise ArgumentError.invalid("sections", f"subset of {list(SECTION_ORDER)}", f"got {unknown}")

        fmt = format or self._config.default_format
        preset_name = preset or self._config.default_preset
        unit = unit or self._config.unit
        weights = PRESETS[preset_name]

        mandatory = self._architecture(weights)
        candidates = [
            *self._hotpaths(weights, max_symbols or self._config.max_hotpaths),
            *self._constraints(weights),
            *(self._focus(weights, focus) if focus is not None else []),
        ]
        candidates = [c for c in candidates if c.section in eligible]
        wanted = set(force_include)
        forced = [c for c in candidates if c.key in wanted or c.section in wanted]
        optional = [c for c in candidates if c.key not in wanted and c.section not in wanted]

        renderer = get_renderer(fmt)
        selector = Selector(renderer, unit, self._config.chars_per_token)
        selection = selector.select(budget, mandatory, optional, forced)

        groups = group_sections(selection.items)
        content = renderer.render(groups)
        used = measure(content, unit, self._config.chars_per_token)

        log.debug(
            "primer_generated",
            budget=budget,
            used=used,
            unit=unit,
            included=len(selection.items),
            excluded=selection.excluded,
        )
        return PrimerDocument(
            content=content,
            format=fmt,
            unit=unit,
            budget=budget,
            used=used,
            preset=preset_name,
            sections=[{"id": section, "items": len(items)} for section, items in groups],
            included=len(selection.items),
            excluded=selection.excluded,
        )

    # -----------------------------------------------------------------
    # Candidate sources
    # -----------------------------------------------------------------

    def _architecture(self, weights: PresetWeights) -> list[Candidate]:
        index = self._index
        languages = index.languages
        summary = f"{index.project or 'project'}: {len(index.files)} files, {len(index.symbols)} symbols"
        if languages:
            summary += f", languages: {', '.join(languages)}"
        items = [
            Candidate(
                section="architecture",
                key="architecture:",
                order=0,
                value=weights.for_section("architecture"),
                text=summary,
                data={
                    "project": index.project,
                    "files": len(index.files),
                    "symbols": len(index.symbols),
                    "languages": languages,
                },
            )
        ]
        for i, name in enumerate(sorted(index.domains), start=1):
            domain = index.domains[name]
            text = f"{name} ({len(domain.members)} files)"
            if domain.description:
                text += f": {domain.description}"
            items.append(
                Candidate(
                    section="architecture",
                    key=f"architecture:{name}",
                    order=i,
                    value=weights.for_section("architecture"),
                    text=text,
                    data={"domain": name, "files": len(domain.members), "description": domain.description},
                )
            )
        return items

    def _hotpaths(self, weights: PresetWeights, k: int) -> list[Candidate]:
        analyzer = HotpathAnalyzer(self._graph)
        return [
            Candidate(
                section="hotpaths",
                key=f"hotpaths:{symbol.id}",
                order=i,
                value=score * weights.for_section("hotpaths"),
                text=f"{symbol.id} [{symbol.kind}] in {symbol.file} (score {score:.3f})",
                data={"symbol": symbol.id, "kind": symbol.kind, "file": symbol.file, "score": round(score, 4)},
            )
            for i, (symbol, score) in enumerate(analyzer.top_symbols(k))
        ]

    def _constraints(self, weights: PresetWeights) -> list[Candidate]:
        items = []
        for result in ConstraintEngine(self._index).evaluate("all"):
            if not result.blocking_violation:
                continue
            c = result.constraint
            for v in result.violations:
                text = f"{c.id}: {v.source_file} -> {v.target_file}"
                if c.description:
                    text += f" ({c.description})"
                items.append(
                    Candidate(
                        section="constraints",
                        key=f"constraints:{c.id}:{v.source_file}->{v.target_file}",
                        order=len(items),
                        value=weights.for_section("constraints"),
                        text=text,
                        data={"constraint": c.id, "source_file": v.source_file, "target_file": v.target_file},
                    )
                )
        return items

    def _focus(self, weights: PresetWeights, focus: str) -> list[Candidate]:
        neighbors = self._graph.neighbors(focus, "both", self._config.focus_depth)
        symbol = self._index.symbols[focus]
        text = f"{symbol.id} in {symbol.file}"
        if symbol.signature:
            text += f": {symbol.signature}"
        items = [
            Candidate(
                section="focus",
                key=f"focus:{symbol.id}",
                order=0,
                value=2.0 * weights.for_section("focus"),
                text=text,
                data={"symbol": symbol.id, "file": symbol.file, "signature": symbol.signature, "distance": 0},
            )
        ]
        for i, n in enumerate(neighbors, start=1):
            items.append(
                Candidate(
                    section="focus",
                    key=f"focus:{n.id}",
                    order=i,
                    value=weights.for_section("focus") / n.distance,
                    text=f"{n.id} (distance {n.distance}{', external' if n.external else ''})",
                    data=n.to_dict(),
                )
            )
        return items
