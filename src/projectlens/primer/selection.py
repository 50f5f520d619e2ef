"""Greedy selection of primer items by value density."""

from __future__ import annotations

from collections.abc import Sequence

from projectlens.config.models import BudgetUnit
from projectlens.core.errors import BudgetTooSmallError
from projectlens.primer.budget import BudgetAccumulator, measure
from projectlens.primer.models import Candidate, SectionId, Selection
from projectlens.primer.rendering import Renderer, group_sections


class Selector:
    """Charges candidates in a budget unit and picks the densest that fit."""

    def __init__(self, renderer: Renderer, unit: BudgetUnit, chars_per_token: int = 4) -> None:
        self._renderer = renderer
        self._unit = unit
        self._chars_per_token = chars_per_token

    def cost(self, piece: str) -> int:
        return measure(piece, self._unit, self._chars_per_token)

    def item_cost(self, candidate: Candidate) -> int:
        return self.cost(self._renderer.item(candidate))

    def header_cost(self, section: SectionId) -> int:
        return self.cost(self._renderer.header(section))

    def required(self, mandatory: Sequence[Candidate]) -> int:
        """Size of the mandatory items rendered on their own."""
        return self.cost(self._renderer.render(group_sections(mandatory)))

    def select(
        self,
        budget: int,
        mandatory: Sequence[Candidate],
        optional: Sequence[Candidate],
        forced: Sequence[Candidate] = (),
    ) -> Selection:
        """Take all mandatory items, then forced ones in order, then optional ones by density.

        Optional ordering is value/cost descending, then value descending,
        then key. Any item that does not fit (with its section header, if the
        section is not open yet) is skipped and the next one is tried.

        Raises:
            BudgetTooSmallError: The mandatory items alone exceed the budget.
        """
        required = self.required(mandatory)
        if required > budget:
            raise BudgetTooSmallError.for_budget(budget, required, self._unit)

        acc = BudgetAccumulator(budget)
        acc.reserve(required)
        opened: set[SectionId] = {c.section for c in mandatory}
        chosen: list[Candidate] = list(mandatory)

        def offer(candidate: Candidate, cost: int) -> None:
            if candidate.section not in opened:
                cost += self.header_cost(candidate.section)
            if acc.try_add(candidate.key, cost):
                chosen.append(candidate)
                opened.add(candidate.section)

        for candidate in forced:
            offer(candidate, self.item_cost(candidate))

        costs = {c.key: self.item_cost(c) for c in optional}
        for candidate in sorted(optional, key=lambda c: (-c.value / costs[c.key], -c.value, c.key)):
            offer(candidate, costs[candidate.key])
        return Selection(items=tuple(chosen), excluded=acc.rejected)
