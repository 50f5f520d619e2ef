"""Primer budget accumulator.

The mandatory block is measured as rendered; optional pieces are measured one
at a time and added on top. Both units are sub-additive over concatenation
(bytes exactly, tokens via ceil), so the sum of accepted costs is an upper
bound on the rendered document's size.
"""

from __future__ import annotations

import math

from projectlens.config.models import BudgetUnit


def measure(text: str, unit: BudgetUnit, chars_per_token: int = 4) -> int:
    """Size of *text* in *unit*.

    ``bytes`` is the UTF-8 length; ``tokens`` is ``ceil(chars / chars_per_token)``.

    Example:
        measure("abcde", "tokens")  # 2
        measure("é", "bytes")  # 2
    """
    if unit == "bytes":
        return len(text.encode("utf-8"))
    return math.ceil(len(text) / chars_per_token)


class BudgetAccumulator:
    """Cost-aware accumulator for whole-unit selection.

    Usage::

        acc = BudgetAccumulator(budget)
        acc.reserve(mandatory_cost)
        for key, cost in candidates:
            acc.try_add(key, cost)  # skipped when it does not fit

    Unlike a paginator there is no first-item allowance: an item either fits
    in the remaining budget or is rejected, and later smaller items may still
    fit after a rejection.
    """

    __slots__ = ("_budget", "_items", "_used", "_rejected")

    def __init__(self, budget: int) -> None:
        self._budget = budget
        self._items: list[str] = []
        self._used: int = 0
        self._rejected: int = 0

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def reserve(self, overhead: int) -> None:
        """Charge *overhead* unconditionally (mandatory content)."""
        self._used += overhead

    def fits(self, cost: int) -> bool:
        return self._used + cost <= self._budget

    def try_add(self, key: str, cost: int) -> bool:
        """Accept *key* at *cost* if it fits; otherwise count it as rejected."""
        if not self.fits(cost):
            self._rejected += 1
            return False
        self._items.append(key)
        self._used += cost
        return True

    @property
    def items(self) -> list[str]:
        """Accepted keys in acceptance order."""
        return self._items

    @property
    def used(self) -> int:
        return self._used

    @property
    def rejected(self) -> int:
        return self._rejected
