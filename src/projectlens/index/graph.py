"""Caller to callee digraph over symbol ids.

Edges come from the union of every symbol's ``callers`` and ``callees``
lists. Ids that do not name an indexed symbol are external sink nodes: they
are reported by traversals but never expanded.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Literal

from projectlens.core.errors import ArgumentError, NotFoundError
from projectlens.index.models import ProjectIndex

Direction = Literal["callers", "callees", "both"]


@dataclass(frozen=True, slots=True)
class Neighbor:
    """A node reached by a traversal, at its minimal distance."""

    id: str
    distance: int
    external: bool

    def to_dict(self) -> dict[str, object]:
        return {"id": self.id, "distance": self.distance, "external": self.external}


class SymbolGraph:
    """Read-only view of the call edges of one ProjectIndex."""

    def __init__(
        self,
        index: ProjectIndex,
        *,
        fan_in_weight: float = 0.7,
        fan_out_weight: float = 0.3,
    ) -> None:
        self._index = index
        self._fan_in_weight = fan_in_weight
        self._fan_out_weight = fan_out_weight
        self._max_fan_in = max((self.fan_in(s) for s in index.symbols), default=0)
        self._max_fan_out = max((self.fan_out(s) for s in index.symbols), default=0)

    @property
    def index(self) -> ProjectIndex:
        return self._index

    def is_external(self, symbol_id: str) -> bool:
        return symbol_id not in self._index.symbols

    def callers(self, symbol_id: str) -> tuple[str, ...]:
        return self._index.callers_of.get(symbol_id, ())

    def callees(self, symbol_id: str) -> tuple[str, ...]:
        return self._index.calls.get(symbol_id, ())

    def fan_in(self, symbol_id: str) -> int:
        return len(self.callers(symbol_id))

    def fan_out(self, symbol_id: str) -> int:
        return len(self.callees(symbol_id))

    def neighbors(
        self,
        symbol_id: str,
        direction: Direction = "both",
        depth: int = 1,
    ) -> list[Neighbor]:
        """Symbols reachable within ``depth`` hops, sorted by (distance, id).

        The start symbol itself is never reported, even when a cycle leads
        back to it.

        Raises:
            ArgumentError: depth is not positive or direction is unknown.
            NotFoundError: symbol_id is not an indexed symbol.
        """
        if depth <= 0:
            raise ArgumentError.invalid("depth", "positive integer", f"got {depth}")
        if direction not in ("callers", "callees", "both"):
            raise ArgumentError.invalid(
                "direction", "one of callers, callees, both", f"got {direction!r}"
            )
        if symbol_id not in self._index.symbols:
            raise NotFoundError.missing("symbol", symbol_id)

        visited: dict[str, int] = {symbol_id: 0}
        queue: deque[str] = deque([symbol_id])
        while queue:
            current = queue.popleft()
            distance = visited[current]
            if distance >= depth or (current != symbol_id and self.is_external(current)):
                continue
            for nxt in self._step(current, direction):
                if nxt not in visited:
                    visited[nxt] = distance + 1
                    queue.append(nxt)

        del visited[symbol_id]
        found = [Neighbor(id=n, distance=d, external=self.is_external(n)) for n, d in visited.items()]
        found.sort(key=lambda n: (n.distance, n.id))
        return found

    def _step(self, symbol_id: str, direction: Direction) -> tuple[str, ...]:
        if direction == "callers":
            return self.callers(symbol_id)
        if direction == "callees":
            return self.callees(symbol_id)
        return self.callers(symbol_id) + self.callees(symbol_id)

    def score(self, symbol_id: str) -> float:
        """Normalized centrality: fan-in and fan-out scaled by the configured weights."""
        score = 0.0
        if self._max_fan_in:
            score += self.fan_in(symbol_id) / self._max_fan_in * self._fan_in_weight
        if self._max_fan_out:
            score += self.fan_out(symbol_id) / self._max_fan_out * self._fan_out_weight
        return score
