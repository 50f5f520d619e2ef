"""Hotpath ranking: symbols and files ordered by call-graph criticality."""

from __future__ import annotations

from dataclasses import dataclass

from projectlens.core.errors import ArgumentError, NotFoundError
from projectlens.index.graph import SymbolGraph
from projectlens.index.models import File, Symbol


@dataclass(frozen=True, slots=True)
class Scope:
    """A resolved ``scope`` argument: a domain or a single file."""

    kind: str  # "domain" | "file"
    name: str
    files: frozenset[str]

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "name": self.name}


class HotpathAnalyzer:
    """Ranks symbols by ``graph.score(id) * symbol.weight``.

    Ordering is score descending, then identifier ascending.
    """

    def __init__(self, graph: SymbolGraph) -> None:
        self._graph = graph
        self._index = graph.index

    def resolve_scope(self, scope: str) -> Scope:
        """Resolve ``domain:<name>``, ``file:<path>``, or a bare name.

        A bare name is tried as a domain first, then as a file.

        Raises:
            NotFoundError: Nothing matches.
        """
        kind, sep, name = scope.partition(":")
        if sep and kind in ("domain", "file"):
            candidates = [kind]
        else:
            kind, name = "", scope
            candidates = ["domain", "file"]
        for candidate in candidates:
            if candidate == "domain" and name in self._index.domains:
                return Scope("domain", name, frozenset(self._index.domains[name].members))
            if candidate == "file" and name in self._index.files:
                return Scope("file", name, frozenset([name]))
        raise NotFoundError.missing(kind or "scope", name)

    def score(self, symbol: Symbol) -> float:
        return self._graph.score(symbol.id) * symbol.weight

    def top_symbols(self, n: int, scope: str | None = None) -> list[tuple[Symbol, float]]:
        """Top ``n`` symbols, optionally restricted to a domain or file.

        ``n`` beyond the population returns the whole population.

        Raises:
            ArgumentError: n is not positive.
            NotFoundError: scope does not resolve.
        """
        if n <= 0:
            raise ArgumentError.invalid("n", "positive integer", f"got {n}")
        files = self.resolve_scope(scope).files if scope is not None else None
        ranked = [
            (symbol, self.score(symbol))
            for symbol in self._index.symbols.values()
            if files is None or symbol.file in files
        ]
        ranked.sort(key=lambda pair: (-pair[1], pair[0].id))
        return ranked[:n]

    def top_files(self, n: int, scope: str | None = None) -> list[tuple[File, float]]:
        """Top ``n`` files by the sum of their symbols' scores, ties by path."""
        if n <= 0:
            raise ArgumentError.invalid("n", "positive integer", f"got {n}")
        files = self.resolve_scope(scope).files if scope is not None else None
        ranked = []
        for file in self._index.files.values():
            if files is not None and file.path not in files:
                continue
            total = sum(self.score(self._index.symbols[sid]) for sid in file.symbols)
            ranked.append((file, total))
        ranked.sort(key=lambda pair: (-pair[1], pair[0].path))
        return ranked[:n]
