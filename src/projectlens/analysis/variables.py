"""Variable expansion.

Values may reference other variables as ``$name`` or ``${name}``; ``$$`` is a
literal dollar sign and a ``$`` not followed by a name is left alone.
Resolution walks references depth-first while tracking the current path, so a
cycle is reported instead of recursing forever. The variable table is never
modified.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from projectlens.core.errors import CycleError, ResolutionDepthError, UndefinedVariableError
from projectlens.index.models import ProjectIndex

_REFERENCE = re.compile(r"\$(?:(\$)|\{([^}]+)\}|([A-Za-z_][A-Za-z0-9_]*))")


@dataclass(frozen=True, slots=True)
class Resolution:
    """Final literal value plus every variable consulted, in first-visit order."""

    name: str
    value: str
    chain: tuple[str, ...]


class VariableResolver:
    def __init__(self, index: ProjectIndex, max_depth: int = 32) -> None:
        self._index = index
        self._variables = index.variables
        self._max_depth = max_depth

    def resolve(self, name: str) -> Resolution:
        """Fully substitute ``name``.

        Raises:
            UndefinedVariableError: name, or anything it references, is undefined.
            CycleError: references loop back onto the current path.
            ResolutionDepthError: nesting exceeds the configured depth.
        """
        chain: list[str] = []
        done: dict[str, str] = {}
        value = self._resolve(name, [], chain, done, referenced_by=None)
        return Resolution(name=name, value=value, chain=tuple(chain))

    def _resolve(
        self,
        name: str,
        path: list[str],
        chain: list[str],
        done: dict[str, str],
        referenced_by: str | None,
    ) -> str:
        if name in done:
            return done[name]
        if name in path:
            raise CycleError.through(path[path.index(name) :])
        if len(path) >= self._max_depth:
            raise ResolutionDepthError.exceeded(path[0], self._max_depth)
        variable = self._variables.get(name)
        if variable is None:
            raise UndefinedVariableError.named(name, referenced_by)

        chain.append(name)
        path.append(name)

        def substitute(match: re.Match[str]) -> str:
            if match.group(1):
                return "$"
            ref = match.group(2) or match.group(3)
            return self._resolve(ref, path, chain, done, referenced_by=name)

        try:
            value = _REFERENCE.sub(substitute, variable.value)
        finally:
            path.pop()
        done[name] = value
        return value

    def references(self, name: str) -> list[str]:
        """Names referenced directly by ``name``'s raw value."""
        variable = self._variables.get(name)
        if variable is None:
            raise UndefinedVariableError.named(name)
        refs = []
        for match in _REFERENCE.finditer(variable.value):
            ref = match.group(2) or match.group(3)
            if ref and ref not in refs:
                refs.append(ref)
        return refs

    def refers_to(self, value: str) -> dict[str, str] | None:
        """Which indexed entity, if any, a resolved value names."""
        if value in self._index.symbols:
            return {"kind": "symbol", "key": value}
        if value in self._index.files:
            return {"kind": "file", "key": value}
        if value in self._index.domains:
            return {"kind": "domain", "key": value}
        return None
