"""Immutable index tables.

A ProjectIndex is built once per load and never mutated. Every derived view
(domain members, reverse maps, the call edges) is materialized by the store
at build time, so readers only ever do lookups.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from projectlens.index.schema import LockLevel, Severity

_EMPTY: Mapping[str, tuple[str, ...]] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class File:
    """One indexed source file."""

    path: str
    domain: str | None
    symbols: tuple[str, ...]
    imports: tuple[str, ...]
    lines: int = 0
    size: int = 0
    language: str | None = None
    layer: str | None = None
    lock: LockLevel | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "path": self.path,
            "domain": self.domain,
            "symbols": list(self.symbols),
            "imports": list(self.imports),
            "lines": self.lines,
            "size": self.size,
            "language": self.language,
            "layer": self.layer,
            "lock": self.lock,
        }


@dataclass(frozen=True, slots=True)
class Symbol:
    """A named definition. ``id`` is unique across the whole index."""

    id: str
    name: str
    kind: str
    file: str
    signature: str = ""
    callers: tuple[str, ...] = ()
    callees: tuple[str, ...] = ()
    weight: float = 1.0
    purpose: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "kind": self.kind,
            "file": self.file,
            "signature": self.signature,
            "weight": self.weight,
            "purpose": self.purpose,
        }


@dataclass(frozen=True, slots=True)
class Domain:
    """A named group of files. ``members`` mirrors File.domain."""

    name: str
    description: str
    members: tuple[str, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "description": self.description,
            "file_count": len(self.members),
        }


@dataclass(frozen=True, slots=True)
class Constraint:
    """A declarative dependency or lock rule.

    For ``domain_dependency`` rules source and target are domain names; for
    ``path_dependency`` they are globs; ``lock`` rules only use ``source``
    (a glob) and ``level``.
    """

    id: str
    kind: str
    source: str
    target: str | None
    severity: Severity
    description: str = ""
    level: LockLevel | None = None

    @property
    def blocking(self) -> bool:
        return self.severity == "blocking"

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "id": self.id,
            "kind": self.kind,
            "source": self.source,
            "target": self.target,
            "severity": self.severity,
            "description": self.description,
        }
        if self.level is not None:
            data["level"] = self.level
        return data


@dataclass(frozen=True, slots=True)
class Variable:
    name: str
    value: str
    source: str | None = None
    description: str = ""


@dataclass(frozen=True)
class ProjectIndex:
    """Root aggregate. Tables keep document order; equality compares contents."""

    version: str
    generated_at: str | None
    project: str | None
    files: Mapping[str, File]
    symbols: Mapping[str, Symbol]
    domains: Mapping[str, Domain]
    constraints: Mapping[str, Constraint]
    variables: Mapping[str, Variable]
    # Reverse maps
    imported_by: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: _EMPTY)
    calls: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: _EMPTY)
    callers_of: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: _EMPTY)
    external_symbols: frozenset[str] = frozenset()
    external_imports: frozenset[str] = frozenset()

    @property
    def languages(self) -> list[str]:
        return sorted({f.language for f in self.files.values() if f.language})

    @property
    def total_lines(self) -> int:
        return sum(f.lines for f in self.files.values())
