"""Index loading and the swappable snapshot.

``parse_index`` is pure: document bytes in, ProjectIndex out. ``IndexStore``
owns the single current-snapshot reference. Readers grab ``store.snapshot``
once and work on that object; reload builds the replacement entirely off to
the side and swaps the reference under a lock, so no reader ever sees a mix
of old and new tables.
"""

from __future__ import annotations

import json
import threading
import time
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any

import structlog
from pydantic import TypeAdapter, ValidationError

from projectlens.config.constants import SUPPORTED_SCHEMA_MAJOR
from projectlens.config.models import AnalysisConfig
from projectlens.core.errors import (
    DuplicateKeyError,
    IndexFileNotFoundError,
    IndexNotLoadedError,
    SchemaError,
)
from projectlens.index.graph import SymbolGraph
from projectlens.index.models import (
    Constraint,
    Domain,
    File,
    ProjectIndex,
    Symbol,
    Variable,
)
from projectlens.index.schema import IndexDoc, VariableDoc, VariableValueDoc

log = structlog.get_logger(__name__)

RawDocument = bytes | str | Mapping[str, Any]

_VARIABLES_ADAPTER: TypeAdapter[dict[str, str | VariableValueDoc]] = TypeAdapter(
    dict[str, str | VariableValueDoc]
)


# =============================================================================
# Decoding
# =============================================================================


def _reject_duplicate_members(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in pairs:
        if key in result:
            raise DuplicateKeyError.for_key("document", key)
        result[key] = value
    return result


def _decode(data: RawDocument, section: str) -> Any:
    if isinstance(data, Mapping):
        return data
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SchemaError.invalid(section, f"not UTF-8: {e}") from e
    try:
        return json.loads(data, object_pairs_hook=_reject_duplicate_members)
    except json.JSONDecodeError as e:
        raise SchemaError.invalid(section, f"invalid JSON: {e}") from e


def _schema_error(e: ValidationError, section: str) -> SchemaError:
    err = e.errors()[0]
    loc = [str(part) for part in err["loc"]]
    if loc:
        section = loc[0]
    field = ".".join(loc[1:])
    if len(loc) == 1 and err["type"] == "extra_forbidden":
        reason = "unknown section"
    elif len(loc) == 1 and err["type"] == "missing":
        reason = "required section is missing"
    elif field:
        reason = f"{field}: {err['msg']}"
    else:
        reason = err["msg"]
    return SchemaError.invalid(section, reason)


def parse_variables(data: RawDocument) -> dict[str, Variable]:
    """Parse a variables document.

    Accepts ``{"variables": {...}}`` or a bare mapping. Values are strings or
    ``{"value": ..., "description": ...}`` objects.
    """
    raw = _decode(data, "variables")
    if isinstance(raw, Mapping) and set(raw) == {"variables"} and isinstance(raw["variables"], Mapping):
        raw = raw["variables"]
    try:
        entries = _VARIABLES_ADAPTER.validate_python(raw)
    except ValidationError as e:
        err = e.errors()[0]
        where = ".".join(str(part) for part in err["loc"])
        raise SchemaError.invalid("variables", f"{where}: {err['msg']}" if where else err["msg"]) from e
    return {name: _variable(name, entry) for name, entry in entries.items()}


def _variable(name: str, entry: str | VariableValueDoc | VariableDoc) -> Variable:
    if isinstance(entry, str):
        return Variable(name=name, value=entry)
    return Variable(name=name, value=entry.value, source=entry.source, description=entry.description)


def parse_index(data: RawDocument, variables: RawDocument | None = None) -> ProjectIndex:
    """Parse and validate an index document into immutable tables.

    Args:
        data: Index document (JSON bytes/str, or an already-decoded mapping).
        variables: Optional variables document merged over the index's own
            variables section.

    Raises:
        SchemaError: Malformed document, unsupported version, unknown or
            missing section, or a dangling reference.
        DuplicateKeyError: A unique key (or JSON object member) repeats.
    """
    raw = _decode(data, "document")
    try:
        doc = IndexDoc.model_validate(raw)
    except ValidationError as e:
        raise _schema_error(e, "document") from e
    extra = parse_variables(variables) if variables is not None else None
    return build_index(doc, extra)


# =============================================================================
# Building
# =============================================================================


def _check_version(version: str | int) -> str:
    text = str(version).strip()
    major = text.split(".", 1)[0]
    if major != str(SUPPORTED_SCHEMA_MAJOR):
        raise SchemaError.unsupported_version(text, f"{SUPPORTED_SCHEMA_MAJOR}.x")
    return text


def _frozen(mapping: dict[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(mapping)


def build_index(doc: IndexDoc, extra_variables: Mapping[str, Variable] | None = None) -> ProjectIndex:
    version = _check_version(doc.meta.version)

    file_docs = {}
    for f in doc.files:
        if f.path in file_docs:
            raise DuplicateKeyError.for_key("files", f.path)
        file_docs[f.path] = f

    symbol_docs = {}
    for s in doc.symbols:
        if s.id in symbol_docs:
            raise DuplicateKeyError.for_key("symbols", s.id)
        if s.file not in file_docs:
            raise SchemaError.invalid("symbols", f"symbol '{s.id}' references unknown file '{s.file}'")
        symbol_docs[s.id] = s

    # File -> owned symbol ids, file-declared order first
    owned: dict[str, dict[str, None]] = {path: {} for path in file_docs}
    for f in doc.files:
        for sid in f.symbols:
            sym = symbol_docs.get(sid)
            if sym is None:
                raise SchemaError.invalid("files", f"file '{f.path}' references unknown symbol '{sid}'")
            if sym.file != f.path:
                raise SchemaError.invalid(
                    "files", f"symbol '{sid}' is listed by '{f.path}' but defined in '{sym.file}'"
                )
            owned[f.path][sid] = None
    for s in doc.symbols:
        owned[s.file][s.id] = None

    files: dict[str, File] = {}
    imported_by: dict[str, list[str]] = {}
    external_imports: set[str] = set()
    members: dict[str, list[str]] = {}
    for path, f in file_docs.items():
        imports = tuple(dict.fromkeys(i for i in f.imports if i != path))
        files[path] = File(
            path=path,
            domain=f.domain,
            symbols=tuple(owned[path]),
            imports=imports,
            lines=f.lines,
            size=f.size,
            language=f.language,
            layer=f.layer,
            lock=f.lock,
        )
        for target in imports:
            if target in file_docs:
                imported_by.setdefault(target, []).append(path)
            else:
                external_imports.add(target)
        if f.domain:
            members.setdefault(f.domain, []).append(path)

    domains: dict[str, Domain] = {}
    for d in doc.domains:
        if d.name in domains:
            raise DuplicateKeyError.for_key("domains", d.name)
        domains[d.name] = Domain(d.name, d.description, tuple(members.get(d.name, ())))
    for name, paths in members.items():
        if name not in domains:
            domains[name] = Domain(name, "", tuple(paths))

    symbols: dict[str, Symbol] = {}
    edges: set[tuple[str, str]] = set()
    for sid, s in symbol_docs.items():
        callers = tuple(dict.fromkeys(s.callers))
        callees = tuple(dict.fromkeys(s.callees))
        symbols[sid] = Symbol(
            id=sid,
            name=s.name or sid.rsplit(".", 1)[-1],
            kind=s.kind,
            file=s.file,
            signature=s.signature,
            callers=callers,
            callees=callees,
            weight=s.weight,
            purpose=s.purpose,
        )
        edges.update((sid, callee) for callee in callees)
        edges.update((caller, sid) for caller in callers)

    calls: dict[str, list[str]] = {}
    callers_of: dict[str, list[str]] = {}
    for src, dst in sorted(edges):
        calls.setdefault(src, []).append(dst)
        callers_of.setdefault(dst, []).append(src)
    external_symbols = {n for edge in edges for n in edge if n not in symbols}

    constraints: dict[str, Constraint] = {}
    for c in doc.constraints:
        if c.id in constraints:
            raise DuplicateKeyError.for_key("constraints", c.id)
        constraints[c.id] = Constraint(
            id=c.id,
            kind=c.kind,
            source=c.source,
            target=c.target,
            severity=c.severity,
            description=c.description,
            level=c.level,
        )

    variables = _index_variables(doc)
    for name, var in (extra_variables or {}).items():
        if name in variables:
            log.info("variable_overridden", name=name, source=var.source)
        variables[name] = var

    return ProjectIndex(
        version=version,
        generated_at=doc.meta.generated_at,
        project=doc.meta.project,
        files=_frozen(files),
        symbols=_frozen(symbols),
        domains=_frozen(domains),
        constraints=_frozen(constraints),
        variables=_frozen(variables),
        imported_by=_frozen({k: tuple(v) for k, v in imported_by.items()}),
        calls=_frozen({k: tuple(v) for k, v in calls.items()}),
        callers_of=_frozen({k: tuple(v) for k, v in callers_of.items()}),
        external_symbols=frozenset(external_symbols),
        external_imports=frozenset(external_imports),
    )


def _index_variables(doc: IndexDoc) -> dict[str, Variable]:
    if isinstance(doc.variables, dict):
        return {name: _variable(name, entry) for name, entry in doc.variables.items()}
    variables: dict[str, Variable] = {}
    for v in doc.variables:
        if v.name in variables:
            raise DuplicateKeyError.for_key("variables", v.name)
        variables[v.name] = _variable(v.name, v)
    return variables


# =============================================================================
# Snapshot store
# =============================================================================


@dataclass(frozen=True, slots=True)
class IndexSnapshot:
    """One consistent view: the index, its graph, and when it went live."""

    index: ProjectIndex
    graph: SymbolGraph
    generation: int
    loaded_at: float


class IndexStore:
    """Holds the current snapshot. Reload is the only writer."""

    def __init__(self, analysis: AnalysisConfig | None = None) -> None:
        self._analysis = analysis or AnalysisConfig()
        self._lock = threading.Lock()
        self._snapshot: IndexSnapshot | None = None
        self._generation = 0
        self._index_path: Path | None = None
        self._variables_path: Path | None = None

    @property
    def snapshot(self) -> IndexSnapshot:
        snapshot = self._snapshot
        if snapshot is None:
            raise IndexNotLoadedError.create()
        return snapshot

    @property
    def is_loaded(self) -> bool:
        return self._snapshot is not None

    @property
    def index_path(self) -> Path | None:
        return self._index_path

    def _build_graph(self, index: ProjectIndex) -> SymbolGraph:
        return SymbolGraph(
            index,
            fan_in_weight=self._analysis.fan_in_weight,
            fan_out_weight=self._analysis.fan_out_weight,
        )

    def _install(self, index: ProjectIndex) -> IndexSnapshot:
        graph = self._build_graph(index)
        with self._lock:
            self._generation += 1
            snapshot = IndexSnapshot(
                index=index,
                graph=graph,
                generation=self._generation,
                loaded_at=time.time(),
            )
            self._snapshot = snapshot
        return snapshot

    def load(self, data: RawDocument, variables: RawDocument | None = None) -> IndexSnapshot:
        """Initial load. Errors propagate; nothing is installed on failure."""
        snapshot = self._install(parse_index(data, variables))
        log.info(
            "index_loaded",
            generation=snapshot.generation,
            files=len(snapshot.index.files),
            symbols=len(snapshot.index.symbols),
            constraints=len(snapshot.index.constraints),
        )
        return snapshot

    def reload(self, data: RawDocument, variables: RawDocument | None = None) -> IndexSnapshot:
        """Replace the current snapshot wholesale.

        On failure the previous snapshot stays live and the error propagates.
        """
        previous = self._snapshot
        try:
            index = parse_index(data, variables)
        except Exception as e:
            log.warning(
                "index_reload_failed",
                error=str(e),
                kept_generation=previous.generation if previous else None,
            )
            raise
        snapshot = self._install(index)
        log.info(
            "index_reloaded",
            generation=snapshot.generation,
            files=len(index.files),
            symbols=len(index.symbols),
        )
        return snapshot

    def load_paths(self, index_path: Path, variables_path: Path | None = None) -> IndexSnapshot:
        """Load from disk and remember the paths for ``reload_from_disk``.

        A missing variables document is not an error.
        """
        data, variables = _read_documents(index_path, variables_path)
        snapshot = self.load(data, variables)
        self._index_path = index_path
        self._variables_path = variables_path
        return snapshot

    def reload_from_disk(self) -> IndexSnapshot:
        if self._index_path is None:
            raise IndexNotLoadedError.create()
        try:
            data, variables = _read_documents(self._index_path, self._variables_path)
        except Exception as e:
            log.warning("index_reload_failed", error=str(e), path=str(self._index_path))
            raise
        return self.reload(data, variables)


def _read_documents(index_path: Path, variables_path: Path | None) -> tuple[bytes, bytes | None]:
    try:
        data = index_path.read_bytes()
    except FileNotFoundError as e:
        raise IndexFileNotFoundError.at(str(index_path)) from e
    variables: bytes | None = None
    if variables_path is not None:
        try:
            variables = variables_path.read_bytes()
        except FileNotFoundError:
            log.debug("variables_file_absent", path=str(variables_path))
    return data, variables
