"""Context MCP tools - get_context handler.

Operation-specific bundles for agent tasks:
- create: conventions of a directory a new file will land in
- modify: importers, locks and constraints of an existing file
- debug: a file or symbol with its imports and hottest symbols
- explore: project stats, domains and the most-imported files
"""

from collections import Counter
from posixpath import dirname
from typing import TYPE_CHECKING, Any, Literal

from pydantic import Field

from projectlens.analysis.constraints import ConstraintEngine
from projectlens.analysis.hotpaths import HotpathAnalyzer
from projectlens.config.constants import DEBUG_HOTPATHS_MAX, KEY_FILES_MAX
from projectlens.core.errors import ArgumentError, NotFoundError
from projectlens.index.models import ProjectIndex
from projectlens.mcp.registry import registry
from projectlens.mcp.tools.base import BaseParams

if TYPE_CHECKING:
    from projectlens.mcp.context import RequestContext

Operation = Literal["create", "modify", "debug", "explore"]


class GetContextParams(BaseParams):
    """Parameters for get_context."""

    operation: Operation = Field(..., description="create, modify, debug or explore")
    target: str | None = Field(
        None,
        description="Directory (create), file (modify), file or symbol (debug), "
        "or a domain filter (explore)",
    )


def _require_target(params: GetContextParams, what: str) -> str:
    if not params.target:
        raise ArgumentError.invalid("target", what, f"required for the {params.operation} operation")
    return params.target


def _in_directory(path: str, directory: str) -> bool:
    directory = directory.strip("/")
    parent = dirname(path)
    return parent == directory or parent.startswith(directory + "/") if directory else True


def _most_common(values: list[str | None]) -> str | None:
    counts = Counter(v for v in values if v)
    if not counts:
        return None
    # Ties resolve alphabetically
    return min(counts, key=lambda v: (-counts[v], v))


def _create_context(index: ProjectIndex, directory: str) -> dict[str, Any]:
    files = [f for f in index.files.values() if _in_directory(f.path, directory)]
    siblings = [f.path for f in files if dirname(f.path) == directory.strip("/")]
    engine = ConstraintEngine(index)
    applicable: set[str] = set()
    for f in files:
        applicable.update(c.id for c in engine.covering(f.path))
    return {
        "operation": "create",
        "directory": directory,
        "language": _most_common([f.language for f in files]),
        "domain": _most_common([f.domain for f in files]),
        "layer": _most_common([f.layer for f in files]),
        "similar_files": sorted(siblings)[:5],
        "constraints": sorted(applicable),
    }


def _modify_context(index: ProjectIndex, path: str) -> dict[str, Any]:
    file = index.files.get(path)
    if file is None:
        raise NotFoundError.missing("file", path)
    importers = list(index.imported_by.get(path, ()))
    results = ConstraintEngine(index).for_file(path)
    lock = file.lock
    for r in results:
        if r.constraint.kind == "lock" and lock is None:
            lock = r.constraint.level
    return {
        "operation": "modify",
        "file": path,
        "domain": file.domain,
        "lock": lock,
        "importers": importers,
        "importer_count": len(importers),
        "symbols": list(file.symbols),
        "constraints": [r.to_dict() for r in results],
    }


def _debug_context(ctx: "RequestContext", target: str) -> dict[str, Any]:
    index, graph = ctx.index, ctx.graph
    if target in index.files:
        path = target
        symbol_ids = list(index.files[path].symbols)
    elif target in index.symbols:
        path = index.symbols[target].file
        symbol_ids = [target]
    else:
        raise NotFoundError.missing("target", target)

    symbols = [
        {
            "id": sid,
            "kind": index.symbols[sid].kind,
            "purpose": index.symbols[sid].purpose,
            "callers": list(graph.callers(sid)),
            "callees": list(graph.callees(sid)),
        }
        for sid in symbol_ids
    ]
    ranked = HotpathAnalyzer(graph).top_symbols(DEBUG_HOTPATHS_MAX, f"file:{path}")
    return {
        "operation": "debug",
        "target": target,
        "file": path,
        "related_files": list(index.files[path].imports),
        "symbols": symbols,
        "hotpaths": [s.id for s, score in ranked if score > 0],
    }


def _explore_context(index: ProjectIndex, domain_filter: str | None) -> dict[str, Any]:
    domains = [
        {
            **index.domains[name].to_dict(),
            "symbol_count": sum(len(index.files[p].symbols) for p in index.domains[name].members),
        }
        for name in sorted(index.domains)
        if domain_filter is None or domain_filter in name
    ]
    ranked = sorted(index.files, key=lambda p: (-len(index.imported_by.get(p, ())), p))
    key_files = [p for p in ranked if index.imported_by.get(p)][:KEY_FILES_MAX]
    return {
        "operation": "explore",
        "domain_filter": domain_filter,
        "stats": {
            "files": len(index.files),
            "symbols": len(index.symbols),
            "lines": index.total_lines,
            "languages": index.languages,
        },
        "domains": domains,
        "key_files": key_files,
    }


@registry.register(
    "get_context",
    "Operation-specific context: 'create' (directory conventions), 'modify' (importers, locks, "
    "constraints), 'debug' (file or symbol with related code), 'explore' (overview).",
    GetContextParams,
)
async def get_context(ctx: "RequestContext", params: GetContextParams) -> dict[str, Any]:
    if params.operation == "create":
        result = _create_context(ctx.index, _require_target(params, "directory path"))
    elif params.operation == "modify":
        result = _modify_context(ctx.index, _require_target(params, "file path"))
    elif params.operation == "debug":
        result = _debug_context(ctx, _require_target(params, "file path or symbol"))
    else:
        result = _explore_context(ctx.index, params.target)
    result["summary"] = f"{params.operation} context" + (f" for {params.target}" if params.target else "")
    return result
