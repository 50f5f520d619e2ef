"""ProjectLens error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Index
- 4xxx: Query
- 9xxx: Internal

Every tool call ends in either a result or exactly one of these errors.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Index (3xxx)
    INDEX_SCHEMA_ERROR = 3001
    INDEX_DUPLICATE_KEY = 3002
    INDEX_NOT_FOUND = 3003

    # Query (4xxx)
    UNKNOWN_TOOL = 4001
    INVALID_ARGUMENT = 4002
    NOT_FOUND = 4003
    UNDEFINED_VARIABLE = 4004
    VARIABLE_CYCLE = 4005
    VARIABLE_DEPTH_EXCEEDED = 4006
    BUDGET_TOO_SMALL = 4007
    CONSTRAINT_UNEVALUABLE = 4008

    # Internal (9xxx)
    INTERNAL_ERROR = 9001
    INTERNAL_TIMEOUT = 9002
    INDEX_NOT_LOADED = 9003


@dataclass(eq=False)
class ProjectLensError(Exception):
    """Base error with structured context for MCP responses."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'INDEX_SCHEMA_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON/MCP responses."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(ProjectLensError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


# =============================================================================
# Index errors
# =============================================================================


class IndexLoadError(ProjectLensError):
    """Errors raised while loading an index document."""


class SchemaError(IndexLoadError):
    """Index document is malformed or has an incompatible schema."""

    @classmethod
    def invalid(cls, section: str, reason: str) -> "SchemaError":
        return cls(
            code=ErrorCode.INDEX_SCHEMA_ERROR,
            message=f"Invalid index section '{section}': {reason}",
            details={"section": section, "reason": reason},
        )

    @classmethod
    def unsupported_version(cls, version: str, supported: str) -> "SchemaError":
        return cls(
            code=ErrorCode.INDEX_SCHEMA_ERROR,
            message=f"Unsupported schema version {version!r} (supported: {supported})",
            details={"section": "meta", "version": version, "supported": supported},
        )


class DuplicateKeyError(IndexLoadError):
    """A key that must be unique appears more than once."""

    @classmethod
    def for_key(cls, section: str, key: str) -> "DuplicateKeyError":
        return cls(
            code=ErrorCode.INDEX_DUPLICATE_KEY,
            message=f"Duplicate key in '{section}': {key}",
            details={"section": section, "key": key},
        )


class IndexFileNotFoundError(IndexLoadError):
    """The index document does not exist on disk."""

    @classmethod
    def at(cls, path: str) -> "IndexFileNotFoundError":
        return cls(
            code=ErrorCode.INDEX_NOT_FOUND,
            message=f"No index found at {path}. Run the indexer first.",
            details={"path": path},
        )


# =============================================================================
# Query errors
# =============================================================================


class QueryError(ProjectLensError):
    """Errors raised while answering a tool query."""


class UnknownToolError(QueryError):
    @classmethod
    def named(cls, name: str, available: list[str]) -> "UnknownToolError":
        return cls(
            code=ErrorCode.UNKNOWN_TOOL,
            message=f"Unknown tool: {name}",
            details={"tool": name, "available_tools": sorted(available)},
        )


class ArgumentError(QueryError):
    """Tool arguments do not match the tool's schema."""

    @classmethod
    def invalid(cls, field: str, expected: str, reason: str) -> "ArgumentError":
        return cls(
            code=ErrorCode.INVALID_ARGUMENT,
            message=f"Invalid argument '{field}' (expected {expected}): {reason}",
            details={"field": field, "expected": expected, "reason": reason},
        )


class NotFoundError(QueryError):
    """A file, symbol, domain or constraint is not in the index."""

    @classmethod
    def missing(cls, kind: str, key: str) -> "NotFoundError":
        return cls(
            code=ErrorCode.NOT_FOUND,
            message=f"{kind.capitalize()} not found: {key}",
            details={"kind": kind, "key": key},
        )


class UndefinedVariableError(QueryError):
    @classmethod
    def named(cls, name: str, referenced_by: str | None = None) -> "UndefinedVariableError":
        details: dict[str, Any] = {"name": name}
        if referenced_by is not None:
            details["referenced_by"] = referenced_by
        return cls(
            code=ErrorCode.UNDEFINED_VARIABLE,
            message=f"Undefined variable: {name}",
            details=details,
        )


class CycleError(QueryError):
    """Variable references form a cycle."""

    @classmethod
    def through(cls, cycle: list[str]) -> "CycleError":
        return cls(
            code=ErrorCode.VARIABLE_CYCLE,
            message=f"Variable reference cycle: {' -> '.join([*cycle, cycle[0]])}",
            details={"cycle": list(cycle)},
        )

    @property
    def cycle(self) -> list[str]:
        return list(self.details.get("cycle", []))


class ResolutionDepthError(QueryError):
    @classmethod
    def exceeded(cls, name: str, max_depth: int) -> "ResolutionDepthError":
        return cls(
            code=ErrorCode.VARIABLE_DEPTH_EXCEEDED,
            message=f"Resolving '{name}' exceeded the maximum depth of {max_depth}",
            details={"name": name, "max_depth": max_depth},
        )


class BudgetTooSmallError(QueryError):
    """Primer budget cannot hold even the mandatory architecture section."""

    @classmethod
    def for_budget(cls, budget: int, required: int, unit: str) -> "BudgetTooSmallError":
        return cls(
            code=ErrorCode.BUDGET_TOO_SMALL,
            message=f"Budget of {budget} {unit} is too small; the architecture summary needs {required}",
            details={"budget": budget, "required": required, "unit": unit},
        )


class UnevaluableConstraint(QueryError):
    """A single constraint cannot be evaluated.

    Raised by rule evaluators and converted into an inline result by the
    engine; it never reaches the caller.
    """

    @classmethod
    def because(cls, constraint_id: str, reason: str) -> "UnevaluableConstraint":
        return cls(
            code=ErrorCode.CONSTRAINT_UNEVALUABLE,
            message=f"Constraint {constraint_id} cannot be evaluated: {reason}",
            details={"constraint_id": constraint_id, "reason": reason},
        )


# =============================================================================
# Internal errors
# =============================================================================


class InternalFault(ProjectLensError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalFault":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )


class IndexNotLoadedError(InternalFault):
    @classmethod
    def create(cls) -> "IndexNotLoadedError":
        return cls(
            code=ErrorCode.INDEX_NOT_LOADED,
            message="No index snapshot is loaded",
        )


class DeadlineExceededError(InternalFault):
    @classmethod
    def after(cls, tool: str, timeout_sec: float) -> "DeadlineExceededError":
        return cls(
            code=ErrorCode.INTERNAL_TIMEOUT,
            message=f"Tool '{tool}' did not finish within {timeout_sec:g}s",
            retryable=True,
            details={"tool": tool, "timeout_sec": timeout_sec},
        )
