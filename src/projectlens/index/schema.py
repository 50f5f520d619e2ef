"""Wire schema for the index and variables documents.

These pydantic models describe the JSON an external indexer writes. They are
validation only: the store converts them into the immutable tables in
models.py and nothing else holds on to them.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

LockLevel = Literal[
    "frozen",
    "restricted",
    "approval-required",
    "tests-required",
    "docs-required",
    "normal",
]
Severity = Literal["advisory", "blocking"]


class _Doc(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class MetaDoc(_Doc):
    version: str | int
    generated_at: str | None = None
    project: str | None = None


class FileDoc(_Doc):
    path: str = Field(min_length=1)
    domain: str | None = None
    symbols: list[str] = Field(default_factory=list)
    imports: list[str] = Field(default_factory=list)
    lines: int = Field(default=0, ge=0)
    size: int = Field(default=0, ge=0)
    language: str | None = None
    layer: str | None = None
    lock: LockLevel | None = None


class SymbolDoc(_Doc):
    id: str = Field(min_length=1)
    name: str | None = None
    kind: str = "function"
    file: str
    signature: str = ""
    callers: list[str] = Field(default_factory=list)
    callees: list[str] = Field(default_factory=list)
    weight: float = Field(default=1.0, ge=0)
    purpose: str | None = None


class DomainDoc(_Doc):
    name: str = Field(min_length=1)
    description: str = ""


class ConstraintDoc(_Doc):
    id: str = Field(min_length=1)
    kind: str
    source: str
    target: str | None = None
    severity: Severity = "advisory"
    description: str = ""
    level: LockLevel | None = None


class VariableDoc(_Doc):
    name: str = Field(min_length=1)
    value: str
    source: str | None = None
    description: str = ""


class VariableValueDoc(_Doc):
    """Mapping form of a variable: ``{"NAME": {"value": ..., "description": ...}}``."""

    value: str
    source: str | None = None
    description: str = ""


class IndexDoc(_Doc):
    """Top-level index document. Unknown sections are rejected."""

    meta: MetaDoc
    files: list[FileDoc]
    symbols: list[SymbolDoc]
    domains: list[DomainDoc] = Field(default_factory=list)
    constraints: list[ConstraintDoc] = Field(default_factory=list)
    variables: list[VariableDoc] | dict[str, str | VariableValueDoc] = Field(default_factory=list)
