"""Constraint evaluation over file-level import edges.

Rule kinds:
- ``domain_dependency``: no file in domain ``source`` may import a file in
  domain ``target``.
- ``path_dependency``: no file matching glob ``source`` may import a file
  matching glob ``target``.
- ``lock``: files matching glob ``source`` are locked at ``level``. Purely
  informational; always satisfied.

A rule that cannot be evaluated becomes an ``unevaluable`` result with a
reason. It never aborts the rest of the batch.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import Literal

import structlog

from projectlens.core.errors import NotFoundError, UnevaluableConstraint
from projectlens.index.models import Constraint, ProjectIndex

log = structlog.get_logger(__name__)

Status = Literal["satisfied", "violated", "unevaluable"]


@dataclass(frozen=True, slots=True)
class Violation:
    source_file: str
    target_file: str

    def to_dict(self) -> dict[str, str]:
        return {"source_file": self.source_file, "target_file": self.target_file}


@dataclass(frozen=True, slots=True)
class ConstraintResult:
    constraint: Constraint
    status: Status
    violations: tuple[Violation, ...] = ()
    affected_files: tuple[str, ...] = ()
    reason: str | None = None

    @property
    def blocking_violation(self) -> bool:
        return self.status == "violated" and self.constraint.blocking

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "id": self.constraint.id,
            "kind": self.constraint.kind,
            "severity": self.constraint.severity,
            "status": self.status,
            "description": self.constraint.description,
            "violations": [v.to_dict() for v in self.violations],
        }
        if self.constraint.kind == "lock":
            data["level"] = self.constraint.level
            data["affected_files"] = list(self.affected_files)
        if self.reason is not None:
            data["reason"] = self.reason
        return data


class ConstraintEngine:
    """Evaluates the constraints of one ProjectIndex on demand."""

    def __init__(self, index: ProjectIndex) -> None:
        self._index = index
        self._edges = [
            (f.path, t) for f in index.files.values() for t in f.imports if t in index.files
        ]
        self._rules: dict[str, Callable[[Constraint], ConstraintResult]] = {
            "domain_dependency": self._domain_dependency,
            "path_dependency": self._path_dependency,
            "lock": self._lock,
        }

    def evaluate(self, constraint_id: str | None = "all") -> list[ConstraintResult]:
        """Evaluate one constraint, or every constraint for ``"all"``/None.

        Results are ordered by constraint id.

        Raises:
            NotFoundError: constraint_id names no constraint.
        """
        if constraint_id is None or constraint_id == "all":
            targets = sorted(self._index.constraints)
        elif constraint_id in self._index.constraints:
            targets = [constraint_id]
        else:
            raise NotFoundError.missing("constraint", constraint_id)
        return [self._evaluate_one(self._index.constraints[cid]) for cid in targets]

    def for_file(self, path: str) -> list[ConstraintResult]:
        """Constraints whose scope covers ``path``, with violations narrowed to it.

        Raises:
            NotFoundError: path is not an indexed file.
        """
        results = []
        for constraint in self.covering(path):
            result = self._evaluate_one(constraint)
            if result.status == "violated":
                mine = tuple(v for v in result.violations if path in (v.source_file, v.target_file))
                result = ConstraintResult(
                    constraint=constraint,
                    status="violated" if mine else "satisfied",
                    violations=mine,
                )
            results.append(result)
        return results

    def covering(self, path: str) -> list[Constraint]:
        """Constraints whose scope covers ``path``, by id, without evaluating them.

        Raises:
            NotFoundError: path is not an indexed file.
        """
        if path not in self._index.files:
            raise NotFoundError.missing("file", path)
        constraints = self._index.constraints
        return [constraints[cid] for cid in sorted(constraints) if self._covers(constraints[cid], path)]

    def _covers(self, constraint: Constraint, path: str) -> bool:
        file = self._index.files[path]
        if constraint.kind == "domain_dependency":
            return file.domain is not None and file.domain in (constraint.source, constraint.target)
        if constraint.kind == "path_dependency":
            return fnmatchcase(path, constraint.source) or (
                constraint.target is not None and fnmatchcase(path, constraint.target)
            )
        if constraint.kind == "lock":
            return fnmatchcase(path, constraint.source)
        return False

    def _evaluate_one(self, constraint: Constraint) -> ConstraintResult:
        rule = self._rules.get(constraint.kind)
        try:
            if rule is None:
                raise UnevaluableConstraint.because(constraint.id, f"unknown kind '{constraint.kind}'")
            return rule(constraint)
        except UnevaluableConstraint as e:
            return ConstraintResult(constraint, "unevaluable", reason=e.details["reason"])
        except Exception as e:
            log.warning("constraint_evaluation_failed", constraint=constraint.id, exc_info=True)
            return ConstraintResult(constraint, "unevaluable", reason=f"evaluation failed: {e}")

    def _verdict(self, constraint: Constraint, violations: Iterator[Violation]) -> ConstraintResult:
        found = tuple(sorted(set(violations), key=lambda v: (v.source_file, v.target_file)))
        return ConstraintResult(constraint, "violated" if found else "satisfied", found)

    def _require_target(self, constraint: Constraint) -> str:
        if not constraint.target:
            raise UnevaluableConstraint.because(constraint.id, "rule has no target")
        return constraint.target

    def _domain_dependency(self, constraint: Constraint) -> ConstraintResult:
        target = self._require_target(constraint)
        for name in (constraint.source, target):
            if name not in self._index.domains:
                raise UnevaluableConstraint.because(constraint.id, f"unknown domain '{name}'")
        files = self._index.files
        return self._verdict(
            constraint,
            (
                Violation(src, dst)
                for src, dst in self._edges
                if files[src].domain == constraint.source and files[dst].domain == target
            ),
        )

    def _path_dependency(self, constraint: Constraint) -> ConstraintResult:
        target = self._require_target(constraint)
        for pattern in (constraint.source, target):
            if not any(fnmatchcase(p, pattern) for p in self._index.files):
                raise UnevaluableConstraint.because(constraint.id, f"pattern '{pattern}' matches no file")
        return self._verdict(
            constraint,
            (
                Violation(src, dst)
                for src, dst in self._edges
                if fnmatchcase(src, constraint.source) and fnmatchcase(dst, target)
            ),
        )

    def _lock(self, constraint: Constraint) -> ConstraintResult:
        if constraint.level is None:
            raise UnevaluableConstraint.because(constraint.id, "lock rule has no level")
        affected = tuple(p for p in self._index.files if fnmatchcase(p, constraint.source))
        if not affected:
            raise UnevaluableConstraint.because(
                constraint.id, f"pattern '{constraint.source}' matches no file"
            )
        return ConstraintResult(constraint, "satisfied", affected_files=affected)
