"""Read-only analyses over a loaded index."""

from projectlens.analysis.constraints import ConstraintEngine, ConstraintResult, Violation
from projectlens.analysis.hotpaths import HotpathAnalyzer, Scope
from projectlens.analysis.variables import Resolution, VariableResolver

__all__ = [
    "ConstraintEngine",
    "ConstraintResult",
    "HotpathAnalyzer",
    "Resolution",
    "Scope",
    "VariableResolver",
    "Violation",
]
