"""Index loading, immutable tables and the call graph."""

from projectlens.index.graph import Neighbor, SymbolGraph
from projectlens.index.models import Constraint, Domain, File, ProjectIndex, Symbol, Variable
from projectlens.index.store import IndexSnapshot, IndexStore, parse_index, parse_variables

__all__ = [
    "Constraint",
    "Domain",
    "File",
    "IndexSnapshot",
    "IndexStore",
    "Neighbor",
    "ProjectIndex",
    "Symbol",
    "SymbolGraph",
    "Variable",
    "parse_index",
    "parse_variables",
]
