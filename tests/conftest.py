"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages, and
provides a small but complete sample index shared by every test package.
"""

import copy
import json
import sys
from pathlib import Path
from typing import Any

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local projectlens package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of projectlens modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("projectlens"):
        del sys.modules[module_name]

from projectlens.index.graph import SymbolGraph  # noqa: E402
from projectlens.index.models import ProjectIndex  # noqa: E402
from projectlens.index.store import IndexSnapshot, IndexStore, parse_index  # noqa: E402

# Call graph:
#   api.handlers.get_user   -> core.service.fetch_user
#   api.handlers.list_users -> core.service.fetch_user
#   core.service.fetch_user -> db.models.User.load, core.utils.slugify, requests.get (external)
#
# Imports: handlers.py -> service.py, models.py, requests (external)
#          service.py  -> models.py, utils.py
SAMPLE_INDEX: dict[str, Any] = {
    "meta": {"version": "1.2", "generated_at": "2024-05-01T12:00:00Z", "project": "shop"},
    "files": [
        {
            "path": "src/api/handlers.py",
            "domain": "api",
            "symbols": ["api.handlers.get_user", "api.handlers.list_users"],
            "imports": ["src/core/service.py", "src/db/models.py", "requests"],
            "lines": 120,
            "size": 4100,
            "language": "python",
            "layer": "interface",
        },
        {
            "path": "src/core/service.py",
            "domain": "core",
            "symbols": ["core.service.fetch_user"],
            "imports": ["src/db/models.py", "src/core/utils.py"],
            "lines": 200,
            "size": 6800,
            "language": "python",
            "layer": "application",
        },
        {
            "path": "src/core/utils.py",
            "domain": "core",
            "symbols": ["core.utils.slugify"],
            "imports": [],
            "lines": 40,
            "size": 900,
            "language": "python",
            "layer": "application",
        },
        {
            "path": "src/db/models.py",
            "domain": "db",
            "symbols": ["db.models.User.load"],
            "imports": [],
            "lines": 80,
            "size": 2500,
            "language": "python",
            "layer": "data",
            "lock": "frozen",
        },
        {
            "path": "scripts/deploy.sh",
            "imports": [],
            "lines": 10,
            "size": 200,
            "language": "shell",
        },
    ],
    "symbols": [
        {
            "id": "api.handlers.get_user",
            "kind": "function",
            "file": "src/api/handlers.py",
            "signature": "def get_user(user_id: int) -> dict",
            "callees": ["core.service.fetch_user"],
            "purpose": "GET /users/{id}",
        },
        {
            "id": "api.handlers.list_users",
            "kind": "function",
            "file": "src/api/handlers.py",
            "callees": ["core.service.fetch_user"],
        },
        {
            "id": "core.service.fetch_user",
            "kind": "function",
            "file": "src/core/service.py",
            "signature": "def fetch_user(user_id: int) -> User",
            "callers": ["api.handlers.get_user"],
            "callees": ["db.models.User.load", "core.utils.slugify", "requests.get"],
        },
        {
            "id": "core.utils.slugify",
            "kind": "function",
            "file": "src/core/utils.py",
        },
        {
            "id": "db.models.User.load",
            "name": "load",
            "kind": "method",
            "file": "src/db/models.py",
        },
    ],
    "domains": [
        {"name": "api", "description": "HTTP handlers"},
        {"name": "core", "description": "Business logic"},
        {"name": "db", "description": "Persistence"},
        {"name": "docs", "description": "Documentation"},
    ],
    "constraints": [
        {
            "id": "C1",
            "kind": "domain_dependency",
            "source": "api",
            "target": "db",
            "severity": "blocking",
            "description": "API must go through core",
        },
        {
            "id": "C2",
            "kind": "domain_dependency",
            "source": "db",
            "target": "api",
            "severity": "advisory",
        },
        {
            "id": "C3",
            "kind": "path_dependency",
            "source": "src/core/*",
            "target": "src/api/*",
            "severity": "blocking",
        },
        {
            "id": "C4",
            "kind": "lock",
            "source": "src/db/*",
            "level": "frozen",
            "severity": "advisory",
            "description": "Schema changes need a migration",
        },
        {
            "id": "C5",
            "kind": "domain_dependency",
            "source": "ghost",
            "target": "core",
            "severity": "blocking",
        },
    ],
    "variables": {
        "API_ROOT": "src/api",
        "HANDLERS": {"value": "${API_ROOT}/handlers.py", "description": "Main handler module"},
        "PRICE": "$$5",
    },
}


@pytest.fixture
def sample_doc() -> dict[str, Any]:
    """Fresh, mutable copy of the sample index document."""
    return copy.deepcopy(SAMPLE_INDEX)


@pytest.fixture
def sample_json(sample_doc: dict[str, Any]) -> str:
    return json.dumps(sample_doc)


@pytest.fixture
def sample_index(sample_json: str) -> ProjectIndex:
    return parse_index(sample_json)


@pytest.fixture
def sample_graph(sample_index: ProjectIndex) -> SymbolGraph:
    return SymbolGraph(sample_index)


@pytest.fixture
def sample_store(sample_json: str) -> IndexStore:
    store = IndexStore()
    store.load(sample_json)
    return store


@pytest.fixture
def sample_snapshot(sample_store: IndexStore) -> IndexSnapshot:
    return sample_store.snapshot


@pytest.fixture
def project_dir(tmp_path: Path, sample_json: str) -> Path:
    """Project root with .projectlens/index.json written."""
    root = tmp_path / "project"
    lens_dir = root / ".projectlens"
    lens_dir.mkdir(parents=True)
    (lens_dir / "index.json").write_text(sample_json)
    return root
