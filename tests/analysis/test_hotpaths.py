"""Tests for analysis/hotpaths.py."""

from __future__ import annotations

from typing import Any

import pytest

from projectlens.analysis.hotpaths import HotpathAnalyzer
from projectlens.core.errors import ArgumentError, NotFoundError
from projectlens.index.graph import SymbolGraph
from projectlens.index.store import parse_index


@pytest.fixture
def analyzer(sample_graph: SymbolGraph) -> HotpathAnalyzer:
    return HotpathAnalyzer(sample_graph)


class TestTopSymbols:
    def test_ranking_with_tie_break_by_id(self, analyzer: HotpathAnalyzer) -> None:
        ranked = analyzer.top_symbols(4)
        assert [s.id for s, _ in ranked] == [
            "core.service.fetch_user",
            "core.utils.slugify",
            "db.models.User.load",
            "api.handlers.get_user",
        ]

    def test_scores_non_increasing(self, analyzer: HotpathAnalyzer) -> None:
        scores = [score for _, score in analyzer.top_symbols(10)]
        assert scores == sorted(scores, reverse=True)

    def test_n_beyond_population_returns_all(self, analyzer: HotpathAnalyzer) -> None:
        assert len(analyzer.top_symbols(100)) == 5

    @pytest.mark.parametrize("n", [0, -3])
    def test_non_positive_n(self, analyzer: HotpathAnalyzer, n: int) -> None:
        with pytest.raises(ArgumentError):
            analyzer.top_symbols(n)

    def test_weight_scales_score(self, sample_doc: dict[str, Any]) -> None:
        sample_doc["symbols"][0]["weight"] = 20.0  # get_user: 0.1 * 20
        analyzer = HotpathAnalyzer(SymbolGraph(parse_index(sample_doc)))
        top, score = analyzer.top_symbols(1)[0]
        assert top.id == "api.handlers.get_user"
        assert score == pytest.approx(2.0)

    def test_domain_scope(self, analyzer: HotpathAnalyzer) -> None:
        ranked = analyzer.top_symbols(10, "domain:api")
        assert [s.id for s, _ in ranked] == ["api.handlers.get_user", "api.handlers.list_users"]

    def test_file_scope(self, analyzer: HotpathAnalyzer) -> None:
        ranked = analyzer.top_symbols(10, "file:src/core/utils.py")
        assert [s.id for s, _ in ranked] == ["core.utils.slugify"]

    def test_bare_scope_prefers_domain(self, analyzer: HotpathAnalyzer) -> None:
        assert [s.id for s, _ in analyzer.top_symbols(10, "db")] == ["db.models.User.load"]

    def test_bare_scope_falls_back_to_file(self, analyzer: HotpathAnalyzer) -> None:
        assert len(analyzer.top_symbols(10, "src/api/handlers.py")) == 2

    def test_empty_domain_scope(self, analyzer: HotpathAnalyzer) -> None:
        assert analyzer.top_symbols(10, "docs") == []

    @pytest.mark.parametrize("scope", ["domain:ghost", "file:nope.py", "ghost"])
    def test_unknown_scope(self, analyzer: HotpathAnalyzer, scope: str) -> None:
        with pytest.raises(NotFoundError):
            analyzer.top_symbols(3, scope)


class TestTopFiles:
    def test_files_ranked_by_summed_score(self, analyzer: HotpathAnalyzer) -> None:
        ranked = analyzer.top_files(10)
        assert [f.path for f, _ in ranked] == [
            "src/core/service.py",
            "src/core/utils.py",
            "src/db/models.py",
            "src/api/handlers.py",
            "scripts/deploy.sh",
        ]
        assert dict((f.path, s) for f, s in ranked)["scripts/deploy.sh"] == 0.0

    def test_files_in_scope(self, analyzer: HotpathAnalyzer) -> None:
        assert [f.path for f, _ in analyzer.top_files(10, "core")] == [
            "src/core/service.py",
            "src/core/utils.py",
        ]

    def test_non_positive_n(self, analyzer: HotpathAnalyzer) -> None:
        with pytest.raises(ArgumentError):
            analyzer.top_files(0)


class TestResolveScope:
    def test_to_dict(self, analyzer: HotpathAnalyzer) -> None:
        assert analyzer.resolve_scope("domain:core").to_dict() == {"kind": "domain", "name": "core"}

    def test_unknown_prefix_treated_as_bare_name(self, analyzer: HotpathAnalyzer) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            analyzer.resolve_scope("layer:data")
        assert exc_info.value.details["key"] == "layer:data"
