"""クロスリファレンス解析エンジンのテスト。"""

import pytest

from src.analyzer.xref_engine import XrefEngine, XrefError
from src.io.artifact_loader import ArtifactLoadError
from src.models.finding import CheckKind, Finding
from src.models.symbol import Symbol


def _symbols(findings):
    return [f.source if f.target is None else (f.source, f.target) for f in findings]


class TestScenario:
    """3モジュール構成の解析テスト。"""

    def test_undefined_function_calls(self, scenario_dir):
        artifacts, library = scenario_dir
        with XrefEngine(str(artifacts), [str(library)]) as engine:
            findings = engine.analyze(CheckKind.UNDEFINED_FUNCTION_CALLS)

        assert findings == [
            Finding.edge(
                CheckKind.UNDEFINED_FUNCTION_CALLS,
                Symbol("a", "foo", 0),
                Symbol("b", "bar", 1)
            )
        ]

    def test_undefined_functions(self, scenario_dir):
        artifacts, library = scenario_dir
        with XrefEngine(str(artifacts), [str(library)]) as engine:
            findings = engine.analyze("undefined_functions")

        assert _symbols(findings) == [Symbol("b", "bar", 1)]

    def test_locals_not_used(self, scenario_dir):
        artifacts, library = scenario_dir
        with XrefEngine(str(artifacts), [str(library)]) as engine:
            findings = engine.analyze(CheckKind.LOCALS_NOT_USED)

        assert _symbols(findings) == [Symbol("b", "baz", 0)]

    def test_exports_not_used_before_filtering(self, scenario_dir):
        """契約による除外はフィルタの役割なので、エンジンは両方を出すこと。"""
        artifacts, library = scenario_dir
        with XrefEngine(str(artifacts), [str(library)]) as engine:
            findings = engine.analyze(CheckKind.EXPORTS_NOT_USED)

        assert _symbols(findings) == [Symbol("a", "foo", 0), Symbol("c", "init", 1)]

    def test_analyze_all_keeps_requested_order(self, scenario_dir):
        artifacts, library = scenario_dir
        checks = [CheckKind.LOCALS_NOT_USED, "undefined_functions"]
        with XrefEngine(str(artifacts), [str(library)]) as engine:
            results = engine.analyze_all(checks)

        assert list(results) == [
            CheckKind.LOCALS_NOT_USED,
            CheckKind.UNDEFINED_FUNCTIONS,
        ]


class TestDefinitions:
    """定義解決のテスト。"""

    def test_library_definitions_resolve_calls(self, tmp_path, make_artifact):
        artifacts = tmp_path / "artifacts"
        library = tmp_path / "lib"
        make_artifact(
            artifacts, "app",
            exports=[["main", 0]],
            functions=[{
                "name": "main", "arity": 0,
                "calls": [{"module": "lists", "function": "map", "arity": 2}]
            }]
        )
        make_artifact(library, "lists", exports=[["map", 2]])

        with XrefEngine(str(artifacts), [str(library)]) as engine:
            assert engine.analyze(CheckKind.UNDEFINED_FUNCTION_CALLS) == []

        with XrefEngine(str(artifacts)) as engine:
            assert len(engine.analyze(CheckKind.UNDEFINED_FUNCTION_CALLS)) == 1

    def test_remote_call_to_local_function_is_undefined(self, tmp_path, make_artifact):
        """他モジュールの非エクスポート関数の呼び出しは未定義扱い。"""
        make_artifact(
            tmp_path, "caller",
            exports=[["run", 0]],
            functions=[{
                "name": "run", "arity": 0,
                "calls": [{"module": "callee", "function": "hidden", "arity": 0}]
            }]
        )
        make_artifact(tmp_path, "callee", functions=[{"name": "hidden", "arity": 0}])

        with XrefEngine(str(tmp_path)) as engine:
            findings = engine.analyze(CheckKind.UNDEFINED_FUNCTIONS)

        assert _symbols(findings) == [Symbol("callee", "hidden", 0)]

    def test_local_calls_resolve_within_module(self, tmp_path, make_artifact):
        make_artifact(
            tmp_path, "m",
            exports=[["run", 0]],
            functions=[
                {"name": "run", "arity": 0,
                 "calls": [{"function": "helper", "arity": 1},
                           {"function": "missing", "arity": 0}]},
                {"name": "helper", "arity": 1},
            ]
        )

        with XrefEngine(str(tmp_path)) as engine:
            calls = engine.analyze(CheckKind.UNDEFINED_FUNCTION_CALLS)
            unused = engine.analyze(CheckKind.LOCALS_NOT_USED)

        assert _symbols(calls) == [(Symbol("m", "run", 0), Symbol("m", "missing", 0))]
        assert unused == []

    def test_module_info_is_synthesized(self, tmp_path, make_artifact):
        make_artifact(
            tmp_path, "m",
            exports=[["run", 0]],
            functions=[{
                "name": "run", "arity": 0,
                "calls": [{"module": "other", "function": "module_info", "arity": 1}]
            }]
        )
        make_artifact(tmp_path, "other")

        with XrefEngine(str(tmp_path)) as engine:
            assert engine.analyze(CheckKind.UNDEFINED_FUNCTION_CALLS) == []
            exports = engine.analyze(CheckKind.EXPORTS_NOT_USED)

        assert _symbols(exports) == [Symbol("m", "run", 0)]


class TestUsage:
    """未使用チェックのテスト。"""

    def test_self_recursion_does_not_count_as_use(self, tmp_path, make_artifact):
        make_artifact(
            tmp_path, "m",
            functions=[{
                "name": "loop", "arity": 1,
                "calls": [{"function": "loop", "arity": 1}]
            }]
        )

        with XrefEngine(str(tmp_path)) as engine:
            findings = engine.analyze(CheckKind.LOCALS_NOT_USED)

        assert _symbols(findings) == [Symbol("m", "loop", 1)]

    def test_export_used_from_other_module(self, tmp_path, make_artifact):
        make_artifact(tmp_path, "lib", exports=[["api", 0]],
                      functions=[{"name": "api", "arity": 0}])
        make_artifact(
            tmp_path, "user",
            exports=[["main", 0]],
            functions=[{
                "name": "main", "arity": 0,
                "calls": [{"module": "lib", "function": "api", "arity": 0}]
            }]
        )

        with XrefEngine(str(tmp_path)) as engine:
            findings = engine.analyze(CheckKind.EXPORTS_NOT_USED)

        assert _symbols(findings) == [Symbol("user", "main", 0)]

    def test_results_are_sorted(self, tmp_path, make_artifact):
        make_artifact(tmp_path, "zeta", functions=[{"name": "b", "arity": 0},
                                                   {"name": "a", "arity": 0}])
        make_artifact(tmp_path, "alpha", functions=[{"name": "c", "arity": 2},
                                                    {"name": "c", "arity": 1}])

        with XrefEngine(str(tmp_path)) as engine:
            findings = engine.analyze(CheckKind.LOCALS_NOT_USED)

        assert _symbols(findings) == [
            Symbol("alpha", "c", 1),
            Symbol("alpha", "c", 2),
            Symbol("zeta", "a", 0),
            Symbol("zeta", "b", 0),
        ]


class TestDeprecation:
    """非推奨チェックのテスト。"""

    def test_deprecated_calls(self, tmp_path, make_artifact):
        artifacts = tmp_path / "artifacts"
        library = tmp_path / "lib"
        make_artifact(
            artifacts, "app",
            exports=[["main", 0]],
            functions=[{
                "name": "main", "arity": 0,
                "calls": [
                    {"module": "old_api", "function": "fetch", "arity": 1},
                    {"module": "old_api", "function": "fetch_all", "arity": 0},
                    {"module": "old_api", "function": "fetch_all", "arity": 0, "line": 9},
                ]
            }]
        )
        make_artifact(
            library, "old_api",
            exports=[["fetch", 1], ["fetch_all", 0]],
            attributes={"deprecated": [["fetch", 1]]}
        )

        with XrefEngine(str(artifacts), [str(library)]) as engine:
            calls = engine.analyze(CheckKind.DEPRECATED_FUNCTION_CALLS)
            nodes = engine.analyze(CheckKind.DEPRECATED_FUNCTIONS)

        assert _symbols(calls) == [(Symbol("app", "main", 0), Symbol("old_api", "fetch", 1))]
        assert _symbols(nodes) == [Symbol("old_api", "fetch", 1)]

    def test_malformed_deprecation_is_ignored(self, tmp_path, make_artifact):
        make_artifact(
            tmp_path, "m",
            exports=[["f", 0]],
            functions=[{"name": "f", "arity": 0,
                        "calls": [{"function": "g", "arity": 0}]},
                       {"name": "g", "arity": 0}],
            attributes={"deprecated": 42}
        )

        with XrefEngine(str(tmp_path)) as engine:
            assert engine.analyze(CheckKind.DEPRECATED_FUNCTION_CALLS) == []


class TestEngineErrors:
    """エンジンのエラー処理テスト。"""

    def test_not_started(self, tmp_path):
        engine = XrefEngine(str(tmp_path))
        with pytest.raises(XrefError, match="not started"):
            engine.analyze(CheckKind.LOCALS_NOT_USED)

    def test_unknown_check(self, tmp_path, make_artifact):
        make_artifact(tmp_path, "m")
        with XrefEngine(str(tmp_path)) as engine:
            with pytest.raises(XrefError, match="Unknown xref check"):
                engine.analyze("exports_used")

    def test_missing_directory_fails_before_checks(self, tmp_path):
        engine = XrefEngine(str(tmp_path / "missing"))
        with pytest.raises(ArtifactLoadError):
            engine.start()

    def test_stop_releases_graph(self, tmp_path, make_artifact):
        make_artifact(tmp_path, "m")
        engine = XrefEngine(str(tmp_path))
        engine.start()
        engine.stop()
        with pytest.raises(XrefError):
            engine.analyze(CheckKind.LOCALS_NOT_USED)
