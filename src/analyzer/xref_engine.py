"""クロスリファレンス解析エンジン。"""

from typing import Callable, Dict, Iterable, List, Optional, Union
import logging

from ..io.artifact_loader import ArtifactStore
from ..models.finding import ALL_CHECKS, CheckKind, Finding
from .call_graph import CallGraph

logger = logging.getLogger(__name__)


class XrefError(Exception):
    """解析エンジンのエラー。実行全体にとって致命的。"""
    pass


def _undefined_function_calls(graph: CallGraph) -> List[Finding]:
    return [
        Finding.edge(CheckKind.UNDEFINED_FUNCTION_CALLS, caller, callee)
        for caller, callee in graph.edges
        if not graph.is_defined(callee, caller.module)
    ]


def _undefined_functions(graph: CallGraph) -> List[Finding]:
    undefined = {
        callee for caller, callee in graph.edges
        if not graph.is_defined(callee, caller.module)
    }
    return [
        Finding.node(CheckKind.UNDEFINED_FUNCTIONS, symbol)
        for symbol in sorted(undefined)
    ]


def _locals_not_used(graph: CallGraph) -> List[Finding]:
    return [
        Finding.node(CheckKind.LOCALS_NOT_USED, symbol)
        for symbol in graph.local_functions
        if not graph.is_used(symbol)
    ]


def _exports_not_used(graph: CallGraph) -> List[Finding]:
    return [
        Finding.node(CheckKind.EXPORTS_NOT_USED, symbol)
        for symbol in graph.exported_functions
        if not graph.is_used(symbol)
    ]


def _deprecated_function_calls(graph: CallGraph) -> List[Finding]:
    return [
        Finding.edge(CheckKind.DEPRECATED_FUNCTION_CALLS, caller, callee)
        for caller, callee in graph.edges
        if graph.is_deprecated(callee)
    ]


def _deprecated_functions(graph: CallGraph) -> List[Finding]:
    deprecated = {
        callee for _, callee in graph.edges
        if graph.is_deprecated(callee)
    }
    return [
        Finding.node(CheckKind.DEPRECATED_FUNCTIONS, symbol)
        for symbol in sorted(deprecated)
    ]


def _as_check(check: Union[CheckKind, str]) -> CheckKind:
    if isinstance(check, CheckKind):
        return check
    try:
        return CheckKind.parse(check)
    except ValueError as e:
        raise XrefError(str(e)) from e


CHECKS: Dict[CheckKind, Callable[[CallGraph], List[Finding]]] = {
    CheckKind.UNDEFINED_FUNCTION_CALLS: _undefined_function_calls,
    CheckKind.UNDEFINED_FUNCTIONS: _undefined_functions,
    CheckKind.LOCALS_NOT_USED: _locals_not_used,
    CheckKind.EXPORTS_NOT_USED: _exports_not_used,
    CheckKind.DEPRECATED_FUNCTION_CALLS: _deprecated_function_calls,
    CheckKind.DEPRECATED_FUNCTIONS: _deprecated_functions,
}


class XrefEngine:
    """成果物ディレクトリ全体を対象に各チェックを評価する。

    ``start()`` で成果物を読み込んでグラフを構築し、``stop()`` で破棄する。
    各チェックは構築済みグラフを読むだけで変更しない。
    """

    def __init__(
        self,
        artifact_dir: str,
        library_paths: Optional[List[str]] = None
    ):
        """解析エンジンを初期化する。

        Args:
            artifact_dir: 解析対象の成果物ディレクトリ
            library_paths: ライブラリ成果物ディレクトリのリスト（任意）
        """
        self.store = ArtifactStore(artifact_dir, library_paths)
        self._graph: Optional[CallGraph] = None

    def start(self) -> None:
        """成果物を読み込み、グラフを構築する。

        Raises:
            ArtifactLoadError: 成果物ディレクトリが読めない場合
        """
        self.store.load()
        self._graph = CallGraph.build(self.store)
        logger.info(f"Xref engine started on {self.store.artifact_dir}")

    def stop(self) -> None:
        """グラフと成果物を破棄する。"""
        self._graph = None
        self.store.clear()
        logger.debug("Xref engine stopped")

    def __enter__(self) -> "XrefEngine":
        self.start()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.stop()

    @property
    def graph(self) -> CallGraph:
        if self._graph is None:
            raise XrefError("Xref engine is not started")
        return self._graph

    def analyze(self, check: Union[CheckKind, str]) -> List[Finding]:
        """単一のチェックを実行する。

        Args:
            check: チェック種別（CheckKindまたはチェック名）

        Returns:
            シンボル順に並んだ指摘のリスト

        Raises:
            XrefError: 未起動、または未知のチェックの場合
        """
        graph = self.graph
        check = _as_check(check)

        handler = CHECKS.get(check)
        if handler is None:
            raise XrefError(f"Unsupported xref check: {check}")

        findings = handler(graph)
        logger.debug(f"{check.value}: {len(findings)} raw findings")
        return findings

    def analyze_all(
        self,
        checks: Iterable[Union[CheckKind, str]] = ALL_CHECKS
    ) -> Dict[CheckKind, List[Finding]]:
        """複数のチェックを順に実行する。

        Args:
            checks: 実行するチェック（デフォルト: 全6種）

        Returns:
            チェック種別から指摘リストへのマッピング（実行順）
        """
        results: Dict[CheckKind, List[Finding]] = {}
        for check in checks:
            check = _as_check(check)
            results[check] = self.analyze(check)
        return results

