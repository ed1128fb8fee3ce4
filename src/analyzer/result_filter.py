"""無視ルールによる指摘のフィルタリング。"""

from typing import List, Optional, Set
import logging

from ..models.finding import CheckKind, Finding
from ..models.ignores import ProjectIgnores
from ..models.symbol import Symbol
from .ignore_collector import IgnoreCollector

logger = logging.getLogger(__name__)


class ResultFilter:
    """無視ルールに一致する指摘を取り除く。

    並び順を保ったまま要素を取り除くだけで、並べ替えや重複は起こさない。
    """

    def __init__(
        self,
        collector: IgnoreCollector,
        project_ignores: Optional[ProjectIgnores] = None
    ):
        self.collector = collector
        self.project_ignores = project_ignores or ProjectIgnores()

    def filter(self, check: CheckKind, findings: List[Finding]) -> List[Finding]:
        """指摘リストをフィルタする。

        無視ルールは解析対象の全モジュールと、指摘に現れる全シンボルの
        モジュールから集める。無視されたシンボルは呼び出し元・呼び出し先の
        どちら側に現れても取り除かれる。

        Args:
            check: チェック種別
            findings: エンジンが出力した指摘

        Returns:
            無視されなかった指摘（元の順序のまま）
        """
        if not findings:
            return []

        exempt: Set[Symbol] = set()
        for module in self._declaring_modules(findings):
            exempt |= self.collector.ignores_for(module, check)

        kept = [f for f in findings if not self._is_ignored(f, exempt)]

        if len(kept) != len(findings):
            logger.debug(
                f"{check.value}: {len(findings) - len(kept)} findings ignored"
            )
        return kept

    def _declaring_modules(self, findings: List[Finding]) -> List[str]:
        modules = dict.fromkeys(
            artifact.module for artifact in self.collector.store.analyzed_modules()
        )
        for finding in findings:
            for symbol in finding.symbols():
                modules.setdefault(symbol.module)
        return list(modules)

    def _is_ignored(self, finding: Finding, exempt: Set[Symbol]) -> bool:
        for symbol in finding.symbols():
            if symbol in exempt or self.project_ignores.matches(symbol):
                return True
        return False
