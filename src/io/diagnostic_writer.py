"""診断行の整形と出力。"""

from typing import Dict, List, Optional, TextIO, Union
import sys
import logging

from ..analyzer.symbol_resolver import SymbolResolver
from ..models.finding import CheckKind, Finding
from ..models.location import ResolvedLocation

logger = logging.getLogger(__name__)


class DiagnosticReporter:
    """指摘を1行ずつ診断ストリーム（既定は標準エラー）に書き出す。"""

    # チェック種別ごとのメッセージ
    MESSAGES: Dict[CheckKind, str] = {
        CheckKind.UNDEFINED_FUNCTION_CALLS: "{source} calls undefined function {target}",
        CheckKind.UNDEFINED_FUNCTIONS: "{source} is undefined function",
        CheckKind.LOCALS_NOT_USED: "{source} is unused local function",
        CheckKind.EXPORTS_NOT_USED: "{source} is unused export",
        CheckKind.DEPRECATED_FUNCTION_CALLS: "{source} calls deprecated function {target}",
        CheckKind.DEPRECATED_FUNCTIONS: "{source} is deprecated function",
    }

    def __init__(
        self,
        resolver: SymbolResolver,
        stream: Optional[TextIO] = None
    ):
        """レポーターを初期化する。

        Args:
            resolver: シンボル解決器
            stream: 出力先ストリーム（省略時は sys.stderr）
        """
        self.resolver = resolver
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        # 実行時の sys.stderr を参照する（テストでの差し替えに追従）
        return self._stream if self._stream is not None else sys.stderr

    @classmethod
    def message(cls, check: Union[CheckKind, str], finding: Finding) -> str:
        """位置情報を含まないメッセージ本文を返す。"""
        target = str(finding.target) if finding.target else "undefined"
        kind = check
        if isinstance(check, str):
            try:
                kind = CheckKind.parse(check)
            except ValueError:
                kind = None

        template = cls.MESSAGES.get(kind) if kind is not None else None
        if template is None:
            name = check.value if isinstance(check, CheckKind) else check
            return f"{finding.source} - {target} xref check: {name}"
        return template.format(source=finding.source, target=target)

    def format(
        self,
        check: Union[CheckKind, str],
        finding: Finding,
        location: ResolvedLocation
    ) -> str:
        """1件の指摘を診断行に整形する。

        Args:
            check: チェック種別（未知の名前は汎用形式で出力）
            finding: 指摘
            location: 呼び出し元シンボルの解決済み位置

        Returns:
            改行を含まない診断行
        """
        return f"{location.prefix()}Warning: {self.message(check, finding)} (Xref)"

    def report(self, check: Union[CheckKind, str], findings: List[Finding]) -> int:
        """指摘を解決・整形して出力する。

        Args:
            check: チェック種別
            findings: フィルタ済みの指摘

        Returns:
            出力した行数
        """
        stream = self.stream
        for finding in findings:
            location = self.resolver.resolve(finding.source)
            stream.write(self.format(check, finding, location) + "\n")
        stream.flush()
        return len(findings)
