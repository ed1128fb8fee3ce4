"""クロスリファレンス解析の指摘情報モデル。"""

from dataclasses import dataclass
from typing import Optional, Tuple
from enum import Enum

from .symbol import Symbol


class CheckKind(Enum):
    """解析のチェック種別（固定の閉じた集合）。"""
    UNDEFINED_FUNCTION_CALLS = "undefined_function_calls"
    UNDEFINED_FUNCTIONS = "undefined_functions"
    LOCALS_NOT_USED = "locals_not_used"
    EXPORTS_NOT_USED = "exports_not_used"
    DEPRECATED_FUNCTION_CALLS = "deprecated_function_calls"
    DEPRECATED_FUNCTIONS = "deprecated_functions"

    @classmethod
    def parse(cls, value: str) -> "CheckKind":
        """文字列からCheckKindを取得する。

        Raises:
            ValueError: 未知のチェック名の場合
        """
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown xref check: {value}") from None


ALL_CHECKS: Tuple[CheckKind, ...] = tuple(CheckKind)


@dataclass(frozen=True)
class Finding:
    """単一の指摘。

    target が None のものはノード指摘（例: 未使用エクスポート）、
    それ以外はエッジ指摘（source が target を呼び出す）。
    """
    check: CheckKind
    source: Symbol
    target: Optional[Symbol] = None

    @classmethod
    def edge(cls, check: CheckKind, source: Symbol, target: Symbol) -> "Finding":
        return cls(check=check, source=source, target=target)

    @classmethod
    def node(cls, check: CheckKind, symbol: Symbol) -> "Finding":
        return cls(check=check, source=symbol)

    @property
    def is_edge(self) -> bool:
        return self.target is not None

    @property
    def module(self) -> str:
        """フィルタ時に関与するモジュール（代表シンボルのモジュール）。"""
        return self.source.module

    def symbols(self) -> Tuple[Symbol, ...]:
        """指摘に含まれるシンボルを返す。"""
        if self.target is None:
            return (self.source,)
        return (self.source, self.target)

    def __str__(self) -> str:
        if self.target is None:
            return f"[{self.check.value}] {self.source}"
        return f"[{self.check.value}] {self.source} -> {self.target}"
