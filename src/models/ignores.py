"""プロジェクト全体の無視設定モデル。"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Set

from .symbol import Symbol


@dataclass
class ProjectIgnores:
    """設定ファイル由来の無視設定。

    モジュール名はそのモジュールの全シンボルを、Symbolは単一の関数を無視する。
    """
    modules: Set[str] = field(default_factory=set)
    symbols: Set[Symbol] = field(default_factory=set)

    @classmethod
    def from_entries(cls, entries: Iterable[Any]) -> "ProjectIgnores":
        """``xref_ignores`` のエントリ列から生成する。

        Args:
            entries: モジュール名、``[M, F, A]`` リスト、または
                ``"m:f/a"`` 形式の文字列

        Raises:
            ValueError: 解釈できないエントリがある場合
        """
        ignores = cls()
        for entry in entries:
            ignores.add(entry)
        return ignores

    def add(self, entry: Any) -> None:
        if isinstance(entry, Symbol):
            self.symbols.add(entry)
        elif isinstance(entry, str):
            if ":" in entry:
                self.symbols.add(Symbol.parse(entry))
            else:
                self.modules.add(entry)
        elif isinstance(entry, (list, tuple)) and len(entry) == 3:
            self.symbols.add(Symbol(str(entry[0]), str(entry[1]), int(entry[2])))
        else:
            raise ValueError(f"Invalid xref ignore entry: {entry!r}")

    def merge(self, other: "ProjectIgnores") -> None:
        self.modules.update(other.modules)
        self.symbols.update(other.symbols)

    def matches(self, symbol: Symbol) -> bool:
        return symbol.module in self.modules or symbol in self.symbols

    def __len__(self) -> int:
        return len(self.modules) + len(self.symbols)
