"""関数シンボル (M, F, A) のモデル。"""

from dataclasses import dataclass
import re


_SYMBOL_PATTERN = re.compile(r"^(?P<module>[^:]+):(?P<function>.+)/(?P<arity>\d+)$")


@dataclass(frozen=True, order=True)
class Symbol:
    """モジュール・関数名・アリティの三つ組。

    解析対象の中で関数定義または呼び出し先を一意に識別する。
    比較順は (module, function, arity) の辞書順。
    """
    module: str
    function: str
    arity: int

    @classmethod
    def parse(cls, text: str) -> "Symbol":
        """``module:function/arity`` 形式の文字列からSymbolを生成する。

        Args:
            text: シンボル文字列

        Returns:
            Symbolインスタンス

        Raises:
            ValueError: 形式が不正な場合
        """
        match = _SYMBOL_PATTERN.match(text.strip())
        if not match:
            raise ValueError(f"Invalid symbol: {text!r}")
        return cls(
            module=match.group("module"),
            function=match.group("function"),
            arity=int(match.group("arity"))
        )

    def __str__(self) -> str:
        return f"{self.module}:{self.function}/{self.arity}"
