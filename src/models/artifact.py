"""コンパイル済みモジュール成果物のスキーマ。

成果物はコンパイル工程が出力するJSON文書で、定義関数・呼び出し・
モジュール属性・デバッグ情報を持つ。``attributes`` と ``debug_info`` は
生の辞書として保持し、必要になった時点で検証する。壊れた属性項目は
その項目だけが無視され、解析全体は止まらない。
"""

from typing import Any, Dict, FrozenSet, List, Literal, Optional, Tuple, Union
import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .symbol import Symbol

logger = logging.getLogger(__name__)

# (関数名, アリティ)
FunctionKey = Tuple[str, int]

# すべてのモジュールが暗黙に定義・エクスポートする合成関数
SYNTHESIZED_FUNCTIONS: FrozenSet[FunctionKey] = frozenset({
    ("module_info", 0),
    ("module_info", 1),
})

IgnoreEntry = Union[Tuple[str, str, int], Tuple[str, int]]
# [F, A] または理由付きの [F, A, Info]
DeprecationEntry = Union[
    Literal["module"],
    Tuple[str, Union[int, Literal["_"]]],
    Tuple[str, Union[int, Literal["_"]], Any],
]


class CallRef(BaseModel):
    """関数本体内の呼び出し先。moduleが省略された場合はローカル呼び出し。"""

    module: Optional[str] = None
    function: str
    arity: int = Field(ge=0)
    line: Optional[int] = None

    def target(self, caller_module: str) -> Symbol:
        return Symbol(self.module or caller_module, self.function, self.arity)


class FunctionDef(BaseModel):
    """モジュール内で定義された関数。"""

    name: str
    arity: int = Field(ge=0)
    calls: List[CallRef] = Field(default_factory=list)

    @property
    def key(self) -> FunctionKey:
        return (self.name, self.arity)


class FunctionLine(BaseModel):
    """デバッグ情報の関数定義行。"""

    name: str
    arity: int = Field(ge=0)
    line: int = Field(ge=1)


class DebugInfo(BaseModel):
    """埋め込みデバッグ情報（元ソースパスと定義行テーブル）。"""

    source: str = Field(min_length=1)
    definitions: List[FunctionLine] = Field(default_factory=list)

    def line_of(self, name: str, arity: int) -> Optional[int]:
        """関数の定義行を返す。テーブルにない場合はNone。"""
        for definition in self.definitions:
            if definition.name == name and definition.arity == arity:
                return definition.line
        return None


class ModuleAttributes(BaseModel):
    """このツールが参照するモジュール属性。

    ``behaviour`` と ``behavior`` は同義で、どちらも準拠する契約を宣言する。
    """

    model_config = ConfigDict(extra="allow")

    ignore_xref: List[IgnoreEntry] = Field(default_factory=list)
    behaviour: List[str] = Field(default_factory=list)
    behavior: List[str] = Field(default_factory=list)
    deprecated: List[DeprecationEntry] = Field(default_factory=list)
    callbacks: List[FunctionKey] = Field(default_factory=list)

    @field_validator("ignore_xref", "callbacks", mode="before")
    @classmethod
    def _wrap_single_entry(cls, value: Any) -> Any:
        # ["legacy", 0] のような単独エントリをリストに包む
        if isinstance(value, (list, tuple)) and value and isinstance(value[0], str):
            return [value]
        return value

    @field_validator("deprecated", mode="before")
    @classmethod
    def _wrap_single_deprecation(cls, value: Any) -> Any:
        if value == "module":
            return [value]
        if (isinstance(value, (list, tuple)) and value
                and isinstance(value[0], str) and value[0] != "module"):
            return [value]
        return value

    @field_validator("behaviour", "behavior", mode="before")
    @classmethod
    def _wrap_single_name(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [value]
        return value

    def conforms_to(self) -> List[str]:
        """宣言された契約名を宣言順・重複なしで返す。"""
        contracts: List[str] = []
        for name in self.behaviour + self.behavior:
            if name not in contracts:
                contracts.append(name)
        return contracts

    def ignore_symbols(self, module: str) -> List[Symbol]:
        """ignore_xrefエントリを完全なSymbolに正規化する。

        (F, A) は所属モジュールで修飾し、(M, F, A) はそのまま使う。
        """
        symbols = []
        for entry in self.ignore_xref:
            if len(entry) == 3:
                symbols.append(Symbol(entry[0], entry[1], entry[2]))
            else:
                symbols.append(Symbol(module, entry[0], entry[1]))
        return symbols

    def is_deprecated(self, function: str, arity: int) -> bool:
        for entry in self.deprecated:
            if entry == "module":
                return True
            name, entry_arity = entry[0], entry[1]
            if name == function and (entry_arity == "_" or entry_arity == arity):
                return True
        return False


class ModuleArtifact(BaseModel):
    """コンパイル済みモジュール成果物。"""

    model_config = ConfigDict(extra="ignore")

    module: str = Field(min_length=1)
    exports: List[FunctionKey] = Field(default_factory=list)
    functions: List[FunctionDef] = Field(default_factory=list)
    attributes: Dict[str, Any] = Field(default_factory=dict)
    debug_info: Optional[Dict[str, Any]] = None

    def defined_keys(self) -> FrozenSet[FunctionKey]:
        """定義済み関数キー（エクスポートのみの宣言と合成関数を含む）。"""
        keys = {f.key for f in self.functions}
        keys.update(tuple(e) for e in self.exports)
        return frozenset(keys | SYNTHESIZED_FUNCTIONS)

    def exported_keys(self) -> FrozenSet[FunctionKey]:
        return frozenset({tuple(e) for e in self.exports} | SYNTHESIZED_FUNCTIONS)

    def parsed_attributes(self) -> ModuleAttributes:
        """属性を項目ごとに検証して返す。

        壊れている項目だけを捨て、残りの項目（ignore_xrefや契約宣言など）は
        そのまま有効にする。

        Returns:
            ModuleAttributes（壊れた項目は既定値の空リスト）
        """
        valid: Dict[str, Any] = {}
        for name, value in self.attributes.items():
            if name in ModuleAttributes.model_fields:
                try:
                    ModuleAttributes.model_validate({name: value})
                except ValidationError as e:
                    logger.warning(
                        f"Malformed attribute {name} in module {self.module}: "
                        f"{e.error_count()} error(s)"
                    )
                    continue
            valid[name] = value
        return ModuleAttributes.model_validate(valid)

    def parsed_debug_info(self) -> Optional[DebugInfo]:
        """デバッグ情報を検証して返す。存在しないか壊れている場合はNone。"""
        if self.debug_info is None:
            return None
        try:
            return DebugInfo.model_validate(self.debug_info)
        except ValidationError as e:
            logger.warning(
                f"Malformed debug info in module {self.module}: "
                f"{e.error_count()} error(s)"
            )
            return None
