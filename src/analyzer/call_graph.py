"""成果物からの呼び出しグラフと定義インデックスの構築。"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Set, Tuple
import logging

from ..io.artifact_loader import ArtifactStore
from ..models.artifact import FunctionKey, ModuleAttributes, SYNTHESIZED_FUNCTIONS
from ..models.symbol import Symbol

logger = logging.getLogger(__name__)

Edge = Tuple[Symbol, Symbol]


@dataclass
class CallGraph:
    """プログラム全体の定義インデックスと呼び出しグラフ。

    構築後は読み取り専用として扱う。呼び出しエッジは解析対象モジュール
    からのもののみで、ライブラリモジュールは定義の解決にだけ使われる。
    """

    # モジュール -> 定義済み関数キー（解析対象 + ライブラリ）
    definitions: Dict[str, FrozenSet[FunctionKey]] = field(default_factory=dict)
    # モジュール -> エクスポート関数キー
    exports: Dict[str, FrozenSet[FunctionKey]] = field(default_factory=dict)
    # 解析対象モジュールの関数（モジュール名順）
    local_functions: List[Symbol] = field(default_factory=list)
    exported_functions: List[Symbol] = field(default_factory=list)
    # (呼び出し元, 呼び出し先) をシンボル順にソートしたもの
    edges: List[Edge] = field(default_factory=list)
    callers: Dict[Symbol, Set[Symbol]] = field(default_factory=dict)
    # モジュール -> 属性（壊れた項目は除かれている）
    attributes: Dict[str, ModuleAttributes] = field(default_factory=dict)

    @classmethod
    def build(cls, store: ArtifactStore) -> "CallGraph":
        """成果物ストアからグラフを構築する。

        Args:
            store: 読み込み済みのArtifactStore

        Returns:
            CallGraphインスタンス
        """
        graph = cls()
        edges: Set[Edge] = set()
        locals_: Set[Symbol] = set()
        exported: Set[Symbol] = set()

        for artifact in store.library_modules():
            graph._index_module(artifact)

        for artifact in store.analyzed_modules():
            module = artifact.module
            graph._index_module(artifact)
            module_exports = graph.exports[module] - SYNTHESIZED_FUNCTIONS

            for function in artifact.functions:
                caller = Symbol(module, function.name, function.arity)
                # 合成関数は未使用チェックの対象外
                if function.key in module_exports:
                    exported.add(caller)
                elif function.key not in SYNTHESIZED_FUNCTIONS:
                    locals_.add(caller)

                for call in function.calls:
                    edges.add((caller, call.target(module)))

            # 定義本体のないエクスポート宣言もエクスポートとして扱う
            for key in module_exports:
                exported.add(Symbol(module, key[0], key[1]))

        graph.local_functions = sorted(locals_)
        graph.exported_functions = sorted(exported)
        graph.edges = sorted(edges)
        for caller, callee in graph.edges:
            graph.callers.setdefault(callee, set()).add(caller)

        logger.info(
            f"Call graph built: {len(graph.edges)} call edges, "
            f"{len(graph.local_functions)} local and "
            f"{len(graph.exported_functions)} exported functions"
        )
        return graph

    def _index_module(self, artifact) -> None:
        module = artifact.module
        self.definitions[module] = artifact.defined_keys()
        self.exports[module] = artifact.exported_keys()

        self.attributes[module] = artifact.parsed_attributes()

    def is_defined(self, target: Symbol, caller_module: str) -> bool:
        """呼び出し先が定義されているかを判定する。

        同一モジュールからの呼び出しはローカル定義で解決し、他モジュール
        からの呼び出しはエクスポートされている場合のみ解決する。
        """
        key = (target.function, target.arity)
        if target.module == caller_module:
            return key in self.definitions.get(target.module, frozenset())
        return key in self.exports.get(target.module, frozenset())

    def is_deprecated(self, symbol: Symbol) -> bool:
        attributes = self.attributes.get(symbol.module)
        if attributes is None:
            return False
        return attributes.is_deprecated(symbol.function, symbol.arity)

    def is_used(self, symbol: Symbol) -> bool:
        """自分以外の関数から呼び出されているかを判定する。"""
        return any(caller != symbol for caller in self.callers.get(symbol, ()))

