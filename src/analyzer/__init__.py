"""コンパイル済み成果物のクロスリファレンス解析モジュール。"""

from .call_graph import CallGraph
from .xref_engine import XrefEngine, XrefError
from .contract_registry import ContractRegistry
from .ignore_collector import IgnoreCollector
from .result_filter import ResultFilter
from .symbol_resolver import SymbolResolver

__all__ = [
    "CallGraph",
    "XrefEngine",
    "XrefError",
    "ContractRegistry",
    "IgnoreCollector",
    "ResultFilter",
    "SymbolResolver",
]
