"""シンボルから元ソースの位置を解決する。"""

import logging

from ..io.artifact_loader import ArtifactStore
from ..models.location import ResolvedLocation
from ..models.symbol import Symbol

logger = logging.getLogger(__name__)


class SymbolResolver:
    """モジュール成果物の埋め込みデバッグ情報からソース位置を解決する。"""

    def __init__(self, store: ArtifactStore):
        """シンボル解決器を初期化する。

        Args:
            store: 成果物ストア
        """
        self.store = store

    def resolve(self, symbol: Symbol) -> ResolvedLocation:
        """シンボルの定義位置を解決する。

        成果物がない場合は MODULE_NOT_FOUND、デバッグ情報がないか壊れている
        場合は NO_DEBUG_INFO、定義行テーブルに関数がない場合（合成関数など）は
        ファイルパスだけを持つ FUNCTION_NOT_FOUND を返す。例外は送出しない。

        Args:
            symbol: 解決するシンボル

        Returns:
            ResolvedLocation
        """
        artifact = self.store.lookup(symbol.module)
        if artifact is None:
            logger.debug(f"Module not found for {symbol}")
            return ResolvedLocation.module_not_found()

        debug_info = artifact.parsed_debug_info()
        if debug_info is None:
            logger.debug(f"No debug info for module {symbol.module}")
            return ResolvedLocation.no_debug_info()

        line = debug_info.line_of(symbol.function, symbol.arity)
        if line is None:
            return ResolvedLocation.function_not_found(debug_info.source)

        return ResolvedLocation.found(debug_info.source, line)
