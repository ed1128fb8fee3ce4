"""モジュールごとの無視ルール収集。"""

from typing import Set
import logging

from ..io.artifact_loader import ArtifactStore
from ..models.finding import CheckKind
from ..models.symbol import Symbol
from .contract_registry import ContractRegistry

logger = logging.getLogger(__name__)


class IgnoreCollector:
    """モジュール属性から無視するシンボルの集合を集める。"""

    def __init__(self, store: ArtifactStore, contracts: ContractRegistry):
        """無視ルール収集器を初期化する。

        Args:
            store: 成果物ストア
            contracts: 契約コールバックのレジストリ
        """
        self.store = store
        self.contracts = contracts

    def ignores_for(self, module: str, check: CheckKind) -> Set[Symbol]:
        """モジュールとチェック種別に対する無視シンボルを返す。

        ``ignore_xref`` 属性のエントリを完全なSymbolに正規化する。
        ``exports_not_used`` の場合は、準拠を宣言した契約が要求する
        コールバックも加える。モジュールが見つからない場合は空集合を返し、
        壊れた属性項目は無視される。

        Args:
            module: モジュール識別子
            check: フィルタ中のチェック種別

        Returns:
            無視するSymbolの集合
        """
        artifact = self.store.lookup(module)
        if artifact is None:
            logger.debug(f"Module {module} not loaded, no ignores")
            return set()

        attributes = artifact.parsed_attributes()
        ignores = set(attributes.ignore_symbols(module))

        if check is CheckKind.EXPORTS_NOT_USED:
            for contract in attributes.conforms_to():
                for function, arity in self.contracts.callbacks_of(contract):
                    ignores.add(Symbol(module, function, arity))

        return ignores
