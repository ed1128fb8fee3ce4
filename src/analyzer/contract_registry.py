"""契約（ビヘイビア）の必須コールバック一覧の解決。"""

from typing import Dict, List, Optional
import logging

from ..io.artifact_loader import ArtifactStore
from ..models.artifact import FunctionKey

logger = logging.getLogger(__name__)


class ContractRegistry:
    """契約名から必須コールバック一覧へのレジストリ。

    契約モジュールの成果物に ``callbacks`` 属性があればそれを使い、
    なければ設定で与えられた一覧を使う。どちらもなければ空。
    任意のコードを実行せず、成果物の内容だけを参照する。
    """

    def __init__(
        self,
        store: ArtifactStore,
        configured: Optional[Dict[str, List[FunctionKey]]] = None
    ):
        """レジストリを初期化する。

        Args:
            store: 成果物ストア
            configured: 設定ファイルで定義された契約 -> コールバック一覧
        """
        self.store = store
        self._configured: Dict[str, List[FunctionKey]] = {
            name: [(str(f), int(a)) for f, a in callbacks]
            for name, callbacks in (configured or {}).items()
        }
        self._cache: Dict[str, List[FunctionKey]] = {}

    def callbacks_of(self, contract: str) -> List[FunctionKey]:
        """契約が要求するコールバック (関数名, アリティ) の一覧を返す。

        Args:
            contract: 契約（ビヘイビア）名

        Returns:
            コールバックのリスト（不明な契約は空リスト）
        """
        if contract in self._cache:
            return self._cache[contract]

        callbacks = self._from_artifact(contract)
        if callbacks is None:
            callbacks = self._configured.get(contract)
        if callbacks is None:
            logger.debug(f"No callback list known for contract {contract}")
            callbacks = []

        self._cache[contract] = callbacks
        return callbacks

    def _from_artifact(self, contract: str) -> Optional[List[FunctionKey]]:
        artifact = self.store.lookup(contract)
        if artifact is None:
            return None

        attributes = artifact.parsed_attributes()
        if not attributes.callbacks:
            return None

        return [tuple(cb) for cb in attributes.callbacks]
