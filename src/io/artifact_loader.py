"""コンパイル済みモジュール成果物の読み込みモジュール。"""

from typing import Dict, List, Optional
from pathlib import Path
import json
import logging

from pydantic import ValidationError

from ..models.artifact import ModuleArtifact

logger = logging.getLogger(__name__)

ARTIFACT_SUFFIX = ".xmod.json"


class ArtifactLoadError(Exception):
    """成果物ディレクトリを読み込めない場合の致命的エラー。"""
    pass


class ArtifactStore:
    """成果物ディレクトリとライブラリパスのモジュール成果物を管理する。

    解析対象ディレクトリのモジュールが解析対象となり、ライブラリパスの
    モジュールは呼び出し先の定義解決にのみ使われる。同名のモジュールが
    両方にある場合は解析対象が優先される。1回の実行中はスナップショット
    として扱い、再スキャンしない。
    """

    def __init__(
        self,
        artifact_dir: str,
        library_paths: Optional[List[str]] = None
    ):
        """成果物ストアを初期化する。

        Args:
            artifact_dir: 解析対象の成果物ディレクトリ
            library_paths: ライブラリ成果物ディレクトリのリスト（任意）
        """
        self.artifact_dir = Path(artifact_dir)
        self.library_paths = [Path(p) for p in (library_paths or [])]

        self._analyzed: Dict[str, ModuleArtifact] = {}
        self._library: Dict[str, ModuleArtifact] = {}
        self._paths: Dict[str, Path] = {}

    def load(self) -> None:
        """全ディレクトリをスキャンして成果物を読み込む。

        Raises:
            ArtifactLoadError: 成果物ディレクトリが読めない、または
                有効な成果物が1つもない場合
        """
        self._analyzed.clear()
        self._library.clear()
        self._paths.clear()

        if not self.artifact_dir.exists():
            raise ArtifactLoadError(
                f"Artifact directory not found: {self.artifact_dir}"
            )
        if not self.artifact_dir.is_dir():
            raise ArtifactLoadError(
                f"Artifact path is not a directory: {self.artifact_dir}"
            )

        try:
            files = self._list_artifacts(self.artifact_dir)
        except OSError as e:
            raise ArtifactLoadError(
                f"Cannot read artifact directory {self.artifact_dir}: {e}"
            ) from e

        for path in files:
            artifact = self._load_file(path)
            if artifact is None:
                continue
            if artifact.module in self._analyzed:
                logger.warning(
                    f"Duplicate module {artifact.module} in {path}, "
                    f"keeping {self._paths[artifact.module]}"
                )
                continue
            self._analyzed[artifact.module] = artifact
            self._paths[artifact.module] = path

        if not self._analyzed:
            raise ArtifactLoadError(
                f"No valid artifacts in {self.artifact_dir}"
            )

        for library_dir in self.library_paths:
            self._load_library(library_dir)

        logger.info(
            f"Loaded {len(self._analyzed)} modules "
            f"({len(self._library)} library modules)"
        )

    def _load_library(self, library_dir: Path) -> None:
        """ライブラリディレクトリを読み込む。失敗しても致命的ではない。"""
        if not library_dir.is_dir():
            logger.warning(f"Library path does not exist: {library_dir}")
            return

        try:
            files = self._list_artifacts(library_dir)
        except OSError as e:
            logger.warning(f"Cannot read library path {library_dir}: {e}")
            return

        for path in files:
            artifact = self._load_file(path)
            if artifact is None:
                continue
            if artifact.module in self._analyzed:
                logger.debug(
                    f"Library module {artifact.module} shadowed by analyzed module"
                )
                continue
            if artifact.module in self._library:
                continue
            self._library[artifact.module] = artifact
            self._paths[artifact.module] = path

    @staticmethod
    def _list_artifacts(directory: Path) -> List[Path]:
        return sorted(
            p for p in directory.iterdir()
            if p.is_file() and p.name.endswith(ARTIFACT_SUFFIX)
        )

    def _load_file(self, path: Path) -> Optional[ModuleArtifact]:
        """1ファイルを読み込む。壊れている場合は警告してNoneを返す。

        Args:
            path: 成果物ファイルのパス

        Returns:
            ModuleArtifact、読み込めない場合はNone
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return ModuleArtifact.model_validate(data)
        except ValidationError as e:
            logger.warning(
                f"Invalid artifact {path}: {e.error_count()} validation error(s)"
            )
        except (OSError, ValueError) as e:
            # JSONDecodeErrorとUnicodeDecodeErrorはValueErrorのサブクラス
            logger.warning(f"Failed to read artifact {path}: {e}")
        return None

    def lookup(self, module: str) -> Optional[ModuleArtifact]:
        """モジュールの成果物を取得する。

        Args:
            module: モジュール識別子

        Returns:
            ModuleArtifact、見つからない場合はNone
        """
        artifact = self._analyzed.get(module)
        if artifact is None:
            artifact = self._library.get(module)
        return artifact

    def path_of(self, module: str) -> Optional[Path]:
        """モジュール成果物のファイルパスを取得する。"""
        return self._paths.get(module)

    def analyzed_modules(self) -> List[ModuleArtifact]:
        """解析対象モジュールをモジュール名順で返す。"""
        return [self._analyzed[name] for name in sorted(self._analyzed)]

    def library_modules(self) -> List[ModuleArtifact]:
        """ライブラリモジュールをモジュール名順で返す。"""
        return [self._library[name] for name in sorted(self._library)]

    def clear(self) -> None:
        """読み込んだ成果物を破棄する。"""
        self._analyzed.clear()
        self._library.clear()
        self._paths.clear()
        logger.debug("Artifact store cleared")
