"""設定管理モジュール。"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any
from pathlib import Path
import os
import logging

import yaml

from .models.finding import ALL_CHECKS, CheckKind
from .models.ignores import ProjectIgnores

logger = logging.getLogger(__name__)

DEFAULT_ARTIFACT_DIR = "build/artifacts"


@dataclass
class Config:
    """アプリケーション設定。"""

    # 解析対象の成果物ディレクトリ
    artifact_dir: str = DEFAULT_ARTIFACT_DIR

    # 解析対象外のライブラリ成果物（呼び出し先の解決用）
    library_paths: List[str] = field(default_factory=list)

    # 実行するチェック（空の場合は全6種）
    xref_checks: List[str] = field(default_factory=list)

    # プロジェクト全体の無視設定
    xref_ignores: List[Any] = field(default_factory=list)
    ignores_source: Dict[str, Any] = field(default_factory=dict)

    # 成果物のない契約の必須コールバック: 契約名 -> [[関数名, アリティ], ...]
    contracts: Dict[str, List[List[Any]]] = field(default_factory=dict)

    # Excelレポート出力先（任意）
    report_file: Optional[str] = None

    # ロギング設定
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_yaml(cls, file_path: str) -> "Config":
        """YAMLファイルから設定を読み込む。

        Args:
            file_path: YAML設定ファイルのパス

        Returns:
            Configインスタンス

        Raises:
            yaml.YAMLError: YAMLの構文エラー
            ValueError: 最上位がマッピングでない場合
        """
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"設定ファイルの最上位がマッピングではありません: {file_path}")

        config = cls()

        # パス設定（環境変数が優先）
        config.artifact_dir = os.getenv(
            "XREF_ARTIFACT_DIR",
            data.get("artifact_dir", config.artifact_dir)
        )
        library_env = os.getenv("XREF_LIBRARY_PATH")
        if library_env:
            config.library_paths = [p for p in library_env.split(os.pathsep) if p]
        else:
            config.library_paths = data.get("library_paths", []) or []

        # チェック設定
        config.xref_checks = data.get("xref_checks", []) or []
        config.xref_ignores = data.get("xref_ignores", []) or []
        config.ignores_source = data.get("ignores_source", {}) or {}
        config.contracts = data.get("contracts", {}) or {}

        # 出力
        config.report_file = data.get("report_file")

        # ロギング
        config.log_level = data.get("log_level", config.log_level)
        config.log_file = data.get("log_file")

        logger.info(f"Configuration loaded from {file_path}")
        return config

    @classmethod
    def from_env(cls) -> "Config":
        """設定ファイルなしで、環境変数とデフォルト値から設定を作成する。"""
        config = cls()
        config.artifact_dir = os.getenv("XREF_ARTIFACT_DIR", config.artifact_dir)
        library_env = os.getenv("XREF_LIBRARY_PATH")
        if library_env:
            config.library_paths = [p for p in library_env.split(os.pathsep) if p]
        return config

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """辞書から設定を作成する。

        Args:
            data: 設定辞書

        Returns:
            Configインスタンス
        """
        config = cls()

        for key, value in data.items():
            if hasattr(config, key):
                setattr(config, key, value)

        return config

    def validate(self) -> List[str]:
        """設定を検証する。

        Returns:
            検証エラーのリスト（有効な場合は空）
        """
        errors = []

        if not self.artifact_dir:
            errors.append("artifact_dirは必須です")

        for name in self.xref_checks:
            try:
                CheckKind.parse(str(name))
            except ValueError:
                errors.append(f"未知のチェックです: {name}")

        for entry in self.xref_ignores:
            try:
                ProjectIgnores().add(entry)
            except (TypeError, ValueError):
                errors.append(f"無効な無視設定です: {entry!r}")

        for contract, callbacks in self.contracts.items():
            if not isinstance(callbacks, list) or not all(
                isinstance(cb, (list, tuple)) and len(cb) == 2 for cb in callbacks
            ):
                errors.append(f"契約 {contract} のコールバック定義が不正です")

        # ライブラリパスは存在しなくても致命的ではない
        for path in self.library_paths:
            if not Path(path).exists():
                logger.warning(f"Library path does not exist: {path}")

        return errors

    def checks(self) -> List[CheckKind]:
        """実行するチェックを返す（未指定なら全6種）。"""
        if not self.xref_checks:
            return list(ALL_CHECKS)
        return [CheckKind.parse(str(name)) for name in self.xref_checks]

    def project_ignores(self) -> ProjectIgnores:
        """インライン設定と外部ファイルの無視設定をまとめて返す。

        Raises:
            IgnoreSourceError: 外部ファイルの種別が不正な場合
        """
        ignores = ProjectIgnores.from_entries(self.xref_ignores)

        if self.ignores_source:
            from .io.ignores_loader import IgnoresLoader

            ignores.merge(IgnoresLoader().load(self.ignores_source))

        return ignores

    def to_dict(self) -> dict:
        """設定を辞書に変換する。

        Returns:
            辞書形式の設定
        """
        return {
            "artifact_dir": self.artifact_dir,
            "library_paths": self.library_paths,
            "xref_checks": self.xref_checks,
            "xref_ignores": self.xref_ignores,
            "ignores_source": self.ignores_source,
            "contracts": self.contracts,
            "report_file": self.report_file,
            "log_level": self.log_level,
            "log_file": self.log_file,
        }

    def save_yaml(self, file_path: str) -> None:
        """設定をYAMLファイルに保存。

        Args:
            file_path: 保存先パス
        """
        output_path = Path(file_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        data = {k: v for k, v in self.to_dict().items() if v is not None}

        with open(file_path, "w", encoding="utf-8") as f:
            yaml.dump(
                data,
                f,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=False
            )

        logger.info(f"Configuration saved to {file_path}")
