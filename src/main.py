"""クロスリファレンス解析ツールのメインエントリーポイント。"""

import argparse
import sys
from pathlib import Path
from typing import Dict, List, Optional, TextIO
from dataclasses import dataclass, field
import logging

import yaml

from .config import Config, DEFAULT_ARTIFACT_DIR
from .io.artifact_loader import ArtifactLoadError
from .io.diagnostic_writer import DiagnosticReporter
from .io.excel_writer import ExcelReportWriter
from .io.ignores_loader import IgnoreSourceError
from .analyzer.xref_engine import XrefEngine, XrefError
from .analyzer.contract_registry import ContractRegistry
from .analyzer.ignore_collector import IgnoreCollector
from .analyzer.result_filter import ResultFilter
from .analyzer.symbol_resolver import SymbolResolver
from .models.finding import CheckKind, Finding
from .models.ignores import ProjectIgnores
from .utils.logger import setup_logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = "xref.yaml"


@dataclass
class ProcessingStats:
    """処理統計情報。"""
    raw: Dict[str, int] = field(default_factory=dict)
    reported: Dict[str, int] = field(default_factory=dict)

    @property
    def total_reported(self) -> int:
        return sum(self.reported.values())


class XrefRunner:
    """解析・フィルタ・出力を1回分実行するメインクラス。"""

    def __init__(
        self,
        config: Config,
        project_ignores: Optional[ProjectIgnores] = None,
        stream: Optional[TextIO] = None
    ):
        """ランナーを初期化する。

        Args:
            config: アプリケーション設定
            project_ignores: プロジェクト全体の無視設定（省略時は設定から読む）
            stream: 診断行の出力先（省略時は標準エラー）
        """
        self.config = config
        self.checks: List[CheckKind] = config.checks()
        self.project_ignores = (
            project_ignores if project_ignores is not None
            else config.project_ignores()
        )
        self.stream = stream
        self.stats = ProcessingStats()

    def run(self) -> int:
        """解析を実行し、残った指摘を出力する。

        全チェックの解析が成功してから出力を始めるため、途中で失敗した
        場合は何も出力されない。

        Returns:
            出力した警告の件数

        Raises:
            ArtifactLoadError: 成果物ディレクトリを読めない場合
            XrefError: チェックの実行に失敗した場合
        """
        engine = XrefEngine(self.config.artifact_dir, self.config.library_paths)
        engine.start()

        try:
            raw_results = engine.analyze_all(self.checks)

            store = engine.store
            contracts = ContractRegistry(store, self.config.contracts)
            result_filter = ResultFilter(
                IgnoreCollector(store, contracts),
                self.project_ignores
            )
            resolver = SymbolResolver(store)
            reporter = DiagnosticReporter(resolver, self.stream)

            kept_results: Dict[CheckKind, List[Finding]] = {}
            for check, findings in raw_results.items():
                kept = result_filter.filter(check, findings)
                kept_results[check] = kept
                reporter.report(check, kept)

                self.stats.raw[check.value] = len(findings)
                self.stats.reported[check.value] = len(kept)

            if self.config.report_file:
                writer = ExcelReportWriter(self.config.report_file)
                writer.write({
                    check: [(f, resolver.resolve(f.source)) for f in kept]
                    for check, kept in kept_results.items()
                })
        finally:
            engine.stop()

        self._log_statistics()
        return self.stats.total_reported

    def _log_statistics(self) -> None:
        """処理統計をログ出力する。"""
        logger.info("=" * 50)
        logger.info("Xref Statistics:")
        for check in self.checks:
            name = check.value
            logger.info(
                f"  {name}: {self.stats.reported.get(name, 0)} reported "
                f"({self.stats.raw.get(name, 0)} before ignores)"
            )
        logger.info(f"  Total warnings: {self.stats.total_reported}")
        logger.info("=" * 50)


def _build_config(args: argparse.Namespace) -> Optional[Config]:
    """設定ファイルとコマンドライン引数から設定を作成する。

    Returns:
        Config、明示された設定ファイルが存在しないか読めない場合はNone
    """
    config_path = Path(args.config or DEFAULT_CONFIG)
    if config_path.exists():
        try:
            config = Config.from_yaml(str(config_path))
        except (yaml.YAMLError, ValueError, OSError) as e:
            print(f"Error: 設定ファイルを読み込めません: {config_path}: {e}", file=sys.stderr)
            return None
    elif args.config:
        print(f"Error: 設定ファイルが見つかりません: {args.config}", file=sys.stderr)
        return None
    else:
        config = Config.from_env()

    # コマンドライン引数が優先
    if args.artifact_dir:
        config.artifact_dir = args.artifact_dir
    if args.library_path:
        config.library_paths = list(config.library_paths) + args.library_path
    if args.checks:
        config.xref_checks = [c for c in args.checks.split(",") if c.strip()]
    if args.report:
        config.report_file = args.report
    if args.log_file:
        config.log_file = args.log_file
    if args.verbose:
        config.log_level = "DEBUG"

    return config


def main(argv: Optional[List[str]] = None) -> int:
    """メインエントリーポイント。

    警告の有無にかかわらず、解析が完了すれば0を返す。

    Returns:
        終了コード
    """
    parser = argparse.ArgumentParser(
        description="コンパイル済みモジュールのクロスリファレンス解析ツール"
    )
    parser.add_argument(
        "-d", "--artifact-dir",
        help=f"成果物ディレクトリ（デフォルト: {DEFAULT_ARTIFACT_DIR}）"
    )
    parser.add_argument(
        "-L", "--library-path",
        action="append",
        default=[],
        help="ライブラリ成果物ディレクトリ（複数指定可）"
    )
    parser.add_argument(
        "-c", "--config",
        help=f"設定ファイルパス（デフォルト: {DEFAULT_CONFIG}、存在する場合のみ）"
    )
    parser.add_argument(
        "--checks",
        help="実行するチェックのカンマ区切りリスト（デフォルト: 全て）"
    )
    parser.add_argument(
        "--report",
        metavar="XLSX",
        help="Excelレポートの出力先"
    )
    parser.add_argument(
        "--log-file",
        help="ログファイルパス"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="詳細ログを有効にする"
    )

    args = parser.parse_args(argv)

    config = _build_config(args)
    if config is None:
        return 1

    setup_logging(level=config.log_level, log_file=config.log_file)

    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        return 1

    try:
        runner = XrefRunner(config)
        runner.run()
        return 0
    except (ArtifactLoadError, XrefError, IgnoreSourceError) as e:
        logger.error(f"Fatal error: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
