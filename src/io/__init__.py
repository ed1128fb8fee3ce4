"""成果物の読み込みと診断・レポート出力モジュール。"""

from .artifact_loader import ArtifactStore, ArtifactLoadError
from .ignores_loader import IgnoresLoader, IgnoreSourceError
from .diagnostic_writer import DiagnosticReporter
from .excel_writer import ExcelReportWriter

__all__ = [
    "ArtifactStore",
    "ArtifactLoadError",
    "IgnoresLoader",
    "IgnoreSourceError",
    "DiagnosticReporter",
    "ExcelReportWriter",
]
