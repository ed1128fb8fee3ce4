"""指摘のExcelレポート出力モジュール。"""

from typing import Dict, List, Tuple
from pathlib import Path
from datetime import datetime
import logging

from openpyxl import Workbook
from openpyxl.styles import PatternFill, Font, Alignment, Border, Side

from ..models.finding import CheckKind, Finding
from ..models.location import ResolvedLocation
from .diagnostic_writer import DiagnosticReporter

logger = logging.getLogger(__name__)

ReportRow = Tuple[Finding, ResolvedLocation]


class ExcelReportWriter:
    """フィルタ済みの指摘をExcelブックに書き込む。"""

    # 各チェック種別の色（RGB hex、#なし）
    CHECK_COLORS: Dict[CheckKind, str] = {
        CheckKind.UNDEFINED_FUNCTION_CALLS: "FFC7CE",   # 赤 - 修正必要
        CheckKind.UNDEFINED_FUNCTIONS: "FFC7CE",
        CheckKind.LOCALS_NOT_USED: "FFEB9C",            # 黄 - レビュー必要
        CheckKind.EXPORTS_NOT_USED: "FFEB9C",
        CheckKind.DEPRECATED_FUNCTION_CALLS: "D9D9D9",  # 灰 - 情報
        CheckKind.DEPRECATED_FUNCTIONS: "D9D9D9",
    }

    HEADERS = ["Check", "Source", "Target", "File", "Line", "Message"]
    COLUMN_WIDTHS = [28, 40, 40, 40, 8, 70]

    def __init__(self, output_file: str):
        """Excelライターを初期化する。

        Args:
            output_file: 出力Excelファイルのパス
        """
        self.output_file = Path(output_file)

    def write(self, results: Dict[CheckKind, List[ReportRow]]) -> None:
        """指摘シートとサマリーシートを書き込む。

        Args:
            results: チェック種別から (指摘, 解決済み位置) のリストへのマッピング
        """
        wb = Workbook()
        ws = wb.active
        ws.title = "Findings"

        thin_border = Border(
            left=Side(style="thin"),
            right=Side(style="thin"),
            top=Side(style="thin"),
            bottom=Side(style="thin")
        )

        self._write_headers(ws, thin_border)

        row = 2
        for check, rows in results.items():
            fill = PatternFill(
                start_color=self.CHECK_COLORS[check],
                end_color=self.CHECK_COLORS[check],
                fill_type="solid"
            )
            for finding, location in rows:
                values = [
                    check.value,
                    str(finding.source),
                    str(finding.target) if finding.target else "",
                    location.file_path or "",
                    location.line,
                    DiagnosticReporter.message(check, finding),
                ]
                for col, value in enumerate(values, 1):
                    cell = ws.cell(row=row, column=col)
                    cell.value = value
                    cell.border = thin_border
                ws.cell(row=row, column=1).fill = fill
                ws.cell(row=row, column=6).alignment = Alignment(wrap_text=True, vertical="top")
                row += 1

        for i, width in enumerate(self.COLUMN_WIDTHS, 1):
            col_letter = ws.cell(row=1, column=i).column_letter
            ws.column_dimensions[col_letter].width = width

        self._write_summary(wb, results, thin_border)

        self.output_file.parent.mkdir(parents=True, exist_ok=True)
        wb.save(self.output_file)
        logger.info(f"Report written to {self.output_file}")

    def _write_headers(self, ws, border: Border) -> None:
        """指摘シートのヘッダーを書き込む。"""
        header_fill = PatternFill(
            start_color="4472C4",
            end_color="4472C4",
            fill_type="solid"
        )
        white_font = Font(bold=True, color="FFFFFF")

        for i, header in enumerate(self.HEADERS, 1):
            cell = ws.cell(row=1, column=i)
            cell.value = header
            cell.font = white_font
            cell.alignment = Alignment(horizontal="center", vertical="center")
            cell.fill = header_fill
            cell.border = border

    def _write_summary(
        self,
        wb: Workbook,
        results: Dict[CheckKind, List[ReportRow]],
        border: Border
    ) -> None:
        """チェック種別ごとの件数をまとめたサマリーシートを追加する。"""
        ws = wb.create_sheet("Summary")

        ws["A1"] = "Xref Summary"
        ws["A1"].font = Font(bold=True, size=14)
        ws.merge_cells("A1:B1")

        ws["A2"] = f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}"
        ws.merge_cells("A2:B2")

        for i, header in enumerate(["Check", "Count"], 1):
            cell = ws.cell(row=4, column=i)
            cell.value = header
            cell.font = Font(bold=True)
            cell.border = border
            cell.alignment = Alignment(horizontal="center")

        row = 5
        total = 0
        for check, rows in results.items():
            cell_check = ws.cell(row=row, column=1)
            cell_check.value = check.value
            cell_check.fill = PatternFill(
                start_color=self.CHECK_COLORS[check],
                end_color=self.CHECK_COLORS[check],
                fill_type="solid"
            )
            cell_check.border = border

            cell_count = ws.cell(row=row, column=2)
            cell_count.value = len(rows)
            cell_count.alignment = Alignment(horizontal="right")
            cell_count.border = border

            total += len(rows)
            row += 1

        # 合計行
        cell_total_label = ws.cell(row=row, column=1)
        cell_total_label.value = "Total"
        cell_total_label.font = Font(bold=True)
        cell_total_label.border = border

        cell_total_count = ws.cell(row=row, column=2)
        cell_total_count.value = total
        cell_total_count.font = Font(bold=True)
        cell_total_count.alignment = Alignment(horizontal="right")
        cell_total_count.border = border

        ws.column_dimensions["A"].width = 30
        ws.column_dimensions["B"].width = 10
