"""Project-wide xref ignore list loader."""

from typing import Any, Dict, Optional
from pathlib import Path
import logging

import pandas as pd
import yaml

from ..models.ignores import ProjectIgnores
from ..models.symbol import Symbol

logger = logging.getLogger(__name__)


class IgnoreSourceError(Exception):
    """Raised when an ignore source is misconfigured."""
    pass


class IgnoresLoader:
    """Load project-wide ignores from various sources (YAML, CSV, Excel)."""

    def load(self, config: dict) -> ProjectIgnores:
        """Load ignores based on configuration.

        Args:
            config: Ignore source configuration with keys:
                - type: "yaml", "csv", or "excel"
                - path: Path to the ignore file
                - sheet: Sheet name for Excel (optional)
                - columns: Column mapping (optional)

        Returns:
            ProjectIgnores (empty when the file is missing)

        Raises:
            IgnoreSourceError: If the source type is not supported
        """
        source_type = config.get("type", "yaml").lower()
        path = config.get("path")

        if not path:
            logger.warning("No ignore source path specified")
            return ProjectIgnores()

        path = Path(path)
        if not path.exists():
            logger.warning(f"Ignore file not found: {path}")
            return ProjectIgnores()

        if source_type == "excel":
            return self.load_from_excel(
                str(path),
                sheet=config.get("sheet"),
                columns=config.get("columns", {})
            )
        elif source_type == "csv":
            return self.load_from_csv(
                str(path),
                columns=config.get("columns", {})
            )
        elif source_type == "yaml":
            return self.load_from_yaml(str(path))
        else:
            raise IgnoreSourceError(f"Unsupported ignore source type: {source_type}")

    def load_from_excel(
        self,
        path: str,
        sheet: Optional[str] = None,
        columns: Optional[Dict[str, str]] = None
    ) -> ProjectIgnores:
        """Load ignores from an Excel file.

        Args:
            path: Path to the Excel file
            sheet: Sheet name (None for first sheet)
            columns: Column name mapping

        Returns:
            ProjectIgnores
        """
        df = pd.read_excel(path, sheet_name=sheet or 0)
        ignores = self._from_dataframe(df, columns or {})
        logger.info(f"Loaded {len(ignores)} ignores from Excel: {path}")
        return ignores

    def load_from_csv(
        self,
        path: str,
        columns: Optional[Dict[str, str]] = None,
        encoding: str = "utf-8"
    ) -> ProjectIgnores:
        """Load ignores from a CSV file.

        Args:
            path: Path to the CSV file
            columns: Column name mapping
            encoding: File encoding

        Returns:
            ProjectIgnores
        """
        df = pd.read_csv(path, encoding=encoding)
        ignores = self._from_dataframe(df, columns or {})
        logger.info(f"Loaded {len(ignores)} ignores from CSV: {path}")
        return ignores

    def load_from_yaml(self, path: str) -> ProjectIgnores:
        """Load ignores from a YAML file.

        Expected YAML format:
        ```yaml
        xref_ignores:
          - legacy_module
          - [mod, fun, 2]
          - "mod:other/0"
        ```

        Args:
            path: Path to the YAML file

        Returns:
            ProjectIgnores
        """
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if not data or "xref_ignores" not in data:
            logger.warning(f"No 'xref_ignores' key found in YAML: {path}")
            return ProjectIgnores()

        ignores = ProjectIgnores()
        for entry in data["xref_ignores"] or []:
            try:
                ignores.add(entry)
            except ValueError as e:
                logger.warning(f"Skipping ignore entry in {path}: {e}")

        logger.info(f"Loaded {len(ignores)} ignores from YAML: {path}")
        return ignores

    def _from_dataframe(
        self,
        df: pd.DataFrame,
        columns: Dict[str, str]
    ) -> ProjectIgnores:
        """Build ignores from tabular rows.

        A row with only the module column set ignores the whole module.

        Args:
            df: Table with module/function/arity columns
            columns: Column name mapping

        Returns:
            ProjectIgnores
        """
        col_module = columns.get("module", "Module")
        col_function = columns.get("function", "Function")
        col_arity = columns.get("arity", "Arity")

        ignores = ProjectIgnores()
        for _, row in df.iterrows():
            module = self._cell(row.get(col_module))
            if not module:
                continue

            function = self._cell(row.get(col_function))
            arity = self._cell(row.get(col_arity))

            if not function:
                ignores.modules.add(module)
                continue

            try:
                ignores.symbols.add(Symbol(module, function, int(float(arity))))
            except (TypeError, ValueError):
                logger.warning(
                    f"Skipping ignore row with invalid arity: {module}:{function}/{arity}"
                )

        return ignores

    @staticmethod
    def _cell(value: Any) -> str:
        """Normalize a table cell to a stripped string ('' for blanks)."""
        if value is None or (isinstance(value, float) and pd.isna(value)):
            return ""
        return str(value).strip()
