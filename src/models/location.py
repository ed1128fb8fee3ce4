"""シンボルのソース位置情報モデル。"""

from dataclasses import dataclass
from typing import Optional
from enum import Enum


class LocationStatus(Enum):
    """位置解決の完全度。"""
    FOUND = "found"
    FUNCTION_NOT_FOUND = "function_not_found"
    MODULE_NOT_FOUND = "module_not_found"
    NO_DEBUG_INFO = "no_debug_info"


@dataclass(frozen=True)
class ResolvedLocation:
    """解決済みのソース位置（縮退形を含む）。"""
    status: LocationStatus
    file_path: Optional[str] = None
    line: Optional[int] = None

    @classmethod
    def found(cls, file_path: str, line: int) -> "ResolvedLocation":
        return cls(LocationStatus.FOUND, file_path, line)

    @classmethod
    def function_not_found(cls, file_path: str) -> "ResolvedLocation":
        return cls(LocationStatus.FUNCTION_NOT_FOUND, file_path)

    @classmethod
    def module_not_found(cls) -> "ResolvedLocation":
        return cls(LocationStatus.MODULE_NOT_FOUND)

    @classmethod
    def no_debug_info(cls) -> "ResolvedLocation":
        return cls(LocationStatus.NO_DEBUG_INFO)

    def prefix(self) -> str:
        """診断行の先頭に付ける位置文字列を返す。

        Returns:
            ``"<file>:<line>: "``、``"<file>: "`` または空文字列
        """
        if self.status is LocationStatus.FOUND:
            return f"{self.file_path}:{self.line}: "
        if self.status is LocationStatus.FUNCTION_NOT_FOUND:
            return f"{self.file_path}: "
        return ""

    def __str__(self) -> str:
        if self.status is LocationStatus.FOUND:
            return f"{self.file_path}:{self.line}"
        return self.file_path or self.status.value
