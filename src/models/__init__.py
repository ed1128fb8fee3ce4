"""Data models for cross-reference analysis."""

from .symbol import Symbol
from .finding import Finding, CheckKind, ALL_CHECKS
from .location import ResolvedLocation, LocationStatus
from .ignores import ProjectIgnores
from .artifact import (
    ModuleArtifact,
    ModuleAttributes,
    FunctionDef,
    CallRef,
    DebugInfo,
    SYNTHESIZED_FUNCTIONS,
)

__all__ = [
    "Symbol",
    "Finding",
    "CheckKind",
    "ALL_CHECKS",
    "ResolvedLocation",
    "LocationStatus",
    "ProjectIgnores",
    "ModuleArtifact",
    "ModuleAttributes",
    "FunctionDef",
    "CallRef",
    "DebugInfo",
    "SYNTHESIZED_FUNCTIONS",
]
