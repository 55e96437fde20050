"""
Dependency configuration management.

This package handles:
1. Parsing dependency records from the host document
2. Deriving the deterministic storage path of every artifact
3. Tracking download plans and dependency states across download threads
"""

from .config_manager import (
    DependencyConfigManager,
    DependencyState,
    DownloadPlan,
    DownloadStatus,
    ResolvedDependency,
)

__all__ = [
    "DependencyConfigManager",
    "DependencyState",
    "DownloadPlan",
    "DownloadStatus",
    "ResolvedDependency",
]
