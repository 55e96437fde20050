"""
Data models for the host document.

This package provides Pydantic models for the dependency descriptors and
extension manifests read from ``scripthost.toml``.
"""

from .maven_dependencies import (
    CHECKSUM_SUFFIX,
    MavenDependenciesConfig,
    MavenDependency,
)
from .extension_manifests import ExtensionManifest

__all__ = [
    "CHECKSUM_SUFFIX",
    "MavenDependenciesConfig",
    "MavenDependency",
    "ExtensionManifest",
]
