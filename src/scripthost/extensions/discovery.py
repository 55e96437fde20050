"""
Configuration sources and extension discovery.

Extensions are discovered from configuration keys: every ``[plugins.<folder>]``
entry names a folder under the scripts folder, and the source files in that
folder make up the extension unit.
"""

from __future__ import annotations

import os
import pathlib
import sys
from collections.abc import Mapping
from typing import Any, Dict, List, Protocol, Tuple

from scripthost.dependency_models import ExtensionManifest
from scripthost.extensions.models import ExtensionUnit
from scripthost.scripthost_exceptions import ConfigurationError

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

HOST_DOCUMENT = "scripthost.toml"


def load_host_document(document_path: str | os.PathLike) -> Dict[str, Any]:
    """
    Read a host document.

    Raises:
        ConfigurationError: If the document is missing or not valid TOML
    """
    try:
        with open(document_path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Failed to read {document_path}: {e}") from e


class ConfigurationSource(Protocol):
    """Supplies already-parsed configuration records."""

    def extension_records(self) -> Mapping[str, Any]:
        """Extension folder -> flat record, in document order."""
        ...

    def dependency_records(self) -> Mapping[str, Any]:
        """Dependency key -> flat record, in document order."""
        ...

    def list_source_files(self, folder: str) -> List[pathlib.Path]:
        """Source files of an extension folder."""
        ...


class StaticConfigurationSource:
    """Configuration held in memory; source files are listed from disk."""

    def __init__(
        self,
        extensions: Mapping[str, Any],
        scripts_folder: str | os.PathLike,
        dependencies: Mapping[str, Any] | None = None,
        source_suffix: str = ".py",
    ) -> None:
        self._extensions = dict(extensions)
        self._dependencies = dict(dependencies or {})
        self.scripts_folder = pathlib.Path(scripts_folder)
        self.source_suffix = source_suffix

    def extension_records(self) -> Mapping[str, Any]:
        return self._extensions

    def dependency_records(self) -> Mapping[str, Any]:
        return self._dependencies

    def list_source_files(self, folder: str) -> List[pathlib.Path]:
        directory = self.scripts_folder / folder
        if not directory.is_dir():
            return []
        return sorted(
            (path for path in directory.iterdir() if path.is_file() and path.name.endswith(self.source_suffix)),
            key=lambda path: path.name,
        )


class TomlConfigurationSource(StaticConfigurationSource):
    """
    Reads ``scripthost.toml`` on every access so that a reload sees the
    current document.
    """

    def __init__(self, document_path: str | os.PathLike, scripts_folder: str | os.PathLike, source_suffix: str = ".py") -> None:
        super().__init__({}, scripts_folder, source_suffix=source_suffix)
        self.document_path = pathlib.Path(document_path)

    def read_document(self) -> Dict[str, Any]:
        return load_host_document(self.document_path)

    def _section(self, name: str) -> Mapping[str, Any]:
        section = self.read_document().get(name, {})
        if not isinstance(section, Mapping):
            raise ConfigurationError(f"[{name}] in {self.document_path} must be a table")
        return section

    def extension_records(self) -> Mapping[str, Any]:
        return self._section("plugins")

    def dependency_records(self) -> Mapping[str, Any]:
        return self._section("dependencies")


def discover_units(source: ConfigurationSource) -> Tuple[List[ExtensionUnit], Dict[str, str]]:
    """
    Build the extension units described by ``source``.

    Returns:
        The units in document order, and a mapping of folder to error message
        for entries that could not be parsed

    Raises:
        ConfigurationError: If the configuration itself cannot be read
    """
    units: List[ExtensionUnit] = []
    invalid: Dict[str, str] = {}

    for folder, record in source.extension_records().items():
        try:
            manifest = ExtensionManifest.from_record(folder, record)
        except ConfigurationError as e:
            invalid[folder] = e.message
            continue

        units.append(
            ExtensionUnit(
                folder=manifest.folder,
                name=manifest.display_name,
                author=manifest.author,
                version=manifest.version,
                description=manifest.description,
                source_files=tuple(source.list_source_files(manifest.folder)),
            )
        )

    return units, invalid
