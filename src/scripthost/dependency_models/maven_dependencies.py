"""
Pydantic data models for the ``[dependencies]`` section of the host document.

Each entry describes one artifact hosted in a Maven-layout repository:

    [dependencies.gson]
    groupId = "com.google.code.gson"
    artifactId = "gson"
    version = "2.10.1"
    repository = "https://repo1.maven.org/maven2/"
"""

import posixpath
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from scripthost.scripthost_exceptions import ConfigurationError

CHECKSUM_SUFFIX = ".sha512"


class MavenDependency(BaseModel):
    """
    A Dependency Descriptor: group, artifact, version and source repository.

    Immutable once parsed. Everything else (storage path, download URLs) is
    derived from these fields.
    """

    key: str = Field(..., description="Key of the entry in the host document")
    group_id: str = Field(..., alias="groupId", description="Dotted group identifier")
    artifact_id: str = Field(..., alias="artifactId", description="Artifact identifier")
    version: str = Field(..., description="Version string")
    repository: str = Field(..., description="Base URL of the repository")
    extension: str = Field("jar", description="Artifact file extension")

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    @field_validator("group_id", "artifact_id", "version", "extension")
    @classmethod
    def _no_path_separators(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        if "/" in value or "\\" in value or value in (".", ".."):
            raise ValueError(f"{value!r} is not a valid coordinate")
        return value

    @field_validator("repository")
    @classmethod
    def _repository_is_http(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"{value!r} is not an http(s) URL")
        return value if value.endswith("/") else value + "/"

    @property
    def coordinates(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"

    @property
    def file_name(self) -> str:
        return f"{self.artifact_id}-{self.version}.{self.extension}"

    @property
    def relative_path(self) -> str:
        """
        Deterministic storage path, e.g. ``org/example/lib/1.0/lib-1.0.jar``.
        """
        return posixpath.join(
            self.group_id.replace(".", "/"),
            self.artifact_id,
            self.version,
            self.file_name,
        )

    @property
    def download_url(self) -> str:
        return self.repository + self.relative_path

    @property
    def checksum_url(self) -> str:
        return self.download_url + CHECKSUM_SUFFIX

    def message_pairs(self) -> List[str]:
        """Placeholder/value pairs used by console messages about this dependency."""
        return [
            "<key>", self.key,
            "<version>", self.version,
            "<groupId>", self.group_id,
            "<artifactId>", self.artifact_id,
            "<repository>", self.repository,
        ]

    @classmethod
    def from_record(cls, key: str, record: Mapping[str, Any]) -> "MavenDependency":
        """
        Parse one flat record from the host document.

        Raises:
            ConfigurationError: If the record is not a valid descriptor
        """
        if not isinstance(record, Mapping):
            raise ConfigurationError(f"Dependency entry {key!r} must be a table, got {type(record).__name__}")
        try:
            return cls(**{**record, "key": key})
        except ValidationError as e:
            raise ConfigurationError(f"Invalid dependency entry {key!r}: {e}") from e


class MavenDependenciesConfig(BaseModel):
    """
    All dependency records of a host document, keyed by entry name.

    Parsing is per entry: one malformed entry never hides the others.
    """

    dependencies: Dict[str, Any] = Field(default_factory=dict)

    def get_dependencies(self) -> Tuple[List[MavenDependency], Dict[str, str]]:
        """
        Returns:
            The parsed descriptors in document order, and a mapping of entry
            key to error message for entries that could not be parsed
        """
        parsed: List[MavenDependency] = []
        invalid: Dict[str, str] = {}
        for key, record in self.dependencies.items():
            try:
                parsed.append(MavenDependency.from_record(key, record))
            except ConfigurationError as e:
                invalid[key] = e.message
        return parsed, invalid

    def get_dependency(self, key: str) -> Optional[MavenDependency]:
        record = self.dependencies.get(key)
        if record is None:
            return None
        return MavenDependency.from_record(key, record)
