"""
Pydantic model for the ``[plugins]`` section of the host document.

    [plugins.greeter]
    name = "Greeter"
    author = "someone"
    version = "1.0.0"
    description = "Says hello"
"""

from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from scripthost.scripthost_exceptions import ConfigurationError


class ExtensionManifest(BaseModel):
    """Metadata of one extension folder."""

    folder: str = Field(..., description="Folder under the scripts folder")
    name: Optional[str] = Field(None, description="Display name, defaults to the folder")
    author: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="allow")

    @property
    def display_name(self) -> str:
        return self.name or self.folder

    @classmethod
    def from_record(cls, folder: str, record: Optional[Mapping[str, Any]]) -> "ExtensionManifest":
        if folder in ("", ".", "..") or "/" in folder or "\\" in folder:
            raise ConfigurationError(f"Extension folder {folder!r} is not a plain folder name")
        if record is None:
            record = {}
        if not isinstance(record, Mapping):
            raise ConfigurationError(f"Extension entry {folder!r} must be a table, got {type(record).__name__}")
        try:
            return cls(folder=folder, **{k: v for k, v in record.items() if k != "folder"})
        except ValidationError as e:
            raise ConfigurationError(f"Invalid extension entry {folder!r}: {e}") from e
