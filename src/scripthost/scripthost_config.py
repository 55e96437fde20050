"""
Configuration parameters for the script host.
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from scripthost.scripthost_exceptions import ConfigurationError


@dataclass
class ScripthostConfig:
    """
    Configuration parameters
    """

    data_folder: str
    libs_folder: Optional[str] = None
    scripts_folder: Optional[str] = None
    fetch_timeout: float = 30.0
    max_workers: Optional[int] = None
    placeholder_enabled: bool = False
    source_suffix: str = ".py"

    def __post_init__(self):
        if self.libs_folder is None:
            self.libs_folder = os.path.join(self.data_folder, "libs")
        if self.scripts_folder is None:
            self.scripts_folder = os.path.join(self.data_folder, "plugins")
        if isinstance(self.fetch_timeout, bool) or not isinstance(self.fetch_timeout, (int, float)):
            raise ConfigurationError(f"fetch_timeout must be a number, got {self.fetch_timeout!r}")
        if self.max_workers is not None and (isinstance(self.max_workers, bool) or not isinstance(self.max_workers, int)):
            raise ConfigurationError(f"max_workers must be an integer, got {self.max_workers!r}")
        if self.fetch_timeout <= 0:
            raise ConfigurationError(f"fetch_timeout must be positive, got {self.fetch_timeout}")
        if self.max_workers is not None and self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be at least 1, got {self.max_workers}")

    @classmethod
    def from_dict(cls, d: Dict[str, Any], data_folder: Optional[str] = None) -> "ScripthostConfig":
        """
        Create a ScripthostConfig instance from a dictionary.

        Relative folders are resolved against ``data_folder`` when given.
        """
        import inspect

        params = {k: v for k, v in d.items() if k in inspect.signature(cls).parameters}
        if data_folder is not None:
            base = params.get("data_folder", ".")
            params["data_folder"] = os.path.join(data_folder, base)
            for key in ("libs_folder", "scripts_folder"):
                if params.get(key) is not None:
                    params[key] = os.path.join(params["data_folder"], params[key])
        if "data_folder" not in params:
            raise ConfigurationError("Host configuration is missing 'data_folder'")
        return cls(**params)
