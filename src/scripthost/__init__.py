"""
scripthost hosts independently authored script extensions inside a
long-running application.

It provisions the third-party artifacts extensions depend on and coordinates
the load, unload and reload of every extension across the host's command,
listener and placeholder subsystems.
"""

from scripthost.host_runner import HostRunner
from scripthost.scripthost_config import ScripthostConfig
from scripthost.scripthost_logger import ScripthostLogger

__all__ = ["HostRunner", "ScripthostConfig", "ScripthostLogger"]
