"""
Console reporting for operators.

Messages are looked up by key and rendered by substituting ``<placeholder>``
tokens from a flat list of placeholder/value pairs, e.g.::

    reporter.send_by_key(
        ConsoleMessageType.ERROR,
        "script-register-error",
        "<script_name>", "greeter.py",
        "<message>", "boom",
    )
"""

import logging
from enum import Enum
from typing import Dict, Optional, Tuple

from scripthost.scripthost_logger import ScripthostLogger


class ConsoleMessageType(Enum):
    """Severity of a console message."""

    NORMAL = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR


DEFAULT_MESSAGES: Dict[str, str] = {
    "maven-dependency-exists": "Dependency <groupId>:<artifactId>:<version> already present, skipping download.",
    "maven-dependency-start-download": "Downloading <groupId>:<artifactId>:<version> from <repository>.",
    "maven-dependency-download-error": "Unable to provision dependency <key>, message: <message>.",
    "libs-download-sha512-done": "Dependency <groupId>:<artifactId>:<version> downloaded and verified.",
    "libs-download-sha512-error": (
        "Dependency <groupId>:<artifactId>:<version> failed verification: expected sha512 <expected_sha512>, "
        "got <err_sha512>. The artifact was kept as <new_file_name>."
    ),
    "extension-unit-discovered": "Discovered extension <name> (<source_count> source files) in <folder>.",
    "extension-unit-invalid": "Skipping extension entry <folder>, message: <message>.",
    "script-registered": "Script successfully registered: <script_name>.",
    "script-register-error": "Unable to register script: <script_name>, message: <message>.",
    "script-hook-error": "Hook <hook> of script <script_name> failed, message: <message>.",
    "interop-unregister-error": "Unable to unregister <kind> <handle> of <script_name>, message: <message>.",
    "interop-unregistered": "Unregistered <count> <kind> registrations.",
}


def render(template: str, *pairs: str) -> str:
    """Substitute ``pairs`` (placeholder, value, placeholder, value, ...) into ``template``."""
    if len(pairs) % 2 != 0:
        raise ValueError(f"Placeholder pairs must come in twos, got {len(pairs)} items")

    for placeholder, value in zip(pairs[::2], pairs[1::2]):
        template = template.replace(placeholder, str(value))
    return template


class ConsoleReporter:
    """
    Sends keyed, templated messages to the scripthost log.
    """

    def __init__(self, logger: ScripthostLogger, messages: Optional[Dict[str, str]] = None):
        self.logger = logger
        self.messages = dict(DEFAULT_MESSAGES)
        if messages:
            self.messages.update(messages)

    def send(self, message_type: ConsoleMessageType, template: str, *pairs: str) -> str:
        """Render ``template`` and log it. Returns the rendered text."""
        return self._send(message_type, template, pairs)

    def send_by_key(self, message_type: ConsoleMessageType, key: str, *pairs: str) -> str:
        """Render the template registered under ``key``. Unknown keys are logged verbatim."""
        return self._send(message_type, self.messages.get(key, key), pairs)

    def _send(self, message_type: ConsoleMessageType, template: str, pairs: Tuple[str, ...]) -> str:
        text = render(template, *pairs)
        # Report the caller of send/send_by_key, not this module.
        self.logger.log(text, message_type.value, stacklevel=3)
        return text
