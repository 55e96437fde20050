"""
This module contains the exceptions raised by the scripthost framework.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from scripthost.dependency_models import MavenDependency


class ScripthostException(Exception):
    """
    Exceptions raised by the scripthost framework.
    """

    def __init__(self, message: str):
        """
        Initializes the exception with the given message.
        """
        super().__init__(message)
        self.message = message


class ConfigurationError(ScripthostException):
    """
    Raised when the configuration source cannot be read or parsed.

    There is no partial data to act on, so this is fatal to the operation
    that triggered the read.
    """


class LifecycleError(ScripthostException):
    """Raised on an illegal lifecycle transition."""


class InteropError(ScripthostException):
    """Raised by a host subsystem that cannot honour a register/unregister call."""


class FetchError(ScripthostException):
    """
    A single dependency could not be provisioned.

    Covers network failures, non-2xx responses and file-system errors. Never
    fatal to the provisioning run as a whole.
    """

    def __init__(
        self,
        dependency: "MavenDependency",
        message: str,
        expected_digest: Optional[str] = None,
        actual_digest: Optional[str] = None,
        rejected_path: Optional[str] = None,
    ):
        super().__init__(message)
        self.dependency = dependency
        self.expected_digest = expected_digest
        self.actual_digest = actual_digest
        self.rejected_path = rejected_path


class ChecksumMismatchError(FetchError):
    """
    The downloaded artifact does not match its published digest. The payload
    has been quarantined at ``rejected_path``.
    """
