"""Extension lifecycle surface."""

from scripthost.extensions.coordinator import LifecycleCoordinator
from scripthost.extensions.discovery import (
    ConfigurationSource,
    StaticConfigurationSource,
    TomlConfigurationSource,
    discover_units,
)
from scripthost.extensions.executor import (
    ExecutorFactory,
    HostApi,
    PythonScriptExecutor,
    ScriptExecutor,
    python_executor_factory,
)
from scripthost.extensions.interop import EasyListenerRegistry, HostInterop, HostSubsystem, InteropRegistry
from scripthost.extensions.models import (
    TEARDOWN_ORDER,
    ExtensionFailure,
    ExtensionUnit,
    InteropKind,
    InteropRegistration,
    LifecycleState,
    teardown_stages,
)
from scripthost.extensions.registry import ExtensionRegistry

__all__ = [
    "TEARDOWN_ORDER",
    "ConfigurationSource",
    "EasyListenerRegistry",
    "ExecutorFactory",
    "ExtensionFailure",
    "ExtensionRegistry",
    "ExtensionUnit",
    "HostApi",
    "HostInterop",
    "HostSubsystem",
    "InteropKind",
    "InteropRegistration",
    "InteropRegistry",
    "LifecycleCoordinator",
    "LifecycleState",
    "PythonScriptExecutor",
    "ScriptExecutor",
    "StaticConfigurationSource",
    "TomlConfigurationSource",
    "discover_units",
    "python_executor_factory",
    "teardown_stages",
]
