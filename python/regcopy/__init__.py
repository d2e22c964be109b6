"""
Copy container images between registries.

Images matching an include pattern are pulled from a source registry,
retagged and pushed to a destination registry through a local container
engine (docker, podman, ...). The orchestration lives in
``regcopy.copy_registry``, which also runs as ``python -m regcopy.copy_registry``.
"""

from regcopy.config_manager import ConfigManager, RegistryConfig
from regcopy.engine_client import EngineClient
from regcopy.registry_client import RegistryClient

__version__ = "0.1.0"

__all__ = [
    "ConfigManager",
    "EngineClient",
    "RegistryClient",
    "RegistryConfig",
]
