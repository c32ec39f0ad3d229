"""Backend services."""

from .executor import execute_flow_remote
from .settings import ServerSettings, available_providers, load_settings

__all__ = ["ServerSettings", "available_providers", "execute_flow_remote", "load_settings"]
