"""Document Agent package."""

from .config import AgentConfig, ModelSettings
from .workspace import Workspace

__all__ = ["AgentConfig", "ModelSettings", "Workspace"]
