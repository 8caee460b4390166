"""Response providers: simulated and remote model variants."""

from .base import ResponseProvider, prompt_history
from .remote import RemoteResponseProvider
from .simulated import SimulatedResponseProvider

__all__ = [
    "ResponseProvider",
    "RemoteResponseProvider",
    "SimulatedResponseProvider",
    "prompt_history",
]
