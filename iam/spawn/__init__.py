"""Agent identity and spawn hierarchy."""

from .registry import IdentityRegistry
from .siblings import SiblingRegistry

__all__ = ["IdentityRegistry", "SiblingRegistry"]
