"""iam: inter-agent messaging core.

Identity registry, mailboxes, thread tracking, spawn hierarchy and the
per-turn notification injector, all owned by one ``Coordinator``.
"""

from .core.coordinator import Coordinator
from .errors import IamError, MissingRequiredField, UnknownRecipient

__all__ = ["Coordinator", "IamError", "MissingRequiredField", "UnknownRecipient"]
