"""Shared data models and types."""

import time
from dataclasses import dataclass, field


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Agent:
    """A registered agent: opaque host id plus the alias other agents address it by."""

    agent_id: str
    alias: str
    description: str | None = None
    registered_at: int = field(default_factory=now_ms)


@dataclass
class Message:
    """A direct message queued in exactly one recipient mailbox.

    ``sender`` is the sender's alias; ``recipient`` is the recipient's raw id.
    ``read`` and ``handled`` only ever flip from False to True.
    """

    message_id: str
    sender: str
    recipient: str
    body: str
    timestamp: int = field(default_factory=now_ms)
    read: bool = False
    handled: bool = False


@dataclass
class ThreadPost:
    author: str
    body: str
    timestamp: int = field(default_factory=now_ms)


@dataclass
class Thread:
    """A tracked multi-party conversation.

    ``posts`` holds what was said through this tracker; a thread with a
    location also keeps its full text in the backing file.
    """

    thread_id: str
    participants: list[str]
    last_author: str
    location: str | None = None
    subject: str | None = None
    created_at: int = field(default_factory=now_ms)
    updated_at: int = 0
    posts: list[ThreadPost] = field(default_factory=list)

    def __post_init__(self):
        self.updated_at = max(self.updated_at, self.created_at)


@dataclass
class PendingUpdate:
    """Latest unconsumed thread activity for one (thread, recipient) pair."""

    thread_id: str
    sender: str
    recipient: str
    location: str | None = None
    subject: str | None = None
    body: str | None = None
    timestamp: int = field(default_factory=now_ms)
    read: bool = False


@dataclass
class MailHeader:
    """Conversation metadata detected in externally authored content.

    ``to`` is required; everything else is optional.
    """

    to: str
    sender: str | None = None
    subject: str | None = None
    thread: str | None = None
    participants: list[str] | None = None


@dataclass
class ParallelAgent:
    alias: str
    description: str | None = None


@dataclass
class BroadcastResult:
    """Outcome of a send. An empty ``delivered`` list is a no-op, not a failure.

    recipients: aliases actually delivered to, in send order.
    reason: "no_agents" when nobody else is known, "self_only" when every
    target resolved to the caller.
    """

    targets: list[str]
    delivered: list[Message] = field(default_factory=list)
    recipients: list[str] = field(default_factory=list)
    reason: str | None = None

    @property
    def no_recipients(self) -> bool:
        return not self.delivered

    @property
    def message_id(self) -> str | None:
        return self.delivered[-1].message_id if self.delivered else None


@dataclass
class Notification:
    """Everything one agent must see on its next turn."""

    recipient: str
    alias: str
    agents: list[ParallelAgent] = field(default_factory=list)
    messages: list[Message] = field(default_factory=list)
    thread_updates: list[PendingUpdate] = field(default_factory=list)
    aliases: dict[str, str] = field(default_factory=dict)

    @property
    def empty(self) -> bool:
        return not self.messages and not self.thread_updates
