"""The coordinator owns every store for one process and exposes the core operations."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from iam.bridge import detect, messaging
from iam.bridge.mailbox import MailboxStore
from iam.bridge.threads import ThreadTracker
from iam.inject import notifications
from iam.lib import paths
from iam.spawn.registry import IdentityRegistry
from iam.spawn.siblings import SiblingRegistry

from .models import BroadcastResult, Notification, ParallelAgent, Thread

log = logging.getLogger(__name__)

ParentLookup = Callable[[str], "str | None"]
ParentNotifier = Callable[[str, str], None]


class Coordinator:
    """Explicit process-wide state: identities, mailboxes, threads, spawn edges.

    Construct one per process (or per test) and pass it to every operation.

    Args:
        parent_lookup: host callback returning an agent's parent id; answers are cached.
        parent_notifier: host callback nudging a parent when a child messages it.
            Best effort: failures are logged, never raised.
    """

    def __init__(
        self,
        *,
        alias_prefix: str = "agent",
        alias_style: str = "numeric",
        inbox_dir: Path | None = None,
        parent_lookup: ParentLookup | None = None,
        parent_notifier: ParentNotifier | None = None,
    ):
        self.registry = IdentityRegistry(alias_prefix, alias_style)
        self.siblings = SiblingRegistry()
        self.mailbox = MailboxStore()
        self.threads = ThreadTracker(inbox_dir)
        self.parent_lookup = parent_lookup
        self.parent_notifier = parent_notifier
        self._parent_cache: dict[str, str | None] = {}

    @classmethod
    def from_config(cls, cfg: dict, **hooks) -> Coordinator:
        return cls(
            alias_prefix=cfg["alias_prefix"],
            alias_style=cfg["alias_style"],
            inbox_dir=paths.inbox_dir(cfg["inbox_dir"]),
            **hooks,
        )

    # identity

    def register(self, agent_id: str) -> str:
        return self.registry.register_or_get_alias(agent_id)

    def statuses(self, excluding_id: str | None = None) -> list[ParallelAgent]:
        """Who is working on what, for presentation by the host."""
        return self.registry.parallel_agents(excluding_id)

    # hierarchy

    def spawned(self, child_id: str, parent_id: str, description: str | None = None) -> str:
        """Spawn-completion hook: register the child and its parent edge."""
        alias = self.registry.register_or_get_alias(child_id)
        self.siblings.register(child_id, parent_id, description)
        self._parent_cache[child_id] = parent_id
        return alias

    def parent_of(self, agent_id: str) -> str | None:
        parent_id = self.siblings.parent_of(agent_id)
        if parent_id:
            return parent_id
        if agent_id in self._parent_cache:
            return self._parent_cache[agent_id]
        if self.parent_lookup is None:
            return None
        try:
            parent_id = self.parent_lookup(agent_id) or None
        except Exception as e:
            log.warning(f"Parent lookup failed for {agent_id}: {e}")
            parent_id = None
        self._parent_cache[agent_id] = parent_id
        log.debug(f"Looked up parent of {agent_id}: {parent_id}")
        return parent_id

    def siblings_of(self, agent_id: str) -> list[str]:
        return self.siblings.siblings_of(agent_id)

    def children_of(self, parent_id: str) -> list[str]:
        return self.siblings.children_of(parent_id)

    def notify_parent(self, parent_id: str, text: str) -> bool:
        if self.parent_notifier is None:
            return False
        try:
            self.parent_notifier(parent_id, text)
        except Exception as e:
            log.warning(f"Failed to notify parent {parent_id}: {e}")
            return False
        log.info(f"Parent {parent_id} notified")
        return True

    # messaging

    def announce(self, caller_id: str, description: str | None) -> tuple[str, list[ParallelAgent]]:
        return messaging.announce(self, caller_id, description)

    def broadcast(
        self,
        caller_id: str,
        message: str | None,
        to: str | None = None,
        reply_to: str | list[str] | None = None,
        parent_id: str | None = None,
    ) -> BroadcastResult:
        return messaging.broadcast(self, caller_id, message, to, reply_to, parent_id)

    def start_thread(
        self,
        caller_id: str,
        to: str,
        body: str | None,
        subject: str | None = None,
        thread_id: str | None = None,
    ) -> Thread | None:
        return messaging.start_thread(self, caller_id, to, body, subject, thread_id)

    def file_written(self, caller_id: str, path: str | Path, content: str) -> Thread | None:
        return detect.on_file_written(self, caller_id, path, content)

    def file_read(self, caller_id: str, path: str | Path) -> int:
        return detect.on_file_read(self, caller_id, path)

    # turn hook

    def deliver(self, recipient_id: str) -> Notification | None:
        return notifications.collect(self, recipient_id)

    def cleanup(self, agent_id: str) -> None:
        """Forget a finished agent. Its mailbox is kept; its alias is never reused."""
        self.threads.cleanup(agent_id)
        self.siblings.cleanup(agent_id)
        self._parent_cache.pop(agent_id, None)
        self.registry.forget(agent_id)
        log.info(f"Cleaned up {agent_id}")
