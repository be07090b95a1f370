"""Send operations: announce, broadcast, thread start/reply."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from iam.core.models import BroadcastResult, ParallelAgent, Thread
from iam.errors import MissingRequiredField, UnknownRecipient
from iam.lib import aliasing

if TYPE_CHECKING:
    from iam.core.coordinator import Coordinator

log = logging.getLogger(__name__)


def announce(coord: Coordinator, caller_id: str, description: str | None) -> tuple[str, list[ParallelAgent]]:
    """Set the caller's status; return its alias and everyone else's status."""
    alias = coord.registry.register_or_get_alias(caller_id)
    if not description or not description.strip():
        log.warning(f"announce from {alias} missing 'message'")
        raise MissingRequiredField("message")
    coord.registry.set_status(caller_id, description.strip())
    return alias, coord.registry.parallel_agents(caller_id)


def _reply_ids(reply_to: str | list[str] | None) -> list[str]:
    if not reply_to:
        return []
    if isinstance(reply_to, str):
        reply_to = reply_to.split(",")
    return [i.strip() for i in reply_to if i and i.strip()]


def broadcast(
    coord: Coordinator,
    caller_id: str,
    message: str | None,
    to: str | None = None,
    reply_to: str | list[str] | None = None,
    parent_id: str | None = None,
) -> BroadcastResult:
    """Queue ``message`` for each resolved recipient.

    ``to`` is an alias, a comma-separated list, ``all`` (or nothing) for every
    other known agent, or ``parent``. One unknown token aborts the whole send
    before anything is queued. The caller is never among the recipients.

    Raises:
        MissingRequiredField: ``message`` is empty.
        UnknownRecipient: a token did not resolve.
    """
    registry = coord.registry
    alias = registry.register_or_get_alias(caller_id)
    if not message:
        log.warning(f"broadcast from {alias} missing 'message'")
        raise MissingRequiredField("message")

    tokens = aliasing.parse_recipients(to)
    targets = registry.list_others(caller_id) if tokens is None else tokens
    if not targets:
        return BroadcastResult(targets=[], reason="no_agents")

    if parent_id is None and any(t.lower() == aliasing.PARENT for t in targets):
        parent_id = coord.parent_of(caller_id)

    recipients: list[str] = []
    for token in targets:
        try:
            recipient = registry.resolve(token, parent_id=parent_id, caller_id=caller_id)
        except UnknownRecipient:
            log.warning(f"broadcast from {alias}: unknown recipient {token}")
            raise
        if recipient == caller_id:
            log.warning(f"Skipping self-message from {alias} ({token})")
            continue
        if recipient not in recipients:
            recipients.append(recipient)

    if not recipients:
        return BroadcastResult(targets=targets, reason="self_only")

    handled = _reply_ids(reply_to)
    if handled:
        coord.mailbox.mark_handled(caller_id, handled)
        coord.mailbox.mark_read(caller_id, handled)

    delivered = []
    for recipient in recipients:
        delivered.append(coord.mailbox.send(alias, recipient, message))
        coord.mailbox.mark_read_from_sender(caller_id, registry.alias_of(recipient))

    if parent_id and parent_id in recipients:
        coord.notify_parent(parent_id, f"[IAM] Message from {alias}: {message}")

    return BroadcastResult(
        targets=targets,
        delivered=delivered,
        recipients=[registry.alias_of(r) for r in recipients],
    )


def start_thread(
    coord: Coordinator,
    caller_id: str,
    to: str,
    body: str | None,
    subject: str | None = None,
    thread_id: str | None = None,
) -> Thread | None:
    """Start a thread with ``to`` or post into ``thread_id``. None if ``to`` is the caller."""
    alias = coord.registry.register_or_get_alias(caller_id)
    if not body:
        raise MissingRequiredField("message")
    if not to:
        raise MissingRequiredField("to")
    parent_id = coord.parent_of(caller_id) if to.strip().lower() == aliasing.PARENT else None
    recipient = coord.registry.resolve(to, parent_id=parent_id, caller_id=caller_id)
    if recipient == caller_id and coord.threads.by_id(thread_id) is None:
        log.warning(f"Skipping self-thread from {alias}")
        return None
    return coord.threads.create_or_update_thread(
        caller_id, recipient, body, subject=subject, thread_id=thread_id
    )
