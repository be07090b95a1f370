"""Build the per-turn payload for one agent and apply its state transition.

Direct messages self-clear on delivery. Thread updates persist until the
recipient reads the thread's backing location; a thread with no backing file
carries its text in the update and clears once shown.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from iam.core.models import Notification

from . import prompts

if TYPE_CHECKING:
    from iam.core.coordinator import Coordinator

log = logging.getLogger(__name__)


def collect(coord: Coordinator, recipient_id: str) -> Notification | None:
    """Snapshot pending work for ``recipient_id``; None when there is nothing to surface.

    Only the messages included in the snapshot are marked read, so anything
    queued while the snapshot is taken waits for the next turn.
    """
    messages = coord.mailbox.unread(recipient_id)
    updates = coord.threads.pending_for(recipient_id)
    if not messages and not updates:
        return None

    registry = coord.registry
    note = Notification(
        recipient=recipient_id,
        alias=registry.alias_of(recipient_id),
        agents=registry.parallel_agents(recipient_id),
        messages=messages,
        thread_updates=updates,
        aliases={u.sender: registry.alias_of(u.sender) for u in updates},
    )
    coord.mailbox.mark_read(recipient_id, [m.message_id for m in messages])
    for update in updates:
        if update.location is None:
            coord.threads.mark_delivered(update)
    log.info(
        f"Injecting {len(messages)} message(s), {len(updates)} thread update(s) for {note.alias}"
    )
    return note


def render(note: Notification) -> str:
    return prompts.notification(note)


def envelopes(note: Notification) -> list[dict]:
    return [prompts.message_envelope(m) for m in note.messages]
