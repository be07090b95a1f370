"""Thread detection from files the host saw an agent write or read."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from iam.core.models import Thread
from iam.errors import UnknownRecipient
from iam.lib import aliasing, frontmatter

if TYPE_CHECKING:
    from iam.core.coordinator import Coordinator

log = logging.getLogger(__name__)


def _resolve(coord: Coordinator, token: str, caller_id: str) -> str:
    parent_id = coord.parent_of(caller_id) if token.lower() == aliasing.PARENT else None
    return coord.registry.resolve(token, parent_id=parent_id, caller_id=caller_id)


def on_file_written(coord: Coordinator, caller_id: str, path: str | Path, content: str) -> Thread | None:
    """Track a written file as a thread if it carries conversation metadata.

    Every other participant gets a pending update; the writer's own update for
    the file is cleared since it has just seen the content.
    """
    if not frontmatter.has_frontmatter_prefix(content):
        return None
    header = frontmatter.parse(content).header
    if header is None:
        return None

    location = str(path)
    coord.registry.register_or_get_alias(caller_id)
    try:
        to = _resolve(coord, header.to, caller_id)
    except UnknownRecipient as e:
        log.warning(f"Ignoring thread file {location}: unknown recipient {e.recipient}")
        return None

    participants = []
    for token in header.participants or []:
        try:
            participants.append(_resolve(coord, token, caller_id))
        except UnknownRecipient:
            log.debug(f"Dropping unknown participant {token} from {location}")

    thread = coord.threads.track_external_thread(
        location,
        caller_id,
        to,
        thread_id=header.thread,
        subject=header.subject,
        participants=participants,
    )
    coord.threads.queue_update(thread, caller_id)
    coord.threads.mark_read(caller_id, location)
    return thread


def on_file_read(coord: Coordinator, caller_id: str, path: str | Path) -> int:
    """The caller looked at a thread file: consume its pending update."""
    return coord.threads.mark_read(caller_id, str(path))
