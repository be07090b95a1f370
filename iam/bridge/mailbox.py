"""Per-recipient message queues with read/handled tracking."""

import logging
import threading
from collections.abc import Iterable

from iam.core.models import Message
from iam.lib import ids

log = logging.getLogger(__name__)


class _Box:
    def __init__(self):
        self.lock = threading.Lock()
        self.messages: list[Message] = []


class MailboxStore:
    """FIFO queue per recipient id.

    Each recipient's queue has its own lock, so senders writing to different
    recipients never contend. Messages are never removed.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._boxes: dict[str, _Box] = {}

    def _box(self, recipient: str) -> _Box:
        box = self._boxes.get(recipient)
        if box is None:
            with self._lock:
                box = self._boxes.setdefault(recipient, _Box())
        return box

    def send(self, sender: str, recipient: str, body: str) -> Message:
        if not recipient:
            raise ValueError("recipient is required")
        message = Message(message_id=ids.message_id(), sender=sender, recipient=recipient, body=body)
        box = self._box(recipient)
        with box.lock:
            box.messages.append(message)
        log.info(f"Message {message.message_id} queued: {sender} -> {recipient} ({len(body)} chars)")
        return message

    def all(self, recipient: str) -> list[Message]:
        box = self._box(recipient)
        with box.lock:
            return list(box.messages)

    def unread(self, recipient: str) -> list[Message]:
        return [m for m in self.all(recipient) if not m.read]

    def get(self, recipient: str, message_id: str) -> Message | None:
        return next((m for m in self.all(recipient) if m.message_id == message_id), None)

    def _mark(self, recipient: str, predicate, attr: str) -> int:
        box = self._box(recipient)
        count = 0
        with box.lock:
            for message in box.messages:
                if not getattr(message, attr) and predicate(message):
                    setattr(message, attr, True)
                    count += 1
        return count

    def mark_all_read(self, recipient: str) -> int:
        count = self._mark(recipient, lambda m: True, "read")
        log.info(f"Marked {count} read for {recipient}")
        return count

    def mark_read(self, recipient: str, message_ids: Iterable[str]) -> int:
        wanted = set(message_ids)
        return self._mark(recipient, lambda m: m.message_id in wanted, "read")

    def mark_read_from_sender(self, recipient: str, sender: str) -> int:
        """Mark only ``sender``'s unread messages; other senders stay pending."""
        count = self._mark(recipient, lambda m: m.sender == sender, "read")
        if count:
            log.info(f"Marked {count} from {sender} read for {recipient}")
        return count

    def mark_handled(self, recipient: str, message_ids: Iterable[str]) -> int:
        """Acknowledge messages by id. Already-handled and unknown ids are ignored."""
        wanted = set(message_ids)
        return self._mark(recipient, lambda m: m.message_id in wanted, "handled")
