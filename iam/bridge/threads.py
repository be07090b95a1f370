"""Thread tracking: group conversations and coalesced update notifications.

A thread is reachable by id or by location (its backing file), whether it was
started here or detected in content another agent wrote. Each (thread,
recipient) pair holds at most one pending update; newer activity replaces it.
"""

import logging
import threading
from pathlib import Path, PurePath

from iam.core.models import MailHeader, PendingUpdate, Thread, ThreadPost, now_ms
from iam.lib import frontmatter, ids

log = logging.getLogger(__name__)

REPLY_MARK = "--- reply from {author} ---"


def same_location(a: str | None, b: str | None) -> bool:
    """Exact match, or one path is a trailing-component suffix of the other."""
    if not a or not b:
        return False
    if a == b:
        return True
    pa, pb = PurePath(a).parts, PurePath(b).parts
    shorter, longer = sorted((pa, pb), key=len)
    return bool(shorter) and longer[len(longer) - len(shorter) :] == shorter


def _union(participants: list[str], extra) -> None:
    for p in extra:
        if p and p not in participants:
            participants.append(p)


class ThreadTracker:
    def __init__(self, inbox_dir: Path | None = None):
        self.inbox_dir = inbox_dir
        self._lock = threading.RLock()
        self._threads: dict[str, Thread] = {}
        self._pending: dict[str, dict[str, PendingUpdate]] = {}
        self._membership: dict[str, dict[str, None]] = {}
        self._departed: set[str] = set()

    def by_id(self, thread_id: str | None) -> Thread | None:
        if not thread_id:
            return None
        return self._threads.get(thread_id)

    def by_location(self, location: str | None) -> Thread | None:
        if not location:
            return None
        with self._lock:
            for thread in self._threads.values():
                if same_location(thread.location, location):
                    return thread
        return None

    def threads_for(self, agent_id: str) -> list[Thread]:
        with self._lock:
            return [self._threads[t] for t in self._membership.get(agent_id, {}) if t in self._threads]

    def _track_membership(self, thread: Thread) -> None:
        for p in thread.participants:
            if p not in self._departed:
                self._membership.setdefault(p, {})[thread.thread_id] = None

    def _touch(self, thread: Thread, author: str, participants) -> None:
        thread.updated_at = max(now_ms(), thread.created_at)
        thread.last_author = author
        _union(thread.participants, participants)

    def _write_backing(self, thread: Thread, sender: str, to: str, body: str) -> str | None:
        path = self.inbox_dir / f"{thread.thread_id}.md"
        header = MailHeader(
            to=to,
            sender=sender,
            subject=thread.subject,
            thread=thread.thread_id,
            participants=list(thread.participants),
        )
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(frontmatter.compose(header, body), encoding="utf-8")
        except OSError as e:
            log.warning(f"Could not write thread file {path}: {e}")
            return None
        return str(path)

    def _append_backing(self, thread: Thread, sender: str, body: str) -> None:
        """Append a reply to the thread's file, refreshing its participant list."""
        path = Path(thread.location)
        reply = f"{REPLY_MARK.format(author=sender)}\n{body}"
        try:
            parsed = frontmatter.parse(path.read_text(encoding="utf-8"))
            if parsed.header is None:
                content = f"{parsed.body}\n\n{reply}"
            else:
                parsed.header.participants = list(thread.participants)
                content = frontmatter.compose(parsed.header, f"{parsed.body}\n\n{reply}")
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            log.warning(f"Could not append to thread file {path}: {e}")

    def create_or_update_thread(
        self,
        sender: str,
        to: str,
        body: str,
        subject: str | None = None,
        location: str | None = None,
        thread_id: str | None = None,
    ) -> Thread:
        """Post ``body`` to a thread, creating it (and its file) when unknown.

        Matching precedence: ``thread_id`` first, then ``location``. A reply to a
        file-backed thread is appended to that file unless ``location`` says the
        content already lives there. Queues an update for every participant
        except ``sender`` and clears the sender's own.
        """
        with self._lock:
            self._departed.difference_update((sender, to))
            thread = self.by_id(thread_id) or self.by_location(location)
            if thread:
                self._touch(thread, sender, [sender, to])
                if location is None and thread.location:
                    self._append_backing(thread, sender, body)
            else:
                thread = Thread(
                    thread_id=thread_id or ids.thread_id(),
                    participants=[p for p in dict.fromkeys([sender, to]) if p],
                    last_author=sender,
                    location=location,
                    subject=subject,
                )
                if location is None and self.inbox_dir is not None:
                    thread.location = self._write_backing(thread, sender, to, body)
                self._threads[thread.thread_id] = thread
                log.info(f"Thread {thread.thread_id} created by {sender} ({thread.location or 'in-memory'})")
            thread.posts.append(ThreadPost(author=sender, body=body))
            self._track_membership(thread)
            self.queue_update(thread, sender, body=None if thread.location else body)
            self.mark_thread_read(sender, thread.thread_id)
        return thread

    def track_external_thread(
        self,
        location: str,
        sender: str,
        to: str,
        thread_id: str | None = None,
        subject: str | None = None,
        participants: list[str] | None = None,
    ) -> Thread:
        """Register a thread detected in externally written content. Does not queue updates."""
        members = list(participants or []) + [sender, to]
        with self._lock:
            self._departed.discard(sender)
            thread = self.by_id(thread_id) or self.by_location(location)
            if thread:
                self._touch(thread, sender, members)
                if thread.location is None:
                    thread.location = location
            else:
                thread = Thread(
                    thread_id=thread_id or ids.thread_id(),
                    participants=[p for p in dict.fromkeys(members) if p],
                    last_author=sender,
                    location=location,
                    subject=subject,
                )
                self._threads[thread.thread_id] = thread
                log.info(f"Tracking external thread {thread.thread_id} at {location}")
            self._track_membership(thread)
        return thread

    def queue_update(self, thread: Thread, sender: str, body: str | None = None) -> list[PendingUpdate]:
        """Upsert one pending update per participant other than ``sender`` (latest wins).

        Participants removed by ``cleanup`` are skipped.
        """
        queued = []
        timestamp = now_ms()
        with self._lock:
            for participant in thread.participants:
                if participant == sender or participant in self._departed:
                    continue
                update = PendingUpdate(
                    thread_id=thread.thread_id,
                    sender=sender,
                    recipient=participant,
                    location=thread.location,
                    subject=thread.subject,
                    body=body,
                    timestamp=timestamp,
                )
                self._pending.setdefault(participant, {})[thread.thread_id] = update
                queued.append(update)
        log.debug(f"Queued {len(queued)} update(s) for thread {thread.thread_id}")
        return queued

    def pending_for(self, recipient: str) -> list[PendingUpdate]:
        with self._lock:
            return list(self._pending.get(recipient, {}).values())

    def all_pending(self) -> list[PendingUpdate]:
        with self._lock:
            return [u for updates in self._pending.values() for u in updates.values()]

    def _consume(self, recipient: str, match) -> int:
        with self._lock:
            updates = self._pending.get(recipient, {})
            consumed = [tid for tid, u in updates.items() if match(u)]
            for tid in consumed:
                updates.pop(tid).read = True
        return len(consumed)

    def mark_read(self, recipient: str, location: str) -> int:
        """Clear the recipient's update for the thread stored at ``location``."""
        count = self._consume(recipient, lambda u: same_location(u.location, location))
        if count:
            log.info(f"{recipient} read thread at {location}")
        return count

    def mark_thread_read(self, recipient: str, thread_id: str) -> int:
        return self._consume(recipient, lambda u: u.thread_id == thread_id)

    def mark_delivered(self, update: PendingUpdate) -> int:
        """Clear ``update`` unless newer activity has replaced it since it was shown."""
        return self._consume(update.recipient, lambda u: u is update)

    def cleanup(self, agent_id: str) -> None:
        """Stop tracking ``agent_id``. It stays in participant lists but gets no further updates."""
        with self._lock:
            self._departed.add(agent_id)
            self._pending.pop(agent_id, None)
            self._membership.pop(agent_id, None)
