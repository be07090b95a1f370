"""Bridge: mailboxes, threads and the send operations built on them."""

from .mailbox import MailboxStore
from .threads import ThreadTracker, same_location

__all__ = ["MailboxStore", "ThreadTracker", "same_location"]
