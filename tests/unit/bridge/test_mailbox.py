import threading

import pytest

from iam.bridge.mailbox import MailboxStore


def test_send_queues_unread_message():
    store = MailboxStore()
    msg = store.send("agent1", "ses_b", "ping")

    unread = store.unread("ses_b")
    assert unread == [msg]
    assert msg.sender == "agent1"
    assert msg.body == "ping"
    assert msg.read is False
    assert msg.handled is False
    assert len(msg.message_id) == 8


def test_send_requires_recipient():
    with pytest.raises(ValueError):
        MailboxStore().send("agent1", "", "ping")


def test_unread_is_fifo_and_stable():
    store = MailboxStore()
    msgs = [store.send("agent1", "b", f"m{i}") for i in range(5)]

    store.mark_read("b", [msgs[2].message_id])

    assert [m.body for m in store.unread("b")] == ["m0", "m1", "m3", "m4"]
    assert [m.body for m in store.all("b")] == ["m0", "m1", "m2", "m3", "m4"]


def test_mark_all_read():
    store = MailboxStore()
    store.send("agent1", "b", "one")
    store.send("agent2", "b", "two")

    assert store.mark_all_read("b") == 2
    assert store.unread("b") == []
    assert store.mark_all_read("b") == 0


def test_mark_read_from_sender_leaves_others():
    store = MailboxStore()
    store.send("agent1", "c", "from one")
    store.send("agent2", "c", "from two")
    store.send("agent1", "c", "again one")

    assert store.mark_read_from_sender("c", "agent1") == 2
    assert [m.body for m in store.unread("c")] == ["from two"]


def test_mark_handled_is_idempotent_and_separate_from_read():
    store = MailboxStore()
    msg = store.send("agent1", "b", "question")

    assert store.mark_handled("b", [msg.message_id, "nope"]) == 1
    assert store.mark_handled("b", [msg.message_id]) == 0
    assert msg.handled is True
    assert msg.read is False


def test_flags_never_flip_back():
    store = MailboxStore()
    msg = store.send("agent1", "b", "x")
    store.mark_all_read("b")
    store.mark_handled("b", [msg.message_id])

    store.mark_read_from_sender("b", "agent1")
    store.mark_read("b", [msg.message_id])

    assert msg.read is True
    assert msg.handled is True


def test_get_and_empty_box():
    store = MailboxStore()
    msg = store.send("agent1", "b", "x")

    assert store.get("b", msg.message_id) is msg
    assert store.get("b", "missing") is None
    assert store.unread("nobody") == []


def test_concurrent_senders_to_different_recipients():
    store = MailboxStore()
    recipients = [f"r{i}" for i in range(8)]

    def flood(recipient):
        for n in range(200):
            store.send("agent1", recipient, str(n))

    workers = [threading.Thread(target=flood, args=(r,)) for r in recipients]
    for w in workers:
        w.start()
    for w in workers:
        w.join()

    for r in recipients:
        assert [m.body for m in store.all(r)] == [str(n) for n in range(200)]
