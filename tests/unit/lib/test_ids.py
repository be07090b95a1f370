import re

from iam.lib import ids


def test_message_ids_are_short_hex_and_unique():
    seen = {ids.message_id() for _ in range(500)}

    assert len(seen) == 500
    assert all(re.fullmatch(r"[0-9a-f]{8}", i) for i in seen)


def test_thread_id_format():
    assert re.fullmatch(r"thread_\d{13}_[0-9a-f]{6}", ids.thread_id())


def test_thread_ids_sort_by_creation():
    first = ids.thread_id()
    time_ms = int(first.split("_")[1])

    assert int(ids.thread_id().split("_")[1]) >= time_ms
