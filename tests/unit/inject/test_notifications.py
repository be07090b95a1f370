from iam.inject import notifications


def test_nothing_pending_yields_nothing(coord):
    coord.register("a")
    coord.register("b")

    assert notifications.collect(coord, "b") is None


def test_collect_marks_messages_read_but_not_thread_updates(coord):
    coord.register("a")
    coord.register("b")
    msg = coord.broadcast("a", "ping", to="agent2").delivered[0]
    thread = coord.start_thread("a", "agent2", "see file", subject="sync")

    note = notifications.collect(coord, "b")

    assert note.alias == "agent2"
    assert note.messages == [msg]
    assert [u.thread_id for u in note.thread_updates] == [thread.thread_id]
    assert note.aliases == {"a": "agent1"}
    assert msg.read is True
    assert coord.mailbox.unread("b") == []
    assert len(coord.threads.pending_for("b")) == 1

    again = notifications.collect(coord, "b")
    assert again.messages == []
    assert len(again.thread_updates) == 1


def test_collect_lists_other_agents_with_status(coord):
    coord.register("a")
    coord.register("b")
    coord.register("c")
    coord.announce("c", "profiling")
    coord.broadcast("a", "hi", to="agent2")

    note = notifications.collect(coord, "b")

    assert [(p.alias, p.description) for p in note.agents] == [("agent1", None), ("agent3", "profiling")]


def test_render_includes_actionable_items(coord):
    coord.register("a")
    coord.register("b")
    msg = coord.broadcast("a", "ping", to="agent2").delivered[0]
    thread = coord.start_thread("a", "agent2", "see file", subject="sync")

    text = notifications.render(notifications.collect(coord, "b"))

    assert "You are agent2" in text
    assert "1 unread message(s) and 1 thread update(s)" in text
    assert f"[{msg.message_id}] From: agent1" in text
    assert "Message: ping" in text
    assert f'Thread "sync" updated by agent1: read {thread.location}' in text
    assert "agent1 is running (hasn't announced yet)" in text


def test_envelopes(coord):
    coord.register("a")
    coord.register("b")
    msg = coord.broadcast("a", "ping", to="agent2").delivered[0]

    [env] = notifications.envelopes(notifications.collect(coord, "b"))

    assert env["tool"] == "iam_message"
    assert env["from"] == "agent1"
    assert env["message_id"] == msg.message_id
    assert "ping" in env["output"]
    assert f'reply_to="{msg.message_id}"' in env["output"]


def test_in_memory_thread_text_is_shown_once(memory_coord):
    coord = memory_coord
    coord.register("a")
    coord.register("b")
    thread = coord.start_thread("a", "agent2", "the secret plan body", subject="sync")

    text = notifications.render(notifications.collect(coord, "b"))

    assert f'Thread "sync" ({thread.thread_id}) updated by agent1: the secret plan body' in text
    assert "Read the thread file" not in text
    assert coord.threads.pending_for("b") == []
    assert notifications.collect(coord, "b") is None


def test_file_thread_update_survives_until_read(coord):
    coord.register("a")
    coord.register("b")
    thread = coord.start_thread("a", "agent2", "see file")

    notifications.collect(coord, "b")
    notifications.collect(coord, "b")

    assert len(coord.threads.pending_for("b")) == 1
    coord.file_read("b", thread.location)
    assert notifications.collect(coord, "b") is None
