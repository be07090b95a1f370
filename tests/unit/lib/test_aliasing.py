from iam.lib.aliasing import alias_for, parse_recipients


def test_numeric_aliases():
    assert [alias_for(i) for i in range(3)] == ["agent1", "agent2", "agent3"]
    assert alias_for(0, prefix="worker") == "worker1"


def test_letter_aliases_wrap_with_suffix():
    assert alias_for(0, style="letters") == "agentA"
    assert alias_for(25, style="letters") == "agentZ"
    assert alias_for(26, style="letters") == "agentA1"
    assert alias_for(53, style="letters") == "agentB2"


def test_parse_recipients():
    assert parse_recipients(None) is None
    assert parse_recipients("  ") is None
    assert parse_recipients("All") is None
    assert parse_recipients("agent1") == ["agent1"]
    assert parse_recipients("agent1, agent3,,") == ["agent1", "agent3"]
