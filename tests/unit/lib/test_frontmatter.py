from iam.core.models import MailHeader
from iam.lib import frontmatter


def test_parse_full_header():
    content = (
        "---\n"
        "mail: true\n"
        "to: agent2\n"
        "from: agent1\n"
        "subject: Re: schema change\n"
        "thread: thread_1700000000000_a1b2c3\n"
        "participants: [agent1, agent2]\n"
        "---\n"
        "Can we rename the column?\n"
    )

    parsed = frontmatter.parse(content)

    assert parsed.is_mail
    assert parsed.header == MailHeader(
        to="agent2",
        sender="agent1",
        subject="Re: schema change",
        thread="thread_1700000000000_a1b2c3",
        participants=["agent1", "agent2"],
    )
    assert parsed.body == "Can we rename the column?"


def test_parse_comma_participants():
    parsed = frontmatter.parse("---\nmail: true\nto: agent2\nparticipants: agent1, agent3\n---\nx")

    assert parsed.header.participants == ["agent1", "agent3"]


def test_no_frontmatter():
    parsed = frontmatter.parse("just text")

    assert not parsed.is_mail
    assert parsed.body == "just text"
    assert not frontmatter.has_frontmatter_prefix("just text")


def test_mail_flag_required():
    assert frontmatter.parse("---\nto: agent2\n---\nx").header is None
    assert frontmatter.parse("---\nmail: false\nto: agent2\n---\nx").header is None
    assert frontmatter.parse("---\nmail: yes please\nto: agent2\n---\nx").header is None


def test_recipient_required():
    assert frontmatter.parse("---\nmail: true\n---\nx").header is None
    assert frontmatter.parse("---\nmail: true\nto:\n---\nx").header is None


def test_malformed_fields_degrade_to_not_mail():
    assert frontmatter.parse("---\nmail: true\nto: [agent1, agent2]\n---\nx").header is None
    assert frontmatter.parse("---\nmail: true\nto: agent2\nsubject: true\n---\nx").header is None
    assert frontmatter.parse("---\nmail: true\nto: agent2\nparticipants: 5\n---\nx").header is None


def test_unknown_keys_ignored():
    parsed = frontmatter.parse("---\nmail: true\nto: agent2\npriority: high\n---\nx")

    assert parsed.header.to == "agent2"


def test_compose_then_parse():
    header = MailHeader(to="agent2", sender="agent1", subject="  multi\nline  ", participants=["a", "b"])

    parsed = frontmatter.parse(frontmatter.compose(header, "hello"))

    assert parsed.header.subject == "multi line"
    assert parsed.header.participants == ["a", "b"]
    assert parsed.body == "hello"


def test_render_omits_empty_fields():
    text = frontmatter.render(MailHeader(to="agent2"))

    assert text == "---\nmail: true\nto: agent2\n---"
