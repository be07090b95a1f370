"""Conversation metadata embedded at the top of thread files.

    ---
    mail: true
    to: agent2
    subject: sync
    thread: thread_1700000000000_a1b2c3
    participants: [ses_1, ses_2]
    ---
    body...

Parsing is strict about meaning: anything malformed degrades to "not a
conversation" (``header is None``) instead of a partially populated header.
"""

import re
from dataclasses import dataclass

import yaml

from iam.core.models import MailHeader

FRONTMATTER_RE = re.compile(r"^---\r?\n(.*?)\r?\n---\r?\n?(.*)$", re.DOTALL)

_KEYS = {"mail", "to", "from", "subject", "thread", "participants"}


class _Malformed(Exception):
    pass


@dataclass
class ParsedContent:
    header: MailHeader | None
    body: str

    @property
    def is_mail(self) -> bool:
        return self.header is not None


def has_frontmatter_prefix(content: str) -> bool:
    return content.lstrip().startswith("---")


def _value(raw: str):
    raw = raw.strip()
    if not raw:
        return None
    try:
        value = yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw
    # "Re: hello" loads as a mapping; keep the literal text
    if isinstance(value, dict):
        return raw
    return value


def _text(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, (list, dict, bool)):
        raise _Malformed(f"expected text, got {type(value).__name__}")
    text = str(value).strip()
    return text or None


def _participants(value) -> list[str] | None:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, list):
        raise _Malformed("participants must be a list")
    return [p for p in (_text(item) for item in value) if p]


def _header(fields: dict) -> MailHeader | None:
    if fields.get("mail") is not True:
        return None
    try:
        to = _text(fields.get("to"))
        if not to:
            return None
        return MailHeader(
            to=to,
            sender=_text(fields.get("from")),
            subject=_text(fields.get("subject")),
            thread=_text(fields.get("thread")),
            participants=_participants(fields.get("participants")),
        )
    except _Malformed:
        return None


def parse(content: str) -> ParsedContent:
    """Parse conversation metadata from file content."""
    match = FRONTMATTER_RE.match(content)
    if not match:
        return ParsedContent(header=None, body=content)

    block, body = match.groups()
    fields = {}
    for line in block.splitlines():
        key, sep, raw = line.partition(":")
        key = key.strip()
        if not sep or key not in _KEYS:
            continue
        fields[key] = _value(raw)

    return ParsedContent(header=_header(fields), body=body.strip())


def render(header: MailHeader) -> str:
    """Render a header block (without the body)."""
    data: dict = {"mail": True, "to": header.to}
    if header.sender:
        data["from"] = header.sender
    if header.subject:
        data["subject"] = " ".join(header.subject.split())
    if header.thread:
        data["thread"] = header.thread
    if header.participants:
        data["participants"] = list(header.participants)
    dumped = yaml.safe_dump(
        data, sort_keys=False, default_flow_style=None, allow_unicode=True, width=2**16
    )
    return f"---\n{dumped}---"


def compose(header: MailHeader, body: str) -> str:
    return f"{render(header)}\n\n{body}"
