"""Step dispatcher shared by ``iam replay`` and ``iam shell``.

A step is a mapping such as ``{"as": "ses_a", "do": "send", "to": "agent2",
"message": "ping"}``. State lives only as long as the session's plugin.
"""

import shlex
from dataclasses import dataclass
from pathlib import Path

import yaml

from iam.errors import MissingRequiredField, UnknownRecipient
from iam.inject import prompts
from iam.plugin import Plugin

STEPS = ("announce", "send", "thread", "turn", "spawn", "write", "read", "agents", "cleanup")
ANONYMOUS_STEPS = {"agents", "spawn", "cleanup"}


@dataclass
class StepResult:
    step: str
    identity: str | None
    output: str


def load_script(path: Path) -> list[dict]:
    with open(path) as f:
        steps = yaml.safe_load(f) or []
    if not isinstance(steps, list) or not all(isinstance(s, dict) for s in steps):
        raise ValueError(f"{path}: script must be a list of steps")
    return steps


def parse_line(line: str) -> dict | None:
    """Turn a shell line into a step. None for blank input."""
    words = shlex.split(line)
    if not words:
        return None
    action, rest = words[0].lower(), words[1:]
    if action == "send":
        if not rest:
            raise ValueError("usage: send <to> <message>")
        return {"do": "send", "to": rest[0], "message": " ".join(rest[1:])}
    if action == "thread":
        if not rest:
            raise ValueError("usage: thread <to> <message>")
        return {"do": "thread", "to": rest[0], "message": " ".join(rest[1:])}
    if action == "spawn":
        if not rest:
            raise ValueError("usage: spawn <child> [parent]")
        step = {"do": "spawn", "child": rest[0]}
        if len(rest) > 1:
            step["parent"] = rest[1]
        return step
    if action in ("read", "cleanup"):
        key = "path" if action == "read" else "id"
        return {"do": action, key: rest[0]} if rest else {"do": action}
    return {"do": action, "message": " ".join(rest)}


class Session:
    def __init__(self, plugin: Plugin):
        self.plugin = plugin
        self.identity: str | None = None

    @property
    def coord(self):
        return self.plugin.coord

    def run(self, step: dict) -> StepResult:
        action = step.get("do")
        if action not in STEPS:
            raise ValueError(f"Unknown step '{action}'. Valid: {', '.join(STEPS)}")
        identity = step.get("as") or self.identity
        if identity is None and action not in ANONYMOUS_STEPS:
            raise ValueError(f"Step '{action}' needs an identity ('as')")
        self.identity = identity
        output = getattr(self, f"_{action}")(identity, step)
        return StepResult(step=action, identity=identity, output=output)

    def _announce(self, identity, step):
        return self.plugin.announce(identity, step.get("message"))

    def _send(self, identity, step):
        return self.plugin.broadcast(identity, step.get("message"), step.get("to"), step.get("reply_to"))

    def _thread(self, identity, step):
        try:
            thread = self.coord.start_thread(
                identity,
                step.get("to") or "",
                step.get("message"),
                subject=step.get("subject"),
                thread_id=step.get("thread"),
            )
        except MissingRequiredField as e:
            return prompts.missing_field(e.field)
        except UnknownRecipient as e:
            return prompts.unknown_recipient(e.recipient, e.known)
        if thread is None:
            return "No valid recipients. You cannot message yourself."
        return f"Thread {thread.thread_id} ({thread.location or 'in-memory'})"

    def _turn(self, identity, step):
        return self.plugin.on_turn(identity) or "(nothing pending)"

    def _spawn(self, identity, step):
        parent = step.get("parent") or identity
        if not step.get("child") or not parent:
            raise ValueError("Step 'spawn' needs 'child' and 'parent' (or 'as')")
        alias = self.plugin.on_tool_after(
            "task", parent, {"session_id": step["child"], "description": step.get("description")}
        )
        return f"{step['child']} registered as {alias}"

    def _write(self, identity, step):
        if not step.get("path"):
            raise ValueError("Step 'write' needs 'path'")
        thread = self.plugin.on_file_written(identity, step["path"], step.get("content") or "")
        if thread is None:
            return "Not a conversation"
        others = [self.coord.registry.alias_of(p) for p in thread.participants if p != identity]
        return f"Thread {thread.thread_id} updated; notified: {', '.join(others) or 'nobody'}"

    def _read(self, identity, step):
        if not step.get("path"):
            raise ValueError("Step 'read' needs 'path'")
        count = self.plugin.on_file_read(identity, step["path"])
        return f"Cleared {count} thread update(s)"

    def _agents(self, identity, step):
        agents = self.coord.statuses(excluding_id=None)
        return "\n".join(prompts.format_agent_list(agents)) or "No agents registered."

    def _cleanup(self, identity, step):
        target = step.get("id") or identity
        if not target:
            raise ValueError("Step 'cleanup' needs 'id' (or 'as')")
        if not self.coord.registry.is_registered(target):
            return f"{target} is not registered"
        self.plugin.on_session_end(target)
        return f"Cleaned up {target}"
