"""Host adapter: the tools agents call and the hooks the host runtime fires.

The host owns sessions and transcripts. It calls into this plugin at fixed
points and renders whatever text comes back.
"""

import logging
from pathlib import Path

from . import config
from .core.coordinator import Coordinator, ParentLookup, ParentNotifier
from .errors import MissingRequiredField, UnknownRecipient
from .inject import notifications, prompts
from .lib import logs

log = logging.getLogger(__name__)

TOOL_SCHEMAS = {
    "announce": {
        "name": "announce",
        "description": prompts.ANNOUNCE_DESCRIPTION,
        "input_schema": {
            "type": "object",
            "properties": {"message": {"type": "string", "description": "Describe what you're working on"}},
            "required": ["message"],
        },
    },
    "broadcast": {
        "name": "broadcast",
        "description": prompts.BROADCAST_DESCRIPTION,
        "input_schema": {
            "type": "object",
            "properties": {
                "to": {
                    "type": "string",
                    "description": "Recipient(s): 'agent1', 'agent1,agent3', or 'parent' (default: all)",
                },
                "message": {"type": "string", "description": "Your message content"},
                "reply_to": {"type": "string", "description": "Message id(s) you are answering"},
            },
            "required": ["message"],
        },
    },
}


class Plugin:
    def __init__(self, coordinator: Coordinator, cfg: dict | None = None):
        self.coord = coordinator
        self.cfg = cfg or config.load_config()
        self.instructed: set[str] = set()
        self._introduced: set[str] = set()

    # tools

    def enabled_tools(self) -> list[str]:
        enabled = []
        if self.cfg.get("announce_enabled", True):
            enabled.append("announce")
        if self.cfg.get("broadcast_enabled", True):
            enabled.append("broadcast")
        return enabled

    def tool_schemas(self) -> list[dict]:
        return [TOOL_SCHEMAS[name] for name in self.enabled_tools()]

    def handlers(self) -> dict:
        table = {
            "announce": lambda session_id, **kw: self.announce(session_id, kw.get("message")),
            "broadcast": lambda session_id, **kw: self.broadcast(
                session_id, kw.get("message"), kw.get("to"), kw.get("reply_to")
            ),
        }
        return {name: table[name] for name in self.enabled_tools()}

    def call(self, tool: str, session_id: str, **kwargs) -> str:
        handler = self.handlers().get(tool)
        if handler is None:
            return f"Error: Unknown tool '{tool}'"
        return handler(session_id, **kwargs)

    def announce(self, session_id: str, message: str | None = None) -> str:
        try:
            alias, agents = self.coord.announce(session_id, message)
        except MissingRequiredField as e:
            return prompts.missing_field(e.field)
        return prompts.announce_result(alias, agents)

    def broadcast(
        self,
        session_id: str,
        message: str | None = None,
        to: str | None = None,
        reply_to: str | None = None,
    ) -> str:
        try:
            result = self.coord.broadcast(session_id, message, to=to, reply_to=reply_to)
        except MissingRequiredField as e:
            return prompts.missing_field(e.field)
        except UnknownRecipient as e:
            return prompts.unknown_recipient(e.recipient, e.known)
        return prompts.broadcast_result(result)

    # hooks

    def on_tool_after(self, tool: str, session_id: str, metadata: dict | None = None) -> str | None:
        """Spawn-completion hook: a ``task`` tool call in ``session_id`` created a child."""
        if tool != "task":
            return None
        metadata = metadata or {}
        child_id = metadata.get("sessionId") or metadata.get("session_id")
        if not child_id:
            log.warning(f"task completed in {session_id} but no session id in metadata")
            return None
        alias = self.coord.spawned(child_id, session_id, metadata.get("description"))
        log.info(f"task completed, registered {child_id} as {alias}")
        return alias

    def system_prompt(self, session_id: str | None, system: list[str]) -> list[str]:
        if not session_id:
            log.debug("No session id in system transform, skipping")
            return system
        system.append(prompts.SYSTEM_PROMPT)
        self.instructed.add(session_id)
        log.info(f"Injected system prompt for {session_id}")
        return system

    def on_turn(self, session_id: str) -> str | None:
        """Turn hook: the text to surface before the agent's next output, if any."""
        parts = []
        intro = self._sibling_intro(session_id)
        if intro:
            parts.append(intro)
        note = notifications.collect(self.coord, session_id)
        if note is not None:
            parts.append(notifications.render(note))
        return "\n\n".join(parts) or None

    def on_turn_envelopes(self, session_id: str) -> list[dict]:
        """Turn hook for hosts that inject one tool-shaped entry per message."""
        note = notifications.collect(self.coord, session_id)
        return notifications.envelopes(note) if note else []

    def _sibling_intro(self, session_id: str) -> str:
        if session_id in self._introduced:
            return ""
        siblings = self.coord.siblings_of(session_id)
        if not siblings:
            return ""
        self._introduced.add(session_id)
        registry = self.coord.registry
        return prompts.sibling_info(
            [(registry.alias_of(s), self.coord.siblings.description_of(s)) for s in siblings]
        )

    def on_file_written(self, session_id: str, path: str | Path, content: str):
        return self.coord.file_written(session_id, path, content)

    def on_file_read(self, session_id: str, path: str | Path) -> int:
        return self.coord.file_read(session_id, path)

    def on_session_end(self, session_id: str) -> None:
        self.coord.cleanup(session_id)
        self.instructed.discard(session_id)
        self._introduced.discard(session_id)

    def transform_config(self, host_config: dict) -> dict:
        """Expose the enabled tools to subagents without dropping existing entries."""
        experimental = dict(host_config.get("experimental") or {})
        existing = list(experimental.get("subagent_tools") or [])
        wanted = [t for t in self.cfg.get("subagent_tools", []) if t in self.enabled_tools()]
        experimental["subagent_tools"] = existing + [t for t in wanted if t not in existing]
        host_config["experimental"] = experimental
        log.info(f"Added {wanted} to experimental.subagent_tools")
        return host_config


def create_plugin(
    cfg: dict | None = None,
    parent_lookup: ParentLookup | None = None,
    parent_notifier: ParentNotifier | None = None,
) -> Plugin:
    """Build a plugin with a fresh coordinator and file logging, as a host would at startup."""
    cfg = cfg or config.load_config()
    logs.setup_logging(cfg)
    coord = Coordinator.from_config(cfg, parent_lookup=parent_lookup, parent_notifier=parent_notifier)
    log.info("Plugin initialized")
    return Plugin(coord, cfg)
