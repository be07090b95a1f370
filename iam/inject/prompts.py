"""All agent-facing text: tool descriptions, tool results, injected reminders."""

from iam.core.models import BroadcastResult, Message, Notification, ParallelAgent

ANNOUNCE_DESCRIPTION = (
    "Announce what you're working on to other parallel agents. Use this first to let others "
    "know what you're doing and see all parallel agents. You can re-announce to update your status."
)

BROADCAST_DESCRIPTION = (
    "Send a message to other parallel agents. Use 'to' for specific agent(s), or omit for all. "
    "Pass 'reply_to' with a message id to acknowledge the message you are answering."
)

MISSING_FIELD = "Error: '{field}' parameter is required. {hint}"

FIELD_HINTS = {
    "message": "Describe what you're working on, or the message to send.",
    "to": "Name the recipient alias.",
}

SYSTEM_PROMPT = """
<instructions tool="iam">
# Inter-Agent Messaging

You have access to `announce` and `broadcast` tools for communicating with other parallel agents.

Usage:
- announce(message="...") - Announce what you're working on (do this first!)
- broadcast(message="...") - Message all agents
- broadcast(to="agent1", message="...") - Message specific agent(s)
- broadcast(to="agent1,agent3", message="...") - Message multiple agents
- broadcast(to="parent", message="...") - Message the agent that spawned you
- broadcast(to="agent1", message="...", reply_to="<message id>") - Answer a specific message

At the start of your task, use announce to let other agents know what you're doing.
You can re-announce to update your status as your task evolves.
Read thread files when notified about thread updates; reply by editing the same file.

When you complete your task, broadcast to all: "Done. Here's what I found/did: ..."
</instructions>
"""

THREAD_FORMAT = """\
To communicate with them, write a file with this format:
```
---
mail: true
to: <sibling alias>
subject: Your subject here
---
Your message...
```
They can reply in the same file, creating a thread."""


def format_agent_list(agents: list[ParallelAgent]) -> list[str]:
    lines = []
    for agent in agents:
        if agent.description:
            lines.append(f"• {agent.alias} is working on: {agent.description}")
        else:
            lines.append(f"• {agent.alias} is running (hasn't announced yet)")
    return lines


def announce_result(alias: str, agents: list[ParallelAgent]) -> str:
    lines = [
        "Announced! Other agents will see your description when they call announce.",
        "",
        f"You are: {alias}",
        "",
    ]
    if agents:
        lines.append("--- Parallel Agents ---")
        lines.extend(format_agent_list(agents))
        lines.append("")
        lines.append("Use broadcast to coordinate with them.")
    else:
        lines.append("No other agents running yet.")
    return "\n".join(lines)


def missing_field(field: str) -> str:
    return MISSING_FIELD.format(field=field, hint=FIELD_HINTS.get(field, "")).rstrip()


def unknown_recipient(to: str, known: list[str]) -> str:
    listing = f"Known agents: {', '.join(known)}" if known else "No agents available yet."
    return f'Error: Unknown recipient "{to}". {listing}'


def broadcast_result(result: BroadcastResult) -> str:
    if result.reason == "no_agents":
        return "No agents to broadcast to. Use announce to see parallel agents."
    if result.no_recipients:
        return "No valid recipients. You cannot message yourself. Use announce to see parallel agents."
    recipients = ", ".join(result.recipients)
    return f"Message sent!\n\nTo: {recipients}\nMessage ID: {result.message_id}\n\nRecipients will be notified."


def sibling_info(siblings: list[tuple[str, str | None]]) -> str:
    """Reminder for a freshly spawned agent: who its siblings are and how to reach them."""
    if not siblings:
        return ""
    lines = ["<system-reminder>", "You have parallel sibling agents working on related tasks:"]
    for alias, description in siblings:
        lines.append(f"- {alias}: {description}" if description else f"- {alias}")
    lines.extend(["", THREAD_FORMAT, "</system-reminder>"])
    return "\n".join(lines)


def message_envelope(message: Message) -> dict:
    """A delivered message shaped as a completed tool call, for transcript injection."""
    sender = message.sender
    return {
        "tool": "iam_message",
        "from": sender,
        "message_id": message.message_id,
        "timestamp": message.timestamp,
        "title": f"📨 Message from {sender}",
        "output": (
            f"📨 INCOMING MESSAGE FROM {sender.upper()} 📨\n\n{message.body}\n\n---\n"
            f'Reply using: broadcast(to="{sender}", message="your response", '
            f'reply_to="{message.message_id}")'
        ),
    }


def notification(note: Notification) -> str:
    lines = [
        '<system-reminder priority="critical">',
        f"You are {note.alias}. You have {len(note.messages)} unread message(s) "
        f"and {len(note.thread_updates)} thread update(s).",
        "",
    ]
    if note.agents:
        lines.append("--- Parallel Agents ---")
        lines.extend(format_agent_list(note.agents))
        lines.append("")

    for msg in note.messages:
        lines.append(f"[{msg.message_id}] From: {msg.sender}")
        lines.append(f"Message: {msg.body}")
        lines.append("")

    for update in note.thread_updates:
        sender = note.aliases.get(update.sender, update.sender)
        subject = f' "{update.subject}"' if update.subject else ""
        if update.location:
            lines.append(f"Thread{subject} updated by {sender}: read {update.location}")
        else:
            lines.append(f"Thread{subject} ({update.thread_id}) updated by {sender}: {update.body}")
    if note.thread_updates:
        lines.append("")

    if note.messages:
        lines.append('Respond using: broadcast(to="<sender>", message="<your response>", reply_to="<message id>")')
    if any(u.location for u in note.thread_updates):
        lines.append("Read the thread file to see the conversation; reply by editing it.")
    lines.append("</system-reminder>")
    return "\n".join(lines)
