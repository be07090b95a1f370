"""Interactive shell: drive several agent identities by hand against one coordinator."""

import sys

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory

from iam.plugin import Plugin

from .session import Session, parse_line


class Colors:
    CYAN = "\033[36m"
    GRAY = "\033[90m"
    YELLOW = "\033[33m"
    BOLD = "\033[1m"
    RESET = "\033[0m"


def _styled(text: str, *colors: str) -> str:
    """Apply colors to text with automatic reset."""
    return f"{''.join(colors)}{text}{Colors.RESET}"


def format_header() -> str:
    title = _styled("iam shell", Colors.BOLD, Colors.CYAN)
    usage = "as <id> | announce <text> | send <to> <text> | thread <to> <text> | turn | spawn <child> [parent] | agents | quit"
    return f"\n{title}\n   {_styled(usage, Colors.GRAY)}\n"


def format_error(msg: str) -> str:
    warn = _styled("!", Colors.YELLOW)
    return f"\n{warn}  {msg}\n"


def format_prompt(identity: str | None, alias: str | None) -> str:
    if identity is None:
        return "> "
    return f"{alias or identity}> "


class Shell:
    def __init__(self, plugin: Plugin):
        self.session = Session(plugin)
        self.prompt_session = PromptSession(history=InMemoryHistory())
        self.running = True

    def handle(self, line: str) -> str | None:
        """Run one input line. Returns the text to print, if any."""
        line = line.strip()
        if not line:
            return None
        word = line.split(maxsplit=1)[0].lower()
        if word in ("quit", "exit"):
            self.running = False
            return None
        if word == "as":
            parts = line.split(maxsplit=1)
            if len(parts) < 2:
                raise ValueError("usage: as <session id>")
            self.session.identity = parts[1].strip()
            alias = self.session.coord.register(self.session.identity)
            return f"Now acting as {self.session.identity} ({alias})"
        step = parse_line(line)
        return self.session.run(step).output if step else None

    def _prompt(self) -> str:
        identity = self.session.identity
        alias = self.session.coord.registry.alias_of(identity) if identity else None
        return format_prompt(identity, alias)

    def run(self) -> None:
        print(format_header())
        while self.running:
            try:
                line = self.prompt_session.prompt(self._prompt())
            except (EOFError, KeyboardInterrupt):
                print()
                break
            try:
                out = self.handle(line)
            except ValueError as e:
                print(format_error(str(e)), file=sys.stderr)
                continue
            if out:
                print(out)
