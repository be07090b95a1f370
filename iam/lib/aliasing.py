"""Alias allocation and recipient address parsing."""

EVERYONE = "all"
PARENT = "parent"


def alias_for(index: int, prefix: str = "agent", style: str = "numeric") -> str:
    """Alias for the ``index``-th registration (0-based).

    numeric: agent1, agent2, ...
    letters: agentA .. agentZ, agentA1 .. agentZ1, agentA2, ...
    """
    if style == "letters":
        letter = chr(ord("A") + index % 26)
        suffix = str(index // 26) if index >= 26 else ""
        return f"{prefix}{letter}{suffix}"
    return f"{prefix}{index + 1}"


def parse_recipients(to: str | None) -> list[str] | None:
    """Split an address into tokens. None means everyone known."""
    if to is None or not to.strip() or to.strip().lower() == EVERYONE:
        return None
    return [token.strip() for token in to.split(",") if token.strip()]
