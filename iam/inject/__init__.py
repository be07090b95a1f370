"""Per-turn notification of pending messages and thread updates."""

from .notifications import collect, render

__all__ = ["collect", "render"]
