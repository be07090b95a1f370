import logging
import threading

log = logging.getLogger(__name__)


class SiblingRegistry:
    """Parent -> children spawn edges, kept in both directions."""

    def __init__(self):
        self._lock = threading.Lock()
        self._children: dict[str, dict[str, str | None]] = {}
        self._parents: dict[str, str] = {}

    def register(self, child_id: str, parent_id: str, description: str | None = None) -> None:
        """Record (or move) the edge parent -> child. A child has exactly one parent."""
        if not child_id or not parent_id:
            raise ValueError("child_id and parent_id are required")
        if child_id == parent_id:
            raise ValueError(f"Agent {child_id} cannot be its own parent")
        with self._lock:
            previous = self._parents.get(child_id)
            if previous and previous != parent_id:
                self._children.get(previous, {}).pop(child_id, None)
            self._parents[child_id] = parent_id
            children = self._children.setdefault(parent_id, {})
            if description is not None or child_id not in children:
                children[child_id] = description
        log.info(f"Registered subagent {child_id} under {parent_id}")

    def parent_of(self, child_id: str) -> str | None:
        return self._parents.get(child_id)

    def description_of(self, child_id: str) -> str | None:
        parent_id = self._parents.get(child_id)
        if parent_id is None:
            return None
        return self._children.get(parent_id, {}).get(child_id)

    def children_of(self, parent_id: str) -> list[str]:
        with self._lock:
            return list(self._children.get(parent_id, {}))

    def siblings_of(self, child_id: str) -> list[str]:
        parent_id = self._parents.get(child_id)
        if parent_id is None:
            return []
        return [c for c in self.children_of(parent_id) if c != child_id]

    def cleanup(self, agent_id: str) -> None:
        """Drop ``agent_id``'s own edge. Its children are orphaned, not removed."""
        with self._lock:
            parent_id = self._parents.pop(agent_id, None)
            if parent_id:
                self._children.get(parent_id, {}).pop(agent_id, None)
            for child in self._children.pop(agent_id, {}):
                self._parents.pop(child, None)
