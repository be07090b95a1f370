import logging
import threading

from iam.core.models import Agent, ParallelAgent
from iam.errors import UnknownRecipient
from iam.lib import aliasing

log = logging.getLogger(__name__)


class IdentityRegistry:
    """Maps opaque agent ids to stable, never-reused aliases.

    Registration order is preserved everywhere aliases are listed. Forgetting an
    id removes its mapping but does not rewind the alias sequence.
    """

    def __init__(self, prefix: str = "agent", style: str = "numeric"):
        self.prefix = prefix
        self.style = style
        self._lock = threading.Lock()
        self._agents: dict[str, Agent] = {}
        self._by_alias: dict[str, str] = {}
        self._next_index = 0

    def register_or_get_alias(self, agent_id: str) -> str:
        """Return the alias for ``agent_id``, allocating the next one on first contact."""
        if not agent_id:
            raise ValueError("agent_id is required")
        with self._lock:
            agent = self._agents.get(agent_id)
            if agent:
                return agent.alias
            alias = aliasing.alias_for(self._next_index, self.prefix, self.style)
            self._next_index += 1
            self._agents[agent_id] = Agent(agent_id=agent_id, alias=alias)
            self._by_alias[alias] = agent_id
            total = len(self._agents)
        log.info(f"Registered {agent_id} as {alias} ({total} active)")
        return alias

    def is_registered(self, agent_id: str) -> bool:
        return agent_id in self._agents

    def alias_of(self, agent_id: str) -> str:
        """Alias for a known id; unknown ids are shown as-is."""
        agent = self._agents.get(agent_id)
        return agent.alias if agent else agent_id

    def set_status(self, agent_id: str, description: str) -> None:
        alias = self.register_or_get_alias(agent_id)
        with self._lock:
            self._agents[agent_id].description = description
        log.info(f"{alias} announced: {description}")

    def get_status(self, alias: str) -> str | None:
        agent_id = self._by_alias.get(alias)
        if agent_id is None:
            return None
        agent = self._agents.get(agent_id)
        return agent.description if agent else None

    def agents(self) -> list[Agent]:
        with self._lock:
            return list(self._agents.values())

    def list_others(self, excluding_id: str | None) -> list[str]:
        return [a.alias for a in self.agents() if a.agent_id != excluding_id]

    def parallel_agents(self, excluding_id: str | None) -> list[ParallelAgent]:
        return [
            ParallelAgent(alias=a.alias, description=a.description)
            for a in self.agents()
            if a.agent_id != excluding_id
        ]

    def resolve(
        self,
        token: str,
        parent_id: str | None = None,
        caller_id: str | None = None,
    ) -> str:
        """Resolve an alias, a known raw id, or ``parent`` to an agent id.

        Raises:
            UnknownRecipient: carrying the aliases known to the caller.
        """
        token = token.strip()
        if token.lower() == aliasing.PARENT and parent_id:
            return parent_id
        agent_id = self._by_alias.get(token)
        if agent_id:
            return agent_id
        if token in self._agents:
            return token
        raise UnknownRecipient(token, self.list_others(caller_id))

    def forget(self, agent_id: str) -> bool:
        with self._lock:
            agent = self._agents.pop(agent_id, None)
            if agent is None:
                return False
            self._by_alias.pop(agent.alias, None)
        log.info(f"Forgot {agent.alias} ({agent_id})")
        return True
