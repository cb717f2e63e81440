"""
BaseAgent — Shared plumbing for every turn handler.

A handler is called as `await handler.execute(state, results)` where
`results` is a read-only view of what earlier handlers produced this turn.
It returns a plain dict. If it owns a slice of state, it writes it in
`apply(state, result)`, which the executor calls only after `execute`
succeeded.
"""

import random
import logging
from typing import Any, Dict, Mapping, Optional, Type

from pydantic import BaseModel

from models.game_config import AgentRole
from models.game_state import GameState
from tools.narrative_client import NarrativeClient, NarrativeRequest

logger = logging.getLogger('Agents')


class BaseAgent:
    role: AgentRole

    def __init__(self, narrator: NarrativeClient, rng: Optional[random.Random] = None):
        self.narrator = narrator
        self.rng = rng or random.Random()

    @property
    def name(self) -> str:
        return self.role.value

    async def ask(self, request: NarrativeRequest, schema: Type[BaseModel]) -> Optional[BaseModel]:
        """Validated document from the narrative service, or None (caller falls back)."""
        result = await self.narrator.request_structured(request, schema)
        if result.ok:
            return result.document
        logger.warning(f"[{self.name}] Using local fallback: {result.error}")
        self.narrator.metrics.record_fallback()
        return None

    async def execute(self, state: GameState, results: Mapping[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    def apply(self, state: GameState, result: Dict[str, Any]) -> None:
        """Commit this handler's own result into state. Default: read-only handler."""
        return None
