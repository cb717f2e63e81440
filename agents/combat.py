"""
CombatAgent — Resolves threats the world builder put in the scene.
"""

import logging
from typing import Any, Dict, Mapping

from agents.base import BaseAgent
from models.game_config import AgentRole
from models.game_state import GameState
from models.outputs import CombatResolution, ConsequenceOutcome, ImmediateEffects
from tools import consequence_applicator
from tools.narrative_client import NarrativeRequest

logger = logging.getLogger('Combat')

FALLBACK_DAMAGE = 10

OUTPUT_FORMAT = {
    "outcome": "what happens in the fight (2-3 sentences)",
    "playerDamage": 0,
    "enemiesDefeated": ["enemy name"],
    "dramatic": True,
}


class CombatAgent(BaseAgent):
    role = AgentRole.COMBAT

    async def execute(self, state: GameState, results: Mapping[str, Any]) -> Dict[str, Any]:
        world = results.get(AgentRole.WORLD_BUILDER.value) or {}
        threats = world.get("threats_present") or []
        if not threats:
            return {"combat_occurred": False}

        request = NarrativeRequest(
            system_context=(
                f"Combat encounter in {state.world.name}.\n"
                f"Player Health: {state.stats.health}/{state.stats.max_health}\n"
                f"Allies: {len(state.group.members)}\n\n"
                "Resolve the combat narratively. playerDamage is the health the player loses (>= 0)."
            ),
            task="Resolve this combat.",
            data={"threats": threats, "stage": state.stage},
            output_format=OUTPUT_FORMAT,
        )
        document = await self.ask(request, CombatResolution)
        if document is None:
            document = CombatResolution(outcome="You engage in combat", player_damage=FALLBACK_DAMAGE)

        return {"combat_occurred": True, "threats": list(threats), **document.model_dump()}

    def apply(self, state: GameState, result: Dict[str, Any]) -> None:
        if not result.get("combat_occurred"):
            return
        damage = abs(int(result.get("player_damage", 0)))
        outcome = ConsequenceOutcome(
            outcome=result.get("outcome", ""),
            immediate_effects=ImmediateEffects(player_health=-damage),
        )
        consequence_applicator.apply(state, outcome)
