"""
BetrayalAgent — Checks every NPC in the scene for a betrayal this turn.

Risk is computed locally. At most one NPC betrays per turn; the first
one whose risk clears the threshold *and* wins the coin flip.
"""

import logging
from typing import Any, Dict, Mapping

from agents.base import BaseAgent
from models.game_config import AgentRole
from models.game_state import GameState
from models.npcs import NPCModel
from models.outputs import BetrayalScene, ConsequenceOutcome, ImmediateEffects
from tools import consequence_applicator, npc_memory
from tools.narrative_client import NarrativeRequest

logger = logging.getLogger('Betrayal')

BETRAYAL_RELATIONSHIP_HIT = -40

OUTPUT_FORMAT = {
    "betrayalScene": "how the betrayal unfolds",
    "motivation": "why they betray",
    "impact": "immediate consequences",
    "canBeRedeemed": False,
}


def betrayal_flag(npc_id: str) -> str:
    return f"betrayed_by_{npc_id}"


class BetrayalAgent(BaseAgent):
    role = AgentRole.BETRAYAL

    async def generate_betrayal(self, npc: NPCModel, state: GameState) -> Dict[str, Any]:
        request = NarrativeRequest(
            system_context=(
                f'NPC "{npc.name}" is about to betray the player in {state.world.name}.\n\n'
                f"Relationship: {npc.relationship}\nMemories: {len(npc.memory)} interactions\n\n"
                "Create a dramatic betrayal scene."
            ),
            task="Generate the betrayal.",
            data={"traits": npc.traits, "motivation": npc.motivation},
            output_format=OUTPUT_FORMAT,
        )
        document = await self.ask(request, BetrayalScene)
        if document is None:
            return BetrayalScene(betrayal_scene=f"{npc.name} has turned against you.").model_dump()
        return document.model_dump()

    async def execute(self, state: GameState, results: Mapping[str, Any]) -> Dict[str, Any]:
        npc_result = results.get(AgentRole.NPC_PERSONALITY.value) or {}
        npc_ids = npc_result.get("npcs_in_scene", state.current_scene.npcs_present)

        risks: Dict[str, float] = {}
        for npc_id in npc_ids:
            npc = state.get_npc(npc_id)
            if npc is None or not (npc.can_betray and npc.alive):
                continue
            risks[npc.id] = npc_memory.estimate_betrayal_risk(npc, state.stage)
            if npc_memory.should_trigger_betrayal(npc, state.stage, self.rng):
                logger.info(f"Betrayal triggered by {npc.name} (risk {risks[npc.id]:.2f})")
                return {
                    "betrayal_triggered": True,
                    "betrayer": npc.id,
                    "details": await self.generate_betrayal(npc, state),
                    "betrayal_risks": risks,
                }

        return {"betrayal_triggered": False, "betrayal_risks": risks}

    def apply(self, state: GameState, result: Dict[str, Any]) -> None:
        if not result.get("betrayal_triggered"):
            return
        npc_id = result["betrayer"]
        outcome = ConsequenceOutcome(
            outcome=result["details"]["betrayal_scene"],
            immediate_effects=ImmediateEffects(npc_relationship_changes={npc_id: BETRAYAL_RELATIONSHIP_HIT}),
            story_flags_set=[betrayal_flag(npc_id)],
            betrayal_triggered=True,
        )
        consequence_applicator.apply(state, outcome)
        state.stats.betrayals_suffered += 1
