"""
DialogueAgent — One line of dialogue per NPC in the scene.
"""

import logging
from typing import Any, Dict, Mapping

from agents.base import BaseAgent
from models.game_config import AgentRole
from models.game_state import GameState
from models.npcs import NPCModel
from models.outputs import DialogueLine
from tools.narrative_client import NarrativeRequest
from tools.npc_memory import relationship_label

logger = logging.getLogger('Dialogue')

OUTPUT_FORMAT = {
    "dialogue": "NPC's spoken words (2-4 sentences)",
    "tone": "friendly|neutral|cautious|hostile|betrayed|grateful",
    "bodyLanguage": "brief description of nonverbal cues",
    "emotionalState": "current emotion",
    "subtext": "what they're not saying",
    "trustIndicator": "sign of trust level (if any)",
}


def fallback_dialogue(npc: NPCModel) -> Dict[str, Any]:
    relationship = npc.relationship
    line, tone = f"{npc.name} greets you.", "neutral"
    if relationship > 50:
        line, tone = f"{npc.name} greets you warmly, clearly happy to see you.", "friendly"
    elif relationship < -50:
        line, tone = f"{npc.name} glares at you with evident distrust.", "hostile"

    return DialogueLine(
        dialogue=line,
        tone=tone,
        body_language="Standard body language",
        emotional_state=tone,
        subtext="Unknown",
        trust_indicator="Seems willing to talk" if relationship > 0 else "Guarded",
    ).model_dump()


class DialogueAgent(BaseAgent):
    role = AgentRole.DIALOGUE

    async def generate_dialogue(self, npc: NPCModel, situation: str) -> Dict[str, Any]:
        request = NarrativeRequest(
            system_context=(
                f'You are generating dialogue for "{npc.name}", a {npc.archetype}.\n\n'
                f"Description: {npc.description}\nMotivation: {npc.motivation}\n"
                f"Relationship with Player: {npc.relationship} ({relationship_label(npc.relationship)})\n\n"
                f"Current Situation:\n{situation}\n\n"
                "Match the personality traits, reference past interactions if relevant, "
                "and keep it natural and concise (2-4 sentences)."
            ),
            task="Generate dialogue for this NPC in this situation.",
            data={
                "traits": npc.traits,
                "recentMemories": [m.model_dump() for m in npc.memory[-3:]],
                "relationship": npc.relationship,
            },
            output_format=OUTPUT_FORMAT,
            max_tokens=800,
        )
        document = await self.ask(request, DialogueLine)
        if document is None:
            return fallback_dialogue(npc)
        return document.model_dump()

    async def execute(self, state: GameState, results: Mapping[str, Any]) -> Dict[str, Any]:
        npc_result = results.get(AgentRole.NPC_PERSONALITY.value) or {}
        npc_ids = npc_result.get("npcs_in_scene", state.current_scene.npcs_present)

        world = results.get(AgentRole.WORLD_BUILDER.value) or {}
        situation = world.get("scene_description") or state.world.description

        dialogues: Dict[str, Dict[str, Any]] = {}
        for npc_id in npc_ids:
            npc = state.get_npc(npc_id)
            if npc is None or not npc.alive:
                continue
            dialogues[npc_id] = await self.generate_dialogue(npc, situation)

        return {"dialogues": dialogues, "npcs_present": list(dialogues)}
