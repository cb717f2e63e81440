"""
SceneComposerAgent — Folds every earlier result into the final scene and
the four choices the player picks from.
"""

import logging
from typing import Any, Dict, List, Mapping

from agents.base import BaseAgent
from models.game_config import AgentRole
from models.game_state import GameState, Choice
from models.outputs import ComposedScene
from tools.narrative_client import NarrativeRequest

logger = logging.getLogger('SceneComposer')

OUTPUT_FORMAT = {
    "finalScene": "complete scene description (3-4 sentences)",
    "npcPresence": "how NPCs are positioned/acting",
    "questHints": "subtle quest progression hints",
    "choices": [
        {"text": "Choice description", "personalityMapping": "AGGRESSIVE", "riskLevel": "high", "likelyOutcome": "hint"},
        {"text": "Choice description", "personalityMapping": "CAUTIOUS", "riskLevel": "low", "likelyOutcome": "hint"},
        {"text": "Choice description", "personalityMapping": "DIPLOMATIC", "riskLevel": "medium", "likelyOutcome": "hint"},
        {"text": "Choice description", "personalityMapping": "CREATIVE", "riskLevel": "medium", "likelyOutcome": "hint"},
    ],
}

FALLBACK_CHOICES = [
    Choice(text="Push forward aggressively", personality_mapping="AGGRESSIVE", risk_level="high"),
    Choice(text="Proceed with caution", personality_mapping="CAUTIOUS", risk_level="low"),
    Choice(text="Seek a diplomatic solution", personality_mapping="DIPLOMATIC", risk_level="medium"),
    Choice(text="Try a creative approach", personality_mapping="CREATIVE", risk_level="medium"),
]


def classify_scene(results: Mapping[str, Any]) -> str:
    """Scene type from what actually happened earlier this turn."""
    if (results.get(AgentRole.BETRAYAL.value) or {}).get("betrayal_triggered"):
        return "betrayal"
    if (results.get(AgentRole.COMBAT.value) or {}).get("combat_occurred"):
        return "combat"
    if (results.get(AgentRole.DIALOGUE.value) or {}).get("dialogues"):
        return "dialogue"
    if (results.get(AgentRole.QUEST_MANAGER.value) or {}).get("new_quests"):
        return "quest"
    return "exploration"


class SceneComposerAgent(BaseAgent):
    role = AgentRole.SCENE_COMPOSER

    async def execute(self, state: GameState, results: Mapping[str, Any]) -> Dict[str, Any]:
        world = results.get(AgentRole.WORLD_BUILDER.value) or {}
        quests = results.get(AgentRole.QUEST_MANAGER.value) or {}
        npc_ids = (results.get(AgentRole.NPC_PERSONALITY.value) or {}).get("npcs_in_scene", [])
        npc_names: List[str] = [npc.name for npc in map(state.get_npc, npc_ids) if npc is not None]

        request = NarrativeRequest(
            system_context=(
                "You compose the final scene combining all earlier results.\n\n"
                f"World Scene: {world.get('scene_description', state.world.description)}\n"
                f"Atmosphere: {world.get('atmosphere', state.world.atmosphere)}\n"
                f"NPCs Present: {', '.join(npc_names) or 'None'}\n"
                f"Active Quests: {len(quests.get('active_quests', []))}\n\n"
                f"Turn: {state.turn}/{state.total_turns}\n\n"
                "Create 4 player choices that fit the scene, map to different personality "
                "traits, have clear consequences, and advance the story."
            ),
            task="Compose the scene and generate 4 choices.",
            data={
                "turn": state.turn,
                "dialogues": (results.get(AgentRole.DIALOGUE.value) or {}).get("dialogues", {}),
            },
            output_format=OUTPUT_FORMAT,
            max_tokens=2000,
        )
        document = await self.ask(request, ComposedScene)
        if document is None:
            document = ComposedScene(
                final_scene=f"You continue your journey through {state.world.name}.",
                choices=FALLBACK_CHOICES,
                npc_presence="None nearby",
            )

        return {**document.model_dump(), "scene_type": classify_scene(results)}

    def apply(self, state: GameState, result: Dict[str, Any]) -> None:
        state.current_scene.description = result["final_scene"]
        state.current_scene.choices = [Choice.model_validate(c) for c in result["choices"]]
        state.current_scene.scene_type = result.get("scene_type", "exploration")
