"""
NPCPersonalityAgent — Who is in the scene, how they feel, and who is new.

Appearance and attitude estimates are local (tools/npc_memory.py). The
narrative service is only asked to invent new characters and to read the
mood of NPCs who already share history with the player.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from agents.base import BaseAgent
from models.game_config import AgentRole, MAX_NPCS, NPC_ARCHETYPES
from models.game_state import GameState
from models.npcs import NPCModel
from models.outputs import GeneratedNPC, NPCAttitude
from tools import npc_memory
from tools.narrative_client import NarrativeRequest

logger = logging.getLogger('NPCPersonality')

# Below this many known NPCs, a new one is introduced every turn.
EARLY_GAME_NPC_COUNT = 5

NPC_OUTPUT_FORMAT = {
    "name": "NPC name",
    "archetype": "|".join(NPC_ARCHETYPES),
    "description": "2-3 sentence character description",
    "backstory": "relevant history",
    "motivation": "what drives them",
    "traits": {"aggression": 0.5, "caution": 0.5, "morality": 0.5, "loyalty": 0.5, "greed": 0.5},
    "secrets": ["secret"],
    "skills": ["skill1", "skill2"],
    "canBetray": True,
    "betrayalTriggers": ["what might cause betrayal"],
    "questPotential": "what quests they could offer",
}

ATTITUDE_OUTPUT_FORMAT = {
    "attitude": "hostile|unfriendly|neutral|friendly|trusted",
    "trustLevel": 0.5,
    "willingToHelp": True,
    "betrayalRisk": 0.3,
    "currentMood": "description of mood",
    "keyMemories": ["memories affecting current attitude"],
    "intentions": "what the NPC plans to do regarding the player",
}


class NPCPersonalityAgent(BaseAgent):
    role = AgentRole.NPC_PERSONALITY

    async def generate_npc(self, state: GameState, scene: Mapping[str, Any]) -> NPCModel:
        request = NarrativeRequest(
            system_context=(
                f"You are creating a character for {state.world.name}.\n\n"
                f"Current Scene: {scene.get('scene_description', state.world.description)}\n"
                f"Stage: {state.stage}/5\nTurn: {state.turn}\n\n"
                "Create a memorable NPC that fits this world and situation, avoids "
                "duplicating existing NPCs, and has potential for alliance or betrayal."
            ),
            task="Generate a new NPC character.",
            data={
                "worldName": state.world.name,
                "currentNPCs": [{"name": n.name, "archetype": n.archetype} for n in state.npcs],
            },
            output_format=NPC_OUTPUT_FORMAT,
            max_tokens=1500,
        )
        document = await self.ask(request, GeneratedNPC)
        if document is None:
            return npc_memory.create_fallback_npc(state, self.rng)

        return NPCModel(
            name=document.name,
            archetype=document.archetype,
            description=document.description,
            backstory=document.backstory,
            motivation=document.motivation,
            traits=document.traits,
            secrets=document.secrets,
            skills=document.skills,
            can_betray=document.can_betray,
            first_met=state.turn,
            last_seen=state.turn,
            location=state.world.current_location,
        )

    async def analyze_attitude(self, npc: NPCModel, state: GameState) -> Dict[str, Any]:
        if not npc.memory:
            return npc_memory.estimate_attitude(npc.relationship)

        request = NarrativeRequest(
            system_context=(
                f'You are analyzing NPC "{npc.name}" ({npc.archetype}) and their attitude '
                f"toward the player.\n\nCurrent Relationship: {npc.relationship} (-100 to 100)"
            ),
            task="Determine the NPC's current attitude and intentions.",
            data={
                "traits": npc.traits,
                "recentInteractions": [m.model_dump() for m in npc.memory[-5:]],
                "relationship": npc.relationship,
            },
            output_format=ATTITUDE_OUTPUT_FORMAT,
            max_tokens=1000,
        )
        document = await self.ask(request, NPCAttitude)
        if document is None:
            return npc_memory.estimate_attitude(npc.relationship)
        return document.model_dump()

    async def execute(self, state: GameState, results: Mapping[str, Any]) -> Dict[str, Any]:
        in_scene: List[str] = []
        attitudes: Dict[str, Dict[str, Any]] = {}

        for npc in state.npcs:
            if npc_memory.should_appear_in_scene(npc, state, self.rng):
                in_scene.append(npc.id)
                if npc.memory:
                    attitudes[npc.id] = await self.analyze_attitude(npc, state)

        world = results.get(AgentRole.WORLD_BUILDER.value) or {}
        new_npcs: List[Dict[str, Any]] = []
        wants_new = len(state.npcs) < EARLY_GAME_NPC_COUNT or (world.get("npcs_needed") and not in_scene)
        if wants_new and len(state.npcs) < MAX_NPCS:
            npc = await self.generate_npc(state, world)
            new_npcs.append(npc.model_dump())
            in_scene.append(npc.id)

        return {
            "npcs_in_scene": in_scene,
            "npc_attitudes": attitudes,
            "new_npcs": new_npcs,
        }

    def apply(self, state: GameState, result: Dict[str, Any]) -> None:
        for data in result.get("new_npcs", []):
            npc = NPCModel.model_validate(data)
            if state.get_npc(npc.id) is None:
                state.npcs.append(npc)
                logger.info(f"New NPC: {npc.name} ({npc.archetype})")

        present = result.get("npcs_in_scene", [])
        state.current_scene.npcs_present = list(present)
        for npc_id in present:
            npc = state.get_npc(npc_id)
            if npc is not None:
                state.replace_npc(npc.model_copy(update={"last_seen": state.turn}))
