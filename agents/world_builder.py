"""
WorldBuilderAgent — Environment description for the current turn.

Scenes are cached per (world, stage, location); the cache's reuse policy
decides whether a revisit gets the stored text or a fresh generation.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from agents.base import BaseAgent
from models.game_config import AgentRole, get_stage
from models.game_state import GameState
from models.outputs import WorldScene
from tools.consequence_applicator import merge_world_state
from tools.context_builder import build_game_context
from tools.narrative_client import NarrativeRequest
from tools.scene_cache import SceneCache

logger = logging.getLogger('WorldBuilder')

WORLD_BUILDER_IDENTITY = """You are the World Builder in a dynamic turn-based RPG.

Create immersive, atmospheric scene descriptions that bring the world to life.

Guidelines:
- Be vivid and sensory (sights, sounds, smells)
- Maintain consistency with previous descriptions
- Reflect the stage's tone (peaceful, tense, climactic)
- Set up potential for choices (don't be static)
- Length: 3-4 sentences for the main description"""

OUTPUT_FORMAT = {
    "sceneDescription": "vivid 3-4 sentence description of the environment",
    "atmosphere": "current mood (tense, peaceful, ominous, etc.)",
    "notableFeatures": ["feature 1", "feature 2"],
    "threatsPresent": ["potential danger"],
    "opportunitiesPresent": ["opportunity"],
    "soundscape": "what can be heard",
    "visualHighlight": "most striking visual element",
    "locationName": "specific location name",
    "worldStateUpdates": {"property": "value"},
    "npcsNeeded": False,
}


def time_of_day(turn: int) -> str:
    return ("dawn", "midday", "dusk", "night")[turn % 4]


class WorldBuilderAgent(BaseAgent):
    role = AgentRole.WORLD_BUILDER

    def __init__(self, narrator, cache: Optional[SceneCache] = None, rng=None):
        super().__init__(narrator, rng)
        self.cache = cache if cache is not None else SceneCache()

    async def execute(self, state: GameState, results: Mapping[str, Any]) -> Dict[str, Any]:
        key = SceneCache.key_for(state.world.name, state.stage, state.world.current_location)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        stage = get_stage(state.stage)
        request = NarrativeRequest(
            system_context=(
                f"{WORLD_BUILDER_IDENTITY}\n\n"
                f"World: {state.world.name}\n"
                f"Current Stage: {stage['name']} - {stage['description']}\n"
                f"Turn: {state.turn}/{state.total_turns}"
            ),
            task="Generate the scene description for this turn.",
            data={
                "gameContext": build_game_context(state, 3),
                "currentLocation": state.world.current_location,
                "lastEvent": state.last_history.consequence if state.last_history else None,
                "timeOfDay": time_of_day(state.turn),
            },
            output_format=OUTPUT_FORMAT,
            max_tokens=1200,
        )
        document = await self.ask(request, WorldScene)
        if document is None:
            return self.fallback_scene(state)

        scene = document.model_dump()
        self.cache.put(key, scene)
        return scene

    def fallback_scene(self, state: GameState) -> Dict[str, Any]:
        stage = get_stage(state.stage)
        return WorldScene(
            scene_description=f"The journey continues through {state.world.name}. {stage['description']}",
            location_name=state.world.current_location or "Unknown Location",
            notable_features=["The path ahead", "Your surroundings"],
            soundscape="ambient sounds",
            visual_highlight="the road ahead",
        ).model_dump()

    def apply(self, state: GameState, result: Dict[str, Any]) -> None:
        state.world.description = result["scene_description"]
        state.world.atmosphere = result.get("atmosphere", state.world.atmosphere)
        state.world.current_location = result["location_name"]
        merge_world_state(state, result.get("world_state_updates") or {})
