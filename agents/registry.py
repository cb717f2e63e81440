"""
Handler registry — agent name -> handler instance for one game session.
"""

import random
from typing import Dict, Optional

from agents.base import BaseAgent
from agents.betrayal import BetrayalAgent
from agents.combat import CombatAgent
from agents.consequence import ConsequenceAgent
from agents.continuity import ContinuityAgent
from agents.dialogue import DialogueAgent
from agents.inventory import InventoryAgent
from agents.npc_personality import NPCPersonalityAgent
from agents.profile_tracker import ProfileTrackerAgent
from agents.quest_manager import QuestManagerAgent
from agents.scene_composer import SceneComposerAgent
from agents.world_builder import WorldBuilderAgent
from tools.narrative_client import NarrativeClient
from tools.scene_cache import SceneCache


def build_registry(
    narrator: NarrativeClient,
    cache: Optional[SceneCache] = None,
    rng: Optional[random.Random] = None,
) -> Dict[str, BaseAgent]:
    """One handler per role; all share the narrator (and so its metrics) and the rng."""
    rng = rng or random.Random()
    handlers = [
        WorldBuilderAgent(narrator, cache=cache, rng=rng),
        NPCPersonalityAgent(narrator, rng),
        DialogueAgent(narrator, rng),
        QuestManagerAgent(narrator, rng),
        CombatAgent(narrator, rng),
        BetrayalAgent(narrator, rng),
        ConsequenceAgent(narrator, rng),
        InventoryAgent(narrator, rng),
        ContinuityAgent(narrator, rng),
        ProfileTrackerAgent(narrator, rng),
        SceneComposerAgent(narrator, rng),
    ]
    return {handler.name: handler for handler in handlers}
