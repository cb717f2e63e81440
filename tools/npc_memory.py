"""
NPC Memory — Relationship scoring, betrayal risk, and scene appearance.

Pure local logic. Functions that take an NPC return a new NPC; the caller
swaps it into GameState. Relationship is always clamped to [-100, 100].
"""

import math
import random
import logging
from typing import Dict, Any, Union

from models.game_config import NPC_ARCHETYPES, RELATIONSHIP_LEVELS, TOTAL_STAGES
from models.game_state import GameState
from models.npcs import NPCModel, MemoryEntry, Interaction

logger = logging.getLogger("NPCMemory")

RELATIONSHIP_MIN = -100
RELATIONSHIP_MAX = 100

BETRAYAL_THRESHOLD = 0.7
BETRAYAL_CHANCE = 0.3


def _clamp_relationship(value: int) -> int:
    return max(RELATIONSHIP_MIN, min(RELATIONSHIP_MAX, value))


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def relationship_change(sentiment: float, importance: float) -> int:
    """Relationship swing for one interaction.

    sentiment * 20, scaled by 0.5 at minimum importance up to 1.0 at maximum.
    """
    multiplier = 0.5 + importance * 0.5
    return _round_half_up(sentiment * 20 * multiplier)


def record_interaction(npc: NPCModel, interaction: Union[Interaction, Dict[str, Any]]) -> NPCModel:
    """Append a memory and apply the resulting relationship change."""
    if not isinstance(interaction, Interaction):
        interaction = Interaction.model_validate(interaction)

    memory = MemoryEntry(
        turn=interaction.turn,
        action=interaction.action,
        sentiment=interaction.sentiment,
        importance=interaction.importance,
        category=interaction.category,
        description=interaction.description,
        witnesses=list(interaction.witnesses),
    )
    delta = relationship_change(interaction.sentiment, interaction.importance)
    return npc.model_copy(update={
        "memory": [*npc.memory, memory],
        "last_seen": max(npc.last_seen, interaction.turn),
        "relationship": _clamp_relationship(npc.relationship + delta),
    })


def adjust_relationship(npc: NPCModel, delta: int) -> NPCModel:
    """Apply a raw relationship delta (e.g. from a consequence document)."""
    return npc.model_copy(update={"relationship": _clamp_relationship(npc.relationship + int(delta))})


def relationship_label(relationship: int) -> str:
    for low, high, label in RELATIONSHIP_LEVELS:
        if low <= relationship <= high:
            return label
    return "Neutral"


def estimate_betrayal_risk(npc: NPCModel, stage: int) -> float:
    """Betrayal risk in [0, 1] from traits, relationship, and stage."""
    risk = npc.traits.get("greed", 0.0)
    risk += (1 - npc.traits.get("loyalty", 0.5)) * 0.5

    if npc.relationship < -50:
        risk += 0.3
    elif npc.relationship < 0:
        risk += 0.1
    elif npc.relationship > 50:
        risk -= 0.2

    risk += (stage / TOTAL_STAGES) * 0.2
    return max(0.0, min(1.0, risk))


def should_trigger_betrayal(npc: NPCModel, stage: int, rng: random.Random = None) -> bool:
    """High risk makes betrayal possible, never certain."""
    if not (npc.can_betray and npc.alive):
        return False
    if estimate_betrayal_risk(npc, stage) <= BETRAYAL_THRESHOLD:
        return False
    rng = rng or random
    return rng.random() < BETRAYAL_CHANCE


def should_appear_in_scene(npc: NPCModel, state: GameState, rng: random.Random = None) -> bool:
    if not npc.alive:
        return False
    if npc.id in state.group.members:
        return True
    if npc.location and npc.location == state.world.current_location:
        return True
    encounter_chance = 0.3 + npc.relationship / 200
    rng = rng or random
    return rng.random() < encounter_chance


def estimate_attitude(relationship: int) -> Dict[str, Any]:
    """Attitude derived from the relationship score alone."""
    attitude = "neutral"
    if relationship <= -60:
        attitude = "hostile"
    elif relationship <= -20:
        attitude = "unfriendly"
    elif relationship >= 60:
        attitude = "trusted"
    elif relationship >= 20:
        attitude = "friendly"

    return {
        "attitude": attitude,
        "trust_level": (relationship + 100) / 200,
        "willing_to_help": relationship > 0,
        "betrayal_risk": max(0.0, min(1.0, (50 - relationship) / 100)),
        "current_mood": attitude,
        "key_memories": [],
        "intentions": "Unknown",
    }


def create_fallback_npc(state: GameState, rng: random.Random = None) -> NPCModel:
    """A plain archetype-seeded stranger for when generation is unavailable."""
    rng = rng or random
    archetype = rng.choice(sorted(NPC_ARCHETYPES))
    template = NPC_ARCHETYPES[archetype]
    return NPCModel(
        name=f"Stranger {len(state.npcs) + 1}",
        archetype=archetype,
        description=f"A mysterious {archetype.lower()} you encounter.",
        backstory="Unknown",
        motivation="Unknown",
        traits=dict(template["traits"]),
        skills=list(template["skills"]),
        can_betray=True,
        first_met=state.turn,
        last_seen=state.turn,
        location=state.world.current_location,
    )
