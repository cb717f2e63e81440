"""
Game constants — stages, traits, choice mappings, archetypes, agent roles.

Everything here is static data. Nothing in this module holds mutable state.
"""

from enum import Enum
from typing import Dict, List, Any


TOTAL_TURNS = 50
TOTAL_STAGES = 5
TURNS_PER_STAGE = 10
SIDE_QUESTS_PER_STAGE = 3
MAX_NPCS = 15
MAX_INVENTORY_SIZE = 20
MAX_GROUP_SIZE = 8

# Turn at which the player's personality profile is revealed.
PROFILE_REVEAL_TURN = 25


class AgentRole(str, Enum):
    """The fixed set of agent names a plan may reference."""
    ORCHESTRATOR = "orchestrator"
    WORLD_BUILDER = "world_builder"
    NPC_PERSONALITY = "npc_personality"
    DIALOGUE = "dialogue"
    QUEST_MANAGER = "quest_manager"
    COMBAT = "combat"
    BETRAYAL = "betrayal"
    CONSEQUENCE = "consequence"
    INVENTORY = "inventory"
    PROFILE_TRACKER = "profile_tracker"
    CONTINUITY = "continuity"
    SCENE_COMPOSER = "scene_composer"


KNOWN_AGENTS = frozenset(role.value for role in AgentRole)

# External dependency marker: the consequence agent waits on player input.
PLAYER_CHOICE = "PLAYER_CHOICE"


STAGES: List[Dict[str, Any]] = [
    {
        "id": 1,
        "name": "The Beginning",
        "turns": (1, 10),
        "description": "Establish the world and meet initial characters",
        "quest_types": ["recruitment", "exploration", "introduction"],
        "difficulty_multiplier": 1.0,
    },
    {
        "id": 2,
        "name": "Rising Conflict",
        "turns": (11, 20),
        "description": "Build alliances or go solo, first betrayals possible",
        "quest_types": ["alliance", "resource_gathering", "trust_building"],
        "difficulty_multiplier": 1.3,
    },
    {
        "id": 3,
        "name": "The Turning Point",
        "turns": (21, 30),
        "description": "Major plot developments, consequences of past decisions",
        "quest_types": ["confrontation", "revelation", "preparation"],
        "difficulty_multiplier": 1.6,
    },
    {
        "id": 4,
        "name": "Escalation",
        "turns": (31, 40),
        "description": "Everything converges, alliances tested",
        "quest_types": ["betrayal_possible", "final_preparation", "critical_choice"],
        "difficulty_multiplier": 2.0,
    },
    {
        "id": 5,
        "name": "Endgame",
        "turns": (41, 50),
        "description": "Final confrontation and resolution",
        "quest_types": ["finale", "resolution", "consequence"],
        "difficulty_multiplier": 2.5,
    },
]


def get_stage(stage_id: int) -> Dict[str, Any]:
    """Look up a stage definition, clamping out-of-range ids."""
    index = max(1, min(TOTAL_STAGES, stage_id)) - 1
    return STAGES[index]


# Ordering matters: it is the tie-break order for dominant traits.
PERSONALITY_TRAITS: Dict[str, Dict[str, str]] = {
    "aggression": {"name": "Aggression", "description": "Tendency to use force and confrontation"},
    "caution": {"name": "Caution", "description": "Risk aversion and careful planning"},
    "morality": {"name": "Morality", "description": "Adherence to ethical principles"},
    "creativity": {"name": "Creativity", "description": "Unconventional and innovative thinking"},
    "leadership": {"name": "Leadership", "description": "Ability to lead and inspire others"},
    "loyalty": {"name": "Loyalty", "description": "Commitment to allies and principles"},
    "independence": {"name": "Independence", "description": "Preference for solo action"},
    "diplomacy": {"name": "Diplomacy", "description": "Skill in negotiation and compromise"},
}

DEFAULT_TRAIT_VALUE = 0.5


CHOICE_MAPPINGS: Dict[str, Dict[str, float]] = {
    "AGGRESSIVE": {"aggression": 0.15, "caution": -0.10, "diplomacy": -0.08},
    "CAUTIOUS": {"caution": 0.15, "aggression": -0.10, "creativity": -0.05},
    "DIPLOMATIC": {"diplomacy": 0.15, "morality": 0.08, "aggression": -0.10},
    "CREATIVE": {"creativity": 0.15, "independence": 0.08, "caution": -0.05},
    "LEADERSHIP": {"leadership": 0.15, "independence": -0.08, "diplomacy": 0.05},
    "LOYAL": {"loyalty": 0.15, "independence": -0.10, "leadership": 0.05},
    "INDEPENDENT": {"independence": 0.15, "loyalty": -0.10, "leadership": -0.05},
    "MORAL": {"morality": 0.15, "aggression": -0.08, "loyalty": 0.05},
}

TRAIT_TO_CHOICE: Dict[str, str] = {
    "aggression": "AGGRESSIVE",
    "caution": "CAUTIOUS",
    "diplomacy": "DIPLOMATIC",
    "creativity": "CREATIVE",
    "leadership": "LEADERSHIP",
    "loyalty": "LOYAL",
    "independence": "INDEPENDENT",
    "morality": "MORAL",
}


NPC_ARCHETYPES: Dict[str, Dict[str, Any]] = {
    "WARRIOR": {
        "traits": {"aggression": 0.8, "loyalty": 0.7, "caution": 0.3},
        "skills": ["combat", "intimidation", "protection"],
    },
    "ROGUE": {
        "traits": {"creativity": 0.8, "independence": 0.9, "loyalty": 0.3},
        "skills": ["stealth", "lockpicking", "deception"],
    },
    "SAGE": {
        "traits": {"morality": 0.8, "caution": 0.7, "diplomacy": 0.6},
        "skills": ["knowledge", "healing", "persuasion"],
    },
    "MERCHANT": {
        "traits": {"diplomacy": 0.8, "caution": 0.6, "morality": 0.4},
        "skills": ["trading", "appraisal", "networking"],
    },
    "REBEL": {
        "traits": {"independence": 0.9, "aggression": 0.6, "loyalty": 0.4},
        "skills": ["guerrilla_tactics", "inspiration", "sabotage"],
    },
    "NOBLE": {
        "traits": {"leadership": 0.8, "morality": 0.7, "diplomacy": 0.7},
        "skills": ["command", "etiquette", "resources"],
    },
}


# category -> max stack size (None = not stackable)
ITEM_STACK_LIMITS: Dict[str, Any] = {
    "weapon": None,
    "armor": None,
    "consumable": 10,
    "quest": None,
    "key": None,
    "crafting": 99,
}


# (min, max, label): inclusive bands over the -100..100 relationship scale
RELATIONSHIP_LEVELS = [
    (-100, -60, "Hostile"),
    (-59, -20, "Unfriendly"),
    (-19, 20, "Neutral"),
    (21, 60, "Friendly"),
    (61, 100, "Trusted"),
]
