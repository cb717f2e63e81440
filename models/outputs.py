"""
Handler output schemas — the validation gate between generated text and state.

Every structured response from the narrative service is validated against
one of these models before a handler may use it. A response that parses as
JSON but has the wrong shape fails validation exactly like garbage does,
and the handler falls back to its local logic.

Keys arrive in camelCase (that is what the prompts ask for) and are exposed
in snake_case.
"""

from typing import List, Optional, Dict, Any, Union
from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from models.quests import PlayerAction, Objective, RewardBundle
from models.game_state import Choice, Scalar


class ServiceDocument(BaseModel):
    model_config = {"alias_generator": to_camel, "populate_by_name": True}


# ---------------------------------------------------------------------------
# Consequence
# ---------------------------------------------------------------------------

class NPCInteraction(ServiceDocument):
    npc_id: str
    action: str = ""
    sentiment: float = 0.0
    importance: float = 0.5
    category: str = "general"
    description: str = ""


class ImmediateEffects(ServiceDocument):
    player_health: int = 0
    npc_relationship_changes: Dict[str, int] = {}
    items_gained: List[Union[str, Dict[str, Any]]] = []
    items_lost: List[str] = []
    gold_change: int = 0
    reputation_change: int = 0


class ConsequenceOutcome(ServiceDocument):
    """The structured outcome document folded into state by the applicator."""

    outcome: str = ""
    success: bool = True
    consequence_level: str = "moderate"
    immediate_effects: ImmediateEffects = Field(default_factory=ImmediateEffects)
    long_term_effects: List[str] = []
    npcs_affected: List[str] = []
    quest_progressions: List[str] = []
    world_state_changes: Dict[str, Scalar] = {}
    betrayal_triggered: bool = False
    death_occurred: bool = False
    story_flags_set: List[str] = []
    npc_interactions: List[NPCInteraction] = []
    player_action: Optional[PlayerAction] = None

    @field_validator("consequence_level")
    @classmethod
    def validate_level(cls, v):
        valid = {"minor", "moderate", "major", "critical"}
        if v.lower() not in valid:
            return "moderate"
        return v.lower()


class ConsequenceDocument(ConsequenceOutcome):
    """What the service must return for a choice: outcome text, success,
    and the effects block are mandatory."""

    outcome: str
    success: bool
    immediate_effects: ImmediateEffects


# ---------------------------------------------------------------------------
# Planning / world / scene
# ---------------------------------------------------------------------------

class WorldScene(ServiceDocument):
    scene_description: str
    location_name: str
    atmosphere: str = "neutral"
    notable_features: List[str] = []
    threats_present: List[str] = []
    opportunities_present: List[str] = []
    soundscape: str = ""
    visual_highlight: str = ""
    world_state_updates: Dict[str, Scalar] = {}
    npcs_needed: bool = False


class ComposedScene(ServiceDocument):
    final_scene: str
    choices: List[Choice] = Field(min_length=1)
    npc_presence: str = ""
    quest_hints: str = ""


class ContinuityReport(ServiceDocument):
    continuity_issues: List[str]
    suggested_references: List[str] = []
    important_reminders: List[str] = []


# ---------------------------------------------------------------------------
# NPCs
# ---------------------------------------------------------------------------

class GeneratedNPC(ServiceDocument):
    name: str
    archetype: str
    description: str = ""
    backstory: str = ""
    motivation: str = ""
    traits: Dict[str, float] = {}
    secrets: List[str] = []
    skills: List[str] = []
    can_betray: bool = True
    betrayal_triggers: List[str] = []
    quest_potential: str = ""


class NPCAttitude(ServiceDocument):
    attitude: str
    trust_level: float = Field(ge=0.0, le=1.0)
    willing_to_help: bool = True
    betrayal_risk: float = Field(default=0.0, ge=0.0, le=1.0)
    current_mood: str = ""
    key_memories: List[str] = []
    intentions: str = "Unknown"

    @field_validator("attitude")
    @classmethod
    def validate_attitude(cls, v):
        valid = {"hostile", "unfriendly", "neutral", "friendly", "trusted"}
        if v.lower() not in valid:
            return "neutral"
        return v.lower()


class DialogueLine(ServiceDocument):
    dialogue: str
    tone: str = "neutral"
    body_language: str = ""
    emotional_state: str = ""
    subtext: str = ""
    trust_indicator: str = ""


class BetrayalScene(ServiceDocument):
    betrayal_scene: str
    motivation: str = "Unknown"
    impact: str = ""
    can_be_redeemed: bool = False


class CombatResolution(ServiceDocument):
    outcome: str
    player_damage: int = 0
    enemies_defeated: List[str] = []
    dramatic: bool = True


# ---------------------------------------------------------------------------
# Quests
# ---------------------------------------------------------------------------

class GeneratedQuest(ServiceDocument):
    name: str
    description: str = ""
    quest_type: str = ""
    objectives: List[Objective] = Field(min_length=1)
    quest_giver: Optional[str] = None
    turns_remaining: Optional[int] = Field(default=10, ge=1)
    rewards: RewardBundle = Field(default_factory=RewardBundle)


class GeneratedQuests(ServiceDocument):
    quests: List[GeneratedQuest] = Field(min_length=1)
