"""
GameState — the root aggregate every handler reads and the engine mutates.

Mutation goes through tools/consequence_applicator.py (stats, inventory,
flags, world map, relationships) or through a handler's own commit hook
for its own domain (scene text, location, new NPCs, new quests).
"""

import math
from typing import Optional, List, Dict, Set, Union
from uuid import uuid4
from pydantic import BaseModel, Field, field_validator

from models.game_config import (
    TOTAL_TURNS,
    TOTAL_STAGES,
    TURNS_PER_STAGE,
    MAX_INVENTORY_SIZE,
)
from models.npcs import NPCModel
from models.quests import QuestBook
from models.profile import Profile


Scalar = Union[str, int, float, bool, None]


class PlayerStats(BaseModel):
    health: int = Field(default=100, ge=0)
    max_health: int = Field(default=100, ge=1)
    reputation: int = 0
    betrayals_suffered: int = Field(default=0, ge=0)
    betrayals_committed: int = Field(default=0, ge=0)

    @field_validator("health")
    @classmethod
    def health_cannot_exceed_max(cls, v, info):
        max_health = info.data.get("max_health")
        if max_health is not None and v > max_health:
            return max_health
        return v


class Item(BaseModel):
    id: str = Field(default_factory=lambda: f"item_{uuid4().hex[:8]}")
    name: str
    category: str = "quest"
    quantity: int = Field(default=1, ge=1)

    @field_validator("category")
    @classmethod
    def validate_category(cls, v):
        valid = {"weapon", "armor", "consumable", "quest", "key", "crafting"}
        if v.lower() not in valid:
            return "quest"
        return v.lower()

    model_config = {"extra": "allow"}


class Inventory(BaseModel):
    items: List[Item] = []
    gold: int = Field(default=0, ge=0)
    max_size: int = Field(default=MAX_INVENTORY_SIZE, ge=0)

    @property
    def available_space(self) -> int:
        return max(0, self.max_size - len(self.items))


class World(BaseModel):
    name: str = "Unnamed Realm"
    description: str = ""
    atmosphere: str = "neutral"
    current_location: str = "Unknown"
    world_state: Dict[str, Scalar] = {}


class Choice(BaseModel):
    text: str
    personality_mapping: str = Field(default="CAUTIOUS", alias="personalityMapping")
    risk_level: str = Field(default="medium", alias="riskLevel")
    likely_outcome: str = Field(default="", alias="likelyOutcome")

    model_config = {"populate_by_name": True}


class PlayerChoice(BaseModel):
    """The choice the player made, waiting to be resolved this turn."""

    text: str
    personality_mapping: str = "CAUTIOUS"


class Scene(BaseModel):
    description: str = ""
    npcs_present: List[str] = []
    choices: List[Choice] = []
    scene_type: str = "exploration"


class Group(BaseModel):
    members: List[str] = []
    morale: float = Field(default=0.5, ge=0.0, le=1.0)


class HistoryEntry(BaseModel):
    """Summary of one completed turn. Never modified after creation."""

    turn: int
    stage: int
    choice_type: Optional[str] = None
    choice_text: Optional[str] = None
    consequence: Optional[str] = None
    scene_type: str = "exploration"
    importance: float = 0.5
    error_count: int = 0

    model_config = {"frozen": True}


class GameState(BaseModel):
    turn: int = Field(default=1, ge=1)
    stage: int = Field(default=1, ge=1, le=TOTAL_STAGES)
    total_turns: int = TOTAL_TURNS
    turns_per_stage: int = Field(default=TURNS_PER_STAGE, ge=1)

    stats: PlayerStats = Field(default_factory=PlayerStats)
    inventory: Inventory = Field(default_factory=Inventory)
    world: World = Field(default_factory=World)
    current_scene: Scene = Field(default_factory=Scene)
    group: Group = Field(default_factory=Group)
    npcs: List[NPCModel] = []
    quests: QuestBook = Field(default_factory=QuestBook)
    profile: Profile = Field(default_factory=Profile)

    story_flags: Set[str] = set()
    history: List[HistoryEntry] = []
    pending_choice: Optional[PlayerChoice] = None

    def stage_for_turn(self, turn: int) -> int:
        return max(1, min(TOTAL_STAGES, math.ceil(turn / self.turns_per_stage)))

    def get_npc(self, npc_id: str) -> Optional[NPCModel]:
        for npc in self.npcs:
            if npc.id == npc_id:
                return npc
        return None

    def replace_npc(self, updated: NPCModel) -> bool:
        """Swap in a new version of an NPC (matched by id)."""
        for i, npc in enumerate(self.npcs):
            if npc.id == updated.id:
                self.npcs[i] = updated
                return True
        return False

    def npcs_in_scene(self) -> List[NPCModel]:
        present = set(self.current_scene.npcs_present)
        return [npc for npc in self.npcs if npc.id in present]

    @property
    def last_history(self) -> Optional[HistoryEntry]:
        return self.history[-1] if self.history else None

    @property
    def is_over(self) -> bool:
        return self.turn > self.total_turns or self.stats.health <= 0
