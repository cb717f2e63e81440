"""
Quest schema — quests, objectives, and the structured actions that complete them.
"""

import math
import re
from enum import Enum
from typing import Optional, List
from uuid import uuid4
from pydantic import BaseModel, Field, field_validator, model_validator


class QuestState(str, Enum):
    LOCKED = "locked"
    AVAILABLE = "available"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"
    EXPIRED = "expired"


TERMINAL_STATES = {QuestState.COMPLETED, QuestState.FAILED, QuestState.EXPIRED}


class ObjectiveKind(str, Enum):
    """What kind of action satisfies an objective."""
    FIND = "find"
    TALK = "talk"
    DEFEAT = "defeat"
    COLLECT = "collect"
    REACH = "reach"

    @classmethod
    def infer(cls, description: str) -> Optional["ObjectiveKind"]:
        """Guess a kind from free text by whole-word keyword. When several
        keywords appear, the one mentioned first wins. Loose: generated
        objectives often use synonyms this will not catch."""
        text = (description or "").lower()
        found = []
        for kind in cls:
            match = re.search(rf"\b{kind.value}\b", text)
            if match:
                found.append((match.start(), kind))
        return min(found, key=lambda hit: hit[0])[1] if found else None


class ActionType(str, Enum):
    COMBAT = "combat"
    DIALOGUE = "dialogue"
    DISCOVERY = "discovery"
    ITEM_ACQUIRED = "item_acquired"
    LOCATION_REACHED = "location_reached"
    OTHER = "other"


class PlayerAction(BaseModel):
    """A structured event describing what the player just did."""

    type: ActionType = ActionType.OTHER
    success: bool = True
    target: Optional[str] = None
    description: str = ""

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v):
        if isinstance(v, ActionType):
            return v
        try:
            return ActionType(str(v).lower())
        except ValueError:
            return ActionType.OTHER


class Objective(BaseModel):
    description: str
    required: bool = True
    completed: bool = False
    kind: Optional[ObjectiveKind] = None
    target: Optional[str] = None

    @model_validator(mode="after")
    def infer_kind(self):
        if self.kind is None:
            self.kind = ObjectiveKind.infer(self.description)
        return self


class RewardBundle(BaseModel):
    """Rewards of a completed quest. Applying them is the caller's job.

    Generated rewards are loose: nulls count as nothing, fractional
    amounts are rounded half up.
    """

    gold: int = 0
    items: List[str] = []
    reputation: int = 0
    experience: int = 0

    @field_validator("gold", "reputation", "experience", mode="before")
    @classmethod
    def coerce_amount(cls, v):
        if v is None:
            return 0
        if isinstance(v, float):
            return math.floor(v + 0.5)
        return v

    @field_validator("items", mode="before")
    @classmethod
    def coerce_items(cls, v):
        return [] if v is None else v


class QuestModel(BaseModel):
    """Schema for a Quest."""

    id: str = Field(default_factory=lambda: f"quest_{uuid4().hex[:8]}")
    name: str
    description: str = ""
    type: str = "side"
    state: QuestState = QuestState.ACTIVE
    objectives: List[Objective] = []
    turns_remaining: Optional[int] = Field(default=None, ge=0)
    rewards: RewardBundle = Field(default_factory=RewardBundle)
    progress: float = 0.0
    stage: int = 1
    quest_giver: Optional[str] = None

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        if v.lower() not in {"main", "side"}:
            return "side"
        return v.lower()

    model_config = {"extra": "allow"}


class QuestBook(BaseModel):
    """The player's quest log. `side` holds only active side quests;
    finished ones move to `completed`, which is never purged."""

    main: Optional[QuestModel] = None
    side: List[QuestModel] = []
    completed: List[QuestModel] = []

    def active_side_quests(self) -> List[QuestModel]:
        return [q for q in self.side if q.state == QuestState.ACTIVE]
