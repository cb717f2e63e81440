"""
NPC schemas — characters, their memories, and the interactions that shape them.

Relationship and memory are owned by tools/npc_memory.py. Nothing else
should write to them directly.
"""

from typing import List, Dict, Optional
from uuid import uuid4
from pydantic import BaseModel, Field, field_validator


class MemoryEntry(BaseModel):
    """A single remembered interaction. Never modified after creation."""

    turn: int = Field(ge=0)
    action: str = ""
    sentiment: float = Field(default=0.0, ge=-1.0, le=1.0)
    importance: float = Field(default=0.5, ge=0.0, le=1.0)
    category: str = "general"
    description: str = ""
    witnesses: List[str] = []

    model_config = {"frozen": True}


class Interaction(BaseModel):
    """Input to record_interaction(): what the player did to or with an NPC."""

    turn: int = Field(ge=0)
    action: str = ""
    sentiment: float = 0.0
    importance: float = 0.5
    category: str = "general"
    description: str = ""
    witnesses: List[str] = []

    @field_validator("sentiment")
    @classmethod
    def clamp_sentiment(cls, v):
        return max(-1.0, min(1.0, float(v)))

    @field_validator("importance")
    @classmethod
    def clamp_importance(cls, v):
        return max(0.0, min(1.0, float(v)))


class NPCModel(BaseModel):
    """Schema for a Non-Player Character."""

    id: str = Field(default_factory=lambda: f"npc_{uuid4().hex[:8]}")
    name: str
    archetype: str = "WARRIOR"
    description: str = ""
    backstory: str = ""
    motivation: str = ""
    traits: Dict[str, float] = {}
    relationship: int = Field(default=0, ge=-100, le=100)
    alive: bool = True
    can_betray: bool = True
    memory: List[MemoryEntry] = []
    location: Optional[str] = None
    first_met: int = 0
    last_seen: int = 0
    secrets: List[str] = []
    skills: List[str] = []

    @field_validator("traits")
    @classmethod
    def clamp_traits(cls, v):
        return {k: max(0.0, min(1.0, float(val))) for k, val in v.items()}

    @field_validator("archetype")
    @classmethod
    def normalize_archetype(cls, v):
        return v.upper() if v else "WARRIOR"

    model_config = {"extra": "allow"}
