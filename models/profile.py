"""
Profile schema — the player's hidden personality vector and its change log.
"""

import time
from typing import Dict, List
from pydantic import BaseModel, Field

from models.game_config import PERSONALITY_TRAITS, DEFAULT_TRAIT_VALUE


def _default_traits() -> Dict[str, float]:
    return {trait: DEFAULT_TRAIT_VALUE for trait in PERSONALITY_TRAITS}


class TraitChange(BaseModel):
    old: float
    new: float
    delta: float

    model_config = {"frozen": True}


class ProfileDelta(BaseModel):
    """One profile update. Append-only history record."""

    timestamp: float = Field(default_factory=time.time)
    choice_type: str
    changes: Dict[str, TraitChange] = {}

    model_config = {"frozen": True}


class Profile(BaseModel):
    traits: Dict[str, float] = Field(default_factory=_default_traits)
    revealed: bool = False
    history: List[ProfileDelta] = []


class Archetype(BaseModel):
    name: str
    description: str
