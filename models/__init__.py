"""
Pydantic v2 data models — the contract for all game state.

Every handler output passes through these models before it can touch state.
If validation fails, nothing is applied.
"""

from models.game_state import (
    GameState,
    PlayerStats,
    Item,
    Inventory,
    World,
    Scene,
    Choice,
    PlayerChoice,
    Group,
    HistoryEntry,
)
from models.npcs import NPCModel, MemoryEntry, Interaction
from models.quests import (
    QuestModel,
    QuestBook,
    QuestState,
    Objective,
    ObjectiveKind,
    PlayerAction,
    ActionType,
    RewardBundle,
)
from models.profile import Profile, ProfileDelta, TraitChange, Archetype
from models.plan import AgentCall, ExecutionPlan, PlanRecord, AgentError, TurnResult
from models.outputs import ConsequenceOutcome, ImmediateEffects, NPCInteraction

__all__ = [
    "GameState",
    "PlayerStats",
    "Item",
    "Inventory",
    "World",
    "Scene",
    "Choice",
    "PlayerChoice",
    "Group",
    "HistoryEntry",
    "NPCModel",
    "MemoryEntry",
    "Interaction",
    "QuestModel",
    "QuestBook",
    "QuestState",
    "Objective",
    "ObjectiveKind",
    "PlayerAction",
    "ActionType",
    "RewardBundle",
    "Profile",
    "ProfileDelta",
    "TraitChange",
    "Archetype",
    "AgentCall",
    "ExecutionPlan",
    "PlanRecord",
    "AgentError",
    "TurnResult",
    "ConsequenceOutcome",
    "ImmediateEffects",
    "NPCInteraction",
]
