"""
Context Builder — Compact JSON digest of GameState for narrative prompts.

The profile stays hidden from prompts until it has been revealed.
"""

import json
from typing import Dict, Any

from models.game_config import PERSONALITY_TRAITS
from models.game_state import GameState
from tools.profile_calculator import dominant_traits


MAJOR_DECISION_IMPORTANCE = 0.7


def game_context(state: GameState, history_limit: int = 5) -> Dict[str, Any]:
    recent = state.history[-history_limit:] if history_limit > 0 else []
    return {
        "world": state.world.name,
        "turn": state.turn,
        "stage": state.stage,
        "location": state.world.current_location,
        "playerProfile": state.profile.traits if state.profile.revealed else {"hidden": True},
        "groupStatus": {
            "isGroup": bool(state.group.members),
            "memberCount": len(state.group.members),
            "morale": state.group.morale,
        },
        "activeQuests": [
            {"name": q.name, "progress": q.progress}
            for q in state.quests.active_side_quests()
        ],
        "recentHistory": [
            {"turn": h.turn, "choice": h.choice_type, "consequence": h.consequence}
            for h in recent
        ],
        "npcsPresent": list(state.current_scene.npcs_present),
        "stats": state.stats.model_dump(),
    }


def build_game_context(state: GameState, history_limit: int = 5) -> str:
    """JSON string form of game_context(), ready to drop into a prompt."""
    return json.dumps(game_context(state, history_limit), indent=2)


def play_style(state: GameState) -> str:
    top = dominant_traits(state.profile, count=1)
    return top[0]["key"] if top else next(iter(PERSONALITY_TRAITS))


def extract_story_flags(state: GameState) -> Dict[str, Any]:
    """Long-running story facts the continuity check cares about."""
    return {
        "betrayalsExperienced": state.stats.betrayals_suffered,
        "betrayalsCommitted": state.stats.betrayals_committed,
        "playStyle": play_style(state),
        "groupMode": bool(state.group.members),
        "reputation": state.stats.reputation,
        "flags": sorted(state.story_flags),
        "majorDecisions": [
            {"turn": h.turn, "choice": h.choice_type}
            for h in state.history
            if h.importance > MAJOR_DECISION_IMPORTANCE
        ],
    }
