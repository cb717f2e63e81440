"""
ProfileTrackerAgent — Read-only view of the player's personality profile.

The profile itself is updated once per turn by the turn cycle, when the
pending choice is resolved. The archetype is recomputed here every time.
"""

from typing import Any, Dict, Mapping

from agents.base import BaseAgent
from models.game_config import AgentRole
from models.game_state import GameState
from tools import profile_calculator


class ProfileTrackerAgent(BaseAgent):
    role = AgentRole.PROFILE_TRACKER

    async def execute(self, state: GameState, results: Mapping[str, Any]) -> Dict[str, Any]:
        profile = state.profile
        return {
            "revealed": profile.revealed,
            "summary": profile_calculator.profile_summary(profile),
            "archetype": profile_calculator.archetype(profile).model_dump(),
            "predicted_choices": profile_calculator.predict_choice_preferences(profile),
            "reveal_text": profile_calculator.reveal_text(profile),
        }
