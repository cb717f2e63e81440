"""
ContinuityAgent — Flags story inconsistencies and suggests callbacks. Read-only.
"""

from typing import Any, Dict, Mapping

from agents.base import BaseAgent
from models.game_config import AgentRole
from models.game_state import GameState
from models.outputs import ContinuityReport
from tools.context_builder import build_game_context, extract_story_flags
from tools.narrative_client import NarrativeRequest

OUTPUT_FORMAT = {
    "continuityIssues": [],
    "suggestedReferences": ["reference to past event"],
    "importantReminders": ["key story point to maintain"],
}


class ContinuityAgent(BaseAgent):
    role = AgentRole.CONTINUITY

    async def execute(self, state: GameState, results: Mapping[str, Any]) -> Dict[str, Any]:
        request = NarrativeRequest(
            system_context=(
                f"You ensure story consistency in {state.world.name}.\n\n"
                "Check for continuity errors, references to past events, NPC consistency, "
                "and world state logic."
            ),
            task="Verify continuity and suggest references.",
            data={
                "gameContext": build_game_context(state, 10),
                "storyFlags": extract_story_flags(state),
                "worldState": state.world.world_state,
            },
            output_format=OUTPUT_FORMAT,
            max_tokens=1000,
        )
        document = await self.ask(request, ContinuityReport)
        if document is None:
            document = ContinuityReport(continuity_issues=[])
        return document.model_dump()
