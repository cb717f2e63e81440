"""
ConsequenceAgent — Resolves the player's pending choice into an outcome document.

The outcome is folded into state only by the consequence applicator, in
this handler's commit hook.
"""

import logging
from typing import Any, Dict, Mapping

from agents.base import BaseAgent
from models.game_config import AgentRole
from models.game_state import GameState, PlayerChoice
from models.outputs import ConsequenceDocument, ConsequenceOutcome
from tools import consequence_applicator
from tools.context_builder import build_game_context
from tools.narrative_client import NarrativeRequest

logger = logging.getLogger('Consequence')

# Fallback outcomes succeed when a uniform draw exceeds this.
FALLBACK_FAILURE_THRESHOLD = 0.3

OUTPUT_FORMAT = {
    "outcome": "vivid 3-4 sentence description of what happens",
    "success": True,
    "consequenceLevel": "minor|moderate|major|critical",
    "immediateEffects": {
        "playerHealth": 0,
        "npcRelationshipChanges": {"npc_id": 10},
        "itemsGained": [],
        "itemsLost": [],
        "goldChange": 0,
        "reputationChange": 0,
    },
    "longTermEffects": ["effect that will matter later"],
    "npcsAffected": ["npc names that reacted"],
    "questProgressions": ["quest affected"],
    "worldStateChanges": {"property": "new value"},
    "betrayalTriggered": False,
    "deathOccurred": False,
    "storyFlagsSet": ["flag name"],
    "npcInteractions": [{"npcId": "npc_id", "action": "what happened", "sentiment": 0.0, "importance": 0.5}],
    "playerAction": {"type": "combat|dialogue|discovery|item_acquired|location_reached|other", "success": True, "target": "name or null"},
}


class ConsequenceAgent(BaseAgent):
    role = AgentRole.CONSEQUENCE

    def fallback_outcome(self, choice: PlayerChoice) -> ConsequenceOutcome:
        return ConsequenceOutcome(
            outcome=f"Your choice to {choice.text} has consequences.",
            success=self.rng.random() > FALLBACK_FAILURE_THRESHOLD,
        )

    async def execute(self, state: GameState, results: Mapping[str, Any]) -> Dict[str, Any]:
        choice = state.pending_choice
        if choice is None:
            return {"resolved": False, "message": "No player choice to process"}

        composed = results.get(AgentRole.SCENE_COMPOSER.value) or {}
        npc_result = results.get(AgentRole.NPC_PERSONALITY.value) or {}
        npc_names = [
            f"{npc.name} ({npc.id})"
            for npc in (state.get_npc(i) for i in npc_result.get("npcs_in_scene", []))
            if npc is not None
        ]

        request = NarrativeRequest(
            system_context=(
                "You are determining the outcome of a player's choice.\n\n"
                f"World: {state.world.name}\n"
                f"Turn: {state.turn}/{state.total_turns}\nStage: {state.stage}/5\n\n"
                f"Current Scene:\n{composed.get('final_scene') or state.current_scene.description}\n\n"
                f"Player Choice: {choice.text}\nChoice Type: {choice.personality_mapping}\n\n"
                f"NPCs Present: {', '.join(npc_names) or 'None'}"
            ),
            task="Determine the immediate outcome and ripple effects.",
            data={
                "gameContext": build_game_context(state, 5),
                "playerChoice": choice.text,
                "turn": state.turn,
            },
            output_format=OUTPUT_FORMAT,
            max_tokens=1500,
        )
        document = await self.ask(request, ConsequenceDocument)
        outcome = document if document is not None else self.fallback_outcome(choice)
        return {"resolved": True, **outcome.model_dump()}

    def apply(self, state: GameState, result: Dict[str, Any]) -> None:
        if not result.get("resolved"):
            return
        report = consequence_applicator.apply(state, result)
        if report is not None:
            logger.info(f"Consequence applied: {report.model_dump(exclude_defaults=True)}")
