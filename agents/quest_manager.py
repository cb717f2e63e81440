"""
QuestManagerAgent — Lists active quests and seeds side quests at stage start.

Progress checks are not done here; they run once per turn in the turn
cycle, after the player's choice has been resolved.
"""

import logging
from typing import Any, Dict, List, Mapping

from agents.base import BaseAgent
from models.game_config import AgentRole, SIDE_QUESTS_PER_STAGE, get_stage
from models.game_state import GameState
from models.outputs import GeneratedQuests
from models.quests import QuestModel
from tools.narrative_client import NarrativeRequest
from tools.quest_progression import fallback_side_quests

logger = logging.getLogger('QuestManager')

OUTPUT_FORMAT = {
    "quests": [
        {
            "name": "Quest name",
            "description": "What the player must do",
            "questType": "one of the stage types",
            "objectives": [
                {"description": "objective", "required": True, "kind": "find|talk|defeat|collect|reach", "target": "name or null"},
            ],
            "questGiver": "NPC name or null",
            "turnsRemaining": 10,
            "rewards": {"gold": 50, "items": ["item name"], "reputation": 10},
        }
    ]
}


class QuestManagerAgent(BaseAgent):
    role = AgentRole.QUEST_MANAGER

    def is_stage_start(self, state: GameState) -> bool:
        return (state.turn - 1) % state.turns_per_stage == 0

    async def generate_side_quests(self, state: GameState, count: int = SIDE_QUESTS_PER_STAGE) -> List[QuestModel]:
        stage = get_stage(state.stage)
        request = NarrativeRequest(
            system_context=(
                f"You are generating side quests for stage {state.stage} of a "
                f"{state.total_turns}-turn RPG.\n\n"
                f"World: {state.world.name}\n"
                f"Stage: {stage['name']} - {stage['description']}\n"
                f"Quest Types for this stage: {', '.join(stage['quest_types'])}\n\n"
                f"Create {count} side quests that fit the stage theme, are completable "
                "within ~10 turns, and involve NPCs when possible."
            ),
            task=f"Generate {count} side quests.",
            data={"stageName": stage["name"], "npcs": [n.name for n in state.npcs]},
            output_format=OUTPUT_FORMAT,
            max_tokens=2000,
        )
        document = await self.ask(request, GeneratedQuests)
        if document is None:
            return fallback_side_quests(state, count)

        return [
            QuestModel(
                name=q.name,
                description=q.description,
                type="side",
                objectives=q.objectives,
                turns_remaining=q.turns_remaining,
                rewards=q.rewards,
                stage=state.stage,
                quest_giver=q.quest_giver,
            )
            for q in document.quests[:count]
        ]

    async def execute(self, state: GameState, results: Mapping[str, Any]) -> Dict[str, Any]:
        active = ([state.quests.main] if state.quests.main else []) + state.quests.active_side_quests()

        new_quests: List[QuestModel] = []
        if self.is_stage_start(state) and not state.quests.active_side_quests():
            new_quests = await self.generate_side_quests(state)

        return {
            "active_quests": [{"id": q.id, "name": q.name, "progress": q.progress} for q in active],
            "new_quests": [q.model_dump() for q in new_quests],
        }

    def apply(self, state: GameState, result: Dict[str, Any]) -> None:
        for data in result.get("new_quests", []):
            quest = QuestModel.model_validate(data)
            state.quests.side.append(quest)
            logger.info(f"Side quest added: {quest.name}")
