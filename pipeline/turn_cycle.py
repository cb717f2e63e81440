"""
Turn cycle — Everything that happens once per turn after the handlers ran.

Profile update from the resolved choice, quest checks and rewards, the
history record, then turn/stage advance and the profile reveal.
"""

import logging
from typing import Any, Dict, List, Optional

from models.game_config import AgentRole
from models.game_state import GameState, HistoryEntry, World
from models.plan import TurnResult
from models.quests import PlayerAction, QuestBook, QuestModel, QuestState, ActionType
from tools import consequence_applicator
from tools.profile_calculator import reveal, update_profile
from tools.quest_progression import apply_rewards, update_all_quests

logger = logging.getLogger('TurnCycle')

CONSEQUENCE_IMPORTANCE = {
    "minor": 0.3,
    "moderate": 0.5,
    "major": 0.8,
    "critical": 1.0,
}


def new_game(
    world_name: str,
    starting_location: str = "The Starting Point",
    main_quest: Optional[QuestModel] = None,
    starting_gold: int = 0,
) -> GameState:
    state = GameState(
        world=World(name=world_name, current_location=starting_location),
        quests=QuestBook(main=main_quest),
    )
    state.inventory.gold = starting_gold
    return state


def player_action_for_turn(results: Dict[str, Any]) -> PlayerAction:
    """The structured action quests are checked against this turn."""
    consequence = results.get(AgentRole.CONSEQUENCE.value) or {}
    if consequence.get("player_action"):
        return PlayerAction.model_validate(consequence["player_action"])

    combat = results.get(AgentRole.COMBAT.value) or {}
    if combat.get("combat_occurred"):
        return PlayerAction(
            type=ActionType.COMBAT,
            success=bool(combat.get("enemies_defeated")),
            description=combat.get("outcome", ""),
        )
    return PlayerAction()


def newly_completed(before: QuestBook, after: QuestBook) -> List[QuestModel]:
    finished = after.completed[len(before.completed):]
    completed = [q for q in finished if q.state == QuestState.COMPLETED]
    if (before.main and after.main
            and before.main.state == QuestState.ACTIVE
            and after.main.state == QuestState.COMPLETED):
        completed.append(after.main)
    return completed


def complete_turn(state: GameState, turn_result: TurnResult) -> HistoryEntry:
    """Close out the turn and advance to the next one. Returns the history entry."""
    choice = state.pending_choice
    if choice is not None:
        state.profile = update_profile(state.profile, choice.personality_mapping)

    before = state.quests
    state.quests = update_all_quests(before, player_action_for_turn(turn_result.results))
    for quest in newly_completed(before, state.quests):
        bundle = apply_rewards(quest)
        if bundle is not None:
            logger.info(f"Quest completed: {quest.name}")
            consequence_applicator.apply(state, consequence_applicator.reward_outcome(bundle, quest.name))

    consequence = turn_result.results.get(AgentRole.CONSEQUENCE.value) or {}
    entry = HistoryEntry(
        turn=state.turn,
        stage=state.stage,
        choice_type=choice.personality_mapping if choice else None,
        choice_text=choice.text if choice else None,
        consequence=consequence.get("outcome"),
        scene_type=turn_result.plan.scene_type,
        importance=CONSEQUENCE_IMPORTANCE.get(consequence.get("consequence_level"), 0.5),
        error_count=len(turn_result.errors),
    )
    state.history.append(entry)

    state.turn += 1
    new_stage = state.stage_for_turn(state.turn)
    if new_stage != state.stage:
        logger.info(f"Stage {state.stage} -> {new_stage}")
    state.stage = new_stage
    state.profile = reveal(state.profile, state.turn)
    state.pending_choice = None
    return entry
