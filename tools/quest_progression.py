"""
Quest Progression — Objective matching, progress, and expiry. No API calls.

A quest only moves forward: active -> completed | expired. Progress is a
cache of completed/total objectives and is recomputed on every check.
"""

import logging
from typing import Callable, Dict, List, Optional

from models.game_state import GameState
from models.quests import (
    QuestModel,
    QuestBook,
    QuestState,
    Objective,
    ObjectiveKind,
    PlayerAction,
    ActionType,
    RewardBundle,
    TERMINAL_STATES,
)

logger = logging.getLogger("QuestProgression")


_PREDICATES: Dict[ObjectiveKind, Callable[[PlayerAction], bool]] = {
    ObjectiveKind.FIND: lambda a: a.type == ActionType.DISCOVERY,
    ObjectiveKind.TALK: lambda a: a.type == ActionType.DIALOGUE,
    ObjectiveKind.DEFEAT: lambda a: a.type == ActionType.COMBAT and a.success,
    ObjectiveKind.COLLECT: lambda a: a.type == ActionType.ITEM_ACQUIRED,
    ObjectiveKind.REACH: lambda a: a.type == ActionType.LOCATION_REACHED,
}


def compute_progress(objectives: List[Objective]) -> float:
    if not objectives:
        return 0.0
    done = sum(1 for o in objectives if o.completed)
    return done / len(objectives) * 100


def action_completes_objective(objective: Objective, action: PlayerAction) -> bool:
    if objective.completed or objective.kind is None:
        return False
    if not _PREDICATES[objective.kind](action):
        return False
    if objective.target:
        return (action.target or "").strip().lower() == objective.target.strip().lower()
    return True


def check_progress(quest: QuestModel, action: Optional[PlayerAction] = None) -> QuestModel:
    """Advance one active quest by one check. Non-active quests are returned as-is."""
    if quest.state != QuestState.ACTIVE:
        return quest

    action = action or PlayerAction()
    objectives = [
        o.model_copy(update={"completed": True}) if action_completes_objective(o, action) else o
        for o in quest.objectives
    ]
    complete = bool(objectives) and all(o.completed for o in objectives)

    update = {
        "objectives": objectives,
        "progress": compute_progress(objectives),
        "state": QuestState.COMPLETED if complete else quest.state,
    }

    if quest.turns_remaining is not None:
        remaining = max(0, quest.turns_remaining - 1)
        update["turns_remaining"] = remaining
        if remaining == 0 and not complete:
            update["state"] = QuestState.EXPIRED

    updated = quest.model_copy(update=update)
    if updated.state != quest.state:
        logger.info(f"Quest '{quest.name}' {quest.state.value} -> {updated.state.value}")
    return updated


def update_all_quests(book: QuestBook, action: Optional[PlayerAction] = None) -> QuestBook:
    """Check every quest; finished side quests move to the archive."""
    checked = [check_progress(q, action) for q in book.side]
    main = check_progress(book.main, action) if book.main else None

    still_active = [q for q in checked if q.state not in TERMINAL_STATES]
    finished = [q for q in checked if q.state in TERMINAL_STATES]

    return QuestBook(
        main=main,
        side=still_active,
        completed=[*book.completed, *finished],
    )


def apply_rewards(quest: QuestModel) -> Optional[RewardBundle]:
    """Rewards for a completed quest, or None. Does not touch state."""
    if quest.state != QuestState.COMPLETED:
        return None
    return quest.rewards.model_copy(deep=True)


def fallback_side_quests(state: GameState, count: int = 3) -> List[QuestModel]:
    quests = []
    for i in range(count):
        quests.append(QuestModel(
            name=f"Quest {i + 1}",
            type="side",
            stage=state.stage,
            description=f"Complete an objective in {state.world.name}",
            objectives=[
                Objective(description="Explore the area", kind=ObjectiveKind.FIND),
                Objective(description="Reach the next landmark", kind=ObjectiveKind.REACH),
            ],
            turns_remaining=10,
            rewards={"gold": 50, "items": [], "reputation": 10},
        ))
    return quests
