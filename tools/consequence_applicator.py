"""
Consequence Applicator — The single write path for outcome documents.

Player health, gold, reputation, inventory, story flags, the world-state
map, and NPC relationships are only changed mid-turn through apply().
Relationship math is delegated to tools/npc_memory.py.

A document that fails validation is rejected entirely: nothing is applied.
"""

import logging
from typing import Dict, Any, List, Union, Optional
from uuid import uuid4

from pydantic import BaseModel, ValidationError

from models.game_config import ITEM_STACK_LIMITS
from models.game_state import GameState, Item, Scalar
from models.npcs import Interaction
from models.outputs import ConsequenceOutcome, ImmediateEffects
from models.quests import RewardBundle
from tools import npc_memory

logger = logging.getLogger("ConsequenceApplicator")


class ApplyReport(BaseModel):
    """What apply() actually changed."""

    health_delta: int = 0
    gold_delta: int = 0
    reputation_delta: int = 0
    relationship_deltas: Dict[str, int] = {}
    items_added: List[str] = []
    items_dropped: List[str] = []
    items_removed: List[str] = []
    flags_added: List[str] = []
    world_keys_changed: List[str] = []


def apply(state: GameState, outcome: Union[ConsequenceOutcome, Dict[str, Any]]) -> Optional[ApplyReport]:
    """Fold one outcome document into state.

    Returns an ApplyReport, or None if the document could not be interpreted.
    """
    if not isinstance(outcome, ConsequenceOutcome):
        try:
            outcome = ConsequenceOutcome.model_validate(outcome)
        except ValidationError as e:
            logger.warning(f"Malformed consequence document ignored: {e}")
            return None

    report = ApplyReport()
    effects = outcome.immediate_effects

    _apply_health(state, effects.player_health, report)
    _apply_relationships(state, effects.npc_relationship_changes, report)
    _apply_interactions(state, outcome, report)
    for entry in effects.items_gained:
        _add_item(state, entry, report)
    for ref in effects.items_lost:
        _remove_item(state, ref, report)

    old_gold = state.inventory.gold
    new_gold = old_gold + effects.gold_change
    if new_gold < 0:
        logger.info(f"Gold change {effects.gold_change} would go negative; flooring at 0")
        new_gold = 0
    state.inventory.gold = new_gold
    report.gold_delta = new_gold - old_gold

    state.stats.reputation += effects.reputation_change
    report.reputation_delta = effects.reputation_change

    for flag in outcome.story_flags_set:
        if flag and flag not in state.story_flags:
            state.story_flags.add(flag)
            report.flags_added.append(flag)

    report.world_keys_changed = merge_world_state(state, outcome.world_state_changes)
    return report


def merge_world_state(state: GameState, changes: Dict[str, Scalar]) -> List[str]:
    """Shallow merge: same-name keys are overwritten, all others kept."""
    if not changes:
        return []
    state.world.world_state = {**state.world.world_state, **changes}
    return list(changes)


def reward_outcome(bundle: RewardBundle, quest_name: str = "") -> ConsequenceOutcome:
    """Wrap a quest reward bundle so it can go through apply()."""
    return ConsequenceOutcome(
        outcome=f"Rewards for completing {quest_name}".strip(),
        immediate_effects=ImmediateEffects(
            items_gained=list(bundle.items),
            gold_change=bundle.gold,
            reputation_change=bundle.reputation,
        ),
    )


def _apply_health(state: GameState, delta: int, report: ApplyReport) -> None:
    if not delta:
        return
    stats = state.stats
    old = stats.health
    stats.health = max(0, min(stats.max_health, old + delta))
    report.health_delta = stats.health - old


def _apply_relationships(state: GameState, changes: Dict[str, int], report: ApplyReport) -> None:
    for npc_id, delta in changes.items():
        npc = state.get_npc(npc_id)
        if npc is None:
            logger.warning(f"Relationship change for unknown NPC '{npc_id}' skipped")
            continue
        updated = npc_memory.adjust_relationship(npc, delta)
        state.replace_npc(updated)
        report.relationship_deltas[npc_id] = updated.relationship - npc.relationship


def _apply_interactions(state: GameState, outcome: ConsequenceOutcome, report: ApplyReport) -> None:
    for entry in outcome.npc_interactions:
        npc = state.get_npc(entry.npc_id)
        if npc is None:
            logger.warning(f"Interaction with unknown NPC '{entry.npc_id}' skipped")
            continue
        interaction = Interaction(
            turn=state.turn,
            action=entry.action,
            sentiment=entry.sentiment,
            importance=entry.importance,
            category=entry.category,
            description=entry.description,
        )
        updated = npc_memory.record_interaction(npc, interaction)
        state.replace_npc(updated)
        prior = report.relationship_deltas.get(entry.npc_id, 0)
        report.relationship_deltas[entry.npc_id] = prior + updated.relationship - npc.relationship


def _add_item(state: GameState, entry: Union[str, Dict[str, Any]], report: ApplyReport) -> None:
    try:
        item = Item(name=entry) if isinstance(entry, str) else Item.model_validate(entry)
    except ValidationError as e:
        logger.warning(f"Unreadable item {entry!r} skipped: {e}")
        return

    inventory = state.inventory
    limit = ITEM_STACK_LIMITS.get(item.category)
    remaining = item.quantity
    added = 0

    if limit:
        for existing in inventory.items:
            if remaining == 0:
                break
            if existing.name.lower() != item.name.lower() or existing.quantity >= limit:
                continue
            moved = min(limit - existing.quantity, remaining)
            existing.quantity += moved
            remaining -= moved
            added += moved

    # Whatever did not fit on an existing stack opens new ones.
    fresh_id = item.id
    while remaining > 0:
        if inventory.available_space <= 0:
            logger.warning(f"Inventory full; {remaining} x '{item.name}' dropped")
            report.items_dropped.append(item.name)
            break
        size = min(limit, remaining) if limit else remaining
        inventory.items.append(item.model_copy(update={"id": fresh_id, "quantity": size}))
        fresh_id = f"item_{uuid4().hex[:8]}"
        remaining -= size
        added += size

    if added:
        report.items_added.append(item.name)


def _remove_item(state: GameState, ref: str, report: ApplyReport) -> None:
    items = state.inventory.items
    for i, item in enumerate(items):
        if item.id == ref or item.name.lower() == str(ref).lower():
            if item.quantity > 1:
                item.quantity -= 1
            else:
                items.pop(i)
            report.items_removed.append(item.name)
            return
    logger.info(f"Item '{ref}' not in inventory; nothing removed")
