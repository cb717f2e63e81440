"""
Tests for end-of-turn bookkeeping (pipeline/turn_cycle.py).
"""

import pytest

from agents.orchestrator import default_plan
from models.plan import AgentError, TurnResult
from models.quests import ActionType, Objective, ObjectiveKind, QuestModel, QuestState
from pipeline.turn_cycle import complete_turn, new_game, player_action_for_turn


def _turn(state, results=None, errors=None):
    return TurnResult(plan=default_plan(state), results=results or {}, errors=errors or [])


class TestNewGame:

    def test_defaults(self):
        state = new_game("Ashfall", starting_gold=25)
        assert state.turn == 1
        assert state.stage == 1
        assert state.world.current_location == "The Starting Point"
        assert state.inventory.gold == 25
        assert state.quests.main is None

    def test_main_quest(self):
        main = QuestModel(name="Reclaim the Crown", type="main")
        assert new_game("Ashfall", main_quest=main).quests.main.name == "Reclaim the Crown"


class TestAdvance:

    def test_turn_advances(self, state):
        complete_turn(state, _turn(state))
        assert state.turn == 2
        assert state.stage == 1

    @pytest.mark.parametrize("turn, stage", [(10, 2), (20, 3), (40, 5), (50, 5)])
    def test_stage_follows_turn(self, state, turn, stage):
        state.turn = turn
        complete_turn(state, _turn(state))
        assert state.stage == stage

    def test_profile_revealed_at_turn_25(self, state):
        state.turn = 23
        complete_turn(state, _turn(state))
        assert not state.profile.revealed
        complete_turn(state, _turn(state))
        assert state.turn == 25
        assert state.profile.revealed

    def test_pending_choice_consumed(self, state, pending_choice):
        state.pending_choice = pending_choice
        complete_turn(state, _turn(state))
        assert state.pending_choice is None
        assert state.profile.traits["aggression"] == pytest.approx(0.65)
        assert state.profile.history[-1].choice_type == "AGGRESSIVE"

    def test_no_choice_leaves_profile(self, state):
        complete_turn(state, _turn(state))
        assert state.profile.history == []


class TestHistory:

    def test_entry_recorded(self, state, pending_choice):
        state.pending_choice = pending_choice
        results = {"consequence": {"resolved": True, "outcome": "The gate falls.", "consequence_level": "critical"}}
        errors = [AgentError(agent="dialogue", error="boom")]
        entry = complete_turn(state, _turn(state, results, errors))

        assert state.history == [entry]
        assert entry.turn == 1
        assert entry.choice_text == "Charge the gate"
        assert entry.consequence == "The gate falls."
        assert entry.importance == 1.0
        assert entry.error_count == 1

    def test_default_importance(self, state):
        entry = complete_turn(state, _turn(state))
        assert entry.importance == 0.5
        assert entry.consequence is None


class TestQuestsAtTurnEnd:

    def test_completed_side_quest_pays_out(self, state, side_quest):
        side_quest.objectives[0].completed = True
        state.quests.side.append(side_quest)
        results = {"consequence": {
            "resolved": True,
            "outcome": "The warden nods.",
            "player_action": {"type": "dialogue", "target": "Warden"},
        }}
        complete_turn(state, _turn(state, results))

        assert state.quests.side == []
        assert state.quests.completed[0].state == QuestState.COMPLETED
        assert state.inventory.gold == 40
        assert state.stats.reputation == 5
        assert [i.name for i in state.inventory.items] == ["Ember Key"]

    @pytest.mark.parametrize("gold, expected", [(None, 0), (12.5, 13)])
    def test_loose_reward_amounts_do_not_break_turn(self, state, side_quest, gold, expected):
        data = side_quest.model_dump()
        data["objectives"][0]["completed"] = True
        data["rewards"] = {"gold": gold, "items": None, "reputation": 5}
        state.quests.side.append(QuestModel.model_validate(data))
        results = {"consequence": {
            "resolved": True,
            "outcome": "The warden nods.",
            "player_action": {"type": "dialogue", "target": "Warden"},
        }}
        complete_turn(state, _turn(state, results))

        assert state.turn == 2
        assert state.quests.completed[0].state == QuestState.COMPLETED
        assert state.inventory.gold == expected
        assert state.stats.reputation == 5

    def test_expired_quest_pays_nothing(self, state, side_quest):
        side_quest.turns_remaining = 1
        state.quests.side.append(side_quest)
        complete_turn(state, _turn(state))
        assert state.quests.completed[0].state == QuestState.EXPIRED
        assert state.inventory.gold == 0

    def test_main_quest_completed_by_combat(self, state):
        state.quests.main = QuestModel(
            name="Slay the Ash Wyrm",
            type="main",
            objectives=[Objective(description="Defeat the wyrm", kind=ObjectiveKind.DEFEAT)],
            rewards={"gold": 100},
        )
        results = {"combat": {"combat_occurred": True, "enemies_defeated": ["Ash Wyrm"], "outcome": "It falls."}}
        complete_turn(state, _turn(state, results))
        assert state.quests.main.state == QuestState.COMPLETED
        assert state.inventory.gold == 100

        complete_turn(state, _turn(state, results))
        assert state.inventory.gold == 100


class TestPlayerAction:

    def test_consequence_wins_over_combat(self):
        action = player_action_for_turn({
            "consequence": {"player_action": {"type": "discovery"}},
            "combat": {"combat_occurred": True},
        })
        assert action.type == ActionType.DISCOVERY

    def test_lost_fight_is_unsuccessful_combat(self):
        action = player_action_for_turn({"combat": {"combat_occurred": True, "enemies_defeated": []}})
        assert action.type == ActionType.COMBAT
        assert action.success is False

    def test_quiet_turn(self):
        assert player_action_for_turn({}).type == ActionType.OTHER
