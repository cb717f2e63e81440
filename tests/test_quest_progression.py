"""
Tests for quest progression (tools/quest_progression.py).
"""

import pytest

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
from tools import quest_progression as qp


def _quest(kinds, turns_remaining=None, **kwargs):
    objectives = [Objective(description=f"{k.value} something", kind=k) for k in kinds]
    return QuestModel(name="Test Quest", objectives=objectives, turns_remaining=turns_remaining, **kwargs)


class TestObjectiveMatching:

    def test_each_kind_has_its_action(self):
        pairs = {
            ObjectiveKind.FIND: ActionType.DISCOVERY,
            ObjectiveKind.TALK: ActionType.DIALOGUE,
            ObjectiveKind.DEFEAT: ActionType.COMBAT,
            ObjectiveKind.COLLECT: ActionType.ITEM_ACQUIRED,
            ObjectiveKind.REACH: ActionType.LOCATION_REACHED,
        }
        for kind, action_type in pairs.items():
            objective = Objective(description="x", kind=kind)
            assert qp.action_completes_objective(objective, PlayerAction(type=action_type))
            assert not qp.action_completes_objective(objective, PlayerAction(type=ActionType.OTHER))

    def test_defeat_requires_success(self):
        objective = Objective(description="Defeat the wolf", kind=ObjectiveKind.DEFEAT)
        assert not qp.action_completes_objective(objective, PlayerAction(type="combat", success=False))

    def test_target_must_match(self):
        objective = Objective(description="Talk to the warden", kind=ObjectiveKind.TALK, target="Warden")
        assert qp.action_completes_objective(objective, PlayerAction(type="dialogue", target="warden"))
        assert not qp.action_completes_objective(objective, PlayerAction(type="dialogue", target="Smith"))

    def test_kind_inferred_from_description(self):
        assert Objective(description="Reach the summit").kind == ObjectiveKind.REACH
        assert Objective(description="Make a significant choice").kind is None

    def test_first_keyword_wins(self):
        assert ObjectiveKind.infer("Defeat the guard and find the key") == ObjectiveKind.DEFEAT
        assert ObjectiveKind.infer("Find the key, then defeat the guard") == ObjectiveKind.FIND

    @pytest.mark.parametrize("description", ["Breach the wall", "Stalk the deer", "Refinding lost things"])
    def test_keywords_match_whole_words_only(self, description):
        assert ObjectiveKind.infer(description) is None

    def test_uninferable_objective_never_completes(self):
        objective = Objective(description="Make a significant choice")
        for action_type in ActionType:
            assert not qp.action_completes_objective(objective, PlayerAction(type=action_type))

    def test_unknown_action_type_is_other(self):
        assert PlayerAction(type="dancing").type == ActionType.OTHER


class TestCheckProgress:

    def test_progress_matches_completed_ratio(self):
        quest = _quest([ObjectiveKind.FIND, ObjectiveKind.TALK, ObjectiveKind.REACH])
        quest = qp.check_progress(quest, PlayerAction(type="discovery"))
        assert quest.progress == pytest.approx(100 / 3)
        quest = qp.check_progress(quest, PlayerAction(type="dialogue"))
        assert quest.progress == pytest.approx(200 / 3)
        assert quest.state == QuestState.ACTIVE

    def test_completes_when_all_objectives_done(self):
        quest = _quest([ObjectiveKind.FIND])
        quest = qp.check_progress(quest, PlayerAction(type="discovery"))
        assert quest.state == QuestState.COMPLETED
        assert quest.progress == 100

    def test_expires_after_last_turn_without_progress(self):
        quest = _quest([ObjectiveKind.FIND, ObjectiveKind.TALK], turns_remaining=1)
        quest = qp.check_progress(quest, PlayerAction())
        assert quest.state == QuestState.EXPIRED
        assert quest.turns_remaining == 0

    def test_completion_beats_expiry(self):
        quest = _quest([ObjectiveKind.FIND, ObjectiveKind.TALK], turns_remaining=2)
        quest = qp.check_progress(quest, PlayerAction(type="discovery"))
        assert quest.state == QuestState.ACTIVE
        quest = qp.check_progress(quest, PlayerAction(type="dialogue"))
        assert quest.state == QuestState.COMPLETED
        assert quest.turns_remaining == 0

    def test_completed_objectives_stay_completed(self):
        quest = _quest([ObjectiveKind.FIND, ObjectiveKind.TALK])
        quest = qp.check_progress(quest, PlayerAction(type="discovery"))
        quest = qp.check_progress(quest, PlayerAction(type="other"))
        assert quest.objectives[0].completed

    def test_non_active_quest_untouched(self):
        quest = _quest([ObjectiveKind.FIND], turns_remaining=1, state=QuestState.EXPIRED)
        assert qp.check_progress(quest, PlayerAction(type="discovery")) is quest

    def test_empty_objectives_never_complete(self):
        quest = QuestModel(name="Open-ended")
        quest = qp.check_progress(quest, PlayerAction(type="discovery"))
        assert quest.state == QuestState.ACTIVE
        assert quest.progress == 0.0

    def test_no_turn_limit_never_expires(self):
        quest = _quest([ObjectiveKind.FIND])
        for _ in range(100):
            quest = qp.check_progress(quest, PlayerAction())
        assert quest.state == QuestState.ACTIVE


class TestQuestBook:

    def test_finished_side_quests_are_archived(self, side_quest):
        expiring = _quest([ObjectiveKind.REACH], turns_remaining=1, id="quest_short")
        book = QuestBook(side=[side_quest, expiring])
        book = qp.update_all_quests(book, PlayerAction(type="discovery"))
        assert [q.id for q in book.side] == ["quest_ember"]
        assert [q.id for q in book.completed] == ["quest_short"]
        assert book.completed[0].state == QuestState.EXPIRED

    def test_archive_is_never_purged(self, side_quest):
        old = _quest([ObjectiveKind.FIND], state=QuestState.COMPLETED, id="quest_old")
        book = QuestBook(side=[side_quest], completed=[old])
        for _ in range(5):
            book = qp.update_all_quests(book, PlayerAction())
        assert book.completed[0].id == "quest_old"
        assert len(book.completed) == 2

    def test_main_quest_checked_in_place(self):
        main = _quest([ObjectiveKind.DEFEAT], type="main")
        book = qp.update_all_quests(QuestBook(main=main), PlayerAction(type="combat", success=True))
        assert book.main.state == QuestState.COMPLETED
        assert book.completed == []


class TestRewards:

    def test_rewards_only_for_completed(self, side_quest):
        assert qp.apply_rewards(side_quest) is None
        done = side_quest.model_copy(update={"state": QuestState.COMPLETED})
        bundle = qp.apply_rewards(done)
        assert bundle.gold == 40
        assert bundle.items == ["Ember Key"]
        assert bundle.reputation == 5

    def test_null_amounts_count_as_nothing(self):
        bundle = RewardBundle.model_validate({"gold": None, "items": None, "reputation": 4})
        assert (bundle.gold, bundle.items, bundle.reputation) == (0, [], 4)

    def test_fractional_amounts_rounded(self):
        bundle = RewardBundle.model_validate({"gold": 12.5, "reputation": 2.4, "experience": -1.5})
        assert (bundle.gold, bundle.reputation, bundle.experience) == (13, 2, -1)

    def test_loose_rewards_on_completed_quest(self, side_quest):
        done = side_quest.model_copy(update={"state": QuestState.COMPLETED})
        done.rewards = RewardBundle.model_validate({"gold": None, "reputation": 7.6})
        bundle = qp.apply_rewards(done)
        assert bundle.gold == 0
        assert bundle.reputation == 8

    def test_fallback_quests(self, state):
        quests = qp.fallback_side_quests(state, 3)
        assert len(quests) == 3
        assert all(q.type == "side" and q.turns_remaining == 10 for q in quests)
