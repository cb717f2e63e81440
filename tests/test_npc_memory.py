"""
Tests for NPC memory, relationships, betrayal risk, and scene appearance
(tools/npc_memory.py).
"""

import pytest

from conftest import FixedRandom
from models.npcs import NPCModel, Interaction
from tools import npc_memory


class TestRelationshipChange:

    @pytest.mark.parametrize("sentiment, importance, expected", [
        (1.0, 1.0, 20),
        (1.0, 0.0, 10),
        (-1.0, 1.0, -20),
        (0.5, 0.5, 8),     # 7.5 rounds half up
        (-0.5, 0.5, -7),   # -7.5 rounds half up
        (0.0, 1.0, 0),
    ])
    def test_formula(self, sentiment, importance, expected):
        assert npc_memory.relationship_change(sentiment, importance) == expected


class TestRecordInteraction:

    def test_appends_memory_and_updates_relationship(self, npc):
        updated = npc_memory.record_interaction(npc, Interaction(turn=3, action="shared bread", sentiment=1.0, importance=1.0))
        assert updated.relationship == 20
        assert len(updated.memory) == 1
        assert updated.memory[0].action == "shared bread"
        assert updated.last_seen == 3
        assert npc.memory == []

    def test_accepts_dict(self, npc):
        updated = npc_memory.record_interaction(npc, {"turn": 1, "sentiment": -1.0, "importance": 0.0})
        assert updated.relationship == -10

    def test_relationship_clamp_is_total(self, npc):
        for _ in range(20):
            npc = npc_memory.record_interaction(npc, Interaction(turn=1, sentiment=1.0, importance=1.0))
        assert npc.relationship == 100
        for _ in range(40):
            npc = npc_memory.record_interaction(npc, Interaction(turn=2, sentiment=-1.0, importance=1.0))
        assert npc.relationship == -100
        assert len(npc.memory) == 60

    def test_out_of_range_sentiment_is_clamped(self, npc):
        updated = npc_memory.record_interaction(npc, Interaction(turn=1, sentiment=50.0, importance=9.0))
        assert updated.relationship == 20

    def test_adjust_relationship_clamps(self, npc):
        assert npc_memory.adjust_relationship(npc, 500).relationship == 100
        assert npc_memory.adjust_relationship(npc, -500).relationship == -100


class TestBetrayalRisk:

    def test_maxed_out_risk(self):
        npc = NPCModel(name="Vex", traits={"greed": 0.8, "loyalty": 0.1}, relationship=-60)
        assert npc_memory.estimate_betrayal_risk(npc, 5) == 1.0

    def test_missing_traits_use_defaults(self):
        npc = NPCModel(name="Plain")
        # greed 0 + (1 - 0.5) * 0.5 + stage 1 term 0.04
        assert npc_memory.estimate_betrayal_risk(npc, 1) == pytest.approx(0.29)

    def test_good_relationship_lowers_risk(self):
        npc = NPCModel(name="Friend", traits={"greed": 0.3, "loyalty": 0.5}, relationship=80)
        assert npc_memory.estimate_betrayal_risk(npc, 1) == pytest.approx(0.3 + 0.25 - 0.2 + 0.04)

    def test_never_negative(self):
        npc = NPCModel(name="Saint", traits={"greed": 0.0, "loyalty": 1.0}, relationship=100)
        assert npc_memory.estimate_betrayal_risk(npc, 1) == 0.0

    def test_trigger_needs_high_risk_and_coin_flip(self):
        traitor = NPCModel(name="Vex", traits={"greed": 0.8, "loyalty": 0.1}, relationship=-60)
        assert npc_memory.should_trigger_betrayal(traitor, 5, FixedRandom(0.1)) is True
        assert npc_memory.should_trigger_betrayal(traitor, 5, FixedRandom(0.5)) is False

    def test_low_risk_never_triggers(self):
        npc = NPCModel(name="Plain")
        assert npc_memory.should_trigger_betrayal(npc, 1, FixedRandom(0.0)) is False

    def test_dead_or_loyal_never_trigger(self):
        dead = NPCModel(name="Ghost", traits={"greed": 1.0}, alive=False)
        sworn = NPCModel(name="Oathbound", traits={"greed": 1.0}, can_betray=False)
        assert npc_memory.should_trigger_betrayal(dead, 5, FixedRandom(0.0)) is False
        assert npc_memory.should_trigger_betrayal(sworn, 5, FixedRandom(0.0)) is False


class TestSceneAppearance:

    def test_dead_never_appears(self, state):
        npc = NPCModel(name="Ghost", alive=False, location=state.world.current_location)
        assert npc_memory.should_appear_in_scene(npc, state, FixedRandom(0.0)) is False

    def test_group_member_always_appears(self, state):
        npc = NPCModel(name="Ally", location="Elsewhere")
        state.group.members.append(npc.id)
        assert npc_memory.should_appear_in_scene(npc, state, FixedRandom(0.99)) is True

    def test_same_location_always_appears(self, state, npc):
        assert npc_memory.should_appear_in_scene(npc, state, FixedRandom(0.99)) is True

    def test_random_encounter_scales_with_relationship(self, state):
        liked = NPCModel(name="Liked", location="Elsewhere", relationship=100)
        disliked = NPCModel(name="Disliked", location="Elsewhere", relationship=-100)
        # liked: 0.3 + 0.5 = 0.8 chance; disliked: 0.3 - 0.5 < 0
        assert npc_memory.should_appear_in_scene(liked, state, FixedRandom(0.7)) is True
        assert npc_memory.should_appear_in_scene(disliked, state, FixedRandom(0.0)) is False


class TestAttitude:

    @pytest.mark.parametrize("relationship, attitude", [
        (-80, "hostile"), (-30, "unfriendly"), (0, "neutral"), (30, "friendly"), (70, "trusted"),
    ])
    def test_bands(self, relationship, attitude):
        assert npc_memory.estimate_attitude(relationship)["attitude"] == attitude

    def test_labels(self):
        assert npc_memory.relationship_label(-100) == "Hostile"
        assert npc_memory.relationship_label(0) == "Neutral"
        assert npc_memory.relationship_label(100) == "Trusted"

    def test_fallback_npc(self, state, rng):
        npc = npc_memory.create_fallback_npc(state, rng)
        assert npc.name == "Stranger 1"
        assert npc.location == state.world.current_location
        assert npc.first_met == state.turn
