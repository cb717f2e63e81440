"""
Tests for turn planning (agents/orchestrator.py).
"""

import asyncio

import pytest

from conftest import make_narrator
from models.plan import AgentCall
from models.quests import QuestModel
from agents.orchestrator import (
    OrchestratorAgent,
    PlanValidationError,
    default_plan,
    optimize_sequence,
    require_known_agents,
    validate_agents,
)

SERVICE_PLAN = {
    "agentsToCall": [
        {"agent": "WORLD_BUILDER", "priority": 1, "reason": "scene"},
        {"agent": "COMBAT", "priority": 2, "reason": "wolves", "dependencies": ["WORLD_BUILDER"]},
        {"agent": "SCENE_COMPOSER", "priority": 3, "reason": "compose"},
    ],
    "executionOrder": ["WORLD_BUILDER", "COMBAT", "SCENE_COMPOSER"],
    "estimatedApiCalls": 3,
    "sceneType": "Combat",
}


class TestDefaultPlan:

    def test_quiet_scene(self, state):
        plan = default_plan(state)
        assert plan.execution_order == ["world_builder", "scene_composer", "consequence"]
        assert plan.scene_type == "exploration"
        assert plan.estimated_api_calls == 3

    def test_npcs_present(self, state_with_npc):
        plan = default_plan(state_with_npc)
        assert plan.execution_order == [
            "world_builder", "npc_personality", "dialogue", "scene_composer", "consequence",
        ]
        assert plan.scene_type == "dialogue"

    def test_npcs_and_quests(self, state_with_npc, side_quest):
        state_with_npc.quests.side.append(side_quest)
        plan = default_plan(state_with_npc)
        assert plan.execution_order == [
            "world_builder", "quest_manager", "npc_personality", "dialogue", "scene_composer", "consequence",
        ]

    def test_main_quest_alone_adds_quest_manager(self, state):
        state.quests.main = QuestModel(name="The Long Road", type="main")
        assert default_plan(state).execution_order[1] == "quest_manager"

    def test_consequence_waits_on_player(self, state):
        plan = default_plan(state)
        consequence = next(c for c in plan.agents_to_call if c.agent == "consequence")
        assert consequence.priority == 10
        assert consequence.dependencies == ["PLAYER_CHOICE"]


class TestSequencing:

    def test_priority_then_dependency_count(self):
        calls = [
            AgentCall(agent="scene_composer", priority=3),
            AgentCall(agent="dialogue", priority=2, dependencies=["npc_personality"]),
            AgentCall(agent="quest_manager", priority=2),
            AgentCall(agent="npc_personality", priority=2, dependencies=["world_builder", "quest_manager"]),
            AgentCall(agent="world_builder", priority=1),
        ]
        ordered = [c.agent for c in optimize_sequence(calls)]
        assert ordered == ["world_builder", "npc_personality", "dialogue", "quest_manager", "scene_composer"]

    def test_full_ties_keep_input_order(self):
        calls = [AgentCall(agent="combat", priority=2), AgentCall(agent="inventory", priority=2)]
        assert [c.agent for c in optimize_sequence(calls)] == ["combat", "inventory"]

    def test_agent_names_are_normalized(self):
        assert AgentCall(agent=" World_Builder ").agent == "world_builder"

    def test_known_agents(self):
        assert validate_agents(["world_builder", "consequence"])
        assert not validate_agents(["world_builder", "bard"])

    def test_require_known_agents_names_offenders(self):
        with pytest.raises(PlanValidationError) as exc_info:
            require_known_agents(["world_builder", "bard", "alchemist"])
        assert exc_info.value.unknown == ["alchemist", "bard"]


class TestOrchestratorAgent:

    def test_service_plan_accepted(self, state):
        narrator = make_narrator([SERVICE_PLAN])
        orchestrator = OrchestratorAgent(narrator)
        plan = asyncio.run(orchestrator.determine_turn_flow(state))
        assert plan.execution_order == ["world_builder", "combat", "scene_composer"]
        assert plan.scene_type == "combat"
        assert narrator.metrics.fallbacks == 0

    def test_unknown_agent_falls_back(self, state):
        bad = dict(SERVICE_PLAN, executionOrder=["WORLD_BUILDER", "BARD"])
        narrator = make_narrator([bad])
        plan = asyncio.run(OrchestratorAgent(narrator).determine_turn_flow(state))
        assert plan == default_plan(state)
        assert narrator.metrics.fallbacks == 1

    def test_garbage_falls_back(self, state):
        narrator = make_narrator(["I think you should call the world builder."])
        plan = asyncio.run(OrchestratorAgent(narrator).determine_turn_flow(state))
        assert plan.execution_order == ["world_builder", "scene_composer", "consequence"]

    def test_offline_falls_back(self, state, offline_narrator):
        plan = asyncio.run(OrchestratorAgent(offline_narrator).determine_turn_flow(state))
        assert plan == default_plan(state)

    def test_missing_order_is_derived(self, state):
        narrator = make_narrator([dict(SERVICE_PLAN, executionOrder=[])])
        plan = asyncio.run(OrchestratorAgent(narrator).determine_turn_flow(state))
        assert plan.execution_order == ["world_builder", "combat", "scene_composer"]

    def test_history_and_stats(self, state, offline_narrator):
        orchestrator = OrchestratorAgent(offline_narrator)
        assert orchestrator.get_stats()["most_common_scene"] is None

        asyncio.run(orchestrator.determine_turn_flow(state))
        state.turn = 2
        asyncio.run(orchestrator.determine_turn_flow(state))

        assert [r.turn for r in orchestrator.call_history] == [1, 2]
        stats = orchestrator.get_stats()
        assert stats["total_turns_orchestrated"] == 2
        assert stats["average_agents_per_turn"] == 3.0
        assert stats["scene_type_distribution"] == {"exploration": 2}
        assert stats["most_common_scene"] == "exploration"
