"""
OrchestratorAgent — Decides which handlers run this turn, and in what order.

The plan is requested from the narrative service. Anything short of a
well-formed plan naming only known agents is replaced by the deterministic
default plan; planning never fails.
"""

import logging
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional

from models.game_config import AgentRole, KNOWN_AGENTS, PLAYER_CHOICE
from models.game_state import GameState
from models.plan import AgentCall, ExecutionPlan, PlanRecord
from tools.context_builder import build_game_context
from tools.narrative_client import NarrativeClient, NarrativeRequest

logger = logging.getLogger('Orchestrator')

# Handlers that call the narrative service (for estimated_api_calls).
SERVICE_BACKED = frozenset({
    AgentRole.WORLD_BUILDER.value,
    AgentRole.NPC_PERSONALITY.value,
    AgentRole.DIALOGUE.value,
    AgentRole.QUEST_MANAGER.value,
    AgentRole.COMBAT.value,
    AgentRole.BETRAYAL.value,
    AgentRole.CONSEQUENCE.value,
    AgentRole.CONTINUITY.value,
    AgentRole.SCENE_COMPOSER.value,
})

ORCHESTRATOR_IDENTITY = """You are the Orchestrator, the coordinator of a multi-agent RPG system.

Analyze the current game state and decide which agents should run this turn.

Available Agents:
- WORLD_BUILDER: Generates environment descriptions and world state
- NPC_PERSONALITY: Manages NPC behaviors and personalities
- DIALOGUE: Creates NPC dialogue and conversations
- QUEST_MANAGER: Updates quest states and objectives
- COMBAT: Handles combat scenarios
- BETRAYAL: Identifies betrayal opportunities
- CONSEQUENCE: Determines outcomes of player choices
- INVENTORY: Manages item interactions
- PROFILE_TRACKER: Reports on the player's personality profile
- CONTINUITY: Ensures story consistency
- SCENE_COMPOSER: Combines all elements into a cohesive scene

Consider what is happening in the scene, which NPCs are present, whether
there is combat potential, quest-related events, and the last player action."""

OUTPUT_FORMAT = {
    "agentsToCall": [
        {"agent": "AGENT_NAME", "priority": 1, "reason": "why this agent is needed", "dependencies": ["AGENT_NAME"]},
    ],
    "executionOrder": ["AGENT_1", "AGENT_2"],
    "estimatedApiCalls": 5,
    "sceneType": "combat|dialogue|exploration|quest|betrayal",
    "urgentFlags": ["any urgent situations"],
}


class PlanValidationError(ValueError):
    """A plan names an agent outside the known set. Configuration error."""

    def __init__(self, unknown: Iterable[str]):
        self.unknown = sorted(unknown)
        super().__init__(f"Plan references unknown agents: {', '.join(self.unknown)}")


def validate_agents(names: Iterable[str]) -> bool:
    return all(name in KNOWN_AGENTS for name in names)


def require_known_agents(names: Iterable[str]) -> None:
    unknown = {name for name in names if name not in KNOWN_AGENTS}
    if unknown:
        raise PlanValidationError(unknown)


def optimize_sequence(calls: List[AgentCall]) -> List[AgentCall]:
    """Ascending priority; among equal priorities, more dependencies first. Stable."""
    return sorted(calls, key=lambda c: (c.priority, -len(c.dependencies)))


def default_plan(state: GameState) -> ExecutionPlan:
    """Deterministic fallback plan."""
    world, composer = AgentRole.WORLD_BUILDER.value, AgentRole.SCENE_COMPOSER.value
    calls = [
        AgentCall(agent=world, priority=1, reason="Generate scene context"),
        AgentCall(agent=composer, priority=2, reason="Create cohesive scene", dependencies=[world]),
    ]
    order = [world, composer]
    scene_type = "exploration"

    if state.current_scene.npcs_present:
        npc, dialogue = AgentRole.NPC_PERSONALITY.value, AgentRole.DIALOGUE.value
        calls.append(AgentCall(agent=npc, priority=2, reason="Manage NPC interactions", dependencies=[world]))
        calls.append(AgentCall(agent=dialogue, priority=3, reason="Generate NPC dialogue", dependencies=[npc]))
        order[1:1] = [npc, dialogue]
        scene_type = "dialogue"

    if state.quests.active_side_quests() or state.quests.main:
        quest = AgentRole.QUEST_MANAGER.value
        calls.append(AgentCall(agent=quest, priority=2, reason="Update quest progress"))
        order.insert(1, quest)

    consequence = AgentRole.CONSEQUENCE.value
    calls.append(AgentCall(
        agent=consequence,
        priority=10,
        reason="Determine outcome of player choice",
        dependencies=[PLAYER_CHOICE],
    ))
    order.append(consequence)

    return ExecutionPlan(
        agents_to_call=calls,
        execution_order=order,
        estimated_api_calls=sum(1 for name in order if name in SERVICE_BACKED),
        scene_type=scene_type,
    )


class OrchestratorAgent:
    """Plans turns and keeps a history of every plan it emitted."""

    role = AgentRole.ORCHESTRATOR

    def __init__(self, narrator: NarrativeClient):
        self.narrator = narrator
        self.call_history: List[PlanRecord] = []

    async def request_plan(self, state: GameState) -> Optional[ExecutionPlan]:
        """A validated plan from the narrative service, or None."""
        request = NarrativeRequest(
            system_context=ORCHESTRATOR_IDENTITY,
            task="Analyze the game state and create an execution plan for this turn.",
            data={
                "gameContext": build_game_context(state),
                "currentTurn": state.turn,
                "currentStage": state.stage,
                "lastAction": state.last_history.model_dump() if state.last_history else None,
            },
            output_format=OUTPUT_FORMAT,
            max_tokens=1500,
        )
        result = await self.narrator.request_structured(request, ExecutionPlan)
        if not result.ok:
            return None

        plan: ExecutionPlan = result.document
        if not validate_agents(plan.agent_names()):
            unknown = [n for n in plan.agent_names() if n not in KNOWN_AGENTS]
            logger.warning(f"Service plan names unknown agents {unknown}; discarding")
            return None
        if not plan.execution_order:
            plan.execution_order = [c.agent for c in optimize_sequence(plan.agents_to_call)]
        return plan

    async def determine_turn_flow(self, state: GameState) -> ExecutionPlan:
        plan = await self.request_plan(state)
        if plan is None:
            logger.warning(f"Turn {state.turn}: using default plan")
            self.narrator.metrics.record_fallback()
            plan = default_plan(state)

        self.call_history.append(PlanRecord(turn=state.turn, plan=plan))
        logger.info(f"Turn {state.turn} plan: {' -> '.join(plan.execution_order)} ({plan.scene_type})")
        return plan

    def get_stats(self) -> Dict[str, Any]:
        total = len(self.call_history)
        scene_types = Counter(record.plan.scene_type or "unknown" for record in self.call_history)
        average = sum(len(r.plan.agents_to_call) for r in self.call_history) / total if total else 0.0
        return {
            "total_turns_orchestrated": total,
            "average_agents_per_turn": round(average, 2),
            "scene_type_distribution": dict(scene_types),
            "most_common_scene": scene_types.most_common(1)[0][0] if scene_types else None,
        }
