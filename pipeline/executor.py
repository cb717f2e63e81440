"""
Turn executor — Runs one turn's plan, handler by handler, against GameState.

Handlers run strictly in plan order; each sees a read-only view of the
results produced before it. A handler that raises, times out, or fails in
its commit hook is recorded as an error, its result is left out, and state
is restored to exactly what it was before that handler started.
"""

import asyncio
import inspect
import logging
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from agents.orchestrator import OrchestratorAgent, default_plan, require_known_agents
from models.game_state import GameState
from models.plan import AgentError, ExecutionPlan, TurnResult

logger = logging.getLogger('Executor')


def _restore(state: GameState, snapshot: GameState) -> None:
    for field in type(state).model_fields:
        setattr(state, field, getattr(snapshot, field))


async def _invoke(handler, state: GameState, view: Mapping[str, Any]) -> Any:
    fn = getattr(handler, "execute", handler)
    result = fn(state, view)
    if inspect.isawaitable(result):
        result = await result
    return result


async def _run_handler(handler, state: GameState, view: Mapping[str, Any], timeout: Optional[float]) -> Any:
    call = _invoke(handler, state, view)
    result = await asyncio.wait_for(call, timeout) if timeout else await call

    commit = getattr(handler, "apply", None)
    if callable(commit):
        commit(state, result)
    return result


async def execute_turn(
    state: GameState,
    registry: Mapping[str, Any],
    orchestrator: Optional[OrchestratorAgent] = None,
    plan: Optional[ExecutionPlan] = None,
    handler_timeout: Optional[float] = None,
) -> TurnResult:
    """Plan (unless a plan is given) and execute one turn.

    Raises PlanValidationError if a supplied plan names an unknown agent;
    nothing has run at that point. Every other failure is reported in
    the TurnResult.
    """
    if plan is not None:
        require_known_agents(plan.agent_names())
    elif orchestrator is not None:
        plan = await orchestrator.determine_turn_flow(state)
    else:
        plan = default_plan(state)

    results: Dict[str, Any] = {}
    errors: List[AgentError] = []
    view = MappingProxyType(results)

    for name in plan.execution_order:
        handler = registry.get(name)
        if handler is None:
            logger.warning(f"Agent '{name}' not found in registry; skipping")
            continue

        snapshot = state.model_copy(deep=True)
        try:
            logger.info(f"Calling {name}...")
            result = await _run_handler(handler, state, view, handler_timeout)
        except asyncio.TimeoutError:
            _restore(state, snapshot)
            logger.error(f"Agent '{name}' timed out after {handler_timeout}s")
            errors.append(AgentError(agent=name, error=f"Timed out after {handler_timeout}s"))
            continue
        except Exception as e:
            _restore(state, snapshot)
            logger.error(f"Agent '{name}' failed: {e}", exc_info=True)
            errors.append(AgentError(agent=name, error=str(e) or type(e).__name__))
            continue

        results[name] = result

    return TurnResult(plan=plan, results=results, errors=errors, success=not errors)
