"""
Narrative Orchestrator — Command-line entry point.

Plays a number of turns end to end, picking a random choice from each
composed scene.

To run: python -m orchestration.main --world "Shattered Isles" --turns 10
"""

import os
import asyncio
import random
import logging
import argparse
from typing import Optional

from google import genai

from agents.orchestrator import OrchestratorAgent
from agents.registry import build_registry
from models.game_state import GameState, PlayerChoice
from orchestration.config import Settings
from pipeline.executor import execute_turn
from pipeline.turn_cycle import complete_turn, new_game
from tools.narrative_client import NarrativeClient
from tools.rate_limiter import RateLimiter
from tools.scene_cache import ProbabilisticReuse, SceneCache
from tools.usage_metrics import UsageMetrics

logger = logging.getLogger('NarrativeOrchestrator')


def setup_logging(settings: Settings) -> None:
    os.makedirs(settings.log_dir, exist_ok=True)
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(os.path.join(settings.log_dir, "orchestrator.log"), encoding="utf-8"),
            logging.StreamHandler(),
        ],
    )


def build_narrator(settings: Settings) -> NarrativeClient:
    client = None
    if settings.gemini_api_key:
        client = genai.Client(api_key=settings.gemini_api_key)
    else:
        logger.warning("GEMINI_API_KEY not set; every handler will use its local fallback.")

    return NarrativeClient(
        client,
        settings.model_id,
        timeout=settings.timeout_seconds,
        retry_policy=settings.retry_policy,
        limiter=RateLimiter(settings.rate_limit_tokens, settings.rate_limit_refill),
        metrics=UsageMetrics(),
    )


def pick_choice(state: GameState, rng: random.Random) -> Optional[PlayerChoice]:
    choices = state.current_scene.choices
    if not choices:
        return None
    choice = rng.choice(choices)
    return PlayerChoice(text=choice.text, personality_mapping=choice.personality_mapping)


async def play(world: str, turns: int, seed: Optional[int], settings: Settings) -> GameState:
    rng = random.Random(seed)
    narrator = build_narrator(settings)
    cache = SceneCache(ProbabilisticReuse(settings.scene_cache_reuse_probability, rng))
    registry = build_registry(narrator, cache=cache, rng=rng)
    orchestrator = OrchestratorAgent(narrator)

    state = new_game(world)
    for _ in range(turns):
        if state.is_over:
            break
        state.pending_choice = pick_choice(state, rng)
        result = await execute_turn(state, registry, orchestrator, handler_timeout=settings.timeout_seconds * 2)
        entry = complete_turn(state, result)

        status = "ok" if result.success else f"{len(result.errors)} error(s)"
        print(f"Turn {entry.turn} [stage {entry.stage}, {entry.scene_type}] "
              f"choice={entry.choice_type or '-'} hp={state.stats.health} gold={state.inventory.gold} ({status})")

    print(f"Orchestrator: {orchestrator.get_stats()}")
    print(f"Usage: {narrator.metrics.get_stats()}")
    return state


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Run turns of the narrative orchestrator.")
    parser.add_argument("--world", default="The Shattered Realm", help="World name")
    parser.add_argument("--turns", type=int, default=5, help="Number of turns to play")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    setup_logging(settings)
    asyncio.run(play(args.world, args.turns, args.seed, settings))


if __name__ == "__main__":
    main()
