"""
Shared pytest fixtures for the narrative orchestrator test suite.

No test talks to a live Gemini model: MockGeminiClient hands back canned
responses in order.
"""

import json
import random

import pytest

from models.game_state import GameState, World, PlayerChoice
from models.npcs import NPCModel
from models.quests import QuestModel, Objective, ObjectiveKind
from tools.narrative_client import NarrativeClient
from tools.retry import NO_RETRY
from tools.usage_metrics import UsageMetrics


# ---------------------------------------------------------------------------
# Gemini Mock Helpers (reusable classes)
# ---------------------------------------------------------------------------

class MockGeminiResponse:
    """Simulates a Gemini response with .text property."""

    def __init__(self, text: str):
        self.text = text


class MockGeminiClient:
    """Mock Gemini client that returns canned responses in order.

    A response may be a str (returned as .text), a dict (JSON-encoded),
    or an Exception instance (raised). Once the canned list runs out,
    every call raises.

    Usage:
        client = MockGeminiClient(['{"a": 1}', RuntimeError("boom")])
        resp = await client.aio.models.generate_content(model=..., contents=...)
        assert resp.text == '{"a": 1}'
    """

    def __init__(self, responses=None):
        self._responses = list(responses or [])
        self.calls = []

    @property
    def aio(self):
        return self

    @property
    def models(self):
        return self

    @property
    def call_count(self):
        return len(self.calls)

    async def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if len(self.calls) > len(self._responses):
            raise RuntimeError("no more canned responses")
        resp = self._responses[len(self.calls) - 1]
        if isinstance(resp, BaseException):
            raise resp
        if isinstance(resp, dict):
            return MockGeminiResponse(json.dumps(resp))
        if isinstance(resp, str):
            return MockGeminiResponse(resp)
        # Allow passing pre-built response objects
        return resp


class FixedRandom(random.Random):
    """Random whose .random() always returns the same value."""

    def __init__(self, value):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


def make_narrator(responses=None, **kwargs) -> NarrativeClient:
    """NarrativeClient over a MockGeminiClient. No retries unless asked for."""
    kwargs.setdefault("retry_policy", NO_RETRY)
    kwargs.setdefault("metrics", UsageMetrics())
    return NarrativeClient(MockGeminiClient(responses), **kwargs)


# ---------------------------------------------------------------------------
# Pytest fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def offline_narrator():
    """Narrator with no client: every request fails, every handler falls back."""
    return NarrativeClient(None, retry_policy=NO_RETRY, metrics=UsageMetrics())


@pytest.fixture
def state():
    return GameState(world=World(name="Ashfall", current_location="Cinder Gate"))


@pytest.fixture
def npc():
    return NPCModel(
        id="npc_mara",
        name="Mara",
        archetype="rogue",
        traits={"greed": 0.2, "loyalty": 0.6},
        location="Cinder Gate",
    )


@pytest.fixture
def state_with_npc(state, npc):
    state.npcs.append(npc)
    state.current_scene.npcs_present = [npc.id]
    return state


@pytest.fixture
def side_quest():
    return QuestModel(
        id="quest_ember",
        name="The Ember Key",
        objectives=[
            Objective(description="Find the ember key", kind=ObjectiveKind.FIND),
            Objective(description="Talk to the warden", kind=ObjectiveKind.TALK, target="Warden"),
        ],
        turns_remaining=3,
        rewards={"gold": 40, "items": ["Ember Key"], "reputation": 5},
    )


@pytest.fixture
def pending_choice():
    return PlayerChoice(text="Charge the gate", personality_mapping="AGGRESSIVE")
