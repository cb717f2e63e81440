"""
UsageMetrics — Call counts and rough cost for narrative service usage.

One instance per game session, passed explicitly to whatever makes calls.
"""

import math
from typing import Dict, Any

# USD per 1K tokens (rough)
INPUT_COST_PER_1K = 0.003
OUTPUT_COST_PER_1K = 0.015


def estimate_tokens(text: str) -> int:
    """~4 characters per token."""
    return math.ceil(len(text or "") / 4)


class UsageMetrics:
    def __init__(self):
        self.call_count = 0
        self.failed_calls = 0
        self.fallbacks = 0
        self.total_cost = 0.0

    def record_call(self, prompt: str, response_text: str) -> None:
        self.call_count += 1
        cost = (estimate_tokens(prompt) * INPUT_COST_PER_1K
                + estimate_tokens(response_text) * OUTPUT_COST_PER_1K) / 1000
        self.total_cost += cost

    def record_failure(self) -> None:
        self.failed_calls += 1

    def record_fallback(self) -> None:
        self.fallbacks += 1

    def get_stats(self) -> Dict[str, Any]:
        average = self.total_cost / self.call_count if self.call_count else 0.0
        return {
            "call_count": self.call_count,
            "failed_calls": self.failed_calls,
            "fallbacks": self.fallbacks,
            "total_cost": round(self.total_cost, 4),
            "average_cost_per_call": round(average, 4),
        }

    def reset(self) -> None:
        self.call_count = 0
        self.failed_calls = 0
        self.fallbacks = 0
        self.total_cost = 0.0
