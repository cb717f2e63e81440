"""
Execution plan schemas — what the orchestrator decided and what happened.

Plans are transient: produced fresh each turn and never persisted.
"""

import time
from typing import List, Dict, Any
from pydantic import BaseModel, Field, field_validator


class AgentCall(BaseModel):
    agent: str
    priority: int = 5
    reason: str = ""
    dependencies: List[str] = []

    @field_validator("agent")
    @classmethod
    def normalize_agent(cls, v):
        return v.strip().lower()


class ExecutionPlan(BaseModel):
    agents_to_call: List[AgentCall] = Field(alias="agentsToCall")
    execution_order: List[str] = Field(default=[], alias="executionOrder")
    estimated_api_calls: int = Field(default=0, ge=0, alias="estimatedApiCalls")
    scene_type: str = Field(default="exploration", alias="sceneType")
    urgent_flags: List[str] = Field(default=[], alias="urgentFlags")

    @field_validator("execution_order")
    @classmethod
    def normalize_order(cls, v):
        return [name.strip().lower() for name in v]

    @field_validator("scene_type")
    @classmethod
    def validate_scene_type(cls, v):
        valid = {"combat", "dialogue", "exploration", "quest", "betrayal"}
        if v.lower() not in valid:
            return "exploration"
        return v.lower()

    model_config = {"populate_by_name": True}

    def agent_names(self) -> List[str]:
        """Every agent name the plan references, in first-seen order."""
        names = [call.agent for call in self.agents_to_call] + list(self.execution_order)
        return list(dict.fromkeys(names))


class PlanRecord(BaseModel):
    turn: int
    plan: ExecutionPlan
    timestamp: float = Field(default_factory=time.time)


class AgentError(BaseModel):
    agent: str
    error: str


class TurnResult(BaseModel):
    plan: ExecutionPlan
    results: Dict[str, Any] = {}
    errors: List[AgentError] = []
    success: bool = True
