"""
Settings — Environment-driven configuration (.env supported via python-dotenv).

No key is required. Without GEMINI_API_KEY every handler runs on its
local fallback logic.
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from tools.retry import RetryPolicy


class Settings(BaseModel):
    gemini_api_key: Optional[str] = None
    model_id: str = "gemini-2.0-flash"
    timeout_seconds: float = Field(default=30.0, gt=0)
    max_attempts: int = Field(default=3, ge=1)
    base_delay: float = Field(default=1.0, ge=0)
    backoff_multiplier: float = Field(default=2.0, ge=1)
    rate_limit_tokens: int = Field(default=15, ge=1)
    rate_limit_refill: float = Field(default=0.25, ge=0)
    scene_cache_reuse_probability: float = Field(default=0.3, ge=0, le=1)
    log_level: str = "INFO"
    log_dir: str = "logs"

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "Settings":
        load_dotenv(dotenv_path)
        env = {
            "gemini_api_key": os.getenv("GEMINI_API_KEY") or None,
            "model_id": os.getenv("NARRATIVE_MODEL_ID"),
            "timeout_seconds": os.getenv("NARRATIVE_TIMEOUT_SECONDS"),
            "max_attempts": os.getenv("NARRATIVE_MAX_ATTEMPTS"),
            "base_delay": os.getenv("NARRATIVE_BASE_DELAY"),
            "backoff_multiplier": os.getenv("NARRATIVE_BACKOFF_MULTIPLIER"),
            "rate_limit_tokens": os.getenv("NARRATIVE_RATE_LIMIT_TOKENS"),
            "rate_limit_refill": os.getenv("NARRATIVE_RATE_LIMIT_REFILL"),
            "scene_cache_reuse_probability": os.getenv("SCENE_CACHE_REUSE_PROBABILITY"),
            "log_level": os.getenv("LOG_LEVEL"),
            "log_dir": os.getenv("LOG_DIR"),
        }
        return cls(**{k: v for k, v in env.items() if v is not None})

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            multiplier=self.backoff_multiplier,
        )
