"""
NarrativeClient — The only door to the external narrative generation service.

A request is {system_context, task, data, output_format}. The response is
untrusted: it is only accepted if it parses as JSON *and* validates against
the Pydantic schema the calling handler declares. Everything else comes back
as a failed NarrativeResult so the handler can use its local fallback.

Each attempt is bounded by a timeout; attempts are bounded by a RetryPolicy.
"""

import json
import asyncio
import logging
from typing import Any, Dict, Optional, Type, Tuple

from google import genai
from pydantic import BaseModel, ValidationError

from tools.rate_limiter import RateLimiter
from tools.retry import RetryPolicy, RetryExhaustedError, call_with_retry
from tools.usage_metrics import UsageMetrics

logger = logging.getLogger('NarrativeClient')

DEFAULT_MODEL_ID = "gemini-2.0-flash"


class NarrativeServiceError(RuntimeError):
    """Transport, timeout, parse, or shape failure."""


class NarrativeRequest(BaseModel):
    system_context: str
    task: str
    data: Dict[str, Any] = {}
    output_format: Dict[str, Any] = {}
    temperature: float = 0.7
    max_tokens: int = 2000


class NarrativeResult(BaseModel):
    """Typed success/failure. `document` is a validated schema instance."""

    document: Optional[Any] = None
    raw: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.document is not None


def build_structured_prompt(request: NarrativeRequest) -> Tuple[str, str]:
    """Split a request into (system_instruction, contents)."""
    contents = f"""TASK:
{request.task}

DATA:
{json.dumps(request.data, indent=2, default=str)}

CRITICAL: Respond ONLY with valid JSON. No markdown, no code blocks, no explanation.

OUTPUT FORMAT:
{json.dumps(request.output_format, indent=2)}

Your response must be parseable JSON matching the format above."""
    return request.system_context, contents


def strip_code_fences(text: str) -> str:
    text = (text or "").strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        text = text.rsplit("```", 1)[0]
    return text.strip()


def parse_document(raw: str, schema: Type[BaseModel]) -> NarrativeResult:
    """Validate raw service text against a schema."""
    text = strip_code_fences(raw)
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        return NarrativeResult(raw=raw, error=f"Response is not JSON: {e}")
    try:
        document = schema.model_validate(payload)
    except ValidationError as e:
        return NarrativeResult(raw=raw, error=f"Response does not match {schema.__name__}: {e}")
    return NarrativeResult(document=document, raw=raw)


class NarrativeClient:
    """Wraps a google-genai client with timeout, retry, rate limiting, and metrics."""

    def __init__(
        self,
        client,
        model_id: str = DEFAULT_MODEL_ID,
        *,
        timeout: float = 30.0,
        retry_policy: Optional[RetryPolicy] = None,
        limiter: Optional[RateLimiter] = None,
        metrics: Optional[UsageMetrics] = None,
    ):
        self.client = client
        self.model_id = model_id
        self.timeout = timeout
        self.retry_policy = retry_policy or RetryPolicy()
        self.limiter = limiter or RateLimiter.unlimited()
        self.metrics = metrics or UsageMetrics()

    @property
    def is_connected(self) -> bool:
        return self.client is not None

    async def _attempt(self, system: str, contents: str, request: NarrativeRequest) -> str:
        await self.limiter.acquire()
        call = self.client.aio.models.generate_content(
            model=self.model_id,
            contents=contents,
            config=genai.types.GenerateContentConfig(
                system_instruction=system,
                temperature=request.temperature,
                max_output_tokens=request.max_tokens,
                response_mime_type="application/json",
            ),
        )
        try:
            response = await asyncio.wait_for(call, timeout=self.timeout)
        except asyncio.TimeoutError:
            raise NarrativeServiceError(f"No response within {self.timeout}s")

        text = getattr(response, "text", None)
        if not text:
            raise NarrativeServiceError("Empty response")
        self.metrics.record_call(system + contents, text)
        return text

    async def complete(self, request: NarrativeRequest) -> str:
        """Raw response text. Raises NarrativeServiceError on any failure."""
        if not self.is_connected:
            raise NarrativeServiceError("Narrative service not connected")

        system, contents = build_structured_prompt(request)
        try:
            return await call_with_retry(
                lambda: self._attempt(system, contents, request),
                self.retry_policy,
                label=self.model_id,
            )
        except RetryExhaustedError as e:
            self.metrics.record_failure()
            raise NarrativeServiceError(str(e)) from e.last_error

    async def request_structured(self, request: NarrativeRequest, schema: Type[BaseModel]) -> NarrativeResult:
        """Ask for a document of the given shape. Never raises."""
        try:
            raw = await self.complete(request)
        except NarrativeServiceError as e:
            logger.warning(f"Narrative request failed: {e}")
            return NarrativeResult(error=str(e))

        result = parse_document(raw, schema)
        if not result.ok:
            logger.warning(result.error)
            logger.debug(f"Raw response: {raw[:500]}")
        return result
