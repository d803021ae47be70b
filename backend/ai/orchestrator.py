# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Prompt orchestrator for the AI co-founder.

Builds the message list (persona → history → prompt), sends it through a
:class:`ai.client.CompletionClient`, and normalises the outcome into one of
two shapes:

    {"success": True,  ...payload..., "usage": {...}}
    {"success": False, "error": "<user-safe message>"[, "details": "<raw>"]}

Structured requests (insights, market analysis) must come back as JSON that
fits the matching schema in :mod:`ai.schemas`; anything else becomes a
failure result rather than being forwarded to the client.  No retries.
"""

import json
import re
from datetime import datetime, timezone

from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from ai import prompts
from ai.client import Completion, CompletionClient, CompletionError
from ai.schemas import DashboardInsights, IdeaValidation, MarketAnalysis
from core.logger import logger

CONNECTION_ERROR = "I apologize, but I'm having trouble connecting right now. Please try again in a moment."
UNREADABLE_ERROR = "I apologize, but I couldn't put together a proper answer this time. Please try again."

_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def parse_model_json(text: str) -> dict:
    """
    Parse the model's answer as a JSON object.

    Tolerates a surrounding markdown code fence; raises ``ValueError`` for
    anything that is not a single JSON object.
    """
    text = text.strip()
    match = _FENCE.match(text)
    if match:
        text = match.group(1)
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


class PromptOrchestrator:
    def __init__(
        self,
        client: CompletionClient,
        temperature: float,
        max_tokens: int,
        expose_details: bool = False,
    ):
        self.client = client
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.expose_details = expose_details

    # -- plumbing ------------------------------------------------------------

    async def _complete(self, prompt: str, history: list[dict] | None = None) -> Completion:
        messages = [{"role": "system", "content": prompts.PERSONA}]
        messages.extend(history or [])
        messages.append({"role": "user", "content": prompt})
        return await self.client.complete(
            messages, temperature=self.temperature, max_tokens=self.max_tokens
        )

    def _failure(self, error: str, raw: str, operation: str) -> dict:
        logger.error("ai %s failed | %s", operation, raw)
        result = {"success": False, "error": error}
        if self.expose_details:
            result["details"] = raw
        return result

    async def _structured(self, prompt: str, schema: type[BaseModel] | None, operation: str):
        """Run *prompt* and validate the answer against *schema*."""
        try:
            completion = await self._complete(prompt)
        except CompletionError as exc:
            return None, None, self._failure(CONNECTION_ERROR, str(exc), operation)

        try:
            data = parse_model_json(completion.content)
            parsed = schema.model_validate(data) if schema is not None else data
        except (ValueError, SchemaError) as exc:
            # json.JSONDecodeError is a ValueError
            return None, None, self._failure(UNREADABLE_ERROR, f"unusable model output: {exc}", operation)

        return parsed, completion.usage, None

    # -- operations ----------------------------------------------------------

    async def chat(self, message: str, history: list[dict] | None = None) -> dict:
        """Free-form conversation; the answer text is returned as-is."""
        try:
            completion = await self._complete(message, history)
        except CompletionError as exc:
            return self._failure(CONNECTION_ERROR, str(exc), "chat")

        return {"success": True, "response": completion.content, "usage": completion.usage}

    async def insights(self, user_data: dict, request_type: str = prompts.DASHBOARD_INSIGHTS) -> dict:
        """
        Dashboard insights, idea validation, or – for any other request type –
        an open-ended JSON object returned under ``insights``.
        """
        logger.info("ai insights | request_type=%s", request_type)

        if request_type == prompts.DASHBOARD_INSIGHTS:
            parsed, usage, failure = await self._structured(
                prompts.dashboard_insights_prompt(user_data), DashboardInsights, "insights"
            )
        elif request_type == prompts.IDEA_VALIDATION:
            parsed, usage, failure = await self._structured(
                prompts.idea_validation_prompt(user_data), IdeaValidation, "insights"
            )
        else:
            parsed, usage, failure = await self._structured(
                prompts.generic_insights_prompt(user_data, request_type), None, "insights"
            )

        if failure:
            return failure
        if isinstance(parsed, BaseModel):
            return {"success": True, **parsed.model_dump(by_alias=True), "usage": usage}

        # The model sometimes echoes a "success" key of its own
        parsed.pop("success", None)
        return {"success": True, "requestType": request_type, "insights": parsed, "usage": usage}

    async def market_analysis(self, business_idea: str, industry: str) -> dict:
        parsed, usage, failure = await self._structured(
            prompts.market_analysis_prompt(business_idea, industry), MarketAnalysis, "market-analysis"
        )
        if failure:
            return failure
        return {"success": True, "analysis": parsed.model_dump(by_alias=True), "usage": usage}

    async def recommendations(self, area: str | None, context: str) -> dict:
        """Area-specific advice (funding, marketing, product) as free text."""
        try:
            completion = await self._complete(prompts.recommendation_prompt(area, context))
        except CompletionError as exc:
            return self._failure(CONNECTION_ERROR, str(exc), "recommendations")

        return {
            "success": True,
            "area": area or "general",
            "response": completion.content,
            "usage": completion.usage,
        }

    async def health(self) -> dict:
        """Send a trivial prompt and report whether the model answered."""
        checked_at = datetime.now(timezone.utc).isoformat()
        try:
            await self._complete(prompts.HEALTH_PROBE)
        except CompletionError as exc:
            failure = self._failure("AI Co-founder is offline", str(exc), "health")
            return {**failure, "status": "AI Co-founder is offline", "model": self.client.model, "timestamp": checked_at}

        return {"success": True, "status": "AI Co-founder is online", "model": self.client.model, "timestamp": checked_at}
