"""Completion service: dispatches ``{action, payload}`` requests to the LLM."""

import json
import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from notecanvas.exceptions import UpstreamError, ValidationError
from notecanvas.schemas.completion import (
    AnalyzeImagePayload,
    AnalyzeTextPayload,
    ChartRecommendationPayload,
    ChatPayload,
)
from notecanvas.schemas.workspace import BreakdownData, ChartConfig
from notecanvas.services.completion_prompts import (
    BREAKDOWN_SCHEMA,
    BREAKDOWN_SYSTEM_PROMPT,
    CHART_SCHEMA,
    CHART_SYSTEM_PROMPT,
    get_breakdown_prompt,
    get_chart_prompt,
    get_chat_system_prompt,
)
from notecanvas.services.llm import LLMService

logger = logging.getLogger(__name__)

PayloadT = TypeVar("PayloadT", bound=BaseModel)

NO_RESPONSE = "I couldn't generate a response."

# Ollama names the model turn "assistant"
PROVIDER_ROLES = {"user": "user", "model": "assistant"}


class CompletionService:
    """Structured and free-text completions over workspace content."""

    def __init__(self, llm_service: LLMService | None = None):
        self.llm_service = llm_service or LLMService()

    async def run(self, action: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Run one action and return its JSON-ready result."""
        handlers = {
            "analyzeText": self._analyze_text,
            "analyzeImage": self._analyze_image,
            "chartRecommendation": self._recommend_chart,
            "chat": self._chat,
        }
        handler = handlers.get(action)
        if handler is None:
            raise ValidationError("Unknown action", field="action")

        try:
            return await handler(payload)
        except PydanticValidationError as e:
            logger.warning(f"Provider returned an invalid {action} result: {e}")
            raise UpstreamError() from e
        except (httpx.HTTPError, json.JSONDecodeError, KeyError) as e:
            logger.error(f"Completion action {action} failed: {e}")
            raise UpstreamError() from e

    async def _analyze_text(self, payload: dict[str, Any]) -> dict[str, Any]:
        request = _parse_payload(AnalyzeTextPayload, payload)
        result = await self.llm_service.generate_json(
            prompt=get_breakdown_prompt(request.text),
            system_prompt=BREAKDOWN_SYSTEM_PROMPT,
            schema=BREAKDOWN_SCHEMA,
        )
        return BreakdownData.model_validate(result).model_dump(by_alias=True)

    async def _analyze_image(self, payload: dict[str, Any]) -> dict[str, Any]:
        request = _parse_payload(AnalyzeImagePayload, payload)
        text = await self.llm_service.generate(
            prompt=request.prompt,
            images=[request.base64_data],
        )
        return {"text": text or "No analysis generated."}

    async def _recommend_chart(self, payload: dict[str, Any]) -> dict[str, Any]:
        request = _parse_payload(ChartRecommendationPayload, payload)
        result = await self.llm_service.generate_json(
            prompt=get_chart_prompt(request.dataset_description),
            system_prompt=CHART_SYSTEM_PROMPT,
            schema=CHART_SCHEMA,
        )
        return ChartConfig.model_validate(result).model_dump(by_alias=True)

    async def _chat(self, payload: dict[str, Any]) -> dict[str, Any]:
        request = _parse_payload(ChatPayload, payload)
        history = [
            {"role": PROVIDER_ROLES[turn.role], "content": turn.content}
            for turn in request.history
        ]
        text = await self.llm_service.generate(
            prompt=request.new_message,
            system_prompt=get_chat_system_prompt(request.context),
            history=history,
        )
        return {"text": text or NO_RESPONSE}


def _parse_payload(model: type[PayloadT], payload: dict[str, Any]) -> PayloadT:
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError("Invalid completion payload", field="payload") from e
