"""OpenAI-backed tutor replies and performance assessment."""

import json

import structlog
from openai import AsyncOpenAI

from lingo_quest.conversation.prompts import build_assess_prompt, build_reply_prompt
from lingo_quest.errors import ProviderUnavailable
from lingo_quest.models.assessment import (
    ConversationContext,
    ConversationReply,
    PerformanceMetrics,
)

logger = structlog.get_logger()

MAX_HISTORY_MESSAGES = 20


def _clamp_score(value) -> float:
    return max(0.0, min(100.0, float(value)))


class OpenAIConversationProvider:
    """Generates replies with the chat completions API in JSON mode.

    Args:
        api_key: OpenAI API key.
        model: Chat model name.
    """

    def __init__(self, api_key: str, model: str = "gpt-4o-mini"):
        self.client = AsyncOpenAI(api_key=api_key)
        self.model = model

    async def _complete_json(
        self, system_prompt: str, messages: list[dict], temperature: float
    ) -> dict:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "system", "content": system_prompt}, *messages],
                temperature=temperature,
                response_format={"type": "json_object"},
            )
            return json.loads(response.choices[0].message.content)
        except Exception as e:
            logger.warning("openai_request_failed", model=self.model, error=str(e))
            raise ProviderUnavailable(str(e)) from e

    async def generate_reply(self, text: str, context: ConversationContext) -> ConversationReply:
        history = [
            {
                "role": "user" if h.get("role") == "user" else "assistant",
                "content": h.get("text", ""),
            }
            for h in context.history[-MAX_HISTORY_MESSAGES:]
        ]
        result = await self._complete_json(
            build_reply_prompt(context),
            history + [{"role": "user", "content": text}],
            temperature=0.7,
        )
        reply = result.get("reply")
        if not reply:
            raise ProviderUnavailable("Empty reply from provider")
        return ConversationReply(
            text=reply,
            confidence=max(0.0, min(1.0, float(result.get("confidence", 0.8)))),
            corrections=list(result.get("corrections", [])),
            suggestions=list(result.get("suggestions", [])),
            source="openai",
        )

    async def assess_performance(
        self, text: str, context: ConversationContext
    ) -> PerformanceMetrics:
        result = await self._complete_json(
            build_assess_prompt(context),
            [{"role": "user", "content": text}],
            temperature=0.3,
        )
        logger.debug("openai_assessment_complete", result=result)
        metrics = PerformanceMetrics(
            accuracy=_clamp_score(result.get("accuracy", 50)),
            fluency=_clamp_score(result.get("fluency", 50)),
            vocabulary=_clamp_score(result.get("vocabulary", 50)),
            grammar=_clamp_score(result.get("grammar", 50)),
            pronunciation=_clamp_score(result.get("pronunciation", 50)),
        )
        metrics.compute_overall()
        return metrics
