"""Conversation service with timeout and fallback to the mock provider."""

import asyncio
from typing import Protocol

import structlog

from lingo_quest.errors import ProviderUnavailable
from lingo_quest.models.assessment import (
    ConversationContext,
    ConversationReply,
    PerformanceMetrics,
)

logger = structlog.get_logger()


class ConversationProvider(Protocol):
    async def generate_reply(
        self, text: str, context: ConversationContext
    ) -> ConversationReply: ...

    async def assess_performance(
        self, text: str, context: ConversationContext
    ) -> PerformanceMetrics: ...


class ConversationService:
    """Calls the primary provider within a timeout, degrading to the fallback.

    Args:
        fallback: Provider used when the primary is missing or fails.
        primary: Optional remote provider.
        timeout_seconds: Upper bound for one primary call.
    """

    def __init__(
        self,
        fallback: ConversationProvider,
        primary: ConversationProvider | None = None,
        timeout_seconds: float = 15.0,
    ):
        self.fallback = fallback
        self.primary = primary
        self.timeout_seconds = timeout_seconds

    async def generate_reply(self, text: str, context: ConversationContext) -> ConversationReply:
        if self.primary is not None:
            try:
                return await asyncio.wait_for(
                    self.primary.generate_reply(text, context), self.timeout_seconds
                )
            except (ProviderUnavailable, TimeoutError) as e:
                logger.warning("provider_unavailable", operation="generate_reply", error=str(e))
        return await self.fallback.generate_reply(text, context)

    async def assess_performance(
        self, text: str, context: ConversationContext
    ) -> PerformanceMetrics:
        if self.primary is not None:
            try:
                return await asyncio.wait_for(
                    self.primary.assess_performance(text, context), self.timeout_seconds
                )
            except (ProviderUnavailable, TimeoutError) as e:
                logger.warning(
                    "provider_unavailable", operation="assess_performance", error=str(e)
                )
        return await self.fallback.assess_performance(text, context)
