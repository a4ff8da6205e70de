"""Wiring of the long-lived collaborators shared by HTTP and WebSocket handlers."""

from dataclasses import dataclass

import structlog

from lingo_quest.config import Settings
from lingo_quest.conversation.mock_provider import MockConversationProvider
from lingo_quest.conversation.openai_provider import OpenAIConversationProvider
from lingo_quest.conversation.service import ConversationService
from lingo_quest.learning.adaptive import AdaptiveDifficultyEngine
from lingo_quest.progression.engine import ProgressionEngine
from lingo_quest.progression.messages import make_selector
from lingo_quest.realtime.dispatcher import ProgressDispatcher
from lingo_quest.realtime.presence import PresenceHub
from lingo_quest.storage.profile_store import (
    InMemoryProfileStore,
    JsonProfileStore,
    ProfileStore,
)

logger = structlog.get_logger()


@dataclass
class Services:
    settings: Settings
    store: ProfileStore
    engine: ProgressionEngine
    adaptive: AdaptiveDifficultyEngine
    conversation: ConversationService
    hub: PresenceHub
    dispatcher: ProgressDispatcher


def build_store(settings: Settings) -> ProfileStore:
    if settings.storage_backend == "memory":
        return InMemoryProfileStore()
    if settings.storage_backend != "json":
        raise ValueError(f"Unknown storage backend: {settings.storage_backend!r}")
    return JsonProfileStore(settings.data_dir)


def build_conversation(settings: Settings) -> ConversationService:
    selector = make_selector(settings.motivation_seed)
    fallback = MockConversationProvider(selector=selector)
    primary = None
    if not settings.use_mock_provider:
        primary = OpenAIConversationProvider(
            api_key=settings.openai_api_key, model=settings.conversation_model
        )
    logger.info("conversation_provider_configured", mock=primary is None)
    return ConversationService(
        fallback=fallback, primary=primary, timeout_seconds=settings.ai_timeout_seconds
    )


def build_services(settings: Settings, store: ProfileStore | None = None) -> Services:
    store = store if store is not None else build_store(settings)
    engine = ProgressionEngine(selector=make_selector(settings.motivation_seed))
    adaptive = AdaptiveDifficultyEngine(window=settings.history_window)
    hub = PresenceHub()
    dispatcher = ProgressDispatcher(
        store=store,
        engine=engine,
        adaptive=adaptive,
        hub=hub,
        history_window=settings.history_window,
    )
    return Services(
        settings=settings,
        store=store,
        engine=engine,
        adaptive=adaptive,
        conversation=build_conversation(settings),
        hub=hub,
        dispatcher=dispatcher,
    )
