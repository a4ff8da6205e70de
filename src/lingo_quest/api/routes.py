"""REST API routes for profiles, sessions, quests and conversation."""

from datetime import datetime
from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, Field

from lingo_quest.errors import LingoQuestError, NotFoundError, PreconditionError, ValidationError
from lingo_quest.learning.goals import add_goal, milestones, refresh_goals
from lingo_quest.models.assessment import ConversationContext
from lingo_quest.models.goal import GoalType
from lingo_quest.models.results import ClaimError
from lingo_quest.models.session import ActivityReport
from lingo_quest.progression.league import leaderboard_position, league_leaderboard
from lingo_quest.progression.leveling import xp_to_next_level
from lingo_quest.services import Services
from lingo_quest.storage.profile_store import validate_user_id

logger = structlog.get_logger()
router = APIRouter(prefix="/api")

_STATUS_BY_ERROR: dict[type[LingoQuestError], int] = {
    ValidationError: 422,
    NotFoundError: 404,
    PreconditionError: 409,
}
_STATUS_BY_CLAIM_ERROR = {ClaimError.NOT_FOUND: 404, ClaimError.PRECONDITION_FAILED: 409}


class ConversationRequest(BaseModel):
    user_id: str
    text: str = Field(min_length=1)
    topic: str | None = None
    history: list[dict[str, str]] = Field(default_factory=list)


class GoalRequest(BaseModel):
    title: str = Field(min_length=1)
    goal_type: GoalType
    target_value: float = Field(gt=0)
    target_date: datetime
    description: str = ""
    reward_xp: int = Field(default=0, ge=0)


def get_services(request: Request) -> Services:
    return request.app.state.services


def http_error(error: LingoQuestError) -> HTTPException:
    """Map a domain error to the matching HTTP status."""
    for error_type, status in _STATUS_BY_ERROR.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))


def checked_user_id(user_id: str) -> str:
    try:
        return validate_user_id(user_id)
    except ValidationError as e:
        raise http_error(e) from e


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@router.get("/profiles/{user_id}")
async def get_profile(user_id: str, services: Services = Depends(get_services)) -> dict:
    """Profile with level progress and a motivational message."""
    profile = await services.dispatcher.read(checked_user_id(user_id))
    return {
        "profile": profile.model_dump(mode="json"),
        "xp_to_next_level": xp_to_next_level(profile.total_xp),
        "message": services.engine.motivational_message(profile),
    }


@router.post("/profiles/{user_id}/sessions")
async def submit_session(
    user_id: str, body: dict[str, Any], services: Services = Depends(get_services)
) -> dict:
    """Record a completed session and return its outcome and next-session advice."""
    user_id = checked_user_id(user_id)
    try:
        report = ActivityReport.parse(body)
    except ValidationError as e:
        logger.info("session_report_rejected", user_id=user_id, error=str(e))
        raise http_error(e) from e

    outcome, adaptation = await services.dispatcher.submit(user_id, report)
    return {
        "outcome": outcome.model_dump(mode="json"),
        "adaptation": adaptation.model_dump(mode="json"),
    }


@router.get("/profiles/{user_id}/quests")
async def list_quests(user_id: str, services: Services = Depends(get_services)) -> list[dict]:
    """Refresh and list the user's quests."""
    quests = await services.dispatcher.run(
        checked_user_id(user_id), services.engine.refresh_quests
    )
    return [q.model_dump(mode="json") for q in quests]


@router.post("/profiles/{user_id}/quests/{quest_id}/claim")
async def claim_quest(
    user_id: str, quest_id: str, services: Services = Depends(get_services)
) -> dict:
    """Claim a completed quest's rewards."""
    outcome = await services.dispatcher.run(
        checked_user_id(user_id),
        lambda profile: services.engine.claim_quest(profile, quest_id),
    )
    if not outcome.ok:
        raise HTTPException(
            status_code=_STATUS_BY_CLAIM_ERROR[outcome.error], detail=outcome.message
        )
    return outcome.model_dump(mode="json")


@router.get("/profiles/{user_id}/league")
async def get_league(user_id: str, services: Services = Depends(get_services)) -> dict:
    profile = await services.dispatcher.read(checked_user_id(user_id))
    return services.engine.league_standing(profile).model_dump(mode="json")


@router.get("/profiles/{user_id}/leaderboard")
async def get_leaderboard(user_id: str, services: Services = Depends(get_services)) -> dict:
    """The user's position among the members of their league."""
    user_id = checked_user_id(user_id)
    profile = await services.dispatcher.read(user_id)
    others = (
        services.store.load(other_id)
        for other_id in services.store.list_user_ids()
        if other_id != user_id
    )
    board = league_leaderboard([profile, *others], profile.league)
    return leaderboard_position(board, user_id).model_dump(mode="json")


@router.post("/profiles/{user_id}/league/settle")
async def settle_league_week(user_id: str, services: Services = Depends(get_services)) -> dict:
    """Close the user's league week: apply promotion or demotion and reset weekly XP."""

    def settle(profile):
        standing = services.engine.settle_week(profile)
        return {"standing": standing.model_dump(mode="json"), "league": profile.league.value}

    return await services.dispatcher.run(checked_user_id(user_id), settle)


@router.get("/profiles/{user_id}/goals")
async def list_goals(user_id: str, services: Services = Depends(get_services)) -> dict:
    """Goals refreshed from the full session history, plus milestones reached."""
    user_id = checked_user_id(user_id)

    def refresh(profile):
        sessions = services.store.recent_sessions(user_id, limit=None)
        return refresh_goals(profile, sessions), milestones(profile, len(sessions))

    goals, reached = await services.dispatcher.run(user_id, refresh)
    return {"goals": [g.model_dump(mode="json") for g in goals], "milestones": reached}


@router.post("/profiles/{user_id}/goals", status_code=201)
async def create_goal(
    user_id: str, request: GoalRequest, services: Services = Depends(get_services)
) -> dict:
    goal = await services.dispatcher.run(
        checked_user_id(user_id), lambda profile: add_goal(profile, **request.model_dump())
    )
    return goal.model_dump(mode="json")


@router.get("/profiles/{user_id}/recommendations")
async def get_recommendations(
    user_id: str,
    interests: list[str] | None = Query(default=None),
    services: Services = Depends(get_services),
) -> dict:
    """Adaptive difficulty advice and personalized content for the next session."""
    user_id = checked_user_id(user_id)
    profile = await services.dispatcher.read(user_id)
    sessions = services.store.recent_sessions(user_id, services.settings.history_window)
    adaptation = services.adaptive.analyze_and_adapt(sessions, profile)
    content = services.adaptive.personalized_content(profile, interests or ())
    return {
        "adaptation": adaptation.model_dump(mode="json"),
        "content": content.model_dump(mode="json"),
    }


@router.post("/profiles/{user_id}/power-ups/{power_up_id}/use")
async def use_power_up(
    user_id: str, power_up_id: str, services: Services = Depends(get_services)
) -> dict:
    try:
        activation = await services.dispatcher.run(
            checked_user_id(user_id),
            lambda profile: services.engine.use_power_up(profile, power_up_id),
        )
    except (NotFoundError, PreconditionError) as e:
        raise http_error(e) from e
    return activation.model_dump(mode="json")


async def _conversation_context(
    request: ConversationRequest, services: Services
) -> ConversationContext:
    profile = await services.dispatcher.read(checked_user_id(request.user_id))
    return ConversationContext(
        user_id=profile.user_id,
        level=profile.learning_level.value,
        topic=request.topic,
        history=request.history,
    )


@router.post("/conversation/reply")
async def conversation_reply(
    request: ConversationRequest, services: Services = Depends(get_services)
) -> dict:
    """Tutor reply to one learner message."""
    context = await _conversation_context(request, services)
    reply = await services.conversation.generate_reply(request.text, context)
    return reply.model_dump(mode="json")


@router.post("/conversation/assess")
async def conversation_assess(
    request: ConversationRequest, services: Services = Depends(get_services)
) -> dict:
    context = await _conversation_context(request, services)
    metrics = await services.conversation.assess_performance(request.text, context)
    return metrics.model_dump(mode="json")
