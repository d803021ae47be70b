# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
AI co-founder endpoints.

Everything except ``/ai/health`` requires a signed-in user.  Input is
checked here, before any call to the model; the orchestrator never raises,
it returns ``{"success": false, ...}`` which is sent with status 500.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ai.orchestrator import PromptOrchestrator
from ai.schemas import ChatRequest, InsightsRequest, MarketAnalysisRequest, RecommendationsRequest
from auth.dependencies import get_current_user
from core.errors import ValidationError
from models.user import User

router = APIRouter(prefix="/ai", tags=["ai"])


def get_orchestrator(request: Request) -> PromptOrchestrator:
    return request.app.state.orchestrator


def _respond(result: dict, failure_status: int = 500):
    if result.get("success"):
        return result
    return JSONResponse(status_code=failure_status, content=result)


# ---------------------------------------------------------------------------
# POST /ai/chat
# ---------------------------------------------------------------------------


@router.post("/chat")
async def chat(
    body: ChatRequest,
    current_user: User = Depends(get_current_user),
    orchestrator: PromptOrchestrator = Depends(get_orchestrator),
):
    """Talk to the AI co-founder; ``conversationHistory`` carries earlier turns."""
    if not body.message or not body.message.strip():
        raise ValidationError("Message is required")

    history = [m.model_dump() for m in body.conversation_history]
    return _respond(await orchestrator.chat(body.message, history))


# ---------------------------------------------------------------------------
# POST /ai/insights
# ---------------------------------------------------------------------------


@router.post("/insights")
async def insights(
    body: InsightsRequest,
    current_user: User = Depends(get_current_user),
    orchestrator: PromptOrchestrator = Depends(get_orchestrator),
):
    """Dashboard insights, idea validation, or a generic analysis."""
    data = body.user_profile or body.user_data
    if not data:
        raise ValidationError("User data is required")

    return _respond(await orchestrator.insights(data, body.request_type))


# ---------------------------------------------------------------------------
# POST /ai/market-analysis
# ---------------------------------------------------------------------------


@router.post("/market-analysis")
async def market_analysis(
    body: MarketAnalysisRequest,
    current_user: User = Depends(get_current_user),
    orchestrator: PromptOrchestrator = Depends(get_orchestrator),
):
    if not (body.business_idea or "").strip() or not (body.industry or "").strip():
        raise ValidationError("Business idea and industry are required")

    return _respond(await orchestrator.market_analysis(body.business_idea.strip(), body.industry.strip()))


# ---------------------------------------------------------------------------
# POST /ai/recommendations
# ---------------------------------------------------------------------------


@router.post("/recommendations")
async def recommendations(
    body: RecommendationsRequest,
    current_user: User = Depends(get_current_user),
    orchestrator: PromptOrchestrator = Depends(get_orchestrator),
):
    """Advice for one business area: funding, marketing, product (or anything else)."""
    if not (body.context or "").strip():
        raise ValidationError("Context is required")

    return _respond(await orchestrator.recommendations(body.area, body.context.strip()))


# ---------------------------------------------------------------------------
# GET /ai/health
# ---------------------------------------------------------------------------


@router.get("/health")
async def health(orchestrator: PromptOrchestrator = Depends(get_orchestrator)):
    """Liveness probe against the model endpoint (one tiny completion)."""
    return _respond(await orchestrator.health(), failure_status=503)
