# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Pydantic models for the AI endpoints.

The *request* models are deliberately lenient (everything optional) so the
router can answer with the same friendly messages as the rest of the API.
The *model output* models describe the JSON the co-founder is asked to
return; an answer that does not fit is rejected instead of being forwarded.
"""

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field

from users.schemas import CAMEL


# -- Requests --------------------------------------------------------------


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    message: Optional[str] = None
    conversation_history: List[ChatMessage] = []

    model_config = CAMEL


class InsightsRequest(BaseModel):
    # Older clients send ``userData``, newer ones ``userProfile``
    user_profile: Optional[dict[str, Any]] = None
    user_data: Optional[dict[str, Any]] = None
    request_type: str = "dashboard_insights"

    model_config = CAMEL


class MarketAnalysisRequest(BaseModel):
    business_idea: Optional[str] = None
    industry: Optional[str] = None

    model_config = CAMEL


class RecommendationsRequest(BaseModel):
    area: Optional[str] = None
    context: Optional[str] = None


# -- Model output ----------------------------------------------------------


class Insight(BaseModel):
    title: str
    description: str
    action: Optional[str] = None
    priority: Optional[str] = None


class DashboardRecommendation(BaseModel):
    type: Optional[str] = None
    title: str
    description: str


class DashboardInsights(BaseModel):
    insights: List[Insight]
    recommendations: List[DashboardRecommendation]
    focus_area: Optional[str] = None
    confidence: Optional[int] = Field(default=None, ge=0, le=100)

    model_config = CAMEL


class PriorityAction(BaseModel):
    priority: Optional[str] = None
    action: str


class ValidationReport(BaseModel):
    score: int = Field(ge=0, le=100)
    strengths: List[str] = []
    weaknesses: List[str] = []
    opportunities: List[str] = []
    threats: List[str] = []
    recommendations: List[PriorityAction] = []


class IdeaValidation(BaseModel):
    validation: ValidationReport
    next_steps: List[str] = []

    model_config = CAMEL


class MarketAnalysis(BaseModel):
    market_size: str
    competition: str
    opportunities: List[str] = []
    threats: List[str] = []
    recommendation: str

    model_config = CAMEL
