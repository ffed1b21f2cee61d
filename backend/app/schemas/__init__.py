from app.schemas.quiz import (
    FootLength, ShoeSize, FootWidth, QuizAnswers, MatchRequest, MatchResponse,
    BootSummary, SessionResponse, SessionUpdateRequest
)
from app.schemas.boot import AffiliateLink, BootBase, BootCreate, BootUpdate, BootResponse
from app.schemas.breakdown import (
    BreakdownSection, BreakdownGenerateRequest, BreakdownResponse, BreakdownGenerateResponse
)
from app.schemas.admin import AnalyticsOverview

__all__ = [
    # Quiz
    "FootLength", "ShoeSize", "FootWidth", "QuizAnswers", "MatchRequest", "MatchResponse",
    "BootSummary", "SessionResponse", "SessionUpdateRequest",
    # Boot
    "AffiliateLink", "BootBase", "BootCreate", "BootUpdate", "BootResponse",
    # Breakdown
    "BreakdownSection", "BreakdownGenerateRequest", "BreakdownResponse", "BreakdownGenerateResponse",
    # Admin
    "AnalyticsOverview",
]
