from app.models.boot import Boot
from app.models.quiz import QuizSession
from app.models.breakdown import FittingBreakdown
from app.models.affiliate import AffiliateClick

__all__ = [
    "Boot",
    # Quiz
    "QuizSession",
    "FittingBreakdown",
    # Tracking
    "AffiliateClick",
]
