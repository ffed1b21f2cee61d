from pydantic import BaseModel


class AnalyticsOverview(BaseModel):
    total_boots: int
    total_sessions: int
    completed_sessions: int
    total_breakdowns: int
    total_affiliate_clicks: int
