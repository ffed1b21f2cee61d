from uuid import UUID
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class BreakdownSection(BaseModel):
    boot_id: str
    heading: str
    body: str


class BreakdownGenerateRequest(BaseModel):
    user_id: str
    quiz_id: UUID
    selected_boot_ids: Optional[list[str]] = None  # Limit the breakdown to these boots


class BreakdownResponse(BaseModel):
    user_id: str
    quiz_id: UUID
    language: str
    model_provider: str
    model_name: str
    word_count: int
    sections: list[BreakdownSection]
    generated_at: datetime

    class Config:
        from_attributes = True
        protected_namespaces = ()


class BreakdownGenerateResponse(BaseModel):
    success: bool
    message: str
    breakdown: BreakdownResponse
