from uuid import UUID
from datetime import datetime
from typing import Optional, Any
from pydantic import BaseModel, Field, field_validator, model_validator
from app.services.fit_profile import (
    Ability, BootType, Feature, Gender, ShoeSizeSystem, ToeShape, Volume, WidthCategory,
    normalize_boot_type, normalize_volume,
)


class FootLength(BaseModel):
    left: float = Field(gt=0)
    right: float = Field(gt=0)


class ShoeSize(BaseModel):
    system: ShoeSizeSystem
    value: float = Field(gt=0)


class FootWidth(BaseModel):
    """Either millimetre measurements (left/right) or a coarse category.

    When both are sent the measurements win.
    """
    left: Optional[float] = Field(default=None, gt=0)
    right: Optional[float] = Field(default=None, gt=0)
    category: Optional[WidthCategory] = None

    @model_validator(mode="after")
    def require_measurement_or_category(self):
        if self.left is None and self.right is None and self.category is None:
            raise ValueError("Must provide at least one width measurement or a width category")
        return self

    @property
    def has_measurement(self) -> bool:
        return self.left is not None or self.right is not None


class QuizAnswers(BaseModel):
    gender: Gender
    ability: Ability
    weight_kg: float = Field(gt=0)
    boot_type: Optional[BootType] = None
    foot_length_mm: Optional[FootLength] = None
    shoe_size: Optional[ShoeSize] = None
    foot_width: Optional[FootWidth] = None
    toe_shape: ToeShape
    instep_height: Volume
    ankle_volume: Volume
    calf_volume: Volume
    features: list[Feature] = []

    @field_validator("instep_height", "ankle_volume", "calf_volume", mode="before")
    @classmethod
    def accept_volume_aliases(cls, value: Any) -> Any:
        # Older clients send "Average" for the middle volume
        return normalize_volume(value) or value

    @field_validator("boot_type", mode="before")
    @classmethod
    def accept_legacy_boot_type(cls, value: Any) -> Any:
        if value in (None, ""):
            return None
        return normalize_boot_type(value) or value


class MatchRequest(BaseModel):
    session_id: Optional[UUID] = None
    answers: QuizAnswers


class BootSummary(BaseModel):
    boot_id: str
    brand: str
    model: str
    flex: int
    boot_type: Optional[BootType] = None
    last_width_mm: Optional[float] = None
    image_url: Optional[str] = None
    affiliate_url: Optional[str] = None
    links: Optional[dict[str, list[dict[str, Any]]]] = None
    score: float
    walk_mode: bool = False
    rear_entry: bool = False
    calf_adjustment: bool = False
    # False for boots added to make up three results
    passed_filters: bool = True


class MatchResponse(BaseModel):
    session_id: UUID
    recommended_mondo: str
    boots: list[BootSummary]


class SessionResponse(BaseModel):
    id: UUID
    user_id: Optional[str] = None
    answers: dict[str, Any]
    recommended_boots: Optional[list[dict[str, Any]]] = None
    recommended_mondo: Optional[str] = None
    started_at: datetime
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SessionUpdateRequest(BaseModel):
    user_id: str
