from uuid import UUID
from datetime import datetime
from typing import Optional, Any, Union
from pydantic import BaseModel, Field, HttpUrl, computed_field, field_validator
from app.services.fit_profile import (
    Gender, Region, ToeShape, Volume, WidthCategory, normalize_volume, width_category_for_last,
)


class AffiliateLink(BaseModel):
    store: str  # e.g. "Ellis Brigham"
    url: HttpUrl
    logo: Optional[HttpUrl] = None
    available: Optional[bool] = None  # False hides the link


class BootBase(BaseModel):
    year: str
    gender: Gender
    boot_type: Union[str, dict[str, bool]]
    brand: str
    model: str
    last_width_mm: float = Field(gt=0)
    flex: int = Field(gt=0)
    instep_height: Volume
    ankle_volume: Volume
    calf_volume: Volume
    toe_box_shape: ToeShape
    calf_adjustment: bool = False
    walk_mode: bool = False
    rear_entry: bool = False
    affiliate_url: Optional[HttpUrl] = None
    links: Optional[dict[Region, list[AffiliateLink]]] = None
    image_url: Optional[HttpUrl] = None
    tags: Optional[list[str]] = None

    @field_validator("instep_height", "ankle_volume", "calf_volume", mode="before")
    @classmethod
    def accept_volume_aliases(cls, value: Any) -> Any:
        return normalize_volume(value) or value


class BootCreate(BootBase):
    pass


class BootUpdate(BaseModel):
    year: Optional[str] = None
    gender: Optional[Gender] = None
    boot_type: Optional[Union[str, dict[str, bool]]] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    last_width_mm: Optional[float] = Field(default=None, gt=0)
    flex: Optional[int] = Field(default=None, gt=0)
    instep_height: Optional[Volume] = None
    ankle_volume: Optional[Volume] = None
    calf_volume: Optional[Volume] = None
    toe_box_shape: Optional[ToeShape] = None
    calf_adjustment: Optional[bool] = None
    walk_mode: Optional[bool] = None
    rear_entry: Optional[bool] = None
    affiliate_url: Optional[HttpUrl] = None
    links: Optional[dict[Region, list[AffiliateLink]]] = None
    image_url: Optional[HttpUrl] = None
    tags: Optional[list[str]] = None

    @field_validator("instep_height", "ankle_volume", "calf_volume", mode="before")
    @classmethod
    def accept_volume_aliases(cls, value: Any) -> Any:
        return normalize_volume(value) or value

    # Required columns may be left out of an update but never cleared
    @field_validator(
        "year", "gender", "brand", "model", "last_width_mm", "flex",
        "calf_adjustment", "walk_mode", "rear_entry",
    )
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("cannot be null")
        return value


class BootResponse(BaseModel):
    id: UUID
    year: str
    gender: str
    boot_type: Any = None
    brand: str
    model: str
    last_width_mm: float
    flex: int
    instep_height: Optional[str] = None
    ankle_volume: Optional[str] = None
    calf_volume: Optional[str] = None
    toe_box_shape: Optional[str] = None
    calf_adjustment: bool = False
    walk_mode: bool = False
    rear_entry: bool = False
    affiliate_url: Optional[str] = None
    links: Optional[dict[str, Any]] = None
    image_url: Optional[str] = None
    tags: Optional[list[str]] = None
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def width_category(self) -> WidthCategory:
        return width_category_for_last(self.last_width_mm)

    class Config:
        from_attributes = True
