"""
Fit attribute vocabularies shared by the catalog, the quiz and the matcher.

Catalog records arrive in several historical shapes (volume text such as
"Average" or "Low;Medium", boot types stored as an object of booleans).
Everything is normalised here so the matcher only ever sees enums.
"""

import enum
from typing import Any, Optional


class Gender(str, enum.Enum):
    MALE = "Male"
    FEMALE = "Female"


class Ability(str, enum.Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class ToeShape(str, enum.Enum):
    ROUND = "Round"
    SQUARE = "Square"
    ANGLED = "Angled"


class Volume(str, enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @property
    def rank(self) -> int:
        return _VOLUME_RANK[self]


_VOLUME_RANK = {Volume.LOW: 0, Volume.MEDIUM: 1, Volume.HIGH: 2}


class Feature(str, enum.Enum):
    WALK_MODE = "Walk Mode"
    REAR_ENTRY = "Rear Entry"
    CALF_ADJUSTMENT = "Calf Adjustment"


class WidthCategory(str, enum.Enum):
    NARROW = "Narrow"
    AVERAGE = "Average"
    WIDE = "Wide"


class ShoeSizeSystem(str, enum.Enum):
    UK = "UK"
    US = "US"
    EU = "EU"


class Region(str, enum.Enum):
    UK = "UK"
    US = "US"
    EU = "EU"


class BootType(str, enum.Enum):
    STANDARD = "Standard"
    FREESTYLE = "Freestyle"
    HYBRID = "Hybrid"
    FREERIDE = "Freeride"
    TOURING = "Touring"


VOLUME_ALIASES = {
    "low": Volume.LOW,
    "l": Volume.LOW,
    "medium": Volume.MEDIUM,
    "med": Volume.MEDIUM,
    "m": Volume.MEDIUM,
    "average": Volume.MEDIUM,
    "avg": Volume.MEDIUM,
    "a": Volume.MEDIUM,
    "high": Volume.HIGH,
    "h": Volume.HIGH,
}


def normalize_volume(value: Any) -> Optional[Volume]:
    """Map volume text ("Average", "low", "Low;Medium", ["High"]) to a Volume.

    Multi-valued input resolves to its first recognised entry.
    """
    if value is None:
        return None
    if isinstance(value, Volume):
        return value
    if isinstance(value, (list, tuple)):
        for item in value:
            volume = normalize_volume(item)
            if volume is not None:
                return volume
        return None

    for part in str(value).split(";"):
        volume = VOLUME_ALIASES.get(part.strip().lower())
        if volume is not None:
            return volume
    return None


def _boot_type_from_text(text: str) -> Optional[BootType]:
    key = text.strip().lower()
    if not key:
        return None
    if key == "all-mountain" or "touring" in key:
        return BootType.TOURING
    for boot_type in BootType:
        if boot_type.value.lower() == key:
            return boot_type
    return None


def normalize_boot_type(value: Any) -> Optional[BootType]:
    """Collapse the boot type representations found in the catalog into one enum.

    Current records store a plain string. Older records store an object of
    booleans such as {"standard": false, "freestyle": true}; the first flag
    that is set wins.
    """
    if value is None:
        return None
    if isinstance(value, BootType):
        return value
    if isinstance(value, dict):
        for key, enabled in value.items():
            if enabled:
                boot_type = _boot_type_from_text(str(key))
                if boot_type is not None:
                    return boot_type
        return None
    return _boot_type_from_text(str(value))


def width_category_for_last(last_width_mm: float) -> WidthCategory:
    """Coarse width label for a boot last."""
    if last_width_mm <= 98:
        return WidthCategory.NARROW
    if last_width_mm <= 102:
        return WidthCategory.AVERAGE
    return WidthCategory.WIDE


# (min length, max length, narrow max width, average max width) in mm
MENS_WIDTH_TABLE = [
    (220, 229, 90, 93),
    (230, 239, 92, 95),
    (240, 249, 94, 97),
    (250, 259, 96, 99),
    (260, 269, 98, 101),
    (270, 279, 100, 103),
    (280, 289, 102, 105),
    (290, 299, 104, 107),
]

WOMENS_WIDTH_TABLE = [
    (220, 229, 92, 95),
    (230, 239, 94, 97),
    (240, 249, 96, 99),
    (250, 259, 98, 101),
    (260, 269, 100, 103),
    (270, 279, 102, 105),
]


def get_user_width_category(gender: Gender, foot_length_mm: float, foot_width_mm: float) -> WidthCategory:
    """Classify a measured foot as Narrow/Average/Wide for its length.

    Feet outside the sizing table are treated as Average.
    """
    table = WOMENS_WIDTH_TABLE if gender == Gender.FEMALE else MENS_WIDTH_TABLE
    for min_length, max_length, narrow_max, average_max in table:
        if min_length <= foot_length_mm <= max_length:
            if foot_width_mm <= narrow_max:
                return WidthCategory.NARROW
            if foot_width_mm <= average_max:
                return WidthCategory.AVERAGE
            return WidthCategory.WIDE
    return WidthCategory.AVERAGE
