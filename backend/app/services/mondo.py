"""
Mondo (ski boot) sizing.

Mondo is roughly foot length in centimetres. Foot lengths map onto 10mm
bands starting at 220mm; street shoe sizes map through per-system lookup
tables, falling back to the nearest tabulated size.
"""

import math
from typing import Optional

from app.services.fit_profile import ShoeSizeSystem

NOT_AVAILABLE = "N/A"

MIN_FOOT_LENGTH_MM = 220
MAX_FOOT_LENGTH_MM = 299
BASE_MONDO = 22

EU_TO_MONDO = {
    36.5: 22.0,
    37: 22.5,
    37.5: 23.0,
    38: 23.5,
    38.5: 24.0,
    39: 24.5,
    40: 25.0,
    40.5: 25.0,
    41: 25.5,
    41.5: 25.5,
    42: 26.0,
    42.5: 26.5,
    43: 27.0,
    43.5: 27.0,
    44: 27.5,
    45: 28.0,
    45.5: 28.5,
    46: 29.0,
    46.5: 29.0,
    47: 29.5,
}

UK_TO_MONDO = {
    3.5: 22.0,
    4: 22.5,
    4.5: 23.0,
    5: 23.5,
    5.5: 24.0,
    6: 24.5,
    6.5: 25.0,
    7: 25.5,
    7.5: 25.5,
    8: 26.0,
    8.5: 26.5,
    9: 27.0,
    9.5: 27.5,
    10: 28.0,
    10.5: 28.5,
    11: 29.0,
    11.5: 29.0,
    12: 29.5,
}

US_TO_MONDO = {
    3.5: 22.0,
    4: 22.5,
    4.5: 23.0,
    5: 23.5,
    5.5: 24.0,
    6: 24.5,
    6.5: 24.5,
    7: 25.0,
    7.5: 25.0,
    8: 25.5,
    8.5: 25.5,
    9: 26.0,
    9.5: 26.5,
    10: 27.0,
    10.5: 27.5,
    11: 28.0,
    11.5: 28.5,
    12: 29.0,
    12.5: 29.0,
    13: 29.5,
}

SIZE_TABLES = {
    ShoeSizeSystem.EU: EU_TO_MONDO,
    ShoeSizeSystem.UK: UK_TO_MONDO,
    ShoeSizeSystem.US: US_TO_MONDO,
}


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def format_mondo_range(base_mondo: float) -> str:
    """Render a whole mondo as its half-size range, e.g. 26 -> "26 - 26.5"."""
    base = math.floor(base_mondo)
    return f"{_format_number(base)} - {_format_number(base + 0.5)}"


def calculate_recommended_mondo(foot_length_mm: Optional[float]) -> str:
    """Mondo range for a foot length, or "N/A" outside the 220-299mm table."""
    if not foot_length_mm or foot_length_mm < MIN_FOOT_LENGTH_MM or foot_length_mm > MAX_FOOT_LENGTH_MM:
        return NOT_AVAILABLE

    base_mondo = BASE_MONDO + math.floor((foot_length_mm - MIN_FOOT_LENGTH_MM) / 10)
    return format_mondo_range(base_mondo)


def _lookup_table(system) -> Optional[dict]:
    try:
        return SIZE_TABLES[ShoeSizeSystem(system)]
    except ValueError:
        return None


def get_mondo_for_shoe_size(system, value: float) -> Optional[float]:
    """Exact table lookup, else the nearest tabulated size (ties go to the smaller size)."""
    table = _lookup_table(system)
    if table is None:
        return None

    if value in table:
        return table[value]

    closest = min(sorted(table), key=lambda size: abs(size - value))
    return table[closest]


def shoe_size_to_mondo(system, value: float) -> str:
    mondo = get_mondo_for_shoe_size(system, value)
    if mondo is None:
        return NOT_AVAILABLE
    return format_mondo_range(mondo)


def shoe_size_to_foot_length_mm(system, value: float) -> Optional[int]:
    """Estimate foot length from a shoe size.

    Mondo is foot length in centimetres, so the estimate is mondo x 10 and
    always lands in the same 10mm band that shoe_size_to_mondo reports.
    """
    mondo = get_mondo_for_shoe_size(system, value)
    if mondo is None:
        return None
    return round(mondo * 10)


def _middle_size(sizes: list[float]) -> float:
    ordered = sorted(sizes)
    return ordered[len(ordered) // 2]


def find_closest_shoe_size_for_mondo(system, mondo: float) -> Optional[float]:
    table = _lookup_table(system)
    if not table:
        return None

    matching = [size for size, size_mondo in table.items() if size_mondo == mondo]
    if matching:
        return _middle_size(matching)

    closest_mondo = min(sorted(set(table.values())), key=lambda m: abs(m - mondo))
    return _middle_size([size for size, size_mondo in table.items() if size_mondo == closest_mondo])


def convert_shoe_size(from_system, value: float, to_system) -> Optional[float]:
    """Convert a shoe size between UK/US/EU using mondo as the common unit."""
    if from_system == to_system:
        return value

    mondo = get_mondo_for_shoe_size(from_system, value)
    if mondo is None:
        return None
    return find_closest_shoe_size_for_mondo(to_system, mondo)


def recommended_mondo_for(
    foot_length_mm: Optional[tuple[float, float]] = None,
    shoe_size: Optional[tuple[ShoeSizeSystem, float]] = None,
) -> str:
    """Mondo for a quiz: the shorter measured foot first, then the shoe size."""
    if foot_length_mm:
        return calculate_recommended_mondo(min(foot_length_mm))
    if shoe_size:
        system, value = shoe_size
        return shoe_size_to_mondo(system, value)
    return NOT_AVAILABLE
