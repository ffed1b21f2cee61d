"""
Boot matching.

Hard filters remove boots that cannot work for the skier (gender, flex,
boot type, required features, width). Survivors are scored out of 100:

    width 30, flex 10, toe 5, instep 20, ankle 15, calf 10, features 10

When fewer than three boots survive, boots of the right gender and flex
are scored as backfill and ranked behind every qualifying boot. The final
three favour brand diversity.

Everything here is a pure function of (answers, catalog); the catalog is
passed in by the caller.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Union

from app.schemas.quiz import BootSummary, FootWidth, QuizAnswers
from app.services.fit_profile import (
    Ability, BootType, Feature, Gender, ShoeSizeSystem, ToeShape, Volume, WidthCategory,
    normalize_boot_type, normalize_volume,
)
from app.services.mondo import recommended_mondo_for

logger = logging.getLogger(__name__)

MAX_RESULTS = 3

# Flex ratings by (gender, ability) before the weight adjustment
BASE_FLEX_TABLE = {
    (Gender.MALE, Ability.BEGINNER): [80, 90],
    (Gender.MALE, Ability.INTERMEDIATE): [100, 110],
    (Gender.MALE, Ability.ADVANCED): [120, 130],
    (Gender.FEMALE, Ability.BEGINNER): [65, 75, 80, 85],
    (Gender.FEMALE, Ability.INTERMEDIATE): [90, 95, 100],
    (Gender.FEMALE, Ability.ADVANCED): [105, 110, 115],
}

# (light below, heavy above) in kg
WEIGHT_THRESHOLDS = {
    Gender.MALE: (60, 95),
    Gender.FEMALE: (50, 80),
}

FLEX_WEIGHT_SHIFT = 10
MIN_FLEX = 70

CATEGORY_TARGET_WIDTH = {
    WidthCategory.NARROW: 98,
    WidthCategory.AVERAGE: 100,
    WidthCategory.WIDE: 102,
}

# Inclusive last-width bands (mm) accepted for category-only width answers
CATEGORY_WIDTH_BANDS = {
    WidthCategory.NARROW: (96, 98),
    WidthCategory.AVERAGE: (100, 102),
    WidthCategory.WIDE: (102, 104),
}

NARROW_IDEAL_WIDTHS = (96, 98)

# Measured feet accept a last between the foot width and 1mm wider
MAX_EXTRA_WIDTH_MM = 1

MAX_WIDTH_SCORE = 30
WIDTH_POINTS_PER_MM = 6
INSTEP_TIEBREAK_WINDOW_MM = 2
INSTEP_PREFERRED_BONUS = 22
INSTEP_EXACT_PENALTY = 5
INSTEP_WRONG_SIDE_PENALTY = 30

MAX_FLEX_SCORE = 10
FLEX_POINTS_PER_UNIT = 0.67

TOE_POINTS = 5
INSTEP_POINTS = 20
ANKLE_POINTS = 15
CALF_POINTS = 10

# Share of points kept per step of distance on the Low/Medium/High scale
VOLUME_DECAY = {0: 1.0, 1: 0.5, 2: 0.25}

FEATURE_POINTS = {
    Feature.WALK_MODE: 4,
    Feature.REAR_ENTRY: 4,
    Feature.CALF_ADJUSTMENT: 2,
}
MAX_FEATURE_SCORE = 10


class MatchingError(Exception):
    """Base class for matching failures."""


class EmptyCatalogError(MatchingError):
    pass


class NoViableCandidatesError(MatchingError):
    pass


@dataclass
class BootRecord:
    id: str
    gender: Gender
    brand: str
    model: str
    flex: int
    last_width_mm: float
    toe_box_shape: Optional[ToeShape] = None
    instep_height: Optional[Volume] = None
    ankle_volume: Optional[Volume] = None
    calf_volume: Optional[Volume] = None
    boot_type: Optional[BootType] = None
    walk_mode: bool = False
    rear_entry: bool = False
    calf_adjustment: bool = False
    year: Optional[str] = None
    image_url: Optional[str] = None
    affiliate_url: Optional[str] = None
    links: Optional[dict[str, list[dict[str, Any]]]] = None

    def has_feature(self, feature: Feature) -> bool:
        if feature == Feature.WALK_MODE:
            return self.walk_mode
        if feature == Feature.REAR_ENTRY:
            return self.rear_entry
        if feature == Feature.CALF_ADJUSTMENT:
            return self.calf_adjustment
        return False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BootRecord":
        """Build a record from stored catalog data, normalising legacy values."""
        toe_shape = data.get("toe_box_shape")
        return cls(
            id=str(data.get("id") or data.get("boot_id")),
            gender=Gender(data["gender"]),
            brand=data["brand"],
            model=data["model"],
            flex=int(data["flex"]),
            last_width_mm=float(data["last_width_mm"]),
            toe_box_shape=ToeShape(toe_shape) if toe_shape else None,
            instep_height=normalize_volume(data.get("instep_height")),
            ankle_volume=normalize_volume(data.get("ankle_volume")),
            calf_volume=normalize_volume(data.get("calf_volume")),
            boot_type=normalize_boot_type(data.get("boot_type")),
            walk_mode=bool(data.get("walk_mode")),
            rear_entry=bool(data.get("rear_entry")),
            calf_adjustment=bool(data.get("calf_adjustment")),
            year=data.get("year"),
            image_url=data.get("image_url"),
            affiliate_url=data.get("affiliate_url"),
            links=data.get("links"),
        )

    @classmethod
    def from_model(cls, boot) -> "BootRecord":
        """Build a record from a Boot ORM row."""
        return cls.from_dict({
            "id": boot.id,
            "gender": boot.gender,
            "brand": boot.brand,
            "model": boot.model,
            "flex": boot.flex,
            "last_width_mm": boot.last_width_mm,
            "toe_box_shape": boot.toe_box_shape,
            "instep_height": boot.instep_height,
            "ankle_volume": boot.ankle_volume,
            "calf_volume": boot.calf_volume,
            "boot_type": boot.boot_type,
            "walk_mode": boot.walk_mode,
            "rear_entry": boot.rear_entry,
            "calf_adjustment": boot.calf_adjustment,
            "year": boot.year,
            "image_url": boot.image_url,
            "affiliate_url": boot.affiliate_url,
            "links": boot.links,
        })


@dataclass
class UserProfile:
    gender: Gender
    ability: Ability
    weight_kg: float
    toe_shape: Optional[ToeShape] = None
    instep_height: Optional[Volume] = None
    ankle_volume: Optional[Volume] = None
    calf_volume: Optional[Volume] = None
    boot_type: Optional[BootType] = None
    features: list[Feature] = field(default_factory=list)
    width_mm: Optional[float] = None  # Measured width; takes priority over the category
    width_category: Optional[WidthCategory] = None
    foot_length_mm: Optional[tuple[float, float]] = None
    shoe_size: Optional[tuple[ShoeSizeSystem, float]] = None


@dataclass
class ScoredCandidate:
    boot: BootRecord
    score: float
    width_score: float
    flex_score: float
    passed_filters: bool = True
    components: dict[str, float] = field(default_factory=dict)


@dataclass
class MatchResult:
    boots: list[BootSummary]
    recommended_mondo: str
    acceptable_flexes: list[int] = field(default_factory=list)


class MatchTrace:
    """Observer for matching decisions. The default records nothing."""

    def record(self, event: str, **data: Any) -> None:
        pass


class LoggingTrace(MatchTrace):
    """Writes each matching event to the module logger."""

    def __init__(self, level: int = logging.DEBUG):
        self.level = level

    def record(self, event: str, **data: Any) -> None:
        if logger.isEnabledFor(self.level):
            details = ", ".join(f"{key}={value}" for key, value in data.items())
            logger.log(self.level, "match.%s %s", event, details)


def get_user_width_mm(foot_width: Optional[FootWidth]) -> Optional[float]:
    """Measured foot width in mm, using the narrower foot when both are given.

    A boot can be stretched for the wider foot but not shrunk for the
    narrower one.
    """
    if foot_width is None:
        return None
    measurements = [w for w in (foot_width.left, foot_width.right) if w and w > 0]
    return min(measurements) if measurements else None


def extract_user_profile(answers: QuizAnswers) -> UserProfile:
    """Extract the matching profile from validated quiz answers."""
    width_mm = get_user_width_mm(answers.foot_width)
    width_category = None
    if width_mm is None and answers.foot_width is not None:
        width_category = answers.foot_width.category

    foot_length = None
    if answers.foot_length_mm:
        foot_length = (answers.foot_length_mm.left, answers.foot_length_mm.right)

    shoe_size = None
    if answers.shoe_size:
        shoe_size = (answers.shoe_size.system, answers.shoe_size.value)

    return UserProfile(
        gender=answers.gender,
        ability=answers.ability,
        weight_kg=answers.weight_kg,
        toe_shape=answers.toe_shape,
        instep_height=answers.instep_height,
        ankle_volume=answers.ankle_volume,
        calf_volume=answers.calf_volume,
        boot_type=answers.boot_type,
        features=list(dict.fromkeys(answers.features)),
        width_mm=width_mm,
        width_category=width_category,
        foot_length_mm=foot_length,
        shoe_size=shoe_size,
    )


# ============================================================================
# FLEX
# ============================================================================

def get_acceptable_flex_values(gender: Gender, ability: Ability, weight_kg: float) -> list[int]:
    """Flex ratings suitable for the skier, ascending.

    Light skiers move down one step (never below 70), heavy skiers up one.
    """
    flexes = BASE_FLEX_TABLE[(Gender(gender), Ability(ability))]
    light_below, heavy_above = WEIGHT_THRESHOLDS[Gender(gender)]

    if weight_kg < light_below:
        flexes = [max(MIN_FLEX, flex - FLEX_WEIGHT_SHIFT) for flex in flexes]
    elif weight_kg > heavy_above:
        flexes = [flex + FLEX_WEIGHT_SHIFT for flex in flexes]

    return sorted(set(flexes))


def calculate_target_flex(gender: Gender, ability: Ability, weight_kg: float) -> float:
    """Midpoint of the acceptable flex ratings."""
    flexes = get_acceptable_flex_values(gender, ability, weight_kg)
    return sum(flexes) / len(flexes)


def flex_range_label(gender: Gender, ability: Ability, weight_kg: float) -> str:
    flexes = get_acceptable_flex_values(gender, ability, weight_kg)
    return f"{flexes[0]}-{flexes[-1]}"


def calculate_flex_score(boot_flex: float, acceptable_flexes: Iterable[int]) -> float:
    """10 points at an acceptable flex, minus 0.67 per unit away from the nearest one."""
    acceptable = list(acceptable_flexes)
    if not acceptable:
        return 0.0
    min_delta = min(abs(boot_flex - flex) for flex in acceptable)
    return max(0.0, MAX_FLEX_SCORE - min_delta * FLEX_POINTS_PER_UNIT)


# ============================================================================
# WIDTH
# ============================================================================

def calculate_width_score(
    user_width_mm: Optional[float],
    boot_width_mm: float,
    instep_height: Optional[Volume],
    width_category: Optional[WidthCategory] = None,
) -> float:
    """Score (0-30) how well a boot last suits the foot width.

    A measurement beats a category. For measured feet within 2mm of the
    last, instep height breaks the tie: a high instep wants the wider
    boot, a low instep the narrower one.
    """
    if user_width_mm is not None:
        target_width = user_width_mm
        from_category = False
    elif width_category is not None:
        target_width = CATEGORY_TARGET_WIDTH[WidthCategory(width_category)]
        from_category = True
    else:
        return 0.0

    width_delta = abs(target_width - boot_width_mm)
    width_score = max(0.0, MAX_WIDTH_SCORE - width_delta * WIDTH_POINTS_PER_MM)

    if from_category:
        if width_category == WidthCategory.NARROW and boot_width_mm in NARROW_IDEAL_WIDTHS:
            return float(MAX_WIDTH_SCORE)
        if width_delta == 0:
            return float(MAX_WIDTH_SCORE)
        return width_score

    if width_delta <= INSTEP_TIEBREAK_WINDOW_MM and instep_height in (Volume.HIGH, Volume.LOW):
        if instep_height == Volume.HIGH:
            preferred = boot_width_mm > target_width
            wrong_side = boot_width_mm < target_width
        else:
            preferred = boot_width_mm < target_width
            wrong_side = boot_width_mm > target_width

        if preferred:
            width_score += INSTEP_PREFERRED_BONUS
        elif wrong_side:
            width_score -= INSTEP_WRONG_SIDE_PENALTY
        else:
            width_score -= INSTEP_EXACT_PENALTY

    return min(float(MAX_WIDTH_SCORE), max(0.0, width_score))


# ============================================================================
# SHAPE, VOLUME AND FEATURES
# ============================================================================

def calculate_volume_score(user_volume: Optional[Volume], boot_volume: Optional[Volume], points: int) -> float:
    """Full points for the same volume, half one step away, a quarter two steps away."""
    if user_volume is None or boot_volume is None:
        return 0.0
    steps = abs(Volume(user_volume).rank - Volume(boot_volume).rank)
    return points * VOLUME_DECAY[steps]


def calculate_shape_scores(profile: UserProfile, boot: BootRecord) -> dict[str, float]:
    toe_match = profile.toe_shape is not None and profile.toe_shape == boot.toe_box_shape
    return {
        "toe": float(TOE_POINTS) if toe_match else 0.0,
        "instep": calculate_volume_score(profile.instep_height, boot.instep_height, INSTEP_POINTS),
        "ankle": calculate_volume_score(profile.ankle_volume, boot.ankle_volume, ANKLE_POINTS),
        "calf": calculate_volume_score(profile.calf_volume, boot.calf_volume, CALF_POINTS),
    }


def calculate_feature_score(features: Iterable[Feature], boot: BootRecord) -> float:
    """Points for requested features the boot has; full marks when none were requested."""
    requested = set(features)
    if not requested:
        return float(MAX_FEATURE_SCORE)
    return float(sum(FEATURE_POINTS[f] for f in requested if boot.has_feature(f)))


def score_boot(
    boot: BootRecord,
    profile: UserProfile,
    acceptable_flexes: list[int],
    passed_filters: bool = True,
) -> ScoredCandidate:
    """Composite 0-100 score for one boot."""
    width_score = calculate_width_score(
        profile.width_mm,
        boot.last_width_mm,
        profile.instep_height,
        profile.width_category,
    )
    flex_score = calculate_flex_score(boot.flex, acceptable_flexes)
    components = calculate_shape_scores(profile, boot)
    components["width"] = width_score
    components["flex"] = flex_score
    components["features"] = calculate_feature_score(profile.features, boot)

    return ScoredCandidate(
        boot=boot,
        score=sum(components.values()),
        width_score=width_score,
        flex_score=flex_score,
        passed_filters=passed_filters,
        components=components,
    )


# ============================================================================
# FILTER, BACKFILL AND SELECTION
# ============================================================================

def is_width_compatible(profile: UserProfile, boot_width_mm: float) -> bool:
    """A measured foot takes a last equal to it or up to 1mm roomier, never narrower."""
    if profile.width_mm is not None:
        return profile.width_mm <= boot_width_mm <= profile.width_mm + MAX_EXTRA_WIDTH_MM
    if profile.width_category is not None:
        low, high = CATEGORY_WIDTH_BANDS[WidthCategory(profile.width_category)]
        return low <= boot_width_mm <= high
    return True


def is_core_compatible(boot: BootRecord, profile: UserProfile, acceptable_flexes: list[int]) -> bool:
    """Gender and flex: the constraints backfill never relaxes."""
    return boot.gender == profile.gender and boot.flex in acceptable_flexes


def passes_filters(boot: BootRecord, profile: UserProfile, acceptable_flexes: list[int]) -> bool:
    if not is_core_compatible(boot, profile, acceptable_flexes):
        return False

    if profile.boot_type is not None and boot.boot_type != profile.boot_type:
        return False

    if any(not boot.has_feature(feature) for feature in profile.features):
        return False

    return is_width_compatible(profile, boot.last_width_mm)


def filter_boots(boots: Iterable[BootRecord], profile: UserProfile, acceptable_flexes: list[int]) -> list[BootRecord]:
    return [boot for boot in boots if passes_filters(boot, profile, acceptable_flexes)]


def backfill_candidates(
    boots: Iterable[BootRecord],
    profile: UserProfile,
    acceptable_flexes: list[int],
    exclude_ids: set[str],
) -> list[ScoredCandidate]:
    """Score boots that failed only the type, feature or width filters."""
    return [
        score_boot(boot, profile, acceptable_flexes, passed_filters=False)
        for boot in boots
        if boot.id not in exclude_ids and is_core_compatible(boot, profile, acceptable_flexes)
    ]


def ranking_key(candidate: ScoredCandidate) -> tuple:
    """Qualified first, then score, width score, flex score, brand A-Z."""
    return (
        not candidate.passed_filters,
        -candidate.score,
        -candidate.width_score,
        -candidate.flex_score,
        candidate.boot.brand.lower(),
        candidate.boot.model.lower(),
        candidate.boot.id,
    )


def _pick_brand_diverse(pool: list[ScoredCandidate], limit: int) -> list[ScoredCandidate]:
    """Best boot per brand first, then fill from the pool in order."""
    best_by_brand: dict[str, ScoredCandidate] = {}
    for candidate in pool:
        best_by_brand.setdefault(candidate.boot.brand.strip().lower(), candidate)

    selected = list(best_by_brand.values())[:limit]
    chosen = {id(candidate) for candidate in selected}
    for candidate in pool:
        if len(selected) >= limit:
            break
        if id(candidate) not in chosen:
            selected.append(candidate)
            chosen.add(id(candidate))
    return selected


def select_top_boots(ranked: list[ScoredCandidate], limit: int = MAX_RESULTS) -> list[ScoredCandidate]:
    """Brand-diverse pick over qualified boots, topped up from backfill.

    A backfilled boot only takes a slot no qualified boot can fill.
    `ranked` must already be ordered by ranking_key.
    """
    qualified = [c for c in ranked if c.passed_filters]
    backfilled = [c for c in ranked if not c.passed_filters]

    selected = _pick_brand_diverse(qualified, limit)
    if len(selected) < limit:
        selected += _pick_brand_diverse(backfilled, limit - len(selected))

    return sorted(selected, key=ranking_key)


def to_boot_summary(candidate: ScoredCandidate) -> BootSummary:
    boot = candidate.boot
    return BootSummary(
        boot_id=boot.id,
        brand=boot.brand,
        model=boot.model,
        flex=boot.flex,
        boot_type=boot.boot_type,
        last_width_mm=boot.last_width_mm,
        image_url=boot.image_url,
        affiliate_url=boot.affiliate_url,
        links=boot.links,
        score=round(candidate.score, 2),
        walk_mode=boot.walk_mode,
        rear_entry=boot.rear_entry,
        calf_adjustment=boot.calf_adjustment,
        passed_filters=candidate.passed_filters,
    )


def _describe_criteria(profile: UserProfile, acceptable_flexes: list[int]) -> str:
    if profile.width_mm is not None:
        width = f"{profile.width_mm}mm"
    elif profile.width_category is not None:
        width = WidthCategory(profile.width_category).value
    else:
        width = "any"
    features = ", ".join(f.value for f in profile.features) or "none"
    boot_type = profile.boot_type.value if profile.boot_type else "any"
    return (
        f"gender: {profile.gender.value}, ability: {profile.ability.value}, "
        f"flex: {acceptable_flexes}, boot type: {boot_type}, features: {features}, width: {width}"
    )


def match_boots(
    answers: Union[QuizAnswers, UserProfile],
    catalog: list[BootRecord],
    trace: Optional[MatchTrace] = None,
) -> MatchResult:
    """Recommend up to three boots from the catalog for a set of quiz answers.

    Raises EmptyCatalogError when the catalog is empty and
    NoViableCandidatesError when no boot shares the skier's gender and flex.
    """
    trace = trace or MatchTrace()

    if not catalog:
        raise EmptyCatalogError("No boots found in catalog. Please import boots first.")

    profile = answers if isinstance(answers, UserProfile) else extract_user_profile(answers)
    acceptable_flexes = get_acceptable_flex_values(profile.gender, profile.ability, profile.weight_kg)

    trace.record(
        "profile",
        gender=profile.gender.value,
        acceptable_flexes=acceptable_flexes,
        flex_range=flex_range_label(profile.gender, profile.ability, profile.weight_kg),
        target_flex=calculate_target_flex(profile.gender, profile.ability, profile.weight_kg),
        width_mm=profile.width_mm,
        width_category=profile.width_category.value if profile.width_category else None,
        instep=profile.instep_height.value if profile.instep_height else None,
    )

    qualifying = filter_boots(catalog, profile, acceptable_flexes)
    scored = [score_boot(boot, profile, acceptable_flexes) for boot in qualifying]
    trace.record("filter", catalog_size=len(catalog), qualifying=len(scored))

    if len(scored) < MAX_RESULTS:
        extra = backfill_candidates(catalog, profile, acceptable_flexes, {c.boot.id for c in scored})
        trace.record("backfill", added=len(extra))
        scored.extend(extra)

    if not scored:
        raise NoViableCandidatesError(
            f"No boots match your criteria. Found {len(catalog)} total boots, "
            f"but none match {_describe_criteria(profile, acceptable_flexes)}"
        )

    ranked = sorted(scored, key=ranking_key)
    for position, candidate in enumerate(ranked[:10], 1):
        trace.record(
            "candidate",
            position=position,
            boot=f"{candidate.boot.brand} {candidate.boot.model}",
            width_mm=candidate.boot.last_width_mm,
            flex=candidate.boot.flex,
            passed_filters=candidate.passed_filters,
            score=round(candidate.score, 2),
            components={k: round(v, 2) for k, v in candidate.components.items()},
        )

    top = select_top_boots(ranked)

    return MatchResult(
        boots=[to_boot_summary(candidate) for candidate in top],
        recommended_mondo=recommended_mondo_for(profile.foot_length_mm, profile.shoe_size),
        acceptable_flexes=acceptable_flexes,
    )
