"""End-to-end matching: filters, backfill, ranking and brand diversity."""

import pytest

from app.services.fit_profile import BootType, Gender
from app.services.matching import (
    BootRecord,
    EmptyCatalogError,
    MatchTrace,
    NoViableCandidatesError,
    extract_user_profile,
    get_acceptable_flex_values,
    match_boots,
    score_boot,
)
from conftest import make_answers, make_boot


class RecordingTrace(MatchTrace):
    def __init__(self):
        self.events = []

    def record(self, event, **data):
        self.events.append((event, data))


# =============================================================================
# ERRORS
# =============================================================================

class TestErrors:
    def test_empty_catalog(self):
        with pytest.raises(EmptyCatalogError, match="No boots found"):
            match_boots(make_answers(), [])

    def test_no_boot_of_gender_and_flex(self):
        catalog = [make_boot(gender=Gender.FEMALE), make_boot(flex=140)]
        with pytest.raises(NoViableCandidatesError) as exc_info:
            match_boots(make_answers(), catalog)
        message = str(exc_info.value)
        assert "Found 2 total boots" in message
        assert "gender: Male" in message
        assert "[100, 110]" in message


# =============================================================================
# SELECTION
# =============================================================================

class TestSelection:
    def test_brand_diversity_and_order(self, mixed_catalog):
        result = match_boots(make_answers(), mixed_catalog)
        # atomic-2 ties atomic-1 on score but loses the brand slot
        assert [b.boot_id for b in result.boots] == ["atomic-1", "salomon-1", "lange-1"]
        assert [b.score for b in result.boots] == [100, 95, 94]
        assert all(b.passed_filters for b in result.boots)

    def test_fills_from_same_brand_when_brands_run_out(self):
        catalog = [make_boot(brand="Atomic", model=f"Hawx {i}") for i in range(4)]
        result = match_boots(make_answers(), catalog)
        assert len(result.boots) == 3
        assert {b.brand for b in result.boots} == {"Atomic"}

    def test_brand_grouping_ignores_case(self):
        catalog = [
            make_boot(brand="Atomic", model="A"),
            make_boot(brand="atomic", model="B"),
            make_boot(brand="Lange", model="C", last_width_mm=101),
            make_boot(brand="Salomon", model="D", last_width_mm=101, toe_box_shape=None),
        ]
        result = match_boots(make_answers(), catalog)
        brands = [b.brand.lower() for b in result.boots]
        assert brands.count("atomic") == 1

    def test_returns_fewer_than_three_when_only_two_viable(self):
        catalog = [make_boot(), make_boot(brand="Lange"), make_boot(gender=Gender.FEMALE)]
        result = match_boots(make_answers(), catalog)
        assert len(result.boots) == 2

    def test_deterministic(self, mixed_catalog):
        first = match_boots(make_answers(), mixed_catalog)
        second = match_boots(make_answers(), list(reversed(mixed_catalog)))
        assert first.boots == second.boots
        assert first.recommended_mondo == second.recommended_mondo


# =============================================================================
# FILTERS AND BACKFILL
# =============================================================================

class TestFiltersAndBackfill:
    def test_results_share_gender_and_flex_set(self, mixed_catalog):
        answers = make_answers()
        result = match_boots(answers, mixed_catalog)
        flexes = get_acceptable_flex_values(answers.gender, answers.ability, answers.weight_kg)
        boots = {boot.id: boot for boot in mixed_catalog}
        for summary in result.boots:
            assert boots[summary.boot_id].gender == Gender.MALE
            assert summary.flex in flexes

    def test_measured_width_accepts_up_to_one_mm_wider(self):
        catalog = [
            make_boot(id="narrower", brand="A", last_width_mm=99),
            make_boot(id="exact", brand="B", last_width_mm=100),
            make_boot(id="plus-one", brand="C", last_width_mm=101),
            make_boot(id="plus-two", brand="D", last_width_mm=102),
        ]
        result = match_boots(make_answers(), catalog)
        passed = {b.boot_id for b in result.boots if b.passed_filters}
        assert passed == {"exact", "plus-one"}

    def test_backfill_ranks_behind_qualified_boots(self):
        catalog = [
            make_boot(id="walk", brand="A", last_width_mm=101, walk_mode=True),
            make_boot(id="plain-1", brand="B"),
            make_boot(id="plain-2", brand="C"),
        ]
        result = match_boots(make_answers(features=["Walk Mode"]), catalog)
        assert result.boots[0].boot_id == "walk"
        assert result.boots[0].passed_filters is True
        # Backfilled boots outscore the qualified one but still rank after it
        assert result.boots[1].score > result.boots[0].score
        assert [b.passed_filters for b in result.boots[1:]] == [False, False]

    def test_qualified_boots_keep_their_slots_over_brand_diversity(self):
        catalog = [
            make_boot(id="atomic-a", brand="Atomic", model="A"),
            make_boot(id="atomic-b", brand="Atomic", model="B"),
            make_boot(id="lange-wide", brand="Lange", last_width_mm=102),
            make_boot(id="salomon-wide", brand="Salomon", last_width_mm=102),
        ]
        result = match_boots(make_answers(), catalog)
        assert [b.boot_id for b in result.boots] == ["atomic-a", "atomic-b", "lange-wide"]
        assert [b.passed_filters for b in result.boots] == [True, True, False]

    def test_backfill_never_relaxes_gender_or_flex(self):
        catalog = [
            make_boot(id="ok", brand="A"),
            make_boot(id="female", brand="B", gender=Gender.FEMALE),
            make_boot(id="stiff", brand="C", flex=130),
        ]
        result = match_boots(make_answers(), catalog)
        assert [b.boot_id for b in result.boots] == ["ok"]

    def test_boot_type_filter_accepts_legacy_catalog_shape(self):
        touring = BootRecord.from_dict({
            "id": "legacy-touring",
            "gender": "Male",
            "brand": "Dynafit",
            "model": "Hoji",
            "flex": 110,
            "last_width_mm": 100,
            "boot_type": {"standard": False, "touring": True},
        })
        catalog = [touring, make_boot(id="standard", brand="Atomic")]
        result = match_boots(make_answers(boot_type="Touring"), catalog)
        assert result.boots[0].boot_id == "legacy-touring"
        assert result.boots[0].passed_filters is True
        assert result.boots[0].boot_type == BootType.TOURING
        assert result.boots[1].passed_filters is False

    def test_width_category_band(self, mixed_catalog):
        result = match_boots(make_answers(foot_width={"category": "Wide"}), mixed_catalog)
        assert result.boots[0].boot_id == "tecnica-1"
        assert result.boots[0].passed_filters is True
        assert all(not b.passed_filters for b in result.boots[1:])

    def test_overlapping_102mm_last_passes_average_and_wide(self):
        catalog = [make_boot(id="overlap", last_width_mm=102)]
        for category in ("Average", "Wide"):
            result = match_boots(make_answers(foot_width={"category": category}), catalog)
            assert result.boots[0].passed_filters is True


# =============================================================================
# SCENARIOS
# =============================================================================

class TestScenarios:
    def test_heavy_advanced_high_instep_prefers_wider_boot(self):
        answers = make_answers(
            ability="Advanced",
            weight_kg=100,
            instep_height="High",
            foot_width={"left": 100, "right": 101},
        )
        profile = extract_user_profile(answers)
        assert profile.width_mm == 100
        assert get_acceptable_flex_values(profile.gender, profile.ability, profile.weight_kg) == [130, 140]

        catalog = [
            make_boot(id="wide", brand="Lange", flex=130, last_width_mm=102),
            make_boot(id="narrow", brand="Atomic", flex=130, last_width_mm=98),
        ]
        result = match_boots(answers, catalog)
        assert [b.boot_id for b in result.boots] == ["wide", "narrow"]
        assert result.boots[0].score > result.boots[1].score

    def test_score_bounds(self, mixed_catalog):
        for instep in ("Low", "Medium", "High"):
            result = match_boots(make_answers(instep_height=instep, features=["Rear Entry"]), mixed_catalog)
            for boot in result.boots:
                assert 0 <= boot.score <= 100

    def test_scores_rounded_to_two_places(self):
        answers = make_answers(foot_width={"left": 100.35, "right": 100.35})
        boot = make_boot(last_width_mm=101)
        result = match_boots(answers, [boot])

        profile = extract_user_profile(answers)
        raw = score_boot(boot, profile, [100, 110]).score
        assert result.boots[0].passed_filters is True
        assert result.boots[0].score == round(raw, 2) == 96.1


# =============================================================================
# MONDO AND TRACING
# =============================================================================

class TestMondoAndTrace:
    def test_mondo_from_shorter_foot(self, mixed_catalog):
        result = match_boots(make_answers(foot_length_mm={"left": 225, "right": 230}), mixed_catalog)
        assert result.recommended_mondo == "22 - 22.5"

    def test_mondo_from_shoe_size(self, mixed_catalog):
        answers = make_answers(foot_length_mm=None, shoe_size={"system": "UK", "value": 8})
        assert match_boots(answers, mixed_catalog).recommended_mondo == "26 - 26.5"

    def test_mondo_not_available(self, mixed_catalog):
        answers = make_answers(foot_length_mm=None)
        assert match_boots(answers, mixed_catalog).recommended_mondo == "N/A"

    def test_trace_records_decisions(self, mixed_catalog):
        trace = RecordingTrace()
        match_boots(make_answers(), mixed_catalog, trace=trace)
        events = [event for event, _ in trace.events]
        assert events[:2] == ["profile", "filter"]
        assert "candidate" in events
        filter_data = dict(trace.events)["filter"]
        assert filter_data == {"catalog_size": 7, "qualifying": 4}

    def test_trace_reports_flex_target_and_range(self, mixed_catalog):
        trace = RecordingTrace()
        match_boots(make_answers(), mixed_catalog, trace=trace)
        profile_data = dict(trace.events)["profile"]
        assert profile_data["acceptable_flexes"] == [100, 110]
        assert profile_data["flex_range"] == "100-110"
        assert profile_data["target_flex"] == 105
