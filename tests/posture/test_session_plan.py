"""
Tests for symptom screening, session planning and pose-mode mapping.
"""

import pytest

from posture_service.models import (
    ExerciseKind,
    ItemKind,
    PainLocation,
    SessionItem,
    SymptomData,
    build_session_plan,
    build_suggestions,
    map_to_pose_mode,
    screen_symptoms,
    session_item_instructions,
)


class TestScreening:

    @pytest.mark.parametrize("flag", ["numbness", "fever", "bladder_bowel", "trauma"])
    def test_red_flag_is_urgent(self, flag):
        result = screen_symptoms(SymptomData(**{flag: True}))
        assert result.tone.value == "bad"
        assert result.label == "See a clinician urgently"

    def test_red_flags_beat_high_pain(self):
        result = screen_symptoms(SymptomData(pain_worst=10, fever=True))
        assert result.tone.value == "bad"

    def test_high_pain(self):
        result = screen_symptoms(SymptomData(pain_worst=8))
        assert result.tone.value == "warn"
        assert result.label == "High pain — go gentle"

    def test_recent_pain_is_mechanical(self):
        result = screen_symptoms(SymptomData(duration_days=41))
        assert result.label == "Likely simple mechanical back pain"

    def test_six_weeks_is_persistent(self):
        result = screen_symptoms(SymptomData(duration_days=42))
        assert result.tone.value == "good"
        assert result.label == "Persistent back pain pattern"
        assert len(result.to_dict()["notes"]) == 2


class TestSessionPlan:

    def test_default_plan(self):
        plan = build_session_plan(SymptomData(), last_score=80)
        assert [s.name for s in plan.stretches] == ["Cat–Cow", "Knee-to-Chest", "Sphinx → Cobra"]
        assert [e.name for e in plan.exercises] == ["Dead Bug", "Bird-Dog", "Side Plank (each)"]

    def test_poor_score_adds_hinge_patterning(self):
        plan = build_session_plan(SymptomData(), last_score=59)
        assert plan.exercises[-1].name == "Hip Hinge Patterning"
        assert plan.exercises[-1].reps == 8

    def test_upper_back_skips_cobra(self):
        plan = build_session_plan(SymptomData(location=PainLocation.UPPER), last_score=60)
        assert "Sphinx → Cobra" not in [s.name for s in plan.stretches]
        assert len(plan.exercises) == 3

    def test_items_run_stretches_first(self):
        plan = build_session_plan(None, last_score=100)
        kinds = [i.kind for i in plan.items]
        assert kinds == [ItemKind.STRETCH] * 2 + [ItemKind.EXERCISE] * 3

    def test_serialized_items_carry_pose_mode(self):
        data = build_session_plan(None, last_score=0).to_dict()
        modes = {e["name"]: e["pose_mode"] for e in data["exercises"]}
        assert modes["Side Plank (each)"] == "plank"
        assert modes["Hip Hinge Patterning"] == "hip_hinge"
        assert modes["Dead Bug"] is None


class TestSuggestions:

    def test_video_notes_capped_at_two(self):
        s = build_suggestions(SymptomData(), 40, ["a", "b", "c"])
        assert s.video_notes == ["a", "b"]
        assert s.exercises[-1] == "Hip Hinge Patterning (2×8 slow reps)"

    def test_long_sitting_habit(self):
        s = build_suggestions(SymptomData(desk_hours=8), 90)
        assert s.habits[0] == "Stand or walk 2–3 min every 30–45 min"

        s = build_suggestions(SymptomData(desk_hours=2), 90)
        assert s.habits[0] == "Keep moving gently through the day"


class TestPoseModeMapping:

    @pytest.mark.parametrize("name, kind", [
        ("Hip Hinge Patterning", ExerciseKind.HIP_HINGE),
        ("Side Plank (each)", ExerciseKind.PLANK),
        ("Bird-Dog", None),
        ("Cat–Cow", None),
    ])
    def test_mapping(self, name, kind):
        assert map_to_pose_mode(name) == kind

    def test_untracked_item_gets_tip(self):
        lines = session_item_instructions(SessionItem(ItemKind.EXERCISE, "Dead Bug", reps=8))
        assert "Target: 8 slow reps" in lines
        assert lines[-1].startswith("Tip:")

    def test_cobra_warning(self):
        lines = session_item_instructions(SessionItem(ItemKind.STRETCH, "Sphinx → Cobra", duration_sec=120))
        assert "Stop if you feel sharp leg pain or tingling." in lines
        assert lines[-1] == "Timer: 120s"
