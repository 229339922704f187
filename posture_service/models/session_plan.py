"""
POSHER Posture Service - Screening & Session Planning

Symptom screening, the suggested stretch/exercise session built from it,
and the mapping from session items to vision-tracked pose modes.

General education only; not a diagnostic tool.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
from enum import Enum

from .rules import ExerciseKind

ACUTE_DURATION_DAYS = 6 * 7
HIGH_PAIN_LEVEL = 8
HINGE_PATTERNING_SCORE = 60
LONG_SITTING_HOURS = 6
MAX_VIDEO_NOTES = 2


# ═══════════════════════════════════════════════════════════════════════════════
# ENUMS AND DATA CLASSES
# ═══════════════════════════════════════════════════════════════════════════════

class PainLocation(Enum):
    LOW = "low"
    MID = "mid"
    UPPER = "upper"


class StressLevel(Enum):
    LOW = "low"
    MEDIUM = "med"
    HIGH = "high"


class ScreeningTone(Enum):
    GOOD = "good"
    WARN = "warn"
    BAD = "bad"


class ItemKind(Enum):
    STRETCH = "stretch"
    EXERCISE = "exercise"


@dataclass
class SymptomData:
    """Self-reported back pain symptoms."""
    pain_now: int = 3
    pain_worst: int = 6
    location: PainLocation = PainLocation.LOW
    duration_days: int = 7
    numbness: bool = False
    fever: bool = False
    bladder_bowel: bool = False
    trauma: bool = False
    desk_hours: int = 6
    sleep_hours: int = 7
    stress: StressLevel = StressLevel.MEDIUM

    @property
    def has_red_flags(self) -> bool:
        return self.bladder_bowel or self.numbness or self.fever or self.trauma


@dataclass
class ScreeningResult:
    tone: ScreeningTone
    label: str
    notes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"tone": self.tone.value, "label": self.label, "notes": list(self.notes)}


@dataclass
class SessionItem:
    """One step of a guided session."""
    kind: ItemKind
    name: str
    duration_sec: Optional[int] = None
    reps: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        mode = map_to_pose_mode(self.name)
        return {
            "kind": self.kind.value,
            "name": self.name,
            "duration_sec": self.duration_sec,
            "reps": self.reps,
            "pose_mode": mode.value if mode else None,
            "instructions": session_item_instructions(self),
        }


@dataclass
class SessionPlan:
    stretches: List[SessionItem] = field(default_factory=list)
    exercises: List[SessionItem] = field(default_factory=list)

    @property
    def items(self) -> List[SessionItem]:
        """Stretches first, then exercises, in run order."""
        return self.stretches + self.exercises

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stretches": [s.to_dict() for s in self.stretches],
            "exercises": [e.to_dict() for e in self.exercises],
        }


@dataclass
class Suggestions:
    stretches: List[str] = field(default_factory=list)
    exercises: List[str] = field(default_factory=list)
    habits: List[str] = field(default_factory=list)
    video_notes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stretches": list(self.stretches),
            "exercises": list(self.exercises),
            "habits": list(self.habits),
            "video_notes": list(self.video_notes),
        }


# ═══════════════════════════════════════════════════════════════════════════════
# SCREENING
# ═══════════════════════════════════════════════════════════════════════════════

def screen_symptoms(symptoms: SymptomData) -> ScreeningResult:
    """
    Triage symptoms. Red flags win over pain level, which wins over duration.
    """
    if symptoms.has_red_flags:
        return ScreeningResult(
            tone=ScreeningTone.BAD,
            label="See a clinician urgently",
            notes=["One or more red flags selected.",
                   "Seek medical assessment before continuing exercise."],
        )

    if symptoms.pain_worst >= HIGH_PAIN_LEVEL:
        return ScreeningResult(
            tone=ScreeningTone.WARN,
            label="High pain — go gentle",
            notes=["Use gentle mobility only, keep sessions short.",
                   "If pain persists/worsens, contact a clinician."],
        )

    if symptoms.duration_days < ACUTE_DURATION_DAYS:
        return ScreeningResult(
            tone=ScreeningTone.GOOD,
            label="Likely simple mechanical back pain",
            notes=["Try daily gentle mobility + light core work.",
                   "Gradually increase activity; avoid prolonged rest."],
        )

    return ScreeningResult(
        tone=ScreeningTone.GOOD,
        label="Persistent back pain pattern",
        notes=["Consider consistent graded activity + stress/sleep support.",
               "Book a non-urgent physio/PCP visit for a plan."],
    )


# ═══════════════════════════════════════════════════════════════════════════════
# PLANNING
# ═══════════════════════════════════════════════════════════════════════════════

def build_session_plan(symptoms: Optional[SymptomData], last_score: float) -> SessionPlan:
    """Suggested session; hinge patterning is added when the last form score is poor."""
    stretches = [
        SessionItem(ItemKind.STRETCH, "Cat–Cow", duration_sec=120),
        SessionItem(ItemKind.STRETCH, "Knee-to-Chest", duration_sec=60),
    ]
    if symptoms is not None and symptoms.location == PainLocation.LOW:
        stretches.append(SessionItem(ItemKind.STRETCH, "Sphinx → Cobra", duration_sec=120))

    exercises = [
        SessionItem(ItemKind.EXERCISE, "Dead Bug", reps=8),
        SessionItem(ItemKind.EXERCISE, "Bird-Dog", reps=8),
        SessionItem(ItemKind.EXERCISE, "Side Plank (each)", duration_sec=25),
    ]
    if last_score < HINGE_PATTERNING_SCORE:
        exercises.append(SessionItem(ItemKind.EXERCISE, "Hip Hinge Patterning", reps=8))

    return SessionPlan(stretches=stretches, exercises=exercises)


def build_suggestions(
    symptoms: Optional[SymptomData],
    last_score: float,
    cues: Sequence[str] = (),
) -> Suggestions:
    """Text suggestions combining symptoms, the last score and video cues."""
    stretches = ["Cat–Cow (2 min)", "Child’s Pose to Side Stretch (1 min/side)", "Knee-to-Chest (1 min)"]
    if symptoms is not None and symptoms.location == PainLocation.LOW:
        stretches.append("Sphinx → Cobra (2–3 min easy range)")

    exercises = ["Dead Bug (2×8 slow)", "Bird-Dog (2×8/side)", "Side Plank (2×20–30s/side)"]
    if last_score < HINGE_PATTERNING_SCORE:
        exercises.append("Hip Hinge Patterning (2×8 slow reps)")

    long_sits = symptoms is not None and symptoms.desk_hours >= LONG_SITTING_HOURS
    habits = [
        "Stand or walk 2–3 min every 30–45 min" if long_sits else "Keep moving gently through the day",
        "Aim 7–9h sleep; manage stress (breathing 5 min)",
    ]

    return Suggestions(
        stretches=stretches,
        exercises=exercises,
        habits=habits,
        video_notes=list(cues)[:MAX_VIDEO_NOTES],
    )


# ═══════════════════════════════════════════════════════════════════════════════
# SESSION RUNNER HELPERS
# ═══════════════════════════════════════════════════════════════════════════════

def map_to_pose_mode(name: str) -> Optional[ExerciseKind]:
    """Vision-tracked mode for a session item name; None means text-guided only."""
    n = name.lower()
    if "hinge" in n:
        return ExerciseKind.HIP_HINGE
    if "plank" in n:
        return ExerciseKind.PLANK
    return None


def session_item_instructions(item: SessionItem) -> List[str]:
    """Short text instructions shown while an item runs."""
    lines: List[str] = []
    name = item.name.lower()

    if item.kind == ItemKind.STRETCH:
        lines.append("Move gently in a comfortable range. Breathe slowly.")
        if "cobra" in name:
            lines.append("Stop if you feel sharp leg pain or tingling.")
        if item.duration_sec:
            lines.append(f"Timer: {item.duration_sec}s")
    else:
        if "hinge" in name:
            lines.append("Keep shins vertical, hinge at hips, spine long.")
        if "plank" in name:
            lines.append("Ribs down, hips level, press floor away.")
        if item.reps:
            lines.append(f"Target: {item.reps} slow reps")
        if map_to_pose_mode(item.name) is None:
            lines.append("Tip: This item isn’t vision-tracked yet—follow the cues above.")

    return lines
