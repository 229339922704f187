"""
POSHER Posture Service - Rule Tables

Thresholds, cues, penalties and display markers for every supported
exercise. Evaluators score from these tables and the display markers read
their scoring ranges from them, so a threshold lives in exactly one place.

Display ranges on markers are kept as authored. Where one disagrees with a
bound the checks enforce, `find_divergences` reports it.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
from enum import Enum

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# ENUMS AND DATA CLASSES
# ═══════════════════════════════════════════════════════════════════════════════

class ExerciseKind(Enum):
    """Supported exercise / posture modes."""
    HIP_HINGE = "hip_hinge"
    PLANK = "plank"
    BIRD_DOG = "bird_dog"
    DEAD_BUG = "dead_bug"
    WALKING_POSTURE = "walking_posture"


class ExerciseCategory(Enum):
    """Which selector tab a mode belongs to."""
    EXERCISE = "exercise"
    POSTURE = "posture"


class RuleTableError(ValueError):
    """A rule table is malformed."""


@dataclass(frozen=True)
class RangeCheck:
    """
    One independent form check.

    The check fails when the measurement is strictly below `minimum` or
    strictly above `maximum`, or when it is not a finite number. A failure
    adds `cue` and subtracts `penalty`.
    """
    measurement: str
    cue: str
    penalty: int
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    def fails(self, value: float) -> bool:
        if not math.isfinite(value):
            return True
        if self.minimum is not None and value < self.minimum:
            return True
        if self.maximum is not None and value > self.maximum:
            return True
        return False


@dataclass(frozen=True)
class PoseMarker:
    """Display metadata for one measurement (not used for scoring)."""
    name: str
    measurement: str
    display_min: float
    display_max: float
    color: str


@dataclass(frozen=True)
class MarkerDivergence:
    """A display range that disagrees with the enforced thresholds."""
    exercise: str
    marker: str
    measurement: str
    display_range: Tuple[float, float]
    scoring_range: Tuple[Optional[float], Optional[float]]

    def to_dict(self) -> Dict:
        return {
            "exercise": self.exercise,
            "marker": self.marker,
            "measurement": self.measurement,
            "display_range": list(self.display_range),
            "scoring_range": list(self.scoring_range),
        }


@dataclass(frozen=True)
class ExerciseRules:
    """Complete rule set for one exercise."""
    kind: ExerciseKind
    display_name: str
    category: ExerciseCategory
    measurements: Tuple[str, ...]
    checks: Tuple[RangeCheck, ...]
    markers: Tuple[PoseMarker, ...] = field(default_factory=tuple)

    def scoring_range(self, measurement: str) -> Tuple[Optional[float], Optional[float]]:
        """Acceptable band for a measurement, as enforced by the checks."""
        lows = [c.minimum for c in self.checks if c.measurement == measurement and c.minimum is not None]
        highs = [c.maximum for c in self.checks if c.measurement == measurement and c.maximum is not None]
        return (max(lows) if lows else None, min(highs) if highs else None)

    def marker_divergences(self) -> List[MarkerDivergence]:
        divergences = []
        for marker in self.markers:
            low, high = self.scoring_range(marker.measurement)
            if (low is not None and low != marker.display_min) or \
               (high is not None and high != marker.display_max):
                divergences.append(MarkerDivergence(
                    exercise=self.display_name,
                    marker=marker.name,
                    measurement=marker.measurement,
                    display_range=(marker.display_min, marker.display_max),
                    scoring_range=(low, high),
                ))
        return divergences

    def validate(self):
        """Raise RuleTableError if the table cannot be scored consistently."""
        if not self.checks:
            raise RuleTableError(f"{self.display_name}: no checks")
        for check in self.checks:
            if check.measurement not in self.measurements:
                raise RuleTableError(f"{self.display_name}: unknown measurement '{check.measurement}'")
            if check.minimum is None and check.maximum is None:
                raise RuleTableError(f"{self.display_name}: check '{check.cue}' has no bound")
            if check.minimum is not None and check.maximum is not None and check.minimum > check.maximum:
                raise RuleTableError(f"{self.display_name}: inverted bounds for '{check.measurement}'")
            if not isinstance(check.penalty, int) or check.penalty <= 0:
                raise RuleTableError(f"{self.display_name}: penalty must be a positive int")
            if not check.cue:
                raise RuleTableError(f"{self.display_name}: empty cue")
        for marker in self.markers:
            if marker.measurement not in self.measurements:
                raise RuleTableError(f"{self.display_name}: marker '{marker.name}' has unknown measurement")


# ═══════════════════════════════════════════════════════════════════════════════
# MEASUREMENT NAMES
# ═══════════════════════════════════════════════════════════════════════════════

TRUNK_ANGLE = "trunk_angle"
KNEE_ANGLE = "knee_angle"
LEG_ANGLE = "leg_angle"
ARM_ANGLE = "arm_angle"
SPINE_ANGLE = "spine_angle"
HIP_TILT = "hip_tilt"
KNEE_TRACKING_ANGLE = "knee_tracking_angle"
STRIDE_DEVIATION = "stride_deviation"

IDEAL_STRIDE_LENGTH_PX = 100.0


# ═══════════════════════════════════════════════════════════════════════════════
# RULE TABLES
# ═══════════════════════════════════════════════════════════════════════════════

HIP_HINGE_RULES = ExerciseRules(
    kind=ExerciseKind.HIP_HINGE,
    display_name="Hip Hinge",
    category=ExerciseCategory.EXERCISE,
    measurements=(TRUNK_ANGLE, KNEE_ANGLE, HIP_TILT),
    checks=(
        RangeCheck(KNEE_ANGLE, "Less knee bend — micro-bend only.", 15, minimum=155),
        RangeCheck(TRUNK_ANGLE, "Push hips back; hinge more.", 15, maximum=165),
        RangeCheck(TRUNK_ANGLE, "Don’t overfold; limit range.", 10, minimum=95),
        RangeCheck(HIP_TILT, "Level your hips.", 10, maximum=20),
    ),
    markers=(
        PoseMarker("Trunk Angle", TRUNK_ANGLE, 110, 160, "#4CAF50"),
        PoseMarker("Knee Angle", KNEE_ANGLE, 155, 175, "#2196F3"),
    ),
)

PLANK_RULES = ExerciseRules(
    kind=ExerciseKind.PLANK,
    display_name="Plank",
    category=ExerciseCategory.EXERCISE,
    measurements=(TRUNK_ANGLE, LEG_ANGLE, HIP_TILT),
    checks=(
        RangeCheck(TRUNK_ANGLE, "Lift chest / tuck ribs — keep trunk long.", 15, minimum=165),
        RangeCheck(TRUNK_ANGLE, "Don’t pike — keep hips level.", 15, maximum=185),
        RangeCheck(LEG_ANGLE, "Straighten legs — press heels back.", 10, minimum=165),
        RangeCheck(HIP_TILT, "Level your hips.", 10, maximum=15),
    ),
    markers=(
        PoseMarker("Trunk Alignment", TRUNK_ANGLE, 165, 185, "#FF9800"),
        PoseMarker("Hip Level", HIP_TILT, -10, 10, "#9C27B0"),
    ),
)

BIRD_DOG_RULES = ExerciseRules(
    kind=ExerciseKind.BIRD_DOG,
    display_name="Bird Dog",
    category=ExerciseCategory.EXERCISE,
    measurements=(ARM_ANGLE, LEG_ANGLE, SPINE_ANGLE, HIP_TILT),
    checks=(
        RangeCheck(ARM_ANGLE, "Keep arm straight but not locked.", 15, minimum=160, maximum=180),
        RangeCheck(LEG_ANGLE, "Extend leg fully, keep it in line with hip.", 15, minimum=170, maximum=190),
        RangeCheck(SPINE_ANGLE, "Maintain a neutral spine. Keep back flat.", 20, minimum=160, maximum=200),
        RangeCheck(HIP_TILT, "Keep hips level and stable.", 10, maximum=20),
    ),
    markers=(
        PoseMarker("Arm Extension", ARM_ANGLE, 160, 180, "#673AB7"),
        PoseMarker("Leg Extension", LEG_ANGLE, 170, 190, "#FF5722"),
    ),
)

DEAD_BUG_RULES = ExerciseRules(
    kind=ExerciseKind.DEAD_BUG,
    display_name="Dead Bug",
    category=ExerciseCategory.EXERCISE,
    measurements=(ARM_ANGLE, LEG_ANGLE, SPINE_ANGLE, HIP_TILT),
    checks=(
        RangeCheck(ARM_ANGLE, "Keep arm extended, parallel to ground.", 15, minimum=160, maximum=190),
        RangeCheck(LEG_ANGLE, "Extend leg fully, keep lower back pressed.", 15, minimum=160, maximum=190),
        RangeCheck(SPINE_ANGLE, "Maintain a neutral spine. Press lower back into ground.", 20, minimum=150, maximum=210),
        RangeCheck(HIP_TILT, "Keep hips level and stable.", 10, maximum=15),
    ),
    markers=(
        PoseMarker("Arm Position", ARM_ANGLE, 160, 190, "#3F51B5"),
        PoseMarker("Leg Angle", LEG_ANGLE, 160, 190, "#009688"),
    ),
)

WALKING_POSTURE_RULES = ExerciseRules(
    kind=ExerciseKind.WALKING_POSTURE,
    display_name="Walking",
    category=ExerciseCategory.POSTURE,
    measurements=(SPINE_ANGLE, HIP_TILT, KNEE_TRACKING_ANGLE, STRIDE_DEVIATION),
    checks=(
        RangeCheck(SPINE_ANGLE, "Maintain a neutral spine. Keep head aligned with shoulders.", 20,
                   minimum=170, maximum=190),
        RangeCheck(HIP_TILT, "Keep hips level. Avoid tilting to one side while walking.", 15, maximum=30),
        RangeCheck(KNEE_TRACKING_ANGLE, "Align knees properly. Avoid inward or outward knee rotation.", 15,
                   minimum=160, maximum=200),
        RangeCheck(STRIDE_DEVIATION, "Maintain consistent stride length. Avoid overstriding or short steps.", 10,
                   maximum=50),
    ),
    markers=(
        PoseMarker("Spine Alignment", SPINE_ANGLE, 170, 190, "#8BC34A"),
        PoseMarker("Hip Levelness", HIP_TILT, -30, 30, "#FFC107"),
    ),
)

RULE_TABLES: Dict[ExerciseKind, ExerciseRules] = {
    rules.kind: rules
    for rules in (HIP_HINGE_RULES, PLANK_RULES, BIRD_DOG_RULES, DEAD_BUG_RULES, WALKING_POSTURE_RULES)
}


def get_rules(kind: ExerciseKind) -> ExerciseRules:
    """Rule table for an exercise kind."""
    return RULE_TABLES[kind]


def find_divergences() -> List[MarkerDivergence]:
    """All display markers whose range disagrees with the enforced thresholds."""
    divergences = []
    for rules in RULE_TABLES.values():
        divergences.extend(rules.marker_divergences())
    return divergences


def _validate_tables():
    missing = set(ExerciseKind) - set(RULE_TABLES)
    if missing:
        raise RuleTableError(f"No rule table for: {sorted(k.value for k in missing)}")
    for rules in RULE_TABLES.values():
        rules.validate()
    for d in find_divergences():
        logger.warning(
            f"{d.exercise} marker '{d.marker}' shows {d.display_range} "
            f"but scoring enforces {d.scoring_range}"
        )


_validate_tables()
