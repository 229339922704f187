"""
POSHER Posture Service - Exercise Evaluators

One pure function per exercise. Each computes its measurements from a
frame's keypoints, then runs the exercise's rule table: every failed check
appends its cue and subtracts its penalty from 100, and the total is clamped
to [0, 100].
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional

from .geometry import Keypoint, Landmark, calculate_angle, get_keypoint, hip_tilt, midline
from .recommendations import Prescription, prescribe_for_score
from .rules import (
    ExerciseRules,
    HIP_HINGE_RULES,
    PLANK_RULES,
    BIRD_DOG_RULES,
    DEAD_BUG_RULES,
    WALKING_POSTURE_RULES,
    TRUNK_ANGLE,
    KNEE_ANGLE,
    LEG_ANGLE,
    ARM_ANGLE,
    SPINE_ANGLE,
    HIP_TILT,
    KNEE_TRACKING_ANGLE,
    STRIDE_DEVIATION,
    IDEAL_STRIDE_LENGTH_PX,
)

MAX_SCORE = 100
MIN_SCORE = 0


@dataclass
class EvaluationResult:
    """Score and ordered cues for one frame."""
    score: int
    cues: List[str] = field(default_factory=list)
    measurements: Dict[str, float] = field(default_factory=dict)
    recommendations: Optional[Prescription] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "score": self.score,
            "cues": list(self.cues),
            "measurements": {k: round(v, 1) for k, v in self.measurements.items()},
        }
        if self.recommendations is not None:
            data["recommendations"] = self.recommendations.to_dict()
        return data


Evaluator = Callable[[Iterable[Keypoint]], EvaluationResult]


def clamp_score(score: float) -> int:
    return int(max(MIN_SCORE, min(MAX_SCORE, score)))


def apply_checks(rules: ExerciseRules, measurements: Dict[str, float]) -> EvaluationResult:
    """Run every check of a rule table against computed measurements."""
    cues: List[str] = []
    score = MAX_SCORE

    for check in rules.checks:
        if check.fails(measurements[check.measurement]):
            cues.append(check.cue)
            score -= check.penalty

    return EvaluationResult(score=clamp_score(score), cues=cues, measurements=measurements)


# ═══════════════════════════════════════════════════════════════════════════════
# MEASUREMENTS
# ═══════════════════════════════════════════════════════════════════════════════

def _side_angle(kps, a: Landmark, b: Landmark, c: Landmark) -> float:
    return calculate_angle(get_keypoint(kps, a), get_keypoint(kps, b), get_keypoint(kps, c))


def measure_hip_hinge(keypoints: Iterable[Keypoint]) -> Dict[str, float]:
    kps = list(keypoints or ())
    shoulder = midline(kps, Landmark.LEFT_SHOULDER, Landmark.RIGHT_SHOULDER)
    hip = midline(kps, Landmark.LEFT_HIP, Landmark.RIGHT_HIP)
    knee = midline(kps, Landmark.LEFT_KNEE, Landmark.RIGHT_KNEE)

    left_knee = _side_angle(kps, Landmark.LEFT_HIP, Landmark.LEFT_KNEE, Landmark.LEFT_ANKLE)
    right_knee = _side_angle(kps, Landmark.RIGHT_HIP, Landmark.RIGHT_KNEE, Landmark.RIGHT_ANKLE)

    return {
        TRUNK_ANGLE: calculate_angle(shoulder, hip, knee),
        KNEE_ANGLE: (left_knee + right_knee) / 2,
        HIP_TILT: hip_tilt(kps),
    }


def measure_plank(keypoints: Iterable[Keypoint]) -> Dict[str, float]:
    kps = list(keypoints or ())
    shoulder = midline(kps, Landmark.LEFT_SHOULDER, Landmark.RIGHT_SHOULDER)
    hip = midline(kps, Landmark.LEFT_HIP, Landmark.RIGHT_HIP)
    knee = midline(kps, Landmark.LEFT_KNEE, Landmark.RIGHT_KNEE)
    ankle = midline(kps, Landmark.LEFT_ANKLE, Landmark.RIGHT_ANKLE)

    return {
        TRUNK_ANGLE: calculate_angle(shoulder, hip, knee),
        LEG_ANGLE: calculate_angle(hip, knee, ankle),
        HIP_TILT: hip_tilt(kps),
    }


def measure_quadruped(keypoints: Iterable[Keypoint]) -> Dict[str, float]:
    """Bird dog and dead bug: left arm, right leg, left-side spine, hip tilt."""
    kps = list(keypoints or ())
    return {
        ARM_ANGLE: _side_angle(kps, Landmark.LEFT_SHOULDER, Landmark.LEFT_ELBOW, Landmark.LEFT_WRIST),
        LEG_ANGLE: _side_angle(kps, Landmark.RIGHT_HIP, Landmark.RIGHT_KNEE, Landmark.RIGHT_ANKLE),
        SPINE_ANGLE: _side_angle(kps, Landmark.LEFT_SHOULDER, Landmark.LEFT_HIP, Landmark.LEFT_KNEE),
        HIP_TILT: hip_tilt(kps),
    }


def measure_walking_posture(keypoints: Iterable[Keypoint]) -> Dict[str, float]:
    kps = list(keypoints or ())
    left_ankle = get_keypoint(kps, Landmark.LEFT_ANKLE)
    right_ankle = get_keypoint(kps, Landmark.RIGHT_ANKLE)
    stride_length = abs(left_ankle.x - right_ankle.x)

    return {
        SPINE_ANGLE: _side_angle(kps, Landmark.LEFT_EAR, Landmark.LEFT_SHOULDER, Landmark.LEFT_HIP),
        HIP_TILT: hip_tilt(kps),
        KNEE_TRACKING_ANGLE: _side_angle(kps, Landmark.LEFT_HIP, Landmark.LEFT_KNEE, Landmark.LEFT_ANKLE),
        STRIDE_DEVIATION: abs(stride_length - IDEAL_STRIDE_LENGTH_PX),
    }


# ═══════════════════════════════════════════════════════════════════════════════
# EVALUATORS
# ═══════════════════════════════════════════════════════════════════════════════

def score_hip_hinge(keypoints: Iterable[Keypoint]) -> EvaluationResult:
    return apply_checks(HIP_HINGE_RULES, measure_hip_hinge(keypoints))


def score_plank(keypoints: Iterable[Keypoint]) -> EvaluationResult:
    return apply_checks(PLANK_RULES, measure_plank(keypoints))


def score_bird_dog(keypoints: Iterable[Keypoint]) -> EvaluationResult:
    return apply_checks(BIRD_DOG_RULES, measure_quadruped(keypoints))


def score_dead_bug(keypoints: Iterable[Keypoint]) -> EvaluationResult:
    return apply_checks(DEAD_BUG_RULES, measure_quadruped(keypoints))


def score_walking_posture(keypoints: Iterable[Keypoint]) -> EvaluationResult:
    """Walking posture also carries a prescription for the final score."""
    result = apply_checks(WALKING_POSTURE_RULES, measure_walking_posture(keypoints))
    result.recommendations = prescribe_for_score(result.score)
    return result
