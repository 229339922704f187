"""
POSHER Posture Service - Geometry Primitives

Keypoint records, the landmark vocabulary, and the joint-angle math
shared by every exercise evaluator.
"""

import numpy as np
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Sequence
from enum import Enum


# ═══════════════════════════════════════════════════════════════════════════════
# ENUMS AND DATA CLASSES
# ═══════════════════════════════════════════════════════════════════════════════

class Landmark(str, Enum):
    """Body landmark names reported by the pose model (MoveNet / COCO order)."""
    NOSE = "nose"
    LEFT_EYE = "left_eye"
    RIGHT_EYE = "right_eye"
    LEFT_EAR = "left_ear"
    RIGHT_EAR = "right_ear"
    LEFT_SHOULDER = "left_shoulder"
    RIGHT_SHOULDER = "right_shoulder"
    LEFT_ELBOW = "left_elbow"
    RIGHT_ELBOW = "right_elbow"
    LEFT_WRIST = "left_wrist"
    RIGHT_WRIST = "right_wrist"
    LEFT_HIP = "left_hip"
    RIGHT_HIP = "right_hip"
    LEFT_KNEE = "left_knee"
    RIGHT_KNEE = "right_knee"
    LEFT_ANKLE = "left_ankle"
    RIGHT_ANKLE = "right_ankle"


@dataclass(frozen=True)
class Keypoint:
    """A single 2-D landmark estimate for one frame."""
    x: float
    y: float
    name: Optional[str] = None
    score: Optional[float] = None  # confidence in [0, 1]

    @property
    def confidence(self) -> float:
        return self.score if self.score is not None else 0.0

    def to_numpy(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=float)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "x": self.x, "y": self.y, "score": self.score}

    @property
    def is_finite(self) -> bool:
        """False when either coordinate is NaN or infinite."""
        return bool(np.all(np.isfinite(self.to_numpy())))


Keypoints = Sequence[Keypoint]

EPSILON = 1e-9


# ═══════════════════════════════════════════════════════════════════════════════
# LOOKUP
# ═══════════════════════════════════════════════════════════════════════════════

def _landmark_name(name) -> str:
    return name.value if isinstance(name, Landmark) else name


def get_keypoint(keypoints: Optional[Iterable[Keypoint]], name) -> Keypoint:
    """
    Return the first keypoint whose name matches.

    Falls back to a zero-confidence placeholder at the origin. The placeholder
    says nothing about visibility; use the visibility validator for that.
    """
    target = _landmark_name(name)
    for kp in keypoints or ():
        if kp.name == target:
            return kp
    return Keypoint(x=0.0, y=0.0, name=target, score=0.0)


def midpoint(a: Keypoint, b: Keypoint) -> Keypoint:
    """Average of two keypoints (used to build midline points)."""
    return Keypoint(x=(a.x + b.x) / 2, y=(a.y + b.y) / 2)


def midline(keypoints: Optional[Iterable[Keypoint]], left, right) -> Keypoint:
    """Midpoint of a left/right landmark pair."""
    return midpoint(get_keypoint(keypoints, left), get_keypoint(keypoints, right))


# ═══════════════════════════════════════════════════════════════════════════════
# MEASUREMENTS
# ═══════════════════════════════════════════════════════════════════════════════

def calculate_angle(a: Keypoint, b: Keypoint, c: Keypoint) -> float:
    """
    Calculate angle at point b formed by points a-b-c.

    Args:
        a, b, c: keypoints, b is the vertex

    Returns:
        Angle in degrees (0-180)
    """
    ba = a.to_numpy() - b.to_numpy()
    bc = c.to_numpy() - b.to_numpy()

    cosine_angle = np.dot(ba, bc) / (np.linalg.norm(ba) * np.linalg.norm(bc) + EPSILON)
    cosine_angle = np.clip(cosine_angle, -1.0, 1.0)

    return float(np.degrees(np.arccos(cosine_angle)))


def hip_tilt(keypoints: Optional[Iterable[Keypoint]]) -> float:
    """Vertical pixel difference between the two hips."""
    left = get_keypoint(keypoints, Landmark.LEFT_HIP)
    right = get_keypoint(keypoints, Landmark.RIGHT_HIP)
    return abs(left.y - right.y)

