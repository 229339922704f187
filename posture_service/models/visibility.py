"""
POSHER Posture Service - Visibility Validator

Decides whether enough of the body is in frame, at high enough confidence,
for a form score to be trusted.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from core.config import settings
from .geometry import Keypoint, Landmark, midline


REQUIRED_JOINTS: List[str] = [
    Landmark.LEFT_SHOULDER.value, Landmark.RIGHT_SHOULDER.value,
    Landmark.LEFT_HIP.value, Landmark.RIGHT_HIP.value,
    Landmark.LEFT_KNEE.value, Landmark.RIGHT_KNEE.value,
    Landmark.LEFT_ANKLE.value, Landmark.RIGHT_ANKLE.value,
]


@dataclass
class VisibilityResult:
    """Per-frame visibility verdict."""
    all_visible: bool
    missing_joints: List[str] = field(default_factory=list)
    too_close: Optional[bool] = None  # None when distance was not checked

    @property
    def usable(self) -> bool:
        """True when the frame can be scored."""
        return self.all_visible and not self.too_close

    def to_dict(self) -> Dict[str, Any]:
        return {
            "all_visible": self.all_visible,
            "missing_joints": list(self.missing_joints),
            "too_close": self.too_close,
        }


def check_joint_visibility(
    keypoints: Optional[Iterable[Keypoint]],
    required: Sequence[str] = REQUIRED_JOINTS,
    threshold: Optional[float] = None,
) -> VisibilityResult:
    """
    Check that every required landmark is present above a confidence threshold.

    A landmark with a NaN or infinite coordinate counts as not visible.

    Args:
        keypoints: Keypoints for one frame (None or empty means no pose)
        required: Landmark names that must be visible, in reporting order
        threshold: Confidence a landmark must exceed (settings default)

    Returns:
        VisibilityResult with missing joints in the order of `required`
    """
    if threshold is None:
        threshold = settings.POSE_VISIBILITY_THRESHOLD
    kps = list(keypoints or ())

    missing = [
        name for name in (getattr(r, "value", r) for r in required)
        if not any(kp.name == name and kp.confidence > threshold and kp.is_finite for kp in kps)
    ]

    return VisibilityResult(all_visible=not missing, missing_joints=missing)


def is_too_close(
    keypoints: Optional[Iterable[Keypoint]],
    min_torso_px: Optional[float] = None,
) -> bool:
    """
    Distance heuristic: the subject is too close when the vertical gap between
    mean shoulder and mean hip is below `min_torso_px` pixels.
    """
    if min_torso_px is None:
        min_torso_px = settings.TOO_CLOSE_DISTANCE_PX
    kps = list(keypoints or ())

    shoulder = midline(kps, Landmark.LEFT_SHOULDER, Landmark.RIGHT_SHOULDER)
    hip = midline(kps, Landmark.LEFT_HIP, Landmark.RIGHT_HIP)

    return abs(shoulder.y - hip.y) < min_torso_px


def check_full_body_visibility(
    keypoints: Optional[Iterable[Keypoint]],
    threshold: Optional[float] = None,
    min_torso_px: Optional[float] = None,
    required: Sequence[str] = REQUIRED_JOINTS,
) -> VisibilityResult:
    """Joint visibility plus the too-close check; the two are independent."""
    if threshold is None:
        threshold = settings.FULL_BODY_VISIBILITY_THRESHOLD
    kps = list(keypoints or ())

    result = check_joint_visibility(kps, required=required, threshold=threshold)
    result.too_close = is_too_close(kps, min_torso_px)
    return result


def visible_keypoints(
    keypoints: Optional[Iterable[Keypoint]],
    threshold: Optional[float] = None,
) -> List[Keypoint]:
    """Keypoints confident enough to be drawn by a display sink."""
    if threshold is None:
        threshold = settings.POSE_VISIBILITY_THRESHOLD
    return [kp for kp in keypoints or () if kp.confidence > threshold and kp.is_finite]
