"""
POSHER Posture Service - Frame Scorer

Per-frame scoring engine: validates visibility, dispatches to the selected
exercise evaluator, and hands the result to any observers.

Stateless between frames. The only state held is configuration, so one
instance can serve concurrent callers.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union

from core.config import settings
from .evaluators import EvaluationResult
from .geometry import Keypoint
from .recommendations import Prescription
from .registry import resolve_kind, score_exercise
from .rules import ExerciseKind
from .visibility import (
    REQUIRED_JOINTS,
    VisibilityResult,
    check_joint_visibility,
    is_too_close,
)

logger = logging.getLogger(__name__)

NOT_IN_FRAME_CUE = "Position your full body in frame"
STATUS_TOO_CLOSE = "Move further back! Full body should be visible."
STATUS_GOOD = "Good positioning. Maintain form."


@dataclass
class FrameResult:
    """Everything a display sink needs for one frame."""
    mode: str
    score: int
    cues: List[str]
    visibility: VisibilityResult
    status: str
    scored: bool
    headline_cues: List[str] = field(default_factory=list)
    measurements: Dict[str, float] = field(default_factory=dict)
    recommendations: Optional[Prescription] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode,
            "score": self.score,
            "cues": list(self.cues),
            "headline_cues": list(self.headline_cues),
            "status": self.status,
            "scored": self.scored,
            "visibility": self.visibility.to_dict(),
            "measurements": {k: round(v, 1) for k, v in self.measurements.items()},
            "recommendations": self.recommendations.to_dict() if self.recommendations else None,
        }


FrameObserver = Callable[[FrameResult], None]


def missing_joints_status(missing: Sequence[str]) -> str:
    return f"Adjust position. Missing: {', '.join(missing)}"


class FrameScorer:
    """
    Scores one pose per call.

    Frames with missing required joints (or, when distance checking is on,
    a subject standing too close) are not scored; they get a zero score
    and a positioning cue instead.
    """

    def __init__(
        self,
        visibility_threshold: Optional[float] = None,
        min_torso_px: Optional[float] = None,
        max_display_cues: Optional[int] = None,
        required_joints: Sequence[str] = REQUIRED_JOINTS,
        observers: Sequence[FrameObserver] = (),
    ):
        """
        Initialize frame scorer.

        Args:
            visibility_threshold: Confidence a required joint must exceed
            min_torso_px: Shoulder-hip gap below which the subject is too
                close; None disables the distance check
            max_display_cues: How many cues are surfaced as headline cues
            required_joints: Landmarks that must be visible to score
            observers: Callables notified with every FrameResult
        """
        self.visibility_threshold = (
            settings.POSE_VISIBILITY_THRESHOLD if visibility_threshold is None else visibility_threshold
        )
        self.min_torso_px = min_torso_px
        self.max_display_cues = settings.MAX_DISPLAY_CUES if max_display_cues is None else max_display_cues
        self.required_joints = tuple(required_joints)
        self.observers = tuple(observers)

    @classmethod
    def live_coach(cls, observers: Sequence[FrameObserver] = ()) -> "FrameScorer":
        """Overlay coach: lower confidence bar, no distance check."""
        return cls(visibility_threshold=settings.POSE_VISIBILITY_THRESHOLD, observers=observers)

    @classmethod
    def full_body(cls, observers: Sequence[FrameObserver] = ()) -> "FrameScorer":
        """Full-body tracker: stricter confidence plus the too-close check."""
        return cls(
            visibility_threshold=settings.FULL_BODY_VISIBILITY_THRESHOLD,
            min_torso_px=settings.TOO_CLOSE_DISTANCE_PX,
            observers=observers,
        )

    def check_visibility(self, keypoints: Sequence[Keypoint]) -> VisibilityResult:
        visibility = check_joint_visibility(
            keypoints, required=self.required_joints, threshold=self.visibility_threshold
        )
        if self.min_torso_px is not None:
            visibility.too_close = is_too_close(keypoints, self.min_torso_px)
        return visibility

    def score_frame(
        self,
        keypoints: Optional[Iterable[Keypoint]],
        mode: Union[str, ExerciseKind, None],
        observers: Sequence[FrameObserver] = (),
    ) -> FrameResult:
        """
        Score one frame.

        Args:
            keypoints: Keypoints of at most one subject; None or empty when
                no pose was detected
            mode: Selected exercise identifier
            observers: Extra observers for this call only

        Returns:
            FrameResult
        """
        kps = list(keypoints or ())
        visibility = self.check_visibility(kps)

        if visibility.too_close:
            status = STATUS_TOO_CLOSE
        elif not visibility.all_visible:
            status = missing_joints_status(visibility.missing_joints)
        else:
            status = STATUS_GOOD

        if visibility.usable:
            evaluation = score_exercise(mode, kps)
        else:
            evaluation = EvaluationResult(score=0, cues=[NOT_IN_FRAME_CUE])

        result = FrameResult(
            mode=self._mode_label(mode),
            score=evaluation.score,
            cues=evaluation.cues,
            visibility=visibility,
            status=status,
            scored=visibility.usable,
            headline_cues=evaluation.cues[:self.max_display_cues],
            measurements=evaluation.measurements,
            recommendations=evaluation.recommendations,
        )

        self._notify(tuple(self.observers) + tuple(observers), result)
        return result

    @staticmethod
    def _mode_label(mode) -> str:
        kind = resolve_kind(mode)
        if kind is not None:
            return kind.value
        return str(mode) if mode is not None else ""

    @staticmethod
    def _notify(observers: Sequence[FrameObserver], result: FrameResult):
        for observer in observers:
            try:
                observer(result)
            except Exception as e:
                logger.error(f"Frame observer {observer!r} failed: {e}")


# ═══════════════════════════════════════════════════════════════════════════════
# MODULE-LEVEL SINGLETON
# ═══════════════════════════════════════════════════════════════════════════════

_scorer_instance: Optional[FrameScorer] = None

def get_frame_scorer() -> FrameScorer:
    """Get or create the shared live-coach scorer (holds no observers)."""
    global _scorer_instance
    if _scorer_instance is None:
        _scorer_instance = FrameScorer.live_coach()
    return _scorer_instance
