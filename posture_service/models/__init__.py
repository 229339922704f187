"""
POSHER Posture Service Models

Rule-based posture and exercise-form scoring from 2-D pose keypoints.
"""

from .geometry import (
    Keypoint,
    Landmark,
    calculate_angle,
    get_keypoint,
    midpoint,
    hip_tilt,
)

from .visibility import (
    REQUIRED_JOINTS,
    VisibilityResult,
    check_joint_visibility,
    check_full_body_visibility,
    is_too_close,
    visible_keypoints,
)

from .rules import (
    ExerciseKind,
    ExerciseCategory,
    ExerciseRules,
    RangeCheck,
    PoseMarker,
    MarkerDivergence,
    RuleTableError,
    get_rules,
    find_divergences,
)

from .recommendations import (
    Prescription,
    SeverityTier,
    prescribe_for_score,
)

from .evaluators import (
    EvaluationResult,
    score_hip_hinge,
    score_plank,
    score_bird_dog,
    score_dead_bug,
    score_walking_posture,
)

from .registry import (
    ExerciseEntry,
    get_exercise,
    list_exercises,
    resolve_kind,
    score_exercise,
)

from .session_plan import (
    SymptomData,
    PainLocation,
    StressLevel,
    ScreeningResult,
    SessionItem,
    SessionPlan,
    Suggestions,
    ItemKind,
    screen_symptoms,
    build_session_plan,
    build_suggestions,
    map_to_pose_mode,
    session_item_instructions,
)

from .frame_scorer import (
    FrameScorer,
    FrameResult,
    get_frame_scorer,
)

__all__ = [
    # Geometry
    "Keypoint",
    "Landmark",
    "calculate_angle",
    "get_keypoint",
    "midpoint",
    "hip_tilt",
    # Visibility
    "REQUIRED_JOINTS",
    "VisibilityResult",
    "check_joint_visibility",
    "check_full_body_visibility",
    "is_too_close",
    "visible_keypoints",
    # Rules
    "ExerciseKind",
    "ExerciseCategory",
    "ExerciseRules",
    "RangeCheck",
    "PoseMarker",
    "MarkerDivergence",
    "RuleTableError",
    "get_rules",
    "find_divergences",
    # Recommendations
    "Prescription",
    "SeverityTier",
    "prescribe_for_score",
    # Evaluators
    "EvaluationResult",
    "score_hip_hinge",
    "score_plank",
    "score_bird_dog",
    "score_dead_bug",
    "score_walking_posture",
    # Registry
    "ExerciseEntry",
    "get_exercise",
    "list_exercises",
    "resolve_kind",
    "score_exercise",
    # Screening & planning
    "SymptomData",
    "PainLocation",
    "StressLevel",
    "ScreeningResult",
    "SessionItem",
    "SessionPlan",
    "Suggestions",
    "ItemKind",
    "screen_symptoms",
    "build_session_plan",
    "build_suggestions",
    "map_to_pose_mode",
    "session_item_instructions",
    # Engine
    "FrameScorer",
    "FrameResult",
    "get_frame_scorer",
]
