"""
POSHER Posture Service - Exercise Registry

Maps mode identifiers coming from a selector to an exercise kind, its
evaluator and its rule table. Lookup fails soft: an unknown identifier
scores as a neutral default instead of raising.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Union

from .evaluators import (
    EvaluationResult,
    Evaluator,
    score_hip_hinge,
    score_plank,
    score_bird_dog,
    score_dead_bug,
    score_walking_posture,
)
from .geometry import Keypoint
from .rules import ExerciseCategory, ExerciseKind, ExerciseRules, get_rules

logger = logging.getLogger(__name__)

UNSUPPORTED_MODE_CUE = "Unsupported mode"


@dataclass(frozen=True)
class ExerciseEntry:
    """Registry entry: one evaluator and one rule table per kind."""
    kind: ExerciseKind
    evaluator: Evaluator
    rules: ExerciseRules

    @property
    def display_name(self) -> str:
        return self.rules.display_name

    @property
    def category(self) -> ExerciseCategory:
        return self.rules.category

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.kind.value,
            "name": self.display_name,
            "category": self.category.value,
            "markers": [
                {
                    "name": m.name,
                    "measurement": m.measurement,
                    "display_range": [m.display_min, m.display_max],
                    "scoring_range": list(self.rules.scoring_range(m.measurement)),
                    "color": m.color,
                }
                for m in self.rules.markers
            ],
            "divergences": [d.to_dict() for d in self.rules.marker_divergences()],
        }


EXERCISES: Dict[ExerciseKind, ExerciseEntry] = {
    ExerciseKind.HIP_HINGE: ExerciseEntry(ExerciseKind.HIP_HINGE, score_hip_hinge, get_rules(ExerciseKind.HIP_HINGE)),
    ExerciseKind.PLANK: ExerciseEntry(ExerciseKind.PLANK, score_plank, get_rules(ExerciseKind.PLANK)),
    ExerciseKind.BIRD_DOG: ExerciseEntry(ExerciseKind.BIRD_DOG, score_bird_dog, get_rules(ExerciseKind.BIRD_DOG)),
    ExerciseKind.DEAD_BUG: ExerciseEntry(ExerciseKind.DEAD_BUG, score_dead_bug, get_rules(ExerciseKind.DEAD_BUG)),
    ExerciseKind.WALKING_POSTURE: ExerciseEntry(
        ExerciseKind.WALKING_POSTURE, score_walking_posture, get_rules(ExerciseKind.WALKING_POSTURE)
    ),
}

# Selector strings other than display names and enum values
_ALIASES: Dict[str, ExerciseKind] = {
    "hinge": ExerciseKind.HIP_HINGE,
    "walking posture": ExerciseKind.WALKING_POSTURE,
    "walking_posture": ExerciseKind.WALKING_POSTURE,
    "bird-dog": ExerciseKind.BIRD_DOG,
    "dead-bug": ExerciseKind.DEAD_BUG,
}


def _build_lookup() -> Dict[str, ExerciseKind]:
    lookup = {}
    for kind, entry in EXERCISES.items():
        lookup[kind.value] = kind
        lookup[entry.display_name.lower()] = kind
    lookup.update(_ALIASES)
    return lookup


_LOOKUP = _build_lookup()


def resolve_kind(identifier: Union[str, ExerciseKind, None]) -> Optional[ExerciseKind]:
    """Resolve a display name, alias or enum value; None when unknown."""
    if isinstance(identifier, ExerciseKind):
        return identifier
    if not isinstance(identifier, str):
        return None
    return _LOOKUP.get(identifier.strip().lower())


def get_exercise(identifier: Union[str, ExerciseKind, None]) -> Optional[ExerciseEntry]:
    kind = resolve_kind(identifier)
    return EXERCISES.get(kind) if kind else None


def list_exercises(category: Optional[ExerciseCategory] = None) -> List[ExerciseEntry]:
    """Registry entries in selector order, optionally for one tab."""
    return [e for e in EXERCISES.values() if category is None or e.category == category]


def unsupported_result() -> EvaluationResult:
    return EvaluationResult(score=0, cues=[UNSUPPORTED_MODE_CUE])


def score_exercise(
    identifier: Union[str, ExerciseKind, None],
    keypoints: Optional[Iterable[Keypoint]],
) -> EvaluationResult:
    """
    Score one frame for the selected mode.

    Args:
        identifier: Mode selector value
        keypoints: Keypoints for the frame

    Returns:
        EvaluationResult, or the neutral default for an unknown mode
    """
    entry = get_exercise(identifier)
    if entry is None:
        logger.warning(f"Unsupported mode requested: {identifier!r}")
        return unsupported_result()
    return entry.evaluator(list(keypoints or ()))
