"""
POSHER Posture Service - Recommendation Mapper

Translates a walking-posture score into a corrective exercise prescription.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List
from enum import Enum


class SeverityTier(Enum):
    """Prescription tiers, worst first."""
    INTENSIVE = "intensive"
    MODERATE = "moderate"
    MAINTENANCE = "maintenance"


@dataclass(frozen=True)
class Prescription:
    """Session guidance for a severity tier."""
    tier: SeverityTier
    exercises: List[str] = field(default_factory=list)
    duration: int = 0  # minutes per session
    frequency: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tier": self.tier.value,
            "exercises": list(self.exercises),
            "duration": self.duration,
            "frequency": self.frequency,
        }


INTENSIVE_SCORE_LIMIT = 50
MODERATE_SCORE_LIMIT = 75

PRESCRIPTIONS: Dict[SeverityTier, Prescription] = {
    SeverityTier.INTENSIVE: Prescription(
        tier=SeverityTier.INTENSIVE,
        exercises=[
            "Hip Mobility Stretches",
            "Core Strengthening",
            "Glute Activation Exercises",
            "Balance and Stability Training",
        ],
        duration=20,
        frequency="Daily for 2-3 weeks",
    ),
    SeverityTier.MODERATE: Prescription(
        tier=SeverityTier.MODERATE,
        exercises=[
            "Gentle Spine Mobility",
            "Hip Flexor Stretches",
            "Walking Technique Drills",
        ],
        duration=15,
        frequency="4-5 times per week",
    ),
    SeverityTier.MAINTENANCE: Prescription(
        tier=SeverityTier.MAINTENANCE,
        exercises=[
            "Maintenance Stretches",
            "Light Mobility Work",
        ],
        duration=10,
        frequency="2-3 times per week",
    ),
}


def severity_for_score(score: float) -> SeverityTier:
    """Scores below 50 are intensive, below 75 moderate, otherwise maintenance."""
    if score < INTENSIVE_SCORE_LIMIT:
        return SeverityTier.INTENSIVE
    elif score < MODERATE_SCORE_LIMIT:
        return SeverityTier.MODERATE
    return SeverityTier.MAINTENANCE


def prescribe_for_score(score: float) -> Prescription:
    """Get the prescription bundle for a walking-posture score."""
    return PRESCRIPTIONS[severity_for_score(score)]
