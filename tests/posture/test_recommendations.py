"""
Tests for the walking-posture prescription tiers.
"""

import pytest

from posture_service.models import SeverityTier, prescribe_for_score
from posture_service.models.recommendations import severity_for_score


@pytest.mark.parametrize("score, tier", [
    (0, SeverityTier.INTENSIVE),
    (49, SeverityTier.INTENSIVE),
    (49.9, SeverityTier.INTENSIVE),
    (50, SeverityTier.MODERATE),
    (74, SeverityTier.MODERATE),
    (75, SeverityTier.MAINTENANCE),
    (100, SeverityTier.MAINTENANCE),
])
def test_tier_boundaries(score, tier):
    assert severity_for_score(score) == tier


def test_score_50_is_moderate_frequency():
    assert prescribe_for_score(50).frequency == "4-5 times per week"


def test_intensive_bundle():
    p = prescribe_for_score(30)
    assert p.duration == 20
    assert p.frequency == "Daily for 2-3 weeks"
    assert p.exercises == [
        "Hip Mobility Stretches",
        "Core Strengthening",
        "Glute Activation Exercises",
        "Balance and Stability Training",
    ]


def test_maintenance_bundle():
    data = prescribe_for_score(90).to_dict()
    assert data == {
        "tier": "maintenance",
        "exercises": ["Maintenance Stretches", "Light Mobility Work"],
        "duration": 10,
        "frequency": "2-3 times per week",
    }
