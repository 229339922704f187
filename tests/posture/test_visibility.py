"""
Tests for the visibility validator and the too-close heuristic.
"""

import pytest

from posture_service.models import (
    REQUIRED_JOINTS,
    check_full_body_visibility,
    check_joint_visibility,
    is_too_close,
    visible_keypoints,
)
from _poses import kp, replace


class TestJointVisibility:

    def test_all_required_present(self, hinge_pose):
        result = check_joint_visibility(hinge_pose)
        assert result.all_visible is True
        assert result.missing_joints == []
        assert result.too_close is None

    @pytest.mark.parametrize("joint", REQUIRED_JOINTS)
    def test_removed_joint_is_reported(self, hinge_pose, joint):
        pose = [p for p in hinge_pose if p.name != joint]
        result = check_joint_visibility(pose)
        assert result.all_visible is False
        assert result.missing_joints == [joint]

    @pytest.mark.parametrize("joint", REQUIRED_JOINTS)
    def test_low_confidence_joint_is_reported(self, hinge_pose, joint):
        pose = replace(hinge_pose, joint, score=0.3)
        assert check_joint_visibility(pose).missing_joints == [joint]

    def test_threshold_is_strict(self, hinge_pose):
        pose = replace(hinge_pose, "left_knee", score=0.45)
        assert check_joint_visibility(pose, threshold=0.45).missing_joints == ["left_knee"]

        pose = replace(hinge_pose, "left_knee", score=0.46)
        assert check_joint_visibility(pose, threshold=0.45).all_visible

    def test_missing_joints_follow_required_order(self, hinge_pose):
        pose = [p for p in hinge_pose if p.name not in ("right_ankle", "left_shoulder", "left_knee")]
        result = check_joint_visibility(pose)
        assert result.missing_joints == ["left_shoulder", "left_knee", "right_ankle"]

    @pytest.mark.parametrize("keypoints", [None, []])
    def test_no_pose_misses_everything(self, keypoints):
        result = check_joint_visibility(keypoints)
        assert result.all_visible is False
        assert result.missing_joints == REQUIRED_JOINTS

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_joint_is_not_visible(self, hinge_pose, bad):
        pose = replace(hinge_pose, "left_knee", x=bad)
        result = check_joint_visibility(pose)
        assert result.all_visible is False
        assert result.missing_joints == ["left_knee"]

        pose = replace(hinge_pose, "right_ankle", y=bad)
        assert check_joint_visibility(pose).missing_joints == ["right_ankle"]

    def test_custom_required_set(self):
        result = check_joint_visibility([kp("nose", 1, 1)], required=["nose", "left_ear"])
        assert result.missing_joints == ["left_ear"]


class TestTooClose:

    def test_short_torso_is_too_close(self, hinge_pose):
        # shoulder and hip midlines are 50px apart
        assert is_too_close(hinge_pose, 100.0) is True

    def test_standing_far_enough(self, standing_pose):
        assert is_too_close(standing_pose, 100.0) is False

    def test_full_body_check_combines_both(self, hinge_pose, standing_pose):
        close = check_full_body_visibility(hinge_pose)
        assert close.all_visible is True
        assert close.too_close is True
        assert close.usable is False

        far = check_full_body_visibility(standing_pose)
        assert far.usable is True

    def test_full_body_threshold_is_stricter(self, standing_pose):
        pose = replace(standing_pose, "right_hip", score=0.48)
        assert check_joint_visibility(pose).all_visible
        assert check_full_body_visibility(pose).missing_joints == ["right_hip"]


def test_visible_keypoints_filters_by_confidence_and_coordinates():
    kps = [
        kp("nose", 1, 1, 0.9),
        kp("left_eye", 1, 1, 0.2),
        kp("right_eye", 1, 1, None),
        kp("left_ear", float("nan"), 1, 0.9),
    ]
    assert [p.name for p in visible_keypoints(kps)] == ["nose"]
