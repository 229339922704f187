import pytest

from _poses import (
    build_hinge_pose,
    build_plank_pose,
    build_quadruped_pose,
    build_standing_pose,
)


@pytest.fixture
def hinge_pose():
    return build_hinge_pose()


@pytest.fixture
def plank_pose():
    return build_plank_pose()


@pytest.fixture
def standing_pose():
    return build_standing_pose()


@pytest.fixture
def quadruped_pose():
    return build_quadruped_pose()
