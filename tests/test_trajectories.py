import numpy as np
import pytest
from spatialmath import SE3

from rmrc.trajectories import CartesianTrajectory, JointTrajectory, MultiPointTrajectory, quintic_scaling


def test_quintic_scaling_boundaries():
    assert quintic_scaling(-1.0, 0.0, 2.0) == (0.0, 0.0, 0.0)
    assert quintic_scaling(0.0, 0.0, 2.0) == (0.0, 0.0, 0.0)
    assert quintic_scaling(2.0, 0.0, 2.0) == (1.0, 0.0, 0.0)
    assert quintic_scaling(5.0, 0.0, 2.0) == (1.0, 0.0, 0.0)


def test_quintic_peak_velocity_follows_optimal_time_scaling():
    s, sd, sdd = quintic_scaling(1.0, 0.0, 2.0)

    assert s == pytest.approx(0.5)
    assert sd == pytest.approx(15.0 / (8.0 * 2.0))
    assert sdd == pytest.approx(0.0, abs=1e-12)


def test_joint_trajectory_clamps_outside_window():
    traj = JointTrajectory([0.0, 1.0], [1.0, -1.0], 1.0, 3.0)

    pos, vel, acc = traj.state(0.0)
    np.testing.assert_allclose(pos, [0.0, 1.0])
    np.testing.assert_allclose(vel, [0.0, 0.0])

    pos, vel, acc = traj.state(10.0)
    np.testing.assert_allclose(pos, [1.0, -1.0])
    np.testing.assert_allclose(acc, [0.0, 0.0])


def test_joint_trajectory_midpoint():
    traj = JointTrajectory([0.0, 1.0], [1.0, -1.0], 0.0, 2.0)

    pos, vel, _ = traj.state(1.0)

    np.testing.assert_allclose(pos, [0.5, 0.0])
    np.testing.assert_allclose(vel, [15.0 / 16.0, -15.0 / 8.0])


def test_joint_trajectory_rejects_mismatched_endpoints():
    with pytest.raises(ValueError):
        JointTrajectory([0.0, 1.0], [1.0], 0.0, 1.0)


def test_cartesian_trajectory_interpolates_translation_and_rotation():
    start = SE3()
    end = SE3(0.4, 0.0, 0.2) * SE3.Rz(1.0)
    traj = CartesianTrajectory(start, end, 0.0, 2.0)

    pose, vel, _ = traj.state(1.0)

    np.testing.assert_allclose(pose.t, [0.2, 0.0, 0.1], atol=1e-12)
    np.testing.assert_allclose(pose.R, SE3.Rz(0.5).R, atol=1e-9)
    np.testing.assert_allclose(vel[:3], np.array([0.4, 0.0, 0.2]) * 15.0 / 16.0)
    np.testing.assert_allclose(vel[3:], [0.0, 0.0, 15.0 / 16.0], atol=1e-9)
    assert traj.distance == pytest.approx(np.hypot(0.4, 0.2))
    assert traj.angle == pytest.approx(1.0)


def test_cartesian_trajectory_reaches_end_pose():
    start = SE3(0.1, 0.2, 0.3) * SE3.Rx(0.3)
    end = SE3(-0.2, 0.0, 0.5) * SE3.Ry(-0.8)
    traj = CartesianTrajectory(start, end, 0.0, 1.0)

    pose, vel, acc = traj.state(1.5)

    np.testing.assert_allclose(pose.A, end.A, atol=1e-9)
    np.testing.assert_allclose(vel, np.zeros(6))
    np.testing.assert_allclose(acc, np.zeros(6))


def test_cartesian_trajectory_takes_shortest_rotation():
    traj = CartesianTrajectory(SE3(), SE3.Rz(1.5 * np.pi), 0.0, 1.0)

    assert traj.angle == pytest.approx(0.5 * np.pi)


def test_multi_point_trajectory_selects_active_segment():
    traj = MultiPointTrajectory([
        JointTrajectory([0.0], [1.0], 0.0, 1.0),
        JointTrajectory([1.0], [3.0], 1.0, 3.0),
    ])

    assert traj.start_time == 0.0
    assert traj.end_time == 3.0
    assert traj.waypoint_times == [1.0, 3.0]
    np.testing.assert_allclose(traj.state(-1.0)[0], [0.0])
    np.testing.assert_allclose(traj.state(1.0)[0], [1.0])
    np.testing.assert_allclose(traj.state(2.0)[0], [2.0])
    np.testing.assert_allclose(traj.state(4.0)[0], [3.0])


def test_multi_point_trajectory_needs_segments():
    with pytest.raises(ValueError):
        MultiPointTrajectory([])
