import numpy as np
import pytest
import roboticstoolbox as rtb
from spatialmath import SE3

from rmrc.robot_model import ToolboxRobot, partial_derivative


class FakeRobot:
    """Robot model with a fixed Jacobian and pose, for exercising the controller."""

    def __init__(self, n, position_limits=None, velocity_limits=None, jacobian=None, pose=None):
        self.n = n
        self.q = np.zeros(n)
        self.qd = np.zeros(n)
        self.plim = np.tile([-1.0, 1.0], (n, 1)) if position_limits is None else np.asarray(position_limits, dtype=float)
        self.vlim = np.ones(n) if velocity_limits is None else np.asarray(velocity_limits, dtype=float)
        if jacobian is None:
            jacobian = np.eye(6, max(n, 6))[:, :n]
        self.J = np.asarray(jacobian, dtype=float)
        self.pose = SE3() if pose is None else pose

    def joint_count(self):
        return self.n

    def joint_position(self, i):
        return float(self.q[i])

    def joint_positions(self):
        return self.q.copy()

    def joint_velocity(self, i):
        return float(self.qd[i])

    def position_limits(self):
        return self.plim.copy()

    def velocity_limits(self):
        return self.vlim.copy()

    def jacobian(self):
        return self.J.copy()

    def partial_derivative(self, J, joint):
        return partial_derivative(J, joint)

    def endpoint_pose(self):
        return self.pose


@pytest.fixture
def single_joint_robot():
    return FakeRobot(1)


@pytest.fixture
def six_joint_robot():
    return FakeRobot(6)


@pytest.fixture
def redundant_robot():
    J = np.hstack([np.eye(6), np.eye(6)[:, :1]])
    return FakeRobot(7, jacobian=J)


@pytest.fixture
def panda():
    robot = ToolboxRobot(rtb.models.DH.Panda(), velocity_limits=2.0)
    robot.update_state(np.array([0.0, -0.3, 0.0, -2.2, 0.0, 2.0, 0.79]))
    return robot
