"""Robot Model Adapter for the Robotics Toolbox"""

import logging

import numpy as np

logger = logging.getLogger(__name__)


def partial_derivative(J, joint):
    """
    Partial derivative of a base-frame Jacobian with respect to one joint.

    Valid for a serial chain of revolute joints, where each column of J is
    [linear velocity; angular velocity] of the endpoint for that joint.

    Args:
        J: Geometric Jacobian (6 x n)
        joint: Index of the joint to differentiate with respect to

    Returns:
        dJ: 6 x n matrix. Zero if the joint index is out of range.
    """
    J = np.asarray(J, dtype=float)
    n = J.shape[1]
    dJ = np.zeros((6, n))

    if not 0 <= joint < n:
        logger.error(
            "partial_derivative(): Joint index %s is out of range for a Jacobian with %d columns.",
            joint, n
        )
        return dJ

    w_j = J[3:, joint]
    for i in range(n):
        if joint <= i:
            dJ[:3, i] = np.cross(w_j, J[:3, i])
            dJ[3:, i] = np.cross(w_j, J[3:, i])
        else:
            dJ[:3, i] = np.cross(J[3:, i], J[:3, joint])   # Angular part is zero

    return dJ


class ToolboxRobot:
    """Exposes a Robotics Toolbox robot through the interface the controllers use."""

    def __init__(self, robot, velocity_limits, position_limits=None):
        """
        Initialize the adapter.

        Args:
            robot: roboticstoolbox robot (e.g. rtb.models.DH.Panda())
            velocity_limits: Maximum joint speed for each joint (rad/s)
            position_limits: Optional (n, 2) array of (lower, upper) pairs.
                Defaults to the robot's qlim.
        """
        self.robot = robot
        self.n = robot.n

        vlim = np.asarray(velocity_limits, dtype=float).ravel()
        if vlim.size == 1:
            vlim = np.full(self.n, vlim.item())
        if vlim.size != self.n:
            raise ValueError(f"Expected {self.n} velocity limits, got {vlim.size}")
        if np.any(vlim <= 0):
            raise ValueError("Velocity limits must be positive")

        if position_limits is None:
            plim = np.asarray(robot.qlim, dtype=float).T       # Toolbox stores qlim as 2 x n
        else:
            plim = np.asarray(position_limits, dtype=float)
        if plim.shape != (self.n, 2):
            raise ValueError(f"Expected position limits of shape ({self.n}, 2), got {plim.shape}")
        if np.any(plim[:, 0] >= plim[:, 1]):
            raise ValueError("Lower position limits must be below upper limits")

        self._vlim = vlim
        self._plim = plim

    def joint_count(self):
        return self.n

    def joint_position(self, i):
        return float(self.robot.q[i])

    def joint_positions(self):
        return np.array(self.robot.q, dtype=float)

    def joint_velocity(self, i):
        return float(self.robot.qd[i])

    def joint_velocities(self):
        return np.array(self.robot.qd, dtype=float)

    def position_limits(self):
        return self._plim.copy()

    def velocity_limits(self):
        return self._vlim.copy()

    def jacobian(self):
        """Base-frame Jacobian at the current configuration."""
        return np.asarray(self.robot.jacob0(self.robot.q), dtype=float)

    def partial_derivative(self, J, joint):
        return partial_derivative(J, joint)

    def endpoint_pose(self):
        """Current end-effector pose as an SE3."""
        return self.robot.fkine(self.robot.q)

    def update_state(self, q, qdot=None):
        """
        Set the joint state of the underlying robot.

        Args:
            q: Joint positions
            qdot: Optional joint velocities (zero if omitted)

        Returns:
            True if the state was updated
        """
        q = np.asarray(q, dtype=float)
        qdot = np.zeros(self.n) if qdot is None else np.asarray(qdot, dtype=float)

        if q.size != self.n or qdot.size != self.n:
            logger.error(
                "update_state(): Robot has %d joints but received %d positions and %d velocities.",
                self.n, q.size, qdot.size
            )
            return False

        self.robot.q = q.copy()
        self.robot.qd = qdot.copy()
        return True
