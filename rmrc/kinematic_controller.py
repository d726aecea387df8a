"""Resolved Motion Rate Control (RMRC) Implementation"""

import logging

import numpy as np
from scipy.spatial.transform import Rotation
from spatialmath import SE3

from .controller_base import SerialLinkController
from .joint_limits import joint_limit_weighting
from .manipulability import manipulability, manipulability_gradient
from .pseudoinverse import get_inverse
from .trajectories import CartesianTrajectory, JointTrajectory, MultiPointTrajectory
from .velocity_scaling import scale_velocity_vector

logger = logging.getLogger(__name__)

TASK_DIM = 6


def pose_error(desired, actual):
    """
    Error between two poses for feedback control.

    Args:
        desired: Desired pose (SE3)
        actual: Actual pose (SE3)

    Returns:
        error: [translation error; vector part of the quaternion for desired*inv(actual)]
    """
    error = np.zeros(TASK_DIM)
    error[:3] = desired.t - actual.t

    quat = Rotation.from_matrix(desired.R @ actual.R.T).as_quat()   # [x, y, z, w]
    if quat[3] < 0:
        quat = -quat                                                  # Shortest rotation
    error[3:] = quat[:3]
    return error


class KinematicController(SerialLinkController):
    """Velocity control of a serial link robot along joint or Cartesian trajectories."""

    get_inverse = staticmethod(get_inverse)
    pose_error = staticmethod(pose_error)

    def __init__(self, robot, gain=1.0, max_linear_speed=1.0, max_angular_speed=10.5,
                 manipulability_scalar=0.5, limit_margin=0.01, min_trajectory_time=1.0):
        """
        Initialize the controller.

        Args:
            robot: Robot model (e.g. ToolboxRobot)
            gain: Proportional gain on the pose and joint position errors
            max_linear_speed: Speed cap for Cartesian trajectories (m/s)
            max_angular_speed: Angular speed cap for Cartesian trajectories (rad/s)
            manipulability_scalar: Step size for singularity avoidance on redundant robots
            limit_margin: Distance inside a position limit used when clamping joint targets
            min_trajectory_time: Shortest duration of a joint trajectory (s)
        """
        super().__init__(robot)

        if gain < 0:
            raise ValueError(f"Gain cannot be negative, got {gain}")
        if max_linear_speed <= 0 or max_angular_speed <= 0:
            raise ValueError("Speed limits must be positive")
        if manipulability_scalar <= 0:
            raise ValueError("Manipulability scalar must be positive")

        self.k = float(gain)
        self.max_linear_speed = max_linear_speed
        self.max_angular_speed = max_angular_speed
        self.manipulability_scalar = manipulability_scalar
        self.limit_margin = limit_margin
        self.min_trajectory_time = min_trajectory_time

        self.position_limits = np.asarray(robot.position_limits(), dtype=float)
        self.velocity_limits = np.asarray(robot.velocity_limits(), dtype=float)
        if self.position_limits.shape != (self.n, 2):
            raise ValueError(f"Expected position limits of shape ({self.n}, 2), got {self.position_limits.shape}")
        if self.velocity_limits.shape != (self.n,):
            raise ValueError(f"Expected {self.n} velocity limits, got {self.velocity_limits.size}")

        self.gain_format = np.eye(TASK_DIM)
        self._redundant_task = None

        # Hold the current state until a target is given
        q = np.asarray(robot.joint_positions(), dtype=float)
        pose = robot.endpoint_pose()
        self.joint_trajectory = JointTrajectory(q, q, 0.0, 1.0)
        self.cartesian_trajectory = CartesianTrajectory(pose, pose, 0.0, 1.0)

    @property
    def gain(self):
        return self.k

    # -------------------------------------------------------------------------
    # Set functions
    # -------------------------------------------------------------------------

    def set_joint_target(self, target):
        """
        Move the joints to a target configuration.

        The duration uses the optimal time scaling for a quintic polynomial so no
        joint exceeds its velocity limit. See:
        Angeles, J. (2002). Fundamentals of robotic mechanical systems (Vol. 2).
        New York: Springer-Verlag.

        Args:
            target: Joint positions (n,)

        Returns:
            True if the trajectory was set
        """
        target = np.array(target, dtype=float).ravel()
        if target.size != self.n:
            logger.error(
                "set_joint_target(): Input vector had %d elements, but the robot has %d joints. "
                "Joint target has not been set.", target.size, self.n
            )
            return False

        start = np.asarray(self.robot.joint_positions(), dtype=float)
        target = self._clamp_to_limits(target)
        min_time = self._min_joint_time(start, target)
        if np.isinf(min_time):
            logger.error(
                "set_joint_target(): A joint with a zero velocity limit cannot move. "
                "Joint target has not been set."
            )
            return False
        end_time = max(self.min_trajectory_time, min_time)

        self.joint_trajectory = JointTrajectory(start, target, 0.0, end_time)
        return True

    def set_joint_targets(self, targets, times):
        """
        Move the joints through several waypoints.

        Each segment is a rest-to-rest quintic. A segment that would violate the
        velocity limits is lengthened, which delays every later waypoint.

        Args:
            targets: List of joint configurations
            times: Arrival time for each waypoint, strictly increasing and positive

        Returns:
            True if the trajectory was set
        """
        if not self._valid_waypoint_times(targets, times, "set_joint_targets"):
            return False

        targets = [np.array(t, dtype=float).ravel() for t in targets]
        for idx, target in enumerate(targets):
            if target.size != self.n:
                logger.error(
                    "set_joint_targets(): Waypoint %d had %d elements, but the robot has %d joints.",
                    idx, target.size, self.n
                )
                return False

        segments = []
        start = np.asarray(self.robot.joint_positions(), dtype=float)
        start_time = 0.0
        prev_request = 0.0
        for target, request in zip(targets, times):
            target = self._clamp_to_limits(target)
            duration = request - prev_request
            min_time = self._min_joint_time(start, target)
            if np.isinf(min_time):
                logger.error(
                    "set_joint_targets(): Waypoint ending at %.3f s moves a joint with a zero velocity limit.",
                    request
                )
                return False
            if min_time > duration:
                logger.warning(
                    "set_joint_targets(): Segment ending at %.3f s exceeds the joint velocity limits. "
                    "Increasing the segment time from %.3f s to %.3f s.", request, duration, min_time
                )
                duration = min_time
            segments.append(JointTrajectory(start, target, start_time, start_time + duration))
            start, start_time, prev_request = target, start_time + duration, request

        self.joint_trajectory = MultiPointTrajectory(segments)
        return True

    def set_feedback_gain(self, gain):
        """Set the proportional gain for the feedback control."""
        if gain < 0:
            logger.error("set_feedback_gain(): Value cannot be negative. Input value: %s", gain)
            return False
        self.k = float(gain)
        return True

    def set_cartesian_gain_format(self, gain_format):
        """
        Set the structure of the Cartesian feedback gain (scaled by the gain).

        Args:
            gain_format: 6x6 symmetric, positive-definite matrix

        Returns:
            True if the format was set
        """
        F = np.asarray(gain_format, dtype=float)
        if F.shape != (TASK_DIM, TASK_DIM):
            logger.error("set_cartesian_gain_format(): Matrix must be 6x6, got %s.", F.shape)
            return False
        if np.linalg.norm(F - F.T) > 1e-4:
            logger.error("set_cartesian_gain_format(): Matrix does not appear to be symmetric.")
            return False
        if np.min(np.linalg.eigvalsh(F)) <= 0:
            logger.error("set_cartesian_gain_format(): Matrix is not positive definite.")
            return False
        self.gain_format = F.copy()
        return True

    def set_redundant_task(self, task):
        """
        Joint velocity to project into the null space on the next Cartesian control call.

        Replaces the manipulability gradient once, then is cleared.
        """
        task = np.array(task, dtype=float).ravel()
        if task.size != self.n:
            logger.error(
                "set_redundant_task(): This robot has %d joints but the input argument had %d elements.",
                self.n, task.size
            )
            self._redundant_task = None
            return False
        self._redundant_task = task
        return True

    def set_target_pose(self, target, time):
        """
        Move the endpoint to a target pose.

        Args:
            target: Desired endpoint pose (SE3)
            time: Requested duration (s). Lengthened if the motion is too fast.

        Returns:
            True if the trajectory was set
        """
        if time <= 0:
            logger.error("set_target_pose(): Time must be greater than zero. Input time: %s", time)
            return False

        current = self.robot.endpoint_pose()
        target = SE3(target)
        time = self._feasible_pose_time(current, target, time, "set_target_pose")

        self.cartesian_trajectory = CartesianTrajectory(current, target, 0.0, time)
        return True

    def set_target_poses(self, targets, times):
        """
        Move the endpoint through several poses.

        Args:
            targets: List of SE3 poses
            times: Arrival time for each pose, strictly increasing and positive

        Returns:
            True if the trajectory was set
        """
        if not self._valid_waypoint_times(targets, times, "set_target_poses"):
            return False

        segments = []
        start = self.robot.endpoint_pose()
        start_time = 0.0
        prev_request = 0.0
        for target, request in zip(targets, times):
            target = SE3(target)
            duration = self._feasible_pose_time(start, target, request - prev_request, "set_target_poses")
            segments.append(CartesianTrajectory(start, target, start_time, start_time + duration))
            start, start_time, prev_request = target, start_time + duration, request

        self.cartesian_trajectory = MultiPointTrajectory(segments)
        return True

    # -------------------------------------------------------------------------
    # Control functions
    # -------------------------------------------------------------------------

    def cartesian_control(self, time):
        """Joint velocity to track the Cartesian trajectory at the given time."""
        pose, vel, acc = self.cartesian_trajectory.state(time)
        return self.track_endpoint_trajectory(pose, vel, acc)

    def joint_control(self, time):
        """Joint velocity to track the joint trajectory at the given time."""
        pos, vel, acc = self.joint_trajectory.state(time)
        return self.track_joint_trajectory(pos, vel, acc)

    def track_endpoint_trajectory(self, desired_pose, desired_vel, desired_acc):
        feedback = self.k * self.gain_format @ pose_error(desired_pose, self.robot.endpoint_pose())
        return self.resolve_endpoint_motion(np.asarray(desired_vel, dtype=float) + feedback)

    def track_joint_trajectory(self, desired_pos, desired_vel, desired_acc):
        desired_pos = np.asarray(desired_pos, dtype=float)
        desired_vel = np.asarray(desired_vel, dtype=float)
        if desired_pos.size != self.n or desired_vel.size != self.n:
            logger.error(
                "track_joint_trajectory(): Robot has %d joints but the desired state had %d positions "
                "and %d velocities.", self.n, desired_pos.size, desired_vel.size
            )
            return np.zeros(self.n)

        q = np.asarray(self.robot.joint_positions(), dtype=float)
        return desired_vel + self.k * (desired_pos - q)       # Feedforward + feedback

    def resolve_endpoint_motion(self, endpoint_motion):
        """
        Joint velocity for a desired endpoint twist.

        The range space solution is scaled for feasibility on its own. On a
        redundant robot a secondary task is then added in the null space and
        only that part is scaled back, so the endpoint task is never degraded.
        """
        xdot = np.asarray(endpoint_motion, dtype=float).ravel()
        if xdot.size != TASK_DIM:
            logger.error("resolve_endpoint_motion(): Expected a 6D twist, got %d elements.", xdot.size)
            return np.zeros(self.n)

        # Fresh snapshot of the robot state
        J = np.asarray(self.robot.jacobian(), dtype=float)
        q = np.asarray(self.robot.joint_positions(), dtype=float)
        qdot = np.array([self.robot.joint_velocity(i) for i in range(self.n)])

        W = joint_limit_weighting(q, qdot, self.position_limits)
        invJ = get_inverse(J, W)                             # Weighted pseudoinverse

        qdot_R = invJ @ xdot                                 # Range space vector
        scale_velocity_vector(qdot_R, qdot_R, self.velocity_limits)

        task = self._redundant_task
        self._redundant_task = None

        if self.n <= TASK_DIM:
            return qdot_R                                    # No redundancy available

        if task is None:
            task = manipulability_gradient(self.robot, J, self.manipulability_scalar)

        N = np.eye(self.n) - invJ @ J                        # Null space projection
        qdot_N = N @ get_inverse(W) @ task

        scale_velocity_vector(qdot_N, qdot_R + qdot_N, self.velocity_limits)
        return qdot_R + qdot_N

    def manipulability(self):
        """Manipulability of the current configuration."""
        return manipulability(self.robot.jacobian())

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _clamp_to_limits(self, target):
        """Keep a joint target just inside the position limits."""
        clamped = target.copy()
        for i in range(self.n):
            lo, hi = self.position_limits[i]
            if clamped[i] <= lo:
                clamped[i] = lo + self.limit_margin
            elif clamped[i] >= hi:
                clamped[i] = hi - self.limit_margin
        if not np.array_equal(clamped, target):
            logger.warning("Joint target was outside the position limits and has been clamped.")
        return clamped

    def _min_joint_time(self, start, target):
        """Shortest quintic duration that keeps every joint under its speed limit."""
        dq = np.abs(target - start)
        moving = dq > 0                                     # Stationary joints never limit the time
        if np.any(self.velocity_limits[moving] <= 0):
            return np.inf
        return float(np.max(15 * dq[moving] / (8 * self.velocity_limits[moving]), initial=0.0))

    def _feasible_pose_time(self, current, target, time, caller):
        """Lengthen a Cartesian motion so it respects the speed caps."""
        distance = float(np.linalg.norm(target.t - current.t))
        if distance / time > self.max_linear_speed:
            logger.warning(
                "%s(): Linear velocity exceeds %s m/s! Increasing the trajectory time...",
                caller, self.max_linear_speed
            )
            time = distance / self.max_linear_speed

        angle = float(np.linalg.norm(Rotation.from_matrix(current.R.T @ target.R).as_rotvec()))
        if angle / time > self.max_angular_speed:
            logger.warning(
                "%s(): Angular velocity exceeds %.1f RPM! Increasing the trajectory time...",
                caller, self.max_angular_speed * 30 / np.pi
            )
            time = angle / self.max_angular_speed

        return time

    def _valid_waypoint_times(self, targets, times, caller):
        if len(targets) == 0 or len(targets) != len(times):
            logger.error(
                "%s(): Received %d waypoints and %d times. They must be the same, non-zero length.",
                caller, len(targets), len(times)
            )
            return False
        times = np.asarray(times, dtype=float)
        if times[0] <= 0 or np.any(np.diff(times) <= 0):
            logger.error("%s(): Times must be positive and strictly increasing.", caller)
            return False
        return True
