"""Joint and Cartesian Trajectory Generators"""

import numpy as np
from scipy.spatial.transform import Rotation
from spatialmath import SE3


def quintic_scaling(time, start_time, end_time):
    """
    Rest-to-rest quintic time scaling.

    Args:
        time: Query time
        start_time: Start of the trajectory
        end_time: End of the trajectory

    Returns:
        (s, sd, sdd): Path parameter in [0, 1] and its time derivatives.
            Clamped to the endpoints outside [start_time, end_time].
    """
    T = end_time - start_time
    if T <= 0 or time >= end_time:
        return 1.0, 0.0, 0.0
    if time <= start_time:
        return 0.0, 0.0, 0.0

    tau = (time - start_time) / T
    s = 10 * tau**3 - 15 * tau**4 + 6 * tau**5
    sd = (30 * tau**2 - 60 * tau**3 + 30 * tau**4) / T
    sdd = (60 * tau - 180 * tau**2 + 120 * tau**3) / T**2
    return s, sd, sdd


class JointTrajectory:
    """Quintic interpolation between two joint configurations."""

    def __init__(self, start, end, start_time, end_time):
        """
        Args:
            start: Start joint positions
            end: End joint positions
            start_time: Time at which the motion begins
            end_time: Time at which the motion ends
        """
        self.start = np.array(start, dtype=float)
        self.end = np.array(end, dtype=float)
        if self.start.shape != self.end.shape:
            raise ValueError(f"Start has {self.start.size} joints but end has {self.end.size}")
        self.start_time = float(start_time)
        self.end_time = float(end_time)

    def state(self, time):
        """Desired (position, velocity, acceleration) at the given time."""
        s, sd, sdd = quintic_scaling(time, self.start_time, self.end_time)
        delta = self.end - self.start
        return self.start + s * delta, sd * delta, sdd * delta


class CartesianTrajectory:
    """Straight-line, shortest-rotation interpolation between two poses."""

    def __init__(self, start, end, start_time, end_time):
        """
        Args:
            start: Start pose (SE3)
            end: End pose (SE3)
            start_time: Time at which the motion begins
            end_time: Time at which the motion ends
        """
        self.start = SE3(start)
        self.end = SE3(end)
        self.start_time = float(start_time)
        self.end_time = float(end_time)

        # Rotation vector from start to end, in the start frame (angle in [0, pi])
        self._R0 = Rotation.from_matrix(self.start.R)
        self._rotvec = Rotation.from_matrix(self.start.R.T @ self.end.R).as_rotvec()
        self._translation = self.end.t - self.start.t

    @property
    def angle(self):
        """Total rotation of the trajectory (rad)."""
        return float(np.linalg.norm(self._rotvec))

    @property
    def distance(self):
        """Total translation of the trajectory (m)."""
        return float(np.linalg.norm(self._translation))

    def state(self, time):
        """
        Desired state at the given time.

        Returns:
            pose: SE3
            vel: Twist [linear; angular] (6,) in the base frame
            acc: Time derivative of the twist (6,)
        """
        s, sd, sdd = quintic_scaling(time, self.start_time, self.end_time)

        R = (self._R0 * Rotation.from_rotvec(s * self._rotvec)).as_matrix()
        pose = SE3.Rt(R, self.start.t + s * self._translation, check=False)

        axis = self.start.R @ self._rotvec                 # Constant in the base frame
        vel = np.concatenate([sd * self._translation, sd * axis])
        acc = np.concatenate([sdd * self._translation, sdd * axis])
        return pose, vel, acc


class MultiPointTrajectory:
    """A sequence of contiguous trajectory segments."""

    def __init__(self, segments):
        """
        Args:
            segments: List of JointTrajectory or CartesianTrajectory objects,
                each starting when the previous one ends
        """
        if not segments:
            raise ValueError("At least one segment is required")
        self.segments = list(segments)
        self.start_time = self.segments[0].start_time
        self.end_time = self.segments[-1].end_time

    @property
    def waypoint_times(self):
        return [seg.end_time for seg in self.segments]

    def state(self, time):
        """Desired state from the segment active at the given time."""
        for seg in self.segments:
            if time < seg.end_time:
                return seg.state(time)
        return self.segments[-1].state(time)
