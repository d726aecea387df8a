"""Common Interface for Serial Link Controllers"""

from abc import ABC, abstractmethod


class SerialLinkController(ABC):
    """
    Capabilities shared by every control strategy for a serial link robot.

    Concrete strategies (e.g. resolved motion rate control) are chosen when the
    controller is constructed and are interchangeable behind this interface.
    """

    def __init__(self, robot):
        """
        Args:
            robot: Robot model. Not owned; it must outlive the controller.
        """
        self.robot = robot
        self.n = robot.joint_count()

    @abstractmethod
    def resolve_endpoint_motion(self, endpoint_motion):
        """
        Compute the joint motion that achieves the given endpoint motion.

        Args:
            endpoint_motion: Desired endpoint twist (6,)

        Returns:
            Joint command (n,)
        """

    @abstractmethod
    def track_endpoint_trajectory(self, desired_pose, desired_vel, desired_acc):
        """Feedforward + feedback control to follow an endpoint state."""

    @abstractmethod
    def track_joint_trajectory(self, desired_pos, desired_vel, desired_acc):
        """Feedforward + feedback control to follow a joint state."""
