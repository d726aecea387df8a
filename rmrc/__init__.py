"""Resolved Motion Rate Control for Serial Link Robots"""

from .controller_base import SerialLinkController
from .kinematic_controller import KinematicController, pose_error
from .joint_limits import joint_limit_weighting
from .manipulability import manipulability, manipulability_gradient
from .pseudoinverse import get_inverse
from .recorder import DataRecorder
from .robot_model import ToolboxRobot, partial_derivative
from .trajectories import CartesianTrajectory, JointTrajectory, MultiPointTrajectory, quintic_scaling
from .velocity_scaling import feasibility_scale, scale_velocity_vector

__all__ = [
    'SerialLinkController',
    'KinematicController',
    'pose_error',
    'joint_limit_weighting',
    'manipulability',
    'manipulability_gradient',
    'get_inverse',
    'DataRecorder',
    'ToolboxRobot',
    'partial_derivative',
    'CartesianTrajectory',
    'JointTrajectory',
    'MultiPointTrajectory',
    'quintic_scaling',
    'feasibility_scale',
    'scale_velocity_vector'
]
