"""Manipulability Measure and Gradient for Singularity Avoidance"""

import logging

import numpy as np

from .pseudoinverse import get_inverse

logger = logging.getLogger(__name__)


def manipulability(J):
    """Yoshikawa's measure of manipulability, sqrt(det(J*J'))."""
    J = np.asarray(J, dtype=float)
    return float(np.sqrt(max(np.linalg.det(J @ J.T), 0.0)))


def manipulability_gradient(robot, J, scalar=0.5):
    """
    Gradient of manipulability with respect to the joint positions.

    Following it in the null space moves a redundant robot away from
    singular configurations without disturbing the endpoint.

    Args:
        robot: Robot model providing partial_derivative(J, joint)
        J: Task Jacobian at the current configuration (6 x n)
        scalar: Step size on the gradient, must be positive

    Returns:
        grad: Joint vector (n,). Zero if the scalar is not positive.
    """
    J = np.asarray(J, dtype=float)
    n = J.shape[1]
    grad = np.zeros(n)

    if scalar <= 0:
        logger.error("manipulability_gradient(): Scalar %s must be positive.", scalar)
        return grad

    JJt = J @ J.T
    invJ = J.T @ get_inverse(JJt)                           # Pseudoinverse of Jacobian
    mu = manipulability(J)

    # First joint doesn't affect manipulability
    for i in range(1, n):
        dJ = robot.partial_derivative(J, i)
        grad[i] = scalar * mu * np.trace(dJ @ invJ)

    return grad
