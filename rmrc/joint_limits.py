"""Joint Limit Avoidance Weighting"""

import logging

import numpy as np

logger = logging.getLogger(__name__)


def joint_limit_weighting(q, qdot, position_limits):
    """
    Weighting matrix that resists motion toward the joint limits.

    Chan, T. F., & Dubey, R. V. (1995). A weighted least-norm solution based scheme
    for avoiding joint limits for redundant joint manipulators.
    IEEE Transactions on Robotics and Automation, 11(2), 286-292.

    The matrix holds the penalty itself (cost >= 1), not its reciprocal. It is
    inverted once where it is used, inside the weighted pseudoinverse.

    Args:
        q: Joint positions (n,)
        qdot: Joint velocities (n,)
        position_limits: Array of (lower, upper) pairs, shape (n, 2)

    Returns:
        W: n x n diagonal cost matrix. Identity if the inputs disagree in length.
    """
    q = np.asarray(q, dtype=float)
    qdot = np.asarray(qdot, dtype=float)
    limits = np.asarray(position_limits, dtype=float).reshape(-1, 2)
    n = len(q)

    W = np.eye(n)

    if len(qdot) != n or len(limits) != n:
        logger.error(
            "joint_limit_weighting(): Received %d positions, %d velocities and %d limits. "
            "No weighting applied.", n, len(qdot), len(limits)
        )
        return W

    for i in range(n):
        lo, hi = limits[i]
        upper = hi - q[i]                                   # Distance to upper limit
        lower = q[i] - lo                                   # Distance to lower limit
        span = hi - lo

        if upper <= 0 or lower <= 0:
            logger.error(
                "joint_limit_weighting(): Joint %d is at or beyond its limits. "
                "qMin: %f q: %f qMax: %f", i, lo, q[i], hi
            )
            continue

        # Partial derivative of the penalty function
        dpdq = span**2 * (2 * q[i] - hi - lo) / (4 * upper**2 * lower**2)

        # Moving toward a limit
        if dpdq * qdot[i] > 0:
            penalty = span**2 / (4 * upper * lower)

            if penalty < 1:
                logger.error(
                    "joint_limit_weighting(): Penalty function for joint %d is less than 1. "
                    "qMin: %f q: %f qMax: %f", i, lo, q[i], hi
                )
                penalty = 1.0

            W[i, i] = penalty

    return W
