"""Velocity Feasibility Scaling"""

import logging

import numpy as np

logger = logging.getLogger(__name__)

VELOCITY_SAFETY_FACTOR = 0.99


def feasibility_scale(reference, velocity_limits):
    """
    Largest uniform scale s in (0, 1] that keeps the reference within limits.

    Args:
        reference: Joint velocity vector used to decide the scaling
        velocity_limits: Symmetric velocity bound for each joint

    Returns:
        s: 1.0 if every component is already feasible, or if the lengths differ
    """
    if len(reference) != len(velocity_limits):
        logger.error(
            "feasibility_scale(): Reference has %d elements but there are %d velocity limits. "
            "No scaling applied.", len(reference), len(velocity_limits)
        )
        return 1.0

    s = 1.0
    for ref, vmax in zip(np.asarray(reference, dtype=float), np.asarray(velocity_limits, dtype=float)):
        speed = abs(ref)
        if speed > vmax and vmax / speed < s:
            s = VELOCITY_SAFETY_FACTOR * vmax / speed
    return s


def scale_velocity_vector(vec, ref, velocity_limits):
    """
    Scale a velocity vector in place so that the reference stays feasible.

    The same factor is applied to every joint so the direction of motion is kept.
    The reference may differ from the vector being scaled, e.g. a null space
    vector scaled against the combined command.

    Args:
        vec: Float array to scale (modified in place)
        ref: Reference velocity vector
        velocity_limits: Symmetric velocity bound for each joint

    Returns:
        True if the vector was scaled, False if the inputs have different lengths
    """
    if len(vec) != len(ref) or len(ref) != len(velocity_limits):
        logger.error(
            "scale_velocity_vector(): Input vectors are not the same length. "
            "vec: %d ref: %d limits: %d", len(vec), len(ref), len(velocity_limits)
        )
        return False

    vec *= feasibility_scale(ref, velocity_limits)
    return True
