"""Damped Pseudoinverse via Singular Value Decomposition"""

import logging

import numpy as np

logger = logging.getLogger(__name__)

SINGULAR_VALUE_THRESHOLD = 1e-6


def get_inverse(A, W=None):
    """
    Get the (weighted) pseudoinverse of a matrix.

    Singular values at or below SINGULAR_VALUE_THRESHOLD are dropped, so the
    inverse stays bounded near a singularity.

    Args:
        A: m x n matrix
        W: Optional n x n weighting matrix (cost on each column of A)

    Returns:
        invA: n x m matrix. Zero if A and W are incompatible.
    """
    A = np.atleast_2d(np.asarray(A, dtype=float))

    if W is None:
        return _damped_inverse(A)

    W = np.atleast_2d(np.asarray(W, dtype=float))
    m, n = A.shape

    # Matrix isn't square, return zero
    if W.shape[0] != W.shape[1]:
        logger.error(
            "get_inverse(): Cannot compute the weighted inverse! "
            "Weighting matrix is %dx%d, but it must be square.", W.shape[0], W.shape[1]
        )
        return np.zeros((n, m))

    # Columns don't match rows, return zero
    if n != W.shape[0]:
        logger.error(
            "get_inverse(): Cannot compute the weighted inverse! "
            "Input matrix has %d columns and weighting matrix has %d rows, "
            "but they must be the same.", n, W.shape[0]
        )
        return np.zeros((n, m))

    invWAt = _damped_inverse(W) @ A.T
    return invWAt @ _damped_inverse(A @ invWAt)


def _damped_inverse(A):
    """Invert A through its SVD, ignoring singular directions."""
    U, s, Vt = np.linalg.svd(A, full_matrices=False)

    s_inv = np.zeros_like(s)
    mask = s > SINGULAR_VALUE_THRESHOLD
    s_inv[mask] = 1.0 / s[mask]

    return (Vt.T * s_inv) @ U.T
