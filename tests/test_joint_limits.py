import logging

import numpy as np
import pytest

from rmrc.joint_limits import joint_limit_weighting

LIMITS = [[-1.0, 1.0]]


def test_moving_toward_limit_is_penalised():
    W = joint_limit_weighting([0.5], [1.0], LIMITS)

    # range^2 / (4 * upper * lower) = 4 / (4 * 0.5 * 1.5)
    assert W[0, 0] == pytest.approx(4.0 / 3.0)


@pytest.mark.parametrize("q, qdot", [(0.5, -1.0), (0.5, 0.0), (0.0, 1.0), (-0.7, 0.4)])
def test_no_penalty_when_moving_away_or_stationary(q, qdot):
    W = joint_limit_weighting([q], [qdot], LIMITS)

    np.testing.assert_allclose(W, np.eye(1))


def test_penalty_grows_closer_to_the_limit():
    near = joint_limit_weighting([0.9], [1.0], LIMITS)[0, 0]
    far = joint_limit_weighting([0.3], [1.0], LIMITS)[0, 0]

    assert near > far >= 1.0


def test_weighting_is_diagonal_and_at_least_one():
    limits = [[-2.0, 2.0], [-1.0, 3.0], [0.0, 1.0]]

    W = joint_limit_weighting([1.5, -0.5, 0.2], [0.1, -0.3, -0.2], limits)

    np.testing.assert_allclose(W, np.diag(np.diag(W)))
    assert np.all(np.diag(W) >= 1.0)


def test_joint_beyond_limit_is_reported_and_not_penalised(caplog):
    with caplog.at_level(logging.ERROR):
        W = joint_limit_weighting([1.2], [1.0], LIMITS)

    np.testing.assert_allclose(W, np.eye(1))
    assert "beyond its limits" in caplog.text


def test_length_mismatch_returns_identity(caplog):
    with caplog.at_level(logging.ERROR):
        W = joint_limit_weighting([0.1, 0.2], [0.0], LIMITS)

    np.testing.assert_allclose(W, np.eye(2))
