"""
Error taxonomy for the EKF-SLAM prediction core.

All errors here flag contract violations (wrong sizes, missing setup,
an unusable motion-model evaluation). They are raised where the violation
is detected and are never caught inside the filter: the caller decides
whether to halt or reset the session.
"""

import numpy as np


class SlamError(Exception):
    """Base class for all filter errors."""


class SizeMismatch(SlamError, ValueError):
    """A vector or matrix disagrees with the expected state, control or map size."""


class UninitializedContinuousState(SlamError, RuntimeError):
    """Continuous-time discretization requested before the continuous values were set."""


class MotionModelFailure(SlamError, ArithmeticError):
    """A motion model could not produce a prediction for the given inputs."""


class MapFull(SlamError):
    """No contiguous free range in the map is large enough for a new object."""


def check_vector(name, value, size):
    """Return ``value`` as a float vector, raising SizeMismatch unless it has ``size`` elements."""
    v = np.asarray(value, dtype=float)
    if v.ndim != 1 or v.shape[0] != size:
        raise SizeMismatch(f"{name}: expected vector of size {size}, got shape {v.shape}")
    return v


def check_matrix(name, value, rows, cols=None):
    """Return ``value`` as a float matrix, raising SizeMismatch unless it is rows x cols."""
    cols = rows if cols is None else cols
    m = np.asarray(value, dtype=float)
    if m.shape != (rows, cols):
        raise SizeMismatch(f"{name}: expected matrix of shape {(rows, cols)}, got {m.shape}")
    return m
