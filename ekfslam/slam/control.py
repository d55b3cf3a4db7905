"""
Discrete-time control input with continuous-time conversion.

A Control is a Gaussian with a time interval ``dt``. The mean is the
deterministic part of the control, the covariance encodes the random
perturbation driving the motion.

Controls may also be specified in continuous time, as a rate ``x_ct`` and a
white-noise spectral density ``P_ct``. Integrating over ``dt``:

    x  = x_ct * dt      (deterministic rate => mean is linear in time)
    P  = P_ct * dt      (white noise => variance is linear in time,
                         standard deviation grows with sqrt(dt))

Examples
--------
>>> import numpy as np
>>> from ekfslam.slam.control import Control
>>> u = Control(2)
>>> u.set_continuous_mean([1.0, 0.1])
>>> u.set_continuous_covariance(np.diag([0.04, 0.01]))
>>> u.discretize_all(0.5)
>>> u.x
array([0.5 , 0.05])
>>> u.dt
0.5
"""

import numpy as np

from ekfslam.slam.errors import (
    SizeMismatch,
    UninitializedContinuousState,
    check_matrix,
    check_vector,
)
from ekfslam.slam.gaussian import Gaussian


class Control(Gaussian):
    """
    Gaussian control vector tagged with its time step.

    Parameters
    ----------
    size : int or Gaussian
        Control dimension, or a Gaussian whose mean and covariance are copied.
    dt : float, optional
        Time interval of the control (default: 1.0).

    Attributes
    ----------
    dt : float
        Time interval the control applies over.
    x_ct : ndarray or None
        Continuous-time mean, None until set.
    P_ct : ndarray or None
        Continuous-time covariance, None until set.
    """

    def __init__(self, size, dt=1.0):
        if isinstance(size, Gaussian):
            super().__init__(size.size, size.x, size.P)
        else:
            super().__init__(size)
        self.dt = float(dt)
        self.x_ct = None
        self.P_ct = None

    def set_continuous_covariance(self, P_ct):
        self.P_ct = check_matrix("continuous covariance", P_ct, self.size).copy()

    def set_continuous_mean(self, x_ct):
        self.x_ct = check_vector("continuous mean", x_ct, self.size).copy()

    def discretize_covariance(self, dt, P_ct=None):
        """
        Discrete perturbation from the continuous-time values, P = P_ct * dt.

        Parameters
        ----------
        dt : float
            Time interval to integrate over. ``self.dt`` is left unchanged.
        P_ct : array_like, optional
            Continuous covariance to store first. If omitted, the previously
            stored one is used.

        Raises
        ------
        UninitializedContinuousState
            If no continuous covariance is available.
        SizeMismatch
            If ``P_ct`` is not size x size.
        """
        if P_ct is not None:
            self.set_continuous_covariance(P_ct)
        if self.P_ct is None:
            raise UninitializedContinuousState("continuous-time covariance not yet initialized")
        self.P = self.P_ct * dt

    def discretize_all(self, dt, source=None):
        """
        Discrete control and perturbation from the continuous-time values.

        Sets ``x = x_ct * dt``, ``P = P_ct * dt`` and ``self.dt = dt``.

        Parameters
        ----------
        dt : float
            Time interval to integrate over.
        source : Gaussian, optional
            Continuous-time Gaussian (rate mean and spectral density) to store
            in the continuous fields first.

        Raises
        ------
        UninitializedContinuousState
            If the continuous mean or covariance was never set.
        SizeMismatch
            If ``source`` has a different size.
        """
        if source is not None:
            if source.size != self.size:
                raise SizeMismatch(
                    f"continuous source: expected size {self.size}, got {source.size}"
                )
            self.set_continuous_covariance(source.P)
            self.set_continuous_mean(source.x)
        if self.x_ct is None or self.P_ct is None:
            raise UninitializedContinuousState("continuous-time values not yet initialized")
        self.x = self.x_ct * dt
        self.P = self.P_ct * dt
        self.dt = float(dt)

    def assign(self, other):
        """Copy mean, covariance and dt from another control of the same size."""
        if other.size != self.size:
            raise SizeMismatch(f"control: expected size {self.size}, got {other.size}")
        self.x = other.x
        self.P = other.P
        self.dt = float(getattr(other, "dt", self.dt))

    def __repr__(self):
        return (
            f"Control(size={self.size}, dt={self.dt}, "
            f"x={np.array2string(self.x, precision=4)})"
        )
