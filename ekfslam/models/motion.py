#!/usr/bin/env python3
"""
Concrete motion models (robot kinematic variants).

Each model implements ``MotionModel.predict(x, u, dt)`` and returns the new
state with its Jacobians wrt state and control.

HolonomicMotionModel
    State of any size n, control of the same size, integrated linearly:
        x' = x + u Δt

DifferentialDriveMotionModel (velocity model, simplified for small Δt)
    State [x, y, θ], control [v, ω]:
        x' = x + v cos(θ) Δt
        y' = y + v sin(θ) Δt
        θ' = θ + ω Δt

OdometryMotionModel
    State [x, y, θ], control [dx, dy, dθ] in the robot frame (Δt unused):
        x' = x + dx cos(θ) - dy sin(θ)
        y' = y + dx sin(θ) + dy cos(θ)
        θ' = θ + dθ

References
----------
.. [1] Thrun, S., Fox, D., & Burgard, W. (2005). Probabilistic Robotics.
       MIT Press. Chapter 5: Robot Motion.
"""

import numpy as np

from ekfslam.slam.errors import MotionModelFailure
from ekfslam.slam.motion import MotionModel


def wrap_angle(theta):
    """Wrap an angle to [-π, π]."""
    return (theta + np.pi) % (2 * np.pi) - np.pi


def _require_finite(model, x, u, dt):
    if not (np.all(np.isfinite(x)) and np.all(np.isfinite(u)) and np.isfinite(dt)):
        raise MotionModelFailure(
            f"{type(model).__name__}: non-finite input x={x}, u={u}, dt={dt}"
        )


class HolonomicMotionModel(MotionModel):
    """
    Linear integrator, x' = x + u Δt.

    Parameters
    ----------
    size : int
        State and control dimension.
    """

    def __init__(self, size):
        self.size_state = int(size)
        self.size_control = int(size)

    def predict(self, x, u, dt):
        _require_finite(self, x, u, dt)
        n = self.size_state
        xnew = x + u * dt
        return xnew, np.eye(n), dt * np.eye(n)


class DifferentialDriveMotionModel(MotionModel):
    """
    Velocity motion model for a planar differential-drive robot.

    Jacobian wrt state G = ∂g/∂x:
        [[1, 0, -v Δt sin(θ)],
         [0, 1,  v Δt cos(θ)],
         [0, 0,  1          ]]

    Jacobian wrt control V = ∂g/∂u:
        [[Δt cos(θ), 0 ],
         [Δt sin(θ), 0 ],
         [0,         Δt]]

    Notes
    -----
    - Orientation is wrapped to [-π, π]
    - Control perturbation is expressed on (v, ω); map it to the state with
      Q = V M V^T
    """

    size_state = 3
    size_control = 2

    def predict(self, x, u, dt):
        _require_finite(self, x, u, dt)
        theta = x[2]
        v, omega = u
        c, s = np.cos(theta), np.sin(theta)

        xnew = np.array(
            [
                x[0] + v * c * dt,
                x[1] + v * s * dt,
                wrap_angle(theta + omega * dt),
            ]
        )

        XNEW_x = np.identity(3)
        XNEW_x[0][2] = -v * dt * s
        XNEW_x[1][2] = v * dt * c

        XNEW_u = np.zeros((3, 2))
        XNEW_u[0][0] = dt * c
        XNEW_u[1][0] = dt * s
        XNEW_u[2][1] = dt
        return xnew, XNEW_x, XNEW_u


class OdometryMotionModel(MotionModel):
    """
    Planar odometry-increment model.

    The control is the pose increment measured by the wheel encoders over the
    step, expressed in the robot frame, so ``dt`` does not enter the
    prediction. Control covariances are usually built from continuous
    rates with ``Control.discretize_covariance(dt)``.
    """

    size_state = 3
    size_control = 3

    def predict(self, x, u, dt):
        _require_finite(self, x, u, dt)
        theta = x[2]
        dx, dy, dtheta = u
        c, s = np.cos(theta), np.sin(theta)

        xnew = np.array(
            [
                x[0] + dx * c - dy * s,
                x[1] + dx * s + dy * c,
                wrap_angle(theta + dtheta),
            ]
        )

        XNEW_x = np.identity(3)
        XNEW_x[0][2] = -dx * s - dy * c
        XNEW_x[1][2] = dx * c - dy * s

        XNEW_u = np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])
        return xnew, XNEW_x, XNEW_u


MOTION_MODELS = {
    "holonomic": HolonomicMotionModel,
    "differential_drive": DifferentialDriveMotionModel,
    "odometry": OdometryMotionModel,
}
