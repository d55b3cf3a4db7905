#!/usr/bin/env python3
"""
Robot: EKF-SLAM prediction (time update) over the shared map state.

The robot pose is not an isolated estimate but a slice of the map's global
mean vector and covariance matrix. A prediction step therefore updates the
robot's own block and its cross-covariances with every other map object,
leaving the rest of the map untouched.

Mathematical Foundation
-----------------------
With the robot block ``r`` and the remaining map states ``o``:

    x_r   <- f(x_r, u, dt)
    P_rr  <- F_x P_rr F_x^T + Q
    P_ro  <- F_x P_ro
    P_or  <- P_ro^T
    P_oo  unchanged

where ``F_x = XNEW_x = df/dx`` and the process noise in state space is

    Q = XNEW_control * control.P * XNEW_control^T

Only the robot moves during a prediction, so only its own block receives
new noise and only its own rows and columns are transformed by ``F_x``.

This is equivalent to the full-state form Σ̄ = G Σ G^T + F_x^T R F_x with
G = blockdiag(F_x, I) used in Table 10.1 of Probabilistic Robotics, but it
never builds the full Jacobian.

References
----------
.. [1] Thrun, S., Burgard, W., & Fox, D. (2005). Probabilistic Robotics.
       Chapter 10: SLAM with Extended Kalman Filters.
.. [2] Solà, J. (2014). Simultaneous localization and mapping with the
       extended Kalman filter. Section 2.2: EKF prediction.

Examples
--------
>>> import numpy as np
>>> from ekfslam.models.motion import HolonomicMotionModel
>>> from ekfslam.slam.map import SlamMap
>>> from ekfslam.slam.robot import Robot
>>>
>>> slam_map = SlamMap(10)
>>> robot = Robot(slam_map, HolonomicMotionModel(1))
>>> robot.link_to_map(slam_map)
>>> robot.pose.P = [[0.01]]
>>> robot.control.P = [[0.02]]
>>> robot.move([1.0])
>>> robot.pose.x, robot.pose.P
(array([1.]), array([[0.03]]))
"""

import logging

import numpy as np

from ekfslam.slam.config import FilterConfig
from ekfslam.slam.control import Control
from ekfslam.slam.errors import (
    MotionModelFailure,
    SizeMismatch,
    check_matrix,
    check_vector,
)
from ekfslam.slam.gaussian import Gaussian
from ekfslam.slam.map import MapObject
from ekfslam.utils.metrics import is_symmetric_psd

logger = logging.getLogger(__name__)


class Robot(MapObject):
    """
    Robot whose pose lives in the SLAM map.

    Parameters
    ----------
    slam_map : SlamMap
        Map in which the pose block is allocated.
    motion_model : MotionModel
        Kinematic law; defines the state and control sizes.
    name : str, optional
        Robot name (default: "robot<id>").
    config : FilterConfig, optional
        Filter options (default: ``FilterConfig()``).

    Attributes
    ----------
    pose : Gaussian
        View of the robot block of the map.
    control : Control
        Current control, of size ``size_control``.
    XNEW_x : ndarray of shape (n, n)
        Jacobian of the new pose wrt the old pose, from the last step.
    XNEW_control : ndarray of shape (n, m)
        Jacobian of the new pose wrt the control, from the last step.
    Q : ndarray of shape (n, n)
        Process noise in state space.
    constant_perturbation : bool
        If True, ``Q`` is fixed at setup time and ``move()`` never recomputes
        it. Set it with ``set_perturbation(Q)``, or fill ``XNEW_control`` and
        ``control.P`` and call ``compute_state_perturbation()`` once.
    sensors : list of Sensor
        Linked sensors, in link order.
    """

    def __init__(self, slam_map, motion_model, name=None, config=None):
        if motion_model.size_state <= 0:
            raise SizeMismatch(
                f"{type(motion_model).__name__} declares state size {motion_model.size_state}"
            )
        super().__init__(slam_map, motion_model.size_state, category="robot", name=name)
        self.motion_model = motion_model
        self.config = config if config is not None else FilterConfig()
        self.constant_perturbation = self.config.constant_perturbation
        self.sensors = []

        n, m = self.size_state, self.size_control
        self.control = Control(m)
        self.XNEW_x = np.zeros((n, n))
        self.XNEW_control = np.zeros((n, m))
        self.Q = np.zeros((n, n))

    @property
    def pose(self):
        return self.state

    @property
    def size_state(self):
        return self.motion_model.size_state

    @property
    def size_control(self):
        return self.motion_model.size_control

    # ------------------------------------------------------------------ #
    # Linking
    # ------------------------------------------------------------------ #

    def link_to_sensor(self, sensor):
        if sensor in self.sensors:
            return
        self.sensors.append(sensor)
        sensor.link_to_robot(self)

    def link_to_map(self, slam_map):
        super().link_to_map(slam_map)
        slam_map.link_robot(self)
        logger.debug(f"Robot {self.name} linked to map, states [{self.ia.start}, {self.ia.stop})")

    # ------------------------------------------------------------------ #
    # Control and perturbation
    # ------------------------------------------------------------------ #

    def set_control(self, control):
        self.control.assign(control)

    def set_perturbation(self, Q):
        """Enter a constant state-space perturbation (setup time)."""
        self.Q[:, :] = check_matrix("perturbation Q", Q, self.size_state)

    def compute_state_perturbation(self):
        """
        Compute the process noise in state space.

        Performs ``Q = XNEW_control * control.P * XNEW_control^T``, where
        ``XNEW_control`` and ``control.P`` must already hold the values of the
        current step. Called by ``move()`` unless ``constant_perturbation``.
        """
        Q = self.XNEW_control @ self.control.P @ self.XNEW_control.T
        if self.config.enforce_symmetry:
            Q = 0.5 * (Q + Q.T)
        self.Q[:, :] = Q

    # ------------------------------------------------------------------ #
    # Prediction
    # ------------------------------------------------------------------ #

    def move(self, control=None):
        """
        Move one step ahead and update the SLAM filter.

        Updates the robot mean and covariance block plus the
        cross-covariances with all other map states.

        Parameters
        ----------
        control : Control or array_like, optional
            - None: use the current control.
            - Control: copied into the robot control first. A plain Gaussian
              is copied the same way and keeps the current dt.
            - array_like of size ``size_control``: replaces the control mean
              only (covariance and dt unchanged).

        Raises
        ------
        SizeMismatch
            If the control or the motion-model outputs have the wrong size.
        MotionModelFailure
            If the motion model cannot predict. Raised before anything in the
            map is written.
        """
        if control is None:
            pass
        elif isinstance(control, Gaussian):
            self.set_control(control)
        else:
            self.control.x = check_vector("control", control, self.size_control)
        self._predict()

    def _predict(self):
        n, m = self.size_state, self.size_control
        slam_map = self.arena

        # ------------------ Step 1: Motion model -------------------------#
        # Evaluate at copies of the current pose and control, so the model
        # can never alias the map storage.
        xnew, XNEW_x, XNEW_u = self.motion_model.predict(
            self.pose.x.copy(), self.control.x.copy(), self.control.dt
        )
        xnew = check_vector("motion model xnew", xnew, n)
        XNEW_x = check_matrix("motion model XNEW_x", XNEW_x, n, n)
        XNEW_u = check_matrix("motion model XNEW_u", XNEW_u, n, m)
        if not np.all(np.isfinite(xnew)):
            raise MotionModelFailure(f"{self.name}: motion model produced non-finite state {xnew}")
        if not (np.all(np.isfinite(XNEW_x)) and np.all(np.isfinite(XNEW_u))):
            raise MotionModelFailure(f"{self.name}: motion model produced non-finite Jacobians")

        # ------------------ Step 2: Process noise ------------------------#
        self.XNEW_x[:, :] = XNEW_x
        self.XNEW_control[:, :] = XNEW_u
        if not self.constant_perturbation:
            self.compute_state_perturbation()

        # ------------------ Step 3: Covariance blocks --------------------#
        # P_rr = F P_rr F' + Q ;  P_ro = F P_ro ;  P_or = P_ro'
        ia = self.ia
        P = slam_map.P
        P_rr = XNEW_x @ P[ia, ia] @ XNEW_x.T + self.Q
        if self.config.enforce_symmetry:
            P_rr = 0.5 * (P_rr + P_rr.T)
        others = slam_map.used_indices(exclude=ia)
        rows = np.arange(ia.start, ia.stop)
        P_ro = XNEW_x @ P[np.ix_(rows, others)]

        # ------------------ Step 4: Commit -------------------------------#
        self.pose.x = xnew
        P[ia, ia] = P_rr
        if others.size:
            P[np.ix_(rows, others)] = P_ro
            P[np.ix_(others, rows)] = P_ro.T

        if self.config.check_consistency and not is_symmetric_psd(P_rr, self.config.symmetry_tol):
            logger.warning(f"Robot {self.name}: covariance block lost symmetry or positive semi-definiteness")
        logger.debug(f"Robot {self.name} moved, dt={self.control.dt}, x={xnew}")

    # ------------------------------------------------------------------ #
    # Sensors
    # ------------------------------------------------------------------ #

    def explore_sensors(self):
        """Call ``process()`` on every linked sensor, in link order."""
        for sensor in self.sensors:
            sensor.process()

    def __str__(self):
        return format_robot(self)


def format_robot(robot, precision=4):
    """
    Human-readable dump of a robot's pose and control for logs.

    Parameters
    ----------
    robot : Robot
        Robot to describe.
    precision : int, optional
        Digits after the decimal point (default: 4).

    Returns
    -------
    str
        Multi-line description.
    """

    def fmt(a):
        return np.array2string(np.asarray(a), precision=precision, suppress_small=True)

    lines = [
        f"ROBOT {robot.id} {robot.name} ({type(robot.motion_model).__name__}),"
        f" map states [{robot.ia.start}, {robot.ia.stop})",
        f"  pose.x       : {fmt(robot.pose.x)}",
        f"  pose.std     : {fmt(robot.pose.std())}",
        f"  control.x    : {fmt(robot.control.x)}",
        f"  control.std  : {fmt(robot.control.std())}",
        f"  control.dt   : {robot.control.dt:.{precision}f}",
        f"  constant Q   : {robot.constant_perturbation}",
        f"  sensors      : {[s.name for s in robot.sensors]}",
    ]
    return "\n".join(lines)
