"""
Motion-model contract.

A motion model predicts the robot state one step of length ``dt`` ahead,
from the current state ``x`` and control ``u``, and linearizes the
prediction:

    xnew    = f(x, u, dt)
    XNEW_x  = d f / d x      (n x n)
    XNEW_u  = d f / d u      (n x m)

One concrete class per kinematic variant (see ``ekfslam.models.motion``).
A robot holds exactly one motion model, chosen at construction time.
"""

from abc import ABC, abstractmethod


class MotionModel(ABC):
    """
    Abstract kinematic law of a robot.

    Attributes
    ----------
    size_state : int
        Dimension n of the robot state.
    size_control : int
        Dimension m of the control vector.
    """

    size_state = 0
    size_control = 0

    @abstractmethod
    def predict(self, x, u, dt):
        """
        Predict the new state and its Jacobians.

        Implementations must not modify ``x`` or ``u`` in place.

        Parameters
        ----------
        x : ndarray of shape (n,)
            Current state.
        u : ndarray of shape (m,)
            Control mean.
        dt : float
            Time interval.

        Returns
        -------
        xnew : ndarray of shape (n,)
        XNEW_x : ndarray of shape (n, n)
        XNEW_u : ndarray of shape (n, m)

        Raises
        ------
        MotionModelFailure
            If no prediction can be made for these inputs.
        """
