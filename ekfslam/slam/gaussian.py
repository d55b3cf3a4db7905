"""
Gaussian belief over a fixed-size state block.

A Gaussian is a mean vector ``x`` and a symmetric covariance ``P`` of the
same dimension. It either owns its arrays, or it is a view over a contiguous
slice of a larger owner's storage (the map arena): in that case reading
``x``/``P`` returns numpy views, and assignments write straight into the
owner's mean vector and covariance matrix.

Examples
--------
>>> import numpy as np
>>> from ekfslam.slam.gaussian import Gaussian
>>> g = Gaussian(2)
>>> g.x = [1.0, 2.0]
>>> g.P = np.eye(2) * 0.1
>>>
>>> # View over the middle of a larger state
>>> x = np.zeros(5)
>>> P = np.zeros((5, 5))
>>> v = Gaussian.view(x, P, slice(1, 3))
>>> v.x = [4.0, 5.0]
>>> x
array([0., 4., 5., 0., 0.])
"""

import numpy as np

from ekfslam.slam.errors import check_matrix, check_vector


class Gaussian:
    """
    Mean and covariance of a Gaussian-distributed vector.

    Parameters
    ----------
    size : int
        Dimension of the vector.
    x : array_like, optional
        Initial mean (default: zeros).
    P : array_like, optional
        Initial covariance (default: zeros).

    Attributes
    ----------
    ia : slice or None
        Range occupied in the owner's storage, None for an owning Gaussian.
    """

    def __init__(self, size, x=None, P=None):
        self._size = int(size)
        self._x = np.zeros(self._size)
        self._P = np.zeros((self._size, self._size))
        self.ia = None
        if x is not None:
            self.x = x
        if P is not None:
            self.P = P

    @classmethod
    def view(cls, mean_storage, cov_storage, ia):
        """
        Build a non-owning Gaussian over ``mean_storage[ia]`` and ``cov_storage[ia, ia]``.

        Parameters
        ----------
        mean_storage : ndarray of shape (N,)
            Owner's mean vector.
        cov_storage : ndarray of shape (N, N)
            Owner's covariance matrix.
        ia : slice
            Contiguous range with unit step.

        Returns
        -------
        Gaussian
            View whose reads and writes go to the owner's arrays.
        """
        g = cls.__new__(cls)
        g._size = ia.stop - ia.start
        g._x = mean_storage[ia]
        g._P = cov_storage[ia, ia]
        g.ia = ia
        return g

    @property
    def size(self):
        return self._size

    @property
    def is_view(self):
        return self.ia is not None

    @property
    def x(self):
        return self._x

    @x.setter
    def x(self, value):
        self._x[:] = check_vector("Gaussian mean", value, self._size)

    @property
    def P(self):
        return self._P

    @P.setter
    def P(self, value):
        self._P[:, :] = check_matrix("Gaussian covariance", value, self._size)

    def std(self):
        """Per-element standard deviation, sqrt of the covariance diagonal."""
        return np.sqrt(np.clip(np.diag(self._P), 0.0, None))

    def copy(self):
        """Owning copy, detached from any storage this Gaussian views."""
        return Gaussian(self._size, self._x.copy(), self._P.copy())

    def __repr__(self):
        return f"Gaussian(size={self._size}, x={np.array2string(self._x, precision=4)})"
