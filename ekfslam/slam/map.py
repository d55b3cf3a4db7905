#!/usr/bin/env python3
"""
Shared SLAM map state.

The map is an arena owning one mean vector and one covariance matrix for
every tracked entity (robots, landmarks, objects):

    x = [ x_r, x_1, x_2, ..., x_N ]^T

    P = [ P_rr  P_r1  ...  P_rN ]
        [ P_1r  P_11  ...  P_1N ]
        [  ...   ...  ...   ... ]
        [ P_Nr  P_N1  ...  P_NN ]

Each entity holds a contiguous index range ``ia`` into the arena and a
Gaussian view over ``x[ia]`` and ``P[ia, ia]``; cross-covariance blocks are
addressed as ``P[ia_i, ia_j]``. Nothing is copied: writing through a view
mutates the map.

Examples
--------
>>> import numpy as np
>>> from ekfslam.slam.map import SlamMap, Landmark
>>> slam_map = SlamMap(20)
>>> lmk = Landmark(slam_map, 2, x=[3.0, 1.0], P=np.eye(2) * 0.5)
>>> lmk.ia
slice(0, 2, None)
>>> slam_map.used_size
2
"""

import itertools
import logging

import numpy as np

from ekfslam.slam.errors import MapFull, SizeMismatch, SlamError
from ekfslam.slam.gaussian import Gaussian

logger = logging.getLogger(__name__)


class SlamMap:
    """
    Arena holding the global mean vector and covariance matrix.

    Parameters
    ----------
    max_size : int
        Total number of state elements the map can hold.

    Attributes
    ----------
    x : ndarray of shape (max_size,)
        Global mean vector.
    P : ndarray of shape (max_size, max_size)
        Global covariance matrix.
    used : ndarray of bool, shape (max_size,)
        Mask of allocated state elements.
    objects : list of MapObject
        Linked map objects, in link order (robots included).
    robots : list
        Linked robots, in link order.
    """

    def __init__(self, max_size):
        if max_size <= 0:
            raise SizeMismatch(f"map size must be positive, got {max_size}")
        self.x = np.zeros(max_size)
        self.P = np.zeros((max_size, max_size))
        self.used = np.zeros(max_size, dtype=bool)
        self.objects = []
        self.robots = []

    @property
    def size(self):
        return self.x.shape[0]

    @property
    def used_size(self):
        return int(np.count_nonzero(self.used))

    @property
    def free_size(self):
        return self.size - self.used_size

    @property
    def landmarks(self):
        return [obj for obj in self.objects if obj.category == "landmark"]

    def allocate(self, size):
        """
        Reserve the first contiguous free range of ``size`` elements.

        Returns
        -------
        slice
            The reserved range.

        Raises
        ------
        MapFull
            If no free contiguous range is long enough.
        """
        if size <= 0:
            raise SizeMismatch(f"allocation size must be positive, got {size}")
        start = 0
        # Walk runs of equal used-flags and take the first long-enough free run
        for is_used, run in itertools.groupby(self.used):
            length = len(list(run))
            if not is_used and length >= size:
                ia = slice(start, start + size)
                self.used[ia] = True
                logger.debug(f"Allocated map states [{ia.start}, {ia.stop})")
                return ia
            start += length
        raise MapFull(
            f"no contiguous range of {size} states ({self.free_size} of {self.size} free)"
        )

    def release(self, ia):
        """Free a range, clearing its mean, its covariance rows and columns."""
        self.used[ia] = False
        self.x[ia] = 0.0
        self.P[ia, :] = 0.0
        self.P[:, ia] = 0.0
        logger.debug(f"Released map states [{ia.start}, {ia.stop})")

    def gaussian(self, ia):
        """Gaussian view over the range ``ia``."""
        return Gaussian.view(self.x, self.P, ia)

    def used_indices(self, exclude=None):
        """
        Indices of all allocated states.

        Parameters
        ----------
        exclude : slice, optional
            Range to leave out (typically the caller's own block).

        Returns
        -------
        ndarray of int
        """
        mask = self.used.copy()
        if exclude is not None:
            mask[exclude] = False
        return np.flatnonzero(mask)

    def cross_covariance(self, a, b):
        """View of the covariance block between two map objects, ``P[a.ia, b.ia]``."""
        return self.P[a.ia, b.ia]

    def link_object(self, obj):
        if obj not in self.objects:
            self.objects.append(obj)

    def unlink_object(self, obj):
        if obj in self.objects:
            self.objects.remove(obj)
        if obj in self.robots:
            self.robots.remove(obj)

    def link_robot(self, robot):
        self.link_object(robot)
        if robot not in self.robots:
            self.robots.append(robot)

    def __repr__(self):
        return (
            f"SlamMap(size={self.size}, used={self.used_size}, "
            f"objects={len(self.objects)})"
        )


class MapObject:
    """
    An entity whose state lives in a slice of the map.

    The state range is allocated at construction; the object is registered
    in the map's bookkeeping by ``link_to_map``.

    Parameters
    ----------
    slam_map : SlamMap
        Map owning the state storage.
    size : int
        State dimension.
    category : str, optional
        Free-form kind label ("robot", "landmark", ...).
    name : str, optional
        Human-readable name (default: "<category><id>").
    """

    _ids = itertools.count(1)

    def __init__(self, slam_map, size, category="object", name=None):
        self.id = next(MapObject._ids)
        self.category = category
        self.name = name if name is not None else f"{category}{self.id}"
        self.slam_map = None
        self.ia = slam_map.allocate(size)
        self.state = slam_map.gaussian(self.ia)
        self.arena = slam_map

    @property
    def size(self):
        return self.state.size

    def link_to_map(self, slam_map):
        if slam_map is not self.arena:
            raise SlamError(f"{self.name}: state was allocated in a different map")
        self.slam_map = slam_map
        slam_map.link_object(self)

    def remove(self):
        """Unlink from the map and release the state range."""
        self.arena.unlink_object(self)
        self.arena.release(self.ia)
        self.slam_map = None


class Landmark(MapObject):
    """
    Stationary map object, e.g. a 2D point landmark.

    Parameters
    ----------
    slam_map : SlamMap
        Map to allocate and link into.
    size : int
        Landmark state dimension (2 for a planar point).
    x : array_like, optional
        Initial mean.
    P : array_like, optional
        Initial covariance.
    """

    def __init__(self, slam_map, size, x=None, P=None, name=None):
        super().__init__(slam_map, size, category="landmark", name=name)
        if x is not None:
            self.state.x = x
        if P is not None:
            self.state.P = P
        self.link_to_map(slam_map)
