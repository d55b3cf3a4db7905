"""
Pose history tables.

This module converts recorded robot estimates to pandas DataFrames indexed
by time, for analysis, plotting and comparison between runs.
"""

import numpy as np
import pandas as pd


def build_timeseries(data, cols):
    """
    Convert a numpy array to a pandas DataFrame with datetime index.

    Parameters
    ----------
    data : ndarray
        Input array whose first column holds Unix timestamps in seconds.
    cols : list of str
        Column names. The first one must be 'stamp'.

    Returns
    -------
    pandas.DataFrame
        Time-indexed DataFrame with the remaining columns.

    Examples
    --------
    >>> data = np.array([[0.0, 0.0, 0.1], [1.0, 1.0, 0.2]])
    >>> df = build_timeseries(data, cols=["stamp", "x0", "std_x0"])
    >>> list(df.columns)
    ['x0', 'std_x0']
    """
    timeseries = pd.DataFrame(np.asarray(data, dtype=float).reshape(-1, len(cols)), columns=cols)
    timeseries["stamp"] = pd.to_datetime(timeseries["stamp"], unit="s")
    timeseries = timeseries.set_index("stamp")
    return timeseries


class PoseHistory:
    """
    Recorder of a robot's pose estimate over successive steps.

    Each record holds the time stamp, the pose mean and the per-element
    standard deviation of the pose.

    Parameters
    ----------
    robot : Robot
        Robot to record.
    labels : list of str, optional
        Names of the state elements (default: "x0", "x1", ...). For planar
        robots, ``["x", "y", "theta"]`` matches the plotting helpers.

    Examples
    --------
    >>> history = PoseHistory(robot, labels=["x", "y", "theta"])
    >>> t = 0.0
    >>> history.record(t)
    >>> for u in controls:
    ...     robot.move(u)
    ...     t += robot.control.dt
    ...     history.record(t)
    >>> df = history.to_dataframe()
    """

    def __init__(self, robot, labels=None):
        self.robot = robot
        n = robot.size_state
        self.labels = list(labels) if labels is not None else [f"x{i}" for i in range(n)]
        if len(self.labels) != n:
            raise ValueError(f"expected {n} labels, got {len(self.labels)}")
        self.rows = []
        self.covariances = []

    def record(self, stamp):
        """Append the robot's current pose estimate at time ``stamp``."""
        pose = self.robot.pose
        self.rows.append(np.concatenate(([stamp], pose.x, pose.std())))
        self.covariances.append(pose.P.copy())

    def __len__(self):
        return len(self.rows)

    def to_dataframe(self):
        """
        Time-indexed table of the recorded poses.

        Returns
        -------
        pandas.DataFrame
            Columns are the state labels followed by ``std_<label>``.
        """
        cols = ["stamp"] + self.labels + [f"std_{label}" for label in self.labels]
        return build_timeseries(np.array(self.rows).reshape(-1, len(cols)), cols)
