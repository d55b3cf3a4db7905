"""
Matplotlib plots of predicted trajectories and their uncertainty.
"""

import matplotlib.pyplot as plt
import numpy as np


def covariance_ellipse(mean, cov, n_std=2.0, n_points=64):
    """
    Points on the n-sigma ellipse of a 2D Gaussian.

    Parameters
    ----------
    mean : array_like of shape (2,)
        Ellipse center.
    cov : array_like of shape (2, 2)
        Covariance matrix.
    n_std : float, optional
        Number of standard deviations (default: 2.0).
    n_points : int, optional
        Number of points on the contour (default: 64).

    Returns
    -------
    ndarray of shape (n_points, 2)
        Closed contour; the first and last points coincide.
    """
    mean = np.asarray(mean, dtype=float)
    cov = np.asarray(cov, dtype=float)
    eigenvalues, eigenvectors = np.linalg.eigh(0.5 * (cov + cov.T))
    radii = n_std * np.sqrt(np.clip(eigenvalues, 0.0, None))
    t = np.linspace(0.0, 2 * np.pi, n_points)
    circle = np.stack([np.cos(t), np.sin(t)], axis=1)
    return mean + (circle * radii) @ eigenvectors.T


def plot_pose_history(history_df, covariances=None, ax=None, n_std=2.0, every=1):
    """
    Plot a planar trajectory with its uncertainty ellipses.

    Parameters
    ----------
    history_df : pandas.DataFrame
        Table from ``PoseHistory.to_dataframe()`` with columns 'x' and 'y'.
    covariances : sequence of ndarray, optional
        Per-row pose covariances (``PoseHistory.covariances``). The x-y
        block of each one is drawn as an ellipse. If omitted, ellipses are
        axis-aligned, built from the 'std_x' and 'std_y' columns.
    ax : matplotlib.axes.Axes, optional
        Axes to draw on (default: a new figure).
    n_std : float, optional
        Ellipse size in standard deviations (default: 2.0).
    every : int, optional
        Draw one ellipse every ``every`` rows (default: 1).

    Returns
    -------
    matplotlib.axes.Axes
    """
    if ax is None:
        _, ax = plt.subplots()

    x = history_df["x"].to_numpy()
    y = history_df["y"].to_numpy()
    ax.plot(x, y, "b.-", linewidth=1, label="Predicted trajectory")
    ax.plot(x[0], y[0], "go", label="Start")

    for i in range(0, len(history_df), every):
        if covariances is not None:
            cov = np.asarray(covariances[i])[:2, :2]
        else:
            cov = np.diag([history_df["std_x"].iloc[i] ** 2, history_df["std_y"].iloc[i] ** 2])
        contour = covariance_ellipse([x[i], y[i]], cov, n_std=n_std)
        ax.plot(contour[:, 0], contour[:, 1], "r-", linewidth=0.5)

    ax.set_xlabel("x [m]")
    ax.set_ylabel("y [m]")
    ax.set_title(f"Prediction with {n_std:g}σ uncertainty")
    ax.axis("equal")
    ax.legend(loc="best")
    return ax


def plot_landmarks(slam_map, ax=None, n_std=2.0):
    """
    Plot planar landmarks of a map with their uncertainty ellipses.

    Parameters
    ----------
    slam_map : SlamMap
        Map whose landmarks (state size >= 2) are drawn.
    ax : matplotlib.axes.Axes, optional
        Axes to draw on (default: a new figure).
    n_std : float, optional
        Ellipse size in standard deviations.

    Returns
    -------
    matplotlib.axes.Axes
    """
    if ax is None:
        _, ax = plt.subplots()
    for lmk in slam_map.landmarks:
        mean = lmk.state.x[:2]
        ax.scatter(mean[0], mean[1], s=200, c="k", alpha=0.2, marker="*")
        ax.text(mean[0], mean[1], lmk.name)
        contour = covariance_ellipse(mean, lmk.state.P[:2, :2], n_std=n_std)
        ax.plot(contour[:, 0], contour[:, 1], "k--", linewidth=0.5)
    return ax
