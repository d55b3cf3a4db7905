"""
Filter consistency metrics for EKF-SLAM.

An EKF that is fed wrong Jacobians, or that drops cross-covariance terms,
becomes overconfident and diverges. This module provides the standard checks
for that failure: structural checks on covariance matrices, and the
Normalized Estimation Error Squared (NEES) with its chi-square acceptance
region.

References
----------
.. [1] Bar-Shalom, Y., Li, X. R., & Kirubarajan, T. (2001). Estimation with
       Applications to Tracking and Navigation. Section 5.4: Consistency.
"""

import logging
from typing import Tuple

import numpy as np
import pandas as pd
from scipy import stats

# Configure module logger
logger = logging.getLogger(__name__)


def is_symmetric_psd(P: np.ndarray, tol: float = 1e-9) -> bool:
    """
    Check that a covariance matrix is symmetric positive semi-definite.

    Parameters
    ----------
    P : np.ndarray
        Square matrix.
    tol : float, optional
        Absolute tolerance on asymmetry and on negative eigenvalues.

    Returns
    -------
    bool
    """
    P = np.asarray(P, dtype=float)
    if P.ndim != 2 or P.shape[0] != P.shape[1]:
        return False
    if P.size == 0:
        return True
    if not np.all(np.isfinite(P)):
        return False
    if np.max(np.abs(P - P.T)) > tol:
        return False
    eigenvalues = np.linalg.eigvalsh(0.5 * (P + P.T))
    return bool(eigenvalues.min() >= -tol)


def nees(error: np.ndarray, P: np.ndarray) -> float:
    """
    Normalized Estimation Error Squared, e^T P^-1 e.

    Parameters
    ----------
    error : np.ndarray of shape (n,)
        Estimate minus ground truth.
    P : np.ndarray of shape (n, n)
        Estimated covariance.

    Returns
    -------
    float
        NEES value; for a consistent filter it is chi-square distributed
        with n degrees of freedom.

    Raises
    ------
    ValueError
        If shapes disagree.
    """
    error = np.asarray(error, dtype=float)
    P = np.asarray(P, dtype=float)
    if error.ndim != 1 or P.shape != (error.shape[0], error.shape[0]):
        raise ValueError(
            f"error of shape {error.shape} does not match covariance of shape {P.shape}"
        )
    return float(error @ np.linalg.solve(P, error))


def nees_bounds(dof: int, n_runs: int = 1, alpha: float = 0.05) -> Tuple[float, float]:
    """
    Two-sided acceptance region for the average NEES.

    The sum of ``n_runs`` independent NEES values is chi-square with
    ``n_runs * dof`` degrees of freedom; the bounds are divided by
    ``n_runs`` to apply to the average.

    Parameters
    ----------
    dof : int
        State dimension.
    n_runs : int, optional
        Number of averaged samples (default: 1).
    alpha : float, optional
        Significance level (default: 0.05 for a 95% region).

    Returns
    -------
    (float, float)
        Lower and upper bound.
    """
    k = dof * n_runs
    lower = stats.chi2.ppf(alpha / 2, k) / n_runs
    upper = stats.chi2.ppf(1 - alpha / 2, k) / n_runs
    return float(lower), float(upper)


def check_consistency(
    errors: np.ndarray,
    covariances: np.ndarray,
    alpha: float = 0.05,
    verbose: bool = True
) -> dict:
    """
    Evaluate filter consistency over a sequence of estimates.

    Parameters
    ----------
    errors : np.ndarray of shape (T, n)
        Per-step estimation errors.
    covariances : np.ndarray of shape (T, n, n)
        Per-step estimated covariances.
    alpha : float, optional
        Significance level of the acceptance region.
    verbose : bool, optional
        If True, log a summary. Default: True.

    Returns
    -------
    dict
        Dictionary containing:
        - 'nees': pandas Series of per-step NEES values
        - 'mean_nees': average NEES
        - 'lower', 'upper': acceptance region for the average NEES
        - 'consistent': whether the average NEES lies in the region
        - 'fraction_inside': share of steps whose NEES lies in the
          single-step region

    Raises
    ------
    ValueError
        If the sequences are empty or have mismatched lengths.
    """
    errors = np.asarray(errors, dtype=float)
    covariances = np.asarray(covariances, dtype=float)
    if errors.ndim != 2 or len(errors) == 0:
        raise ValueError(f"errors must be a non-empty (T, n) array, got shape {errors.shape}")
    if len(covariances) != len(errors):
        raise ValueError(
            f"got {len(errors)} errors but {len(covariances)} covariances"
        )

    T, n = errors.shape
    values = pd.Series([nees(e, P) for e, P in zip(errors, covariances)], name="nees")
    mean_nees = float(values.mean())
    lower, upper = nees_bounds(n, T, alpha)
    step_lower, step_upper = nees_bounds(n, 1, alpha)
    fraction_inside = float(((values >= step_lower) & (values <= step_upper)).mean())
    consistent = lower <= mean_nees <= upper

    if verbose:
        logger.info("=" * 60)
        logger.info("NEES Consistency Check")
        logger.info("=" * 60)
        logger.info(f"✓ Steps: {T}, state dimension: {n}")
        logger.info(f"✓ Mean NEES: {mean_nees:.4f}")
        logger.info(f"✓ {100 * (1 - alpha):.0f}% region: [{lower:.4f}, {upper:.4f}]")
        logger.info(f"✓ Steps inside single-step region: {100 * fraction_inside:.1f}%")
        if not consistent:
            logger.warning(
                "Mean NEES outside the acceptance region: filter is "
                + ("overconfident" if mean_nees > upper else "underconfident")
            )

    return {
        "nees": values,
        "mean_nees": mean_nees,
        "lower": lower,
        "upper": upper,
        "consistent": consistent,
        "fraction_inside": fraction_inside,
    }
