"""Extended Kalman Filter SLAM prediction core."""

__version__ = "0.1.0"
