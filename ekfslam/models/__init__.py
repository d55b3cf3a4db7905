"""Robot kinematic variants: holonomic, differential drive, odometry."""

from .motion import (
    MOTION_MODELS,
    DifferentialDriveMotionModel,
    HolonomicMotionModel,
    OdometryMotionModel,
)

__all__ = [
    "MOTION_MODELS",
    "DifferentialDriveMotionModel",
    "HolonomicMotionModel",
    "OdometryMotionModel",
]
