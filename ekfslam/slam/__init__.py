"""EKF-SLAM filter core: Gaussians, controls, the shared map and robots."""

from .config import FilterConfig
from .control import Control
from .errors import (
    MapFull,
    MotionModelFailure,
    SizeMismatch,
    SlamError,
    UninitializedContinuousState,
)
from .gaussian import Gaussian
from .map import Landmark, MapObject, SlamMap
from .motion import MotionModel
from .robot import Robot, format_robot
from .sensor import Sensor

__all__ = [
    "Control",
    "FilterConfig",
    "Gaussian",
    "Landmark",
    "MapFull",
    "MapObject",
    "MotionModel",
    "MotionModelFailure",
    "Robot",
    "Sensor",
    "SizeMismatch",
    "SlamError",
    "SlamMap",
    "UninitializedContinuousState",
    "format_robot",
]
