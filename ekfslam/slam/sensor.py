"""Sensor base class: an observer linked to a robot."""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class Sensor(ABC):
    """
    Observer attached to a robot.

    The robot calls ``process()`` on each linked sensor from
    ``Robot.explore_sensors()`` once a prediction has produced a new pose.
    What a sensor does there (acquisition, observation, correction) is up to
    the concrete class.

    Parameters
    ----------
    name : str, optional
        Sensor name used in logs.
    """

    def __init__(self, name=None):
        self.name = name if name is not None else type(self).__name__
        self.robot = None

    def link_to_robot(self, robot):
        """Record the robot and register this sensor with it."""
        if self.robot is robot:
            return
        if self.robot is not None and self in self.robot.sensors:
            self.robot.sensors.remove(self)
        self.robot = robot
        robot.link_to_sensor(self)
        logger.debug(f"Sensor {self.name} linked to robot {robot.name}")

    @abstractmethod
    def process(self):
        """Run the sensor's processing for the current robot pose."""
