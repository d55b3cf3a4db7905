import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from ekfslam.models.motion import HolonomicMotionModel
from ekfslam.slam import Landmark, Robot, SlamMap


@pytest.fixture
def robot_and_landmark():
    """Planar robot (n=3) followed by one landmark (k=2) with known blocks."""
    slam_map = SlamMap(8)
    robot = Robot(slam_map, HolonomicMotionModel(3), name="rob")
    robot.link_to_map(slam_map)
    robot.pose.x = [1.0, 2.0, 0.3]
    robot.pose.P = np.diag([0.1, 0.2, 0.05])
    landmark = Landmark(slam_map, 2, x=[5.0, -1.0], P=[[0.5, 0.1], [0.1, 0.4]])
    P_ro = np.array([[0.01, 0.02], [0.03, -0.01], [0.0, 0.005]])
    slam_map.cross_covariance(robot, landmark)[:, :] = P_ro
    slam_map.cross_covariance(landmark, robot)[:, :] = P_ro.T
    return slam_map, robot, landmark
