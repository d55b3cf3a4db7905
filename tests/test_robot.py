import logging

import numpy as np
import pytest

from ekfslam.models.motion import DifferentialDriveMotionModel, HolonomicMotionModel
from ekfslam.slam import (
    Control,
    FilterConfig,
    Gaussian,
    Landmark,
    MotionModelFailure,
    Robot,
    SizeMismatch,
    SlamMap,
    format_robot,
)
from ekfslam.slam.motion import MotionModel


def snapshot(slam_map):
    return slam_map.x.tobytes(), slam_map.P.tobytes()


def test_one_dimensional_prediction():
    slam_map = SlamMap(4)
    robot = Robot(slam_map, HolonomicMotionModel(1))
    robot.link_to_map(slam_map)
    robot.pose.x = [0.0]
    robot.pose.P = [[0.01]]
    robot.control.P = [[0.02]]

    robot.move([1.0])

    assert robot.pose.x[0] == pytest.approx(1.0)
    assert robot.Q[0, 0] == pytest.approx(0.02)
    assert robot.pose.P[0, 0] == pytest.approx(0.03)
    assert slam_map.P[0, 0] == pytest.approx(0.03)


def test_identity_motion_leaves_covariance_blocks_unchanged(robot_and_landmark):
    slam_map, robot, landmark = robot_and_landmark
    P_before = slam_map.P.copy()
    # Zero control noise: Q = 0, and XNEW_x = I for the holonomic model
    robot.move([0.5, 0.0, -0.1])

    np.testing.assert_allclose(robot.XNEW_x, np.eye(3))
    np.testing.assert_allclose(robot.Q, np.zeros((3, 3)))
    np.testing.assert_allclose(slam_map.P, P_before)
    assert np.array_equal(landmark.state.P, P_before[3:5, 3:5])
    np.testing.assert_allclose(robot.pose.x, [1.5, 2.0, 0.2])


def test_nonlinear_prediction_updates_robot_and_cross_blocks():
    slam_map = SlamMap(7)
    robot = Robot(slam_map, DifferentialDriveMotionModel())
    robot.link_to_map(slam_map)
    landmark = Landmark(slam_map, 2, x=[3.0, 1.0], P=[[0.5, 0.1], [0.1, 0.4]])
    robot.pose.x = [0.0, 0.0, 0.4]
    robot.pose.P = np.diag([0.1, 0.2, 0.05])
    P_ro = np.array([[0.01, 0.02], [0.03, -0.01], [0.0, 0.005]])
    slam_map.P[0:3, 3:5] = P_ro
    slam_map.P[3:5, 0:3] = P_ro.T
    robot.control.x = [1.0, 0.2]
    robot.control.P = np.diag([0.01, 0.004])
    robot.control.dt = 0.5

    x0 = robot.pose.x.copy()
    P_rr0 = robot.pose.P.copy()
    P_ll0 = landmark.state.P.copy()
    expected_x, F_x, F_u = robot.motion_model.predict(x0, robot.control.x, 0.5)
    expected_Q = F_u @ robot.control.P @ F_u.T

    robot.move()

    np.testing.assert_allclose(robot.pose.x, expected_x)
    np.testing.assert_allclose(robot.XNEW_x, F_x)
    np.testing.assert_allclose(robot.XNEW_control, F_u)
    np.testing.assert_allclose(robot.Q, expected_Q)
    np.testing.assert_allclose(robot.pose.P, F_x @ P_rr0 @ F_x.T + expected_Q)
    np.testing.assert_allclose(slam_map.P[0:3, 3:5], F_x @ P_ro)
    np.testing.assert_allclose(slam_map.P[3:5, 0:3], (F_x @ P_ro).T)
    assert np.array_equal(landmark.state.P, P_ll0)
    assert np.allclose(slam_map.P, slam_map.P.T)


def test_unused_map_states_are_not_touched():
    slam_map = SlamMap(6)
    robot = Robot(slam_map, HolonomicMotionModel(2))
    robot.link_to_map(slam_map)
    robot.pose.P = np.eye(2)
    robot.control.P = np.eye(2)
    robot.move([1.0, 1.0])
    assert np.all(slam_map.P[2:, :] == 0.0)
    assert np.all(slam_map.P[:, 2:] == 0.0)


def test_cross_block_with_another_robot_follows_the_moving_robot():
    slam_map = SlamMap(6)
    a = Robot(slam_map, DifferentialDriveMotionModel(), name="a")
    b = Robot(slam_map, DifferentialDriveMotionModel(), name="b")
    a.link_to_map(slam_map)
    b.link_to_map(slam_map)
    a.pose.x = [0.0, 0.0, 1.0]
    slam_map.P[:] = np.eye(6) * 0.1
    slam_map.P[0:3, 3:6] = 0.01
    slam_map.P[3:6, 0:3] = 0.01
    P_bb = b.pose.P.copy()
    P_ab = slam_map.P[0:3, 3:6].copy()

    a.move([1.0, 0.0])

    np.testing.assert_allclose(slam_map.P[0:3, 3:6], a.XNEW_x @ P_ab)
    assert np.array_equal(b.pose.P, P_bb)
    assert slam_map.robots == [a, b]


def test_wrong_control_size_leaves_map_untouched(robot_and_landmark):
    slam_map, robot, _ = robot_and_landmark
    before = snapshot(slam_map)
    with pytest.raises(SizeMismatch):
        robot.move([1.0, 2.0])
    assert snapshot(slam_map) == before


def test_wrong_control_object_size_is_rejected(robot_and_landmark):
    slam_map, robot, _ = robot_and_landmark
    before = snapshot(slam_map)
    with pytest.raises(SizeMismatch):
        robot.move(Control(2))
    assert snapshot(slam_map) == before


def test_motion_model_failure_leaves_map_untouched(robot_and_landmark):
    slam_map, robot, _ = robot_and_landmark
    before = snapshot(slam_map)
    with pytest.raises(MotionModelFailure):
        robot.move([np.nan, 0.0, 0.0])
    assert snapshot(slam_map) == before


class InfiniteJacobianModel(MotionModel):
    size_state = 1
    size_control = 1

    def predict(self, x, u, dt):
        return x + u * dt, np.array([[np.inf]]), np.array([[dt]])


def test_non_finite_jacobian_leaves_map_untouched():
    slam_map = SlamMap(3)
    robot = Robot(slam_map, InfiniteJacobianModel())
    robot.link_to_map(slam_map)
    landmark = Landmark(slam_map, 2, P=np.eye(2))
    robot.pose.P = [[0.1]]
    slam_map.cross_covariance(robot, landmark)[:, :] = [[0.01, 0.0]]
    slam_map.cross_covariance(landmark, robot)[:, :] = [[0.01], [0.0]]
    before = snapshot(slam_map)

    with pytest.raises(MotionModelFailure):
        robot.move([1.0])

    assert snapshot(slam_map) == before
    assert np.all(np.isfinite(robot.XNEW_x))
    assert np.all(np.isfinite(robot.Q))


def test_plain_gaussian_control_is_copied():
    slam_map = SlamMap(4)
    robot = Robot(slam_map, HolonomicMotionModel(2))
    robot.link_to_map(slam_map)
    robot.control.dt = 0.5

    robot.move(Gaussian(2, x=[1.0, -2.0], P=np.eye(2) * 0.04))

    np.testing.assert_allclose(robot.control.x, [1.0, -2.0])
    np.testing.assert_allclose(robot.pose.x, [0.5, -1.0])
    np.testing.assert_allclose(robot.Q, np.eye(2) * 0.01)
    assert robot.control.dt == 0.5


def test_wrong_size_plain_gaussian_control_is_rejected(robot_and_landmark):
    slam_map, robot, _ = robot_and_landmark
    before = snapshot(slam_map)
    with pytest.raises(SizeMismatch):
        robot.move(Gaussian(2))
    assert snapshot(slam_map) == before


class WrongJacobianModel(MotionModel):
    size_state = 3
    size_control = 2

    def predict(self, x, u, dt):
        return x.copy(), np.eye(3), np.zeros((3, 3))


def test_wrong_jacobian_shape_is_a_size_mismatch():
    slam_map = SlamMap(5)
    robot = Robot(slam_map, WrongJacobianModel())
    robot.pose.P = np.eye(3)
    before = snapshot(slam_map)
    with pytest.raises(SizeMismatch):
        robot.move([1.0, 0.0])
    assert snapshot(slam_map) == before


def test_move_with_control_copies_control():
    slam_map = SlamMap(3)
    robot = Robot(slam_map, HolonomicMotionModel(1))
    control = Control(1, dt=0.5)
    control.x = [2.0]
    control.P = [[0.04]]
    robot.move(control)
    assert robot.control.dt == 0.5
    assert robot.pose.x[0] == pytest.approx(1.0)
    # XNEW_control = dt * I, so Q = 0.25 * 0.04
    assert robot.Q[0, 0] == pytest.approx(0.01)
    control.x = [5.0]
    assert robot.control.x[0] == 2.0


def test_raw_vector_keeps_covariance_and_dt():
    slam_map = SlamMap(3)
    robot = Robot(slam_map, HolonomicMotionModel(1))
    robot.control.P = [[0.3]]
    robot.control.dt = 2.0
    robot.move([1.0])
    assert robot.control.P[0, 0] == 0.3
    assert robot.control.dt == 2.0
    assert robot.pose.x[0] == pytest.approx(2.0)


def test_compute_state_perturbation_formula():
    slam_map = SlamMap(3)
    robot = Robot(slam_map, DifferentialDriveMotionModel())
    robot.XNEW_control[:, :] = [[0.5, 0.0], [0.2, 0.1], [0.0, 0.5]]
    robot.control.P = [[0.04, 0.01], [0.01, 0.02]]
    robot.compute_state_perturbation()
    expected = robot.XNEW_control @ robot.control.P @ robot.XNEW_control.T
    np.testing.assert_allclose(robot.Q, expected)
    assert np.array_equal(robot.Q, robot.Q.T)


def test_constant_perturbation_is_never_recomputed():
    slam_map = SlamMap(3)
    config = FilterConfig(constant_perturbation=True)
    robot = Robot(slam_map, DifferentialDriveMotionModel(), config=config)
    Q0 = np.diag([0.001, 0.002, 0.0005])
    robot.set_perturbation(Q0)
    robot.pose.x = [0.0, 0.0, 0.3]

    for v, sigma in [(1.0, 0.1), (0.5, 0.3), (2.0, 0.05)]:
        robot.control.P = np.diag([sigma, sigma]) ** 2
        robot.control.dt = 0.1
        robot.move([v, 0.1])
        assert np.array_equal(robot.Q, Q0)


def test_constant_perturbation_from_setup_jacobian():
    slam_map = SlamMap(3)
    robot = Robot(slam_map, HolonomicMotionModel(2), config=FilterConfig(constant_perturbation=True))
    robot.XNEW_control[:, :] = np.eye(2)
    robot.control.P = np.eye(2) * 0.01
    robot.compute_state_perturbation()
    robot.control.P = np.eye(2)
    robot.move([0.0, 0.0])
    robot.move([0.0, 0.0])
    np.testing.assert_allclose(robot.Q, np.eye(2) * 0.01)
    np.testing.assert_allclose(robot.pose.P, np.eye(2) * 0.02)


def test_set_perturbation_size_check():
    robot = Robot(SlamMap(3), HolonomicMotionModel(3))
    with pytest.raises(SizeMismatch):
        robot.set_perturbation(np.eye(2))


def test_sizes_come_from_the_motion_model():
    robot = Robot(SlamMap(3), DifferentialDriveMotionModel())
    assert robot.size_state == 3
    assert robot.size_control == 2
    assert robot.control.size == 2
    assert robot.XNEW_x.shape == (3, 3)
    assert robot.XNEW_control.shape == (3, 2)


def test_model_without_state_is_rejected():
    class Empty(MotionModel):
        def predict(self, x, u, dt):
            return x, None, None

    with pytest.raises(SizeMismatch):
        Robot(SlamMap(3), Empty())


def test_consistency_warning(caplog):
    slam_map = SlamMap(2)
    robot = Robot(slam_map, HolonomicMotionModel(1), config=FilterConfig(check_consistency=True))
    robot.pose.P = [[-1.0]]
    with caplog.at_level(logging.WARNING, logger="ekfslam.slam.robot"):
        robot.move([0.0])
    assert "positive semi-definiteness" in caplog.text


def test_format_robot_mentions_pose_and_control():
    slam_map = SlamMap(4)
    robot = Robot(slam_map, DifferentialDriveMotionModel(), name="rover")
    robot.pose.x = [1.0, 2.0, 0.5]
    text = format_robot(robot)
    assert "rover" in text
    assert "DifferentialDriveMotionModel" in text
    assert "pose.x" in text and "control.x" in text
    assert str(robot) == text
