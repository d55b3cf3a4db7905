import marimo

__generated_with = "0.16.5"
app = marimo.App(width="full")


@app.cell(hide_code=True)
def _(mo):
    mo.md(
        r"""
    # EKF-SLAM Prediction Step

    **Learning Objectives**:
    - See how a robot pose lives inside the shared map mean and covariance
    - Propagate pose uncertainty through a motion model and its Jacobians
    - Watch the robot-landmark cross-covariance follow the robot Jacobian
      while the landmark block stays untouched

    **Interactive Controls**: adjust the motion model, time step, control noise
    and number of steps below. Plots update automatically.
    """
    )
    return


@app.cell(hide_code=True)
def _():
    import matplotlib.pyplot as plt
    import numpy as np
    return np, plt


@app.cell
def _():
    from ekfslam.models.motion import MOTION_MODELS
    from ekfslam.slam import Control, Landmark, Robot, Sensor, SlamMap
    from ekfslam.utils.data_utils import PoseHistory
    from ekfslam.visualization import marimo_helpers as mh
    from ekfslam.visualization.plotting import plot_landmarks, plot_pose_history
    return (
        Control,
        Landmark,
        MOTION_MODELS,
        PoseHistory,
        Robot,
        Sensor,
        SlamMap,
        mh,
        plot_landmarks,
        plot_pose_history,
    )


@app.cell
def _(mh, mo):
    # Interactive controls
    model_selector = mh.create_motion_model_selector()
    dt_slider = mh.create_dt_slider(default=0.1)
    steps_slider = mh.create_steps_slider(default=50)
    noise_sliders = mh.create_control_noise_sliders(["v", "ω"], [0.05, 0.02])

    mo.hstack(
        [
            mh.build_control_panel(
                {
                    "## Run": None,
                    "model": model_selector,
                    "dt": dt_slider,
                    "steps": steps_slider,
                }
            ),
            mh.build_control_panel({"## Control noise (v, ω)": None, **noise_sliders}),
        ],
        justify="start",
    )
    return dt_slider, model_selector, noise_sliders, steps_slider


@app.cell
def _(
    Control,
    Landmark,
    MOTION_MODELS,
    PoseHistory,
    Robot,
    Sensor,
    SlamMap,
    dt_slider,
    model_selector,
    noise_sliders,
    np,
    steps_slider,
):
    class StepCounter(Sensor):
        def __init__(self):
            super().__init__("step counter")
            self.count = 0

        def process(self):
            self.count += 1

    slam_map = SlamMap(32)
    model_cls = MOTION_MODELS[model_selector.value]
    motion_model = model_cls(3) if model_selector.value == "holonomic" else model_cls()
    robot = Robot(slam_map, motion_model, name="demo")
    robot.link_to_map(slam_map)
    robot.pose.P = np.diag([1e-4, 1e-4, 1e-4])

    landmark = Landmark(slam_map, 2, x=[2.0, 1.0], P=np.eye(2) * 0.05)
    # Small initial robot-landmark correlation
    slam_map.cross_covariance(robot, landmark)[:2, :] = np.eye(2) * 1e-5
    slam_map.cross_covariance(landmark, robot)[:, :2] = np.eye(2) * 1e-5
    counter = StepCounter()
    robot.link_to_sensor(counter)

    # Continuous-time control, discretized with dt
    sigmas = [s.value for s in noise_sliders.values()]
    if robot.size_control == 2:
        rates, densities = [0.5, 0.3], sigmas
    else:
        rates, densities = [0.5, 0.0, 0.3], [sigmas[0], sigmas[0], sigmas[1]]
    control = Control(robot.size_control)
    control.set_continuous_mean(rates)
    control.set_continuous_covariance(np.diagflat(densities) ** 2)
    control.discretize_all(dt_slider.value)
    if model_selector.value != "odometry":
        # These models integrate dt themselves: feed rates, not increments
        control.x = rates

    history = PoseHistory(robot, labels=["x", "y", "theta"])
    t = 0.0
    history.record(t)
    for _ in range(steps_slider.value):
        robot.move(control)
        robot.explore_sensors()
        t += control.dt
        history.record(t)
    return counter, history, landmark, robot, slam_map


@app.cell
def _(history, plot_landmarks, plot_pose_history, plt, slam_map):
    fig, ax = plt.subplots(figsize=(8, 6))
    plot_pose_history(history.to_dataframe(), history.covariances, ax=ax, every=5)
    plot_landmarks(slam_map, ax=ax)
    fig
    return


@app.cell
def _(counter, landmark, mo, robot, slam_map):
    mo.md(
        f"""
    ```
    {robot}
    ```

    Sensor hook calls: **{counter.count}**

    Robot-landmark cross-covariance:

    ```
    {slam_map.cross_covariance(robot, landmark)}
    ```

    Landmark block (unchanged by prediction):

    ```
    {landmark.state.P}
    ```
    """
    )
    return


@app.cell
def _():
    import marimo as mo
    return (mo,)


if __name__ == "__main__":
    app.run()
