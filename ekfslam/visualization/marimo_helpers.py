"""
Marimo UI widget helpers for prediction-step parameters.

Provides standardized widget creation functions for the parameters of an
EKF-SLAM prediction run: time step, control noise, motion model and number
of steps. All widgets are designed to work with Marimo's reactive execution
model.

Example:
    import marimo as mo
    from ekfslam.visualization.marimo_helpers import (
        create_dt_slider,
        create_control_noise_sliders,
    )

    # Create reactive controls
    dt = create_dt_slider()
    noise = create_control_noise_sliders(["v", "ω"])

    # Use in dependent cell
    P_ct = np.diagflat([s.value for s in noise.values()]) ** 2
"""

import marimo as mo

from ekfslam.models.motion import MOTION_MODELS


def create_parameter_slider(
    name: str,
    min_val: float,
    max_val: float,
    default: float,
    step: float | None = None,
) -> mo.ui.slider:
    """
    Create a standardized parameter slider with consistent styling.

    Args:
        name: Slider label (e.g., "σ_v (m/s)")
        min_val: Minimum slider value
        max_val: Maximum slider value
        default: Default/initial value
        step: Step size (default: (max-min)/100)

    Returns:
        Marimo slider widget with show_value=True
    """
    if step is None:
        step = (max_val - min_val) / 100

    return mo.ui.slider(
        min_val,
        max_val,
        value=default,
        step=step,
        label=name,
        show_value=True,
    )


def create_dt_slider(
    default: float = 0.1, min_val: float = 0.01, max_val: float = 1.0
) -> mo.ui.slider:
    """
    Create slider for the prediction time step.

    Example:
        dt = create_dt_slider()
        control.discretize_all(dt.value)
    """
    return create_parameter_slider("Δt (s)", min_val, max_val, default, 0.01)


def create_control_noise_sliders(
    labels: list[str],
    defaults: list[float] | None = None,
    min_val: float = 0.0,
    max_val: float = 1.0,
) -> dict[str, mo.ui.slider]:
    """
    Create one standard-deviation slider per control element.

    Args:
        labels: Control element names (e.g., ["v", "ω"])
        defaults: Default standard deviations (default: 0.1 each)
        min_val: Minimum slider value
        max_val: Maximum slider value

    Returns:
        Dictionary keyed by label

    Example:
        noise = create_control_noise_sliders(["v", "ω"], [0.05, 0.02])
        P_ct = np.diagflat([s.value for s in noise.values()]) ** 2
    """
    if defaults is None:
        defaults = [0.1] * len(labels)
    if len(defaults) != len(labels):
        raise ValueError(f"expected {len(labels)} defaults, got {len(defaults)}")

    return {
        label: create_parameter_slider(f"σ_{label}", min_val, max_val, default, 0.01)
        for label, default in zip(labels, defaults)
    }


def create_motion_model_selector(default: str = "differential_drive") -> mo.ui.dropdown:
    """
    Create dropdown for the robot kinematic variant.

    Example:
        model = create_motion_model_selector()
        motion_model = MOTION_MODELS[model.value]()
    """
    return mo.ui.dropdown(list(MOTION_MODELS), label="Motion model", value=default)


def create_steps_slider(
    max_steps: int = 200, default: int = 50, step: int = 10
) -> mo.ui.slider:
    """
    Create slider for the number of prediction steps.

    Example:
        steps = create_steps_slider()
        for _ in range(steps.value):
            robot.move()
    """
    return mo.ui.slider(
        step,
        max_steps,
        value=default,
        step=step,
        label="Prediction steps",
        show_value=True,
    )


def build_control_panel(widgets: dict):
    """
    Build a standardized vertical control panel from widgets.

    Args:
        widgets: Dictionary of {label: widget}; labels starting with "##"
            are rendered as section headers instead.

    Returns:
        Marimo vstack containing the widgets
    """
    elements = []
    for label, widget in widgets.items():
        if label.startswith("##"):  # Section header
            elements.append(mo.md(label))
        else:
            elements.append(widget)

    return mo.vstack(elements)
