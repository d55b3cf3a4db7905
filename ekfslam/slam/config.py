"""Filter configuration shared by robots and consistency checks."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class FilterConfig:
    # Q is set once at setup time and never recomputed by move()
    constant_perturbation: bool = False
    # Average Q and the robot block with their transposes after each step
    enforce_symmetry: bool = True
    symmetry_tol: float = 1e-9
    # Log a warning when the robot block stops being symmetric PSD
    check_consistency: bool = False
