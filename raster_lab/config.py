from __future__ import annotations

from dataclasses import dataclass, field


def _default_custom_kernel() -> list[list[float]]:
    return [
        [-1, -1, -1],
        [-1, 8, -1],
        [-1, -1, -1],
    ]


@dataclass
class ProcessingParams:
    """Centralized parameters for the editor's processing operations.

    Extend as needed; the CLI binds its defaults to these values.
    """

    # convolution filters
    smoothing_size: int = 3
    median_size: int = 3
    gaussian_radius: float = 1.0
    gaussian_sigma: float = 1.0
    sobel_threshold: float = 128
    sobel_direction: str = "both"
    highpass_strength: float = 1.0
    custom_kernel: list[list[float]] = field(default_factory=_default_custom_kernel)
    custom_divisor: float = 1
    custom_offset: float = 0

    # binarization
    manual_threshold: int = 128
    percent_black: float = 50
    mean_iterative_max_iterations: int = 100

    # morphology
    binary_threshold: int = 128
    se_size: int = 3
    se_shape: str = "square"  # square / cross / circle

    # color area analysis
    hue_min: float = 60  # degrees; hue_min > hue_max wraps through 0
    hue_max: float = 180
    saturation_min: float = 30  # percent
    saturation_max: float = 100
    value_min: float = 20  # percent
    value_max: float = 100
    green_min: int = 50
    green_max: int = 255
    red_ratio: float = 0.7  # R/G must stay below
    blue_ratio: float = 0.8  # B/G must stay below
    target_color: tuple[int, int, int] = (0, 128, 0)
    color_tolerance: float = 50
    match_in_hsv: bool = False


# A single shared default instance for simple use-cases
default_params = ProcessingParams()
