"""
Animation Core - Functional Core

Pure functions for time-based animation calculations.
No side effects, no drawing - only animation math.

Used by shell.AnimationDriver to advance the oscillation every frame.
"""

from .core import compose_full_figure, compose_plain_figure
from .figure_types import (
    FigureConfig,
    FigureLayout,
    MIN_DELTA_TIME_MS,
    MAX_DELTA_TIME_MS,
    OSCILLATION_DIVISOR,
    MIN_TOP_PART_SIZE,
    MAX_TOP_PART_SIZE,
)


# ============================================================================
# Time Calculations
# ============================================================================

def frame_time_from_number(frame_number: int, fps: float) -> float:
    """Calculate time in milliseconds for a given frame number

    Args:
        frame_number: Frame index (0-based)
        fps: Frames per second

    Returns:
        Time in milliseconds
    """
    return frame_number * 1000.0 / fps


def total_frames_from_duration(duration_seconds: float, fps: float) -> int:
    """Calculate total number of frames for duration

    Args:
        duration_seconds: Duration in seconds
        fps: Frames per second

    Returns:
        Total frame count
    """
    return int(duration_seconds * fps)


def frames_per_second(delta_time: float) -> float:
    """Instantaneous frame rate from the last frame interval (ms)"""
    if delta_time <= 0:
        return 0.0
    return 1000.0 / delta_time


# ============================================================================
# Oscillation
# ============================================================================

def clamp_delta_time(delta_time: float) -> float:
    """Clamp a frame interval to [10, 50] ms

    Stalls and frame-rate spikes both map onto a bounded step, so the
    animation speed never jumps.
    """
    return min(MAX_DELTA_TIME_MS, max(MIN_DELTA_TIME_MS, delta_time))


def oscillation_step(delta_time: float) -> float:
    """Amount top_part_size shrinks after a frame of delta_time ms"""
    return clamp_delta_time(delta_time) / OSCILLATION_DIVISOR


def advance_top_part_size(top_part_size: float, delta_time: float) -> float:
    """Advance the sawtooth oscillation by one frame

    Args:
        top_part_size: Current value in [0.5, 1.0]
        delta_time: Milliseconds since the previous frame

    Returns:
        New value; resets to 1.0 once it drops below 0.5
    """
    top_part_size -= oscillation_step(delta_time)

    if top_part_size < MIN_TOP_PART_SIZE:
        top_part_size = MAX_TOP_PART_SIZE

    return top_part_size


def steps_until_reset(delta_time: float, top_part_size: float = MAX_TOP_PART_SIZE) -> int:
    """Number of frames at a constant delta until the oscillation resets

    Args:
        delta_time: Constant frame interval in ms
        top_part_size: Starting value

    Returns:
        Frame count after which top_part_size has jumped back to 1.0
    """
    steps = 0
    step = oscillation_step(delta_time)
    while True:
        steps += 1
        top_part_size -= step
        if top_part_size < MIN_TOP_PART_SIZE:
            return steps


# ============================================================================
# Frame Layout
# ============================================================================

def build_frame_layout(
    top_part_size: float,
    surface_width: float,
    surface_height: float,
    config: FigureConfig
) -> FigureLayout:
    """Build the figure for the current frame

    Args:
        top_part_size: Current oscillation value
        surface_width, surface_height: Surface size read this frame
        config: Variant preset

    Returns:
        FigureLayout centered on the surface
    """
    center_x = surface_width / 2
    center_y = surface_height / 2

    if not config.bordered:
        return compose_plain_figure(
            center_x, center_y,
            rows_count=config.rows_count,
            square_size=config.square_size
        )

    return compose_full_figure(
        center_x, center_y,
        rows_count=config.rows_count,
        square_size=config.square_size,
        top_part_size=top_part_size
    )
