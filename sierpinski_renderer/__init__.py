"""
Sierpinski Renderer Package

Pulsing Pascal-parity (Sierpinski) animation using functional core,
imperative shell pattern.

Modules:
- exact_math: Arbitrary-precision combinatorics (pure)
- pascal: Lazy binomial and parity row generators (pure)
- core: Triangle layout and figure composition (pure)
- animation: Oscillation and frame timing math (pure)
- shell: Surfaces, timing and the AnimationDriver (side effects)
- host_shell: Offline and OpenCV window frame hosts, frame export
"""

from .errors import (
    ArithmeticPreconditionError,
    NonExactDivisionError,
    SurfaceUnavailableError,
)

from .figure_types import (
    TriangleSpec,
    FigureLayout,
    Rectangle,
    FigureConfig,
    AnimationState,
    BORDERED_CONFIG,
    PLAIN_CONFIG,
    PARITY_CONFIG,
    get_config,
    available_variants,
)

from .exact_math import (
    integer_range,
    multiply,
    product_of_range,
    factorial,
    exact_divide,
    combination,
)

from .pascal import (
    binomial_row,
    pascal_triangle,
    is_odd_coefficient,
    parity_row,
    sierpinski_triangle,
)

from .core import (
    width_of_line,
    height_of_triangle,
    triangle_rectangles,
    render_triangle,
    compose_full_figure,
    compose_plain_figure,
    figure_rectangles,
    render_figure,
    pixel_rect_to_ndc,
    batch_rectangle_data,
)

from .animation import (
    frame_time_from_number,
    total_frames_from_duration,
    frames_per_second,
    clamp_delta_time,
    oscillation_step,
    advance_top_part_size,
    steps_until_reset,
    build_frame_layout,
)

from .shell import (
    RenderTimings,
    time_operation,
    ImageSurface,
    ModernGLSurface,
    create_surface,
    DriverStatus,
    AnimationDriver,
)

from .host_shell import (
    OfflineFrameHost,
    OpenCVWindowHost,
    render_animation,
    render_frames_to_array,
    save_frames_as_images,
    write_video,
)

__all__ = [
    # Errors
    'ArithmeticPreconditionError',
    'NonExactDivisionError',
    'SurfaceUnavailableError',

    # Types and presets
    'TriangleSpec',
    'FigureLayout',
    'Rectangle',
    'FigureConfig',
    'AnimationState',
    'BORDERED_CONFIG',
    'PLAIN_CONFIG',
    'PARITY_CONFIG',
    'get_config',
    'available_variants',

    # Exact arithmetic
    'integer_range',
    'multiply',
    'product_of_range',
    'factorial',
    'exact_divide',
    'combination',

    # Rows
    'binomial_row',
    'pascal_triangle',
    'is_odd_coefficient',
    'parity_row',
    'sierpinski_triangle',

    # Layout
    'width_of_line',
    'height_of_triangle',
    'triangle_rectangles',
    'render_triangle',
    'compose_full_figure',
    'compose_plain_figure',
    'figure_rectangles',
    'render_figure',
    'pixel_rect_to_ndc',
    'batch_rectangle_data',

    # Animation
    'frame_time_from_number',
    'total_frames_from_duration',
    'frames_per_second',
    'clamp_delta_time',
    'oscillation_step',
    'advance_top_part_size',
    'steps_until_reset',
    'build_frame_layout',

    # Shell
    'RenderTimings',
    'time_operation',
    'ImageSurface',
    'ModernGLSurface',
    'create_surface',
    'DriverStatus',
    'AnimationDriver',

    # Hosts
    'OfflineFrameHost',
    'OpenCVWindowHost',
    'render_animation',
    'render_frames_to_array',
    'save_frames_as_images',
    'write_video',
]
