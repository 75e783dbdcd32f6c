"""
Triangle Layout - Functional Core

Pure functions mapping parity triangles onto screen-space squares.
No side effects, no drawing - only geometry.

Follows functional core, imperative shell pattern:
- This module: Pure geometry (testable, predictable)
- shell.py: Surfaces and the frame loop (side effects)
"""

import math
from typing import Callable, Iterable, Iterator, List, Tuple

import numpy as np

from .figure_types import (
    TriangleSpec,
    FigureLayout,
    Rectangle,
    MIN_TOP_PART_SIZE,
    MAX_TOP_PART_SIZE,
)
from .pascal import sierpinski_triangle


# Callback receiving (x, y, size) of a filled square's top-left corner
EmitFn = Callable[[float, float, float], None]


# ============================================================================
# Triangle Dimensions
# ============================================================================

def width_of_line(line_number: float, square_size: float) -> float:
    """Width of a triangle's base at a given row count

    Args:
        line_number: Number of rows (L)
        square_size: Cell size (s)

    Returns:
        (L + 1) * s
    """
    return (line_number + 1) * square_size


def height_of_triangle(lines_count: float, square_size: float) -> float:
    """Height of a triangle with lines_count rows: L * s"""
    return lines_count * square_size


# ============================================================================
# Single Triangle Rendering
# ============================================================================

def triangle_rectangles(
    spec: TriangleSpec,
    use_bitwise: bool = False,
    offset: Tuple[float, float] = (0.0, 0.0)
) -> Iterator[Rectangle]:
    """Yield a square for every odd cell of a parity triangle

    Row r of the stream has its center line at spec.y + r * size. Its
    leftmost cell starts at spec.x - floor(size * cells / 2) and cells
    advance by size, so every row is centered on spec.x.

    Args:
        spec: Triangle to render
        use_bitwise: Compute parity without exact coefficients
        offset: Translation added to every square (screen origin of the figure)

    Yields:
        Rectangle with the top-left corner of each filled square
    """
    if spec.starting_row < 1:
        raise ValueError(f"starting_row must be >= 1, got {spec.starting_row}")

    offset_x, offset_y = offset
    size = spec.square_size
    half = size / 2
    center_y = spec.y

    rows = sierpinski_triangle(spec.first_row_index, spec.last_row_index, use_bitwise)
    for row in rows:
        left_x = spec.x - math.floor(size * len(row) / 2)

        for k, is_odd in enumerate(row):
            if is_odd:
                center_x = left_x + half + k * size
                yield Rectangle(
                    x=offset_x + center_x - half,
                    y=offset_y + center_y - half,
                    size=size
                )

        center_y += size


def render_triangle(
    spec: TriangleSpec,
    emit: EmitFn,
    use_bitwise: bool = False,
    offset: Tuple[float, float] = (0.0, 0.0)
) -> int:
    """Stream a triangle's filled squares into emit(x, y, size)

    Args:
        spec: Triangle to render
        emit: Called once per filled cell with its top-left corner and size
        use_bitwise: Compute parity without exact coefficients
        offset: Translation added to every square

    Returns:
        Number of squares emitted
    """
    count = 0
    for rect in triangle_rectangles(spec, use_bitwise=use_bitwise, offset=offset):
        emit(rect.x, rect.y, rect.size)
        count += 1
    return count


# ============================================================================
# Figure Composition
# ============================================================================

def compose_full_figure(
    center_x: float,
    center_y: float,
    rows_count: int,
    square_size: float,
    top_part_size: float
) -> FigureLayout:
    """Compose the pulsing "Sierpinski of triangles" figure

    Four triangles in figure-local coordinates:
    1. Top triangle at the origin, cells scaled by top_part_size
    2. Left and right triangles hanging from the top triangle's base
       corners, cells scaled by 1 - top_part_size
    3. Border triangle starting at row 2 * rows_count, spanning
       2 * rows_count rows at half the default cell size

    Args:
        center_x, center_y: Screen point the figure is centered on
        rows_count: Rows per inner triangle
        square_size: Default cell size
        top_part_size: Top triangle share of the cell size, in [0.5, 1.0]

    Returns:
        FigureLayout with the translation and the four triangles

    Raises:
        ValueError: If top_part_size is outside [0.5, 1.0]
    """
    if not (MIN_TOP_PART_SIZE <= top_part_size <= MAX_TOP_PART_SIZE):
        raise ValueError(
            f"top_part_size {top_part_size} out of range "
            f"[{MIN_TOP_PART_SIZE}, {MAX_TOP_PART_SIZE}]"
        )

    # Top triangle
    top_square_size = square_size * top_part_size
    top_height = height_of_triangle(rows_count, top_square_size)
    top_width = width_of_line(rows_count, top_square_size)
    top_x, top_y = 0.0, 0.0

    # Bottom part: two triangles
    bottom_square_size = square_size * (1 - top_part_size)
    bottom_height = height_of_triangle(rows_count, bottom_square_size)

    left_x = top_x - top_width / 2
    right_x = top_x + top_width / 2
    bottom_y = top_height

    origin_y = center_y - (top_height + bottom_height) / 2

    triangles = (
        TriangleSpec(x=top_x, y=top_y, rows_count=rows_count,
                     square_size=top_square_size),
        TriangleSpec(x=left_x, y=bottom_y, rows_count=rows_count,
                     square_size=bottom_square_size),
        TriangleSpec(x=right_x, y=bottom_y, rows_count=rows_count,
                     square_size=bottom_square_size),
        # Closes the border around the whole figure
        TriangleSpec(x=top_x, y=bottom_y + bottom_height,
                     starting_row=rows_count * 2,
                     rows_count=rows_count * 2,
                     square_size=square_size / 2),
    )

    return FigureLayout(origin=(center_x, origin_y), triangles=triangles)


def compose_plain_figure(
    center_x: float,
    center_y: float,
    rows_count: int,
    square_size: float
) -> FigureLayout:
    """Single triangle centered on the given point"""
    height = height_of_triangle(rows_count, square_size)
    triangle = TriangleSpec(x=0.0, y=0.0, rows_count=rows_count, square_size=square_size)
    return FigureLayout(origin=(center_x, center_y - height / 2), triangles=(triangle,))


def figure_rectangles(layout: FigureLayout, use_bitwise: bool = False) -> Iterator[Rectangle]:
    """Yield every filled square of a figure in screen space, triangle by triangle"""
    for spec in layout.triangles:
        yield from triangle_rectangles(spec, use_bitwise=use_bitwise, offset=layout.origin)


def render_figure(layout: FigureLayout, emit: EmitFn, use_bitwise: bool = False) -> int:
    """Stream every filled square of a figure into emit(x, y, size)

    Returns:
        Total number of squares emitted
    """
    count = 0
    for rect in figure_rectangles(layout, use_bitwise=use_bitwise):
        emit(rect.x, rect.y, rect.size)
        count += 1
    return count


# ============================================================================
# Coordinate System Transformations
# ============================================================================

def pixel_rect_to_ndc(
    x: float, y: float, width: float, height: float,
    screen_width: int, screen_height: int
) -> Tuple[float, float, float, float]:
    """Convert a top-left pixel rectangle to OpenGL normalized coords

    Pixel space has its origin at the top-left with Y growing downward.
    Normalized space spans -1 to 1 with Y growing upward, and OpenGL
    rectangles are anchored at their bottom-left corner.

    Args:
        x, y: Top-left corner in pixels
        width, height: Size in pixels
        screen_width, screen_height: Surface size in pixels

    Returns:
        (x, y, width, height) in normalized coords, y at the bottom edge
    """
    ndc_x = (x / screen_width) * 2.0 - 1.0
    ndc_top = 1.0 - (y / screen_height) * 2.0
    ndc_width = (width / screen_width) * 2.0
    ndc_height = (height / screen_height) * 2.0
    return (ndc_x, ndc_top - ndc_height, ndc_width, ndc_height)


def batch_rectangle_data(
    rectangles: Iterable[Tuple[float, float, float, float]],
    screen_width: int,
    screen_height: int
) -> np.ndarray:
    """Batch pixel rectangles into a numpy array for GPU upload

    Args:
        rectangles: (x, y, width, height) tuples in pixels (top-left origin)
        screen_width, screen_height: Surface size in pixels

    Returns:
        (N, 4) float32 array of normalized (x, y, width, height)
    """
    converted: List[Tuple[float, float, float, float]] = [
        pixel_rect_to_ndc(x, y, w, h, screen_width, screen_height)
        for x, y, w, h in rectangles
    ]
    if not converted:
        return np.zeros((0, 4), dtype='f4')
    return np.array(converted, dtype='f4')
