"""
Unit tests for triangle layout - Functional Core

Tests pure geometry: triangle dimensions, per-cell placement, figure
composition and conversion to GPU coordinates.
"""

from unittest.mock import Mock

import numpy as np
import pytest

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
from .animation import build_frame_layout
from .figure_types import BORDERED_CONFIG, TriangleSpec, Rectangle


# ============================================================================
# Triangle Dimensions
# ============================================================================

class TestDimensions:
    """Test base width and height formulas"""

    def test_width_of_line(self):
        assert width_of_line(64, 4) == 260
        assert width_of_line(0, 3) == 3

    def test_height_of_triangle(self):
        assert height_of_triangle(64, 4) == 256
        assert height_of_triangle(128, 3) == 384

    def test_zero_cell_size(self):
        assert width_of_line(64, 0) == 0
        assert height_of_triangle(64, 0) == 0


# ============================================================================
# Single Triangle
# ============================================================================

class TestRenderTriangle:
    """Test placement of filled cells"""

    def test_single_row_triangle(self):
        """One row emits one cell centered on the anchor"""
        emit = Mock()
        spec = TriangleSpec(x=0, y=0, rows_count=1, square_size=4)

        count = render_triangle(spec, emit)

        assert count == 1
        emit.assert_called_once_with(-2, -2, 4)

    def test_three_rows(self):
        """Rows are centered on the anchor and advance by one cell"""
        emit = Mock()
        spec = TriangleSpec(x=10, y=20, rows_count=3, square_size=2)

        count = render_triangle(spec, emit)

        calls = [tuple(c.args) for c in emit.call_args_list]
        assert count == 5
        assert calls == [
            (9, 19, 2),                 # row 0: [1]
            (8, 21, 2), (10, 21, 2),    # row 1: [1, 1]
            (7, 23, 2), (11, 23, 2),    # row 2: [1, 2, 1], middle is even
        ]

    def test_cells_are_horizontally_symmetric(self):
        """Every row is mirrored around the anchor X"""
        spec = TriangleSpec(x=0, y=0, rows_count=16, square_size=2)
        rects = list(triangle_rectangles(spec))

        centers = {(r.x + r.size / 2, r.y) for r in rects}
        assert centers == {(-cx, cy) for cx, cy in centers}

    def test_starting_row_skips_leading_rows(self):
        """starting_row=3, rows_count=1 renders only Pascal row 2"""
        emit = Mock()
        spec = TriangleSpec(x=0, y=0, rows_count=1, square_size=2, starting_row=3)

        assert render_triangle(spec, emit) == 2
        assert [tuple(c.args) for c in emit.call_args_list] == [(-3, -1, 2), (1, -1, 2)]

    def test_row_range(self):
        spec = TriangleSpec(x=0, y=0, rows_count=128, square_size=2, starting_row=128)
        assert spec.first_row_index == 127
        assert spec.last_row_index == 254

    def test_offset_translates_cells(self):
        emit = Mock()
        spec = TriangleSpec(x=0, y=0, rows_count=1, square_size=4)

        render_triangle(spec, emit, offset=(100, 50))

        emit.assert_called_once_with(98, 48, 4)

    def test_sixty_four_rows_have_729_cells(self):
        """2**6 rows of Pascal's triangle contain 3**6 odd entries"""
        spec = TriangleSpec(x=0, y=0, rows_count=64, square_size=4)
        assert render_triangle(spec, Mock()) == 729
        assert render_triangle(spec, Mock(), use_bitwise=True) == 729

    def test_bitwise_and_exact_cells_match(self):
        spec = TriangleSpec(x=5, y=7, rows_count=40, square_size=3, starting_row=9)
        exact = list(triangle_rectangles(spec))
        bitwise = list(triangle_rectangles(spec, use_bitwise=True))
        assert exact == bitwise

    def test_invalid_starting_row(self):
        spec = TriangleSpec(x=0, y=0, rows_count=1, square_size=4, starting_row=0)
        with pytest.raises(ValueError):
            render_triangle(spec, Mock())

    def test_fractional_cell_size(self):
        """Oscillating cell sizes are fractional and floor the row offset"""
        emit = Mock()
        spec = TriangleSpec(x=0, y=0, rows_count=2, square_size=2.5)

        render_triangle(spec, emit)

        calls = [tuple(c.args) for c in emit.call_args_list]
        # row 0: left = -floor(1.25) = -1; row 1: left = -floor(2.5) = -2
        assert calls == [
            (-1, -1.25, 2.5),
            (-2, 1.25, 2.5), (0.5, 1.25, 2.5),
        ]


# ============================================================================
# Figure Composition
# ============================================================================

class TestComposeFullFigure:
    """Test the four-triangle composition"""

    def test_full_top_triangle(self):
        """top_part_size = 1.0 gives the top triangle all the space"""
        layout = compose_full_figure(400, 300, rows_count=64, square_size=4, top_part_size=1.0)
        top, left, right, border = layout.triangles

        assert layout.origin == (400, 300 - 256 / 2)
        assert top == TriangleSpec(x=0, y=0, rows_count=64, square_size=4)
        assert left.square_size == 0
        assert right.square_size == 0
        assert (left.x, left.y) == (-130, 256)
        assert (right.x, right.y) == (130, 256)
        assert border == TriangleSpec(x=0, y=256, rows_count=128, square_size=2, starting_row=128)

    def test_half_split(self):
        """top_part_size = 0.5 splits the cell size evenly"""
        layout = compose_full_figure(400, 300, rows_count=64, square_size=4, top_part_size=0.5)
        top, left, right, border = layout.triangles

        assert top.square_size == 2
        assert left.square_size == 2
        assert right.square_size == 2
        assert (left.x, left.y) == (-65, 128)
        assert (right.x, right.y) == (65, 128)
        assert layout.origin == (400, 300 - (128 + 128) / 2)
        assert border.y == 256

    def test_bottom_triangles_meet_top_base_corners(self):
        layout = compose_full_figure(0, 0, rows_count=64, square_size=4, top_part_size=0.75)
        top, left, right, _ = layout.triangles

        top_width = width_of_line(64, top.square_size)
        top_height = height_of_triangle(64, top.square_size)
        assert left.x == pytest.approx(-top_width / 2)
        assert right.x == pytest.approx(top_width / 2)
        assert left.y == pytest.approx(top_height)

    def test_cell_sizes_never_negative(self):
        for top_part_size in (0.5, 0.6, 0.75, 0.9, 1.0):
            layout = compose_full_figure(0, 0, 64, 4, top_part_size)
            for spec in layout.triangles:
                assert 0 <= spec.square_size <= 4

    @pytest.mark.parametrize("top_part_size", [0.49, 1.01, -1.0])
    def test_out_of_range_top_part_size(self, top_part_size):
        with pytest.raises(ValueError):
            compose_full_figure(0, 0, 64, 4, top_part_size)

    def test_plain_figure(self):
        layout = compose_plain_figure(400, 300, rows_count=128, square_size=3)

        assert layout.origin == (400, 300 - 384 / 2)
        assert layout.triangles == (TriangleSpec(x=0, y=0, rows_count=128, square_size=3),)


class TestFigureRendering:
    """Test streaming a whole figure"""

    def test_figure_rectangles_applies_origin(self):
        layout = compose_plain_figure(50, 50, rows_count=1, square_size=4)
        rects = list(figure_rectangles(layout))
        assert rects == [Rectangle(x=48, y=46, size=4)]

    def test_render_figure_counts_all_triangles(self):
        layout = compose_full_figure(400, 300, rows_count=8, square_size=4, top_part_size=0.5)
        emit = Mock()

        count = render_figure(layout, emit, use_bitwise=True)

        border_cells = sum(2 ** bin(n).count('1') for n in range(15, 31))
        assert count == 27 * 3 + border_cells
        assert emit.call_count == count

    def test_render_figure_matches_figure_rectangles(self):
        layout = compose_full_figure(400, 300, rows_count=8, square_size=4, top_part_size=0.8)
        emitted = []

        render_figure(layout, lambda x, y, s: emitted.append(Rectangle(x, y, s)))

        assert emitted == list(figure_rectangles(layout))

    def test_default_frame_exact_matches_bitwise(self):
        """A full default frame streams identical squares on both parity paths"""
        layout = build_frame_layout(1.0, 800, 600, BORDERED_CONFIG)

        exact = list(figure_rectangles(layout))
        bitwise = list(figure_rectangles(layout, use_bitwise=True))

        assert len(exact) > 729
        assert exact == bitwise
        assert render_figure(layout, Mock()) == len(exact)


# ============================================================================
# GPU Coordinate Conversion
# ============================================================================

class TestCoordinateConversion:
    """Test pixel → normalized device coordinates"""

    def test_top_left_quadrant(self):
        result = pixel_rect_to_ndc(0, 0, 100, 100, 200, 200)
        assert result == pytest.approx((-1.0, 0.0, 1.0, 1.0))

    def test_center_rect(self):
        result = pixel_rect_to_ndc(100, 100, 50, 50, 200, 200)
        assert result == pytest.approx((0.0, -0.5, 0.5, 0.5))

    def test_non_square_screen(self):
        result = pixel_rect_to_ndc(0, 0, 400, 100, 400, 200)
        assert result == pytest.approx((-1.0, 0.0, 2.0, 1.0))

    def test_batch_rectangle_data(self):
        rects = batch_rectangle_data([(0, 0, 100, 100), (100, 100, 50, 50)], 200, 200)

        assert rects.shape == (2, 4)
        assert rects.dtype == np.float32
        np.testing.assert_allclose(rects[1], [0.0, -0.5, 0.5, 0.5])

    def test_batch_empty(self):
        rects = batch_rectangle_data([], 200, 200)
        assert rects.shape == (0, 4)
        assert rects.dtype == np.float32
