"""
Sierpinski Renderer - Imperative Shell

Handles drawing surfaces, timing and the per-frame animation loop.
Uses pure functions from core and animation for every calculation.

Follows functional core, imperative shell pattern:
- core.py / animation.py: Pure transformations (testable, predictable)
- This module: Surfaces, GPU resources and frame state (side effects)
"""

import time
from contextlib import contextmanager
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

import moderngl
import numpy as np
from PIL import Image

from .animation import advance_top_part_size, build_frame_layout, frames_per_second
from .core import batch_rectangle_data, render_figure
from .errors import SurfaceUnavailableError
from .figure_types import AnimationState, FigureConfig, BORDERED_CONFIG


Color = Tuple[int, int, int]
FrameCallback = Callable[[], None]


# ============================================================================
# Host Platform Contract
# ============================================================================

class Surface(Protocol):
    """Drawing surface provided by the host platform"""

    def get_size(self) -> Tuple[int, int]:
        ...

    def clear(self, color: Color) -> None:
        ...

    def fill_rect(self, x: float, y: float, width: float, height: float, color: Color) -> None:
        ...

    def resize(self, width: int, height: int) -> None:
        ...


class FrameHost(Protocol):
    """Clock and frame scheduler provided by the host platform"""

    def now(self) -> float:
        """Current timestamp in milliseconds"""
        ...

    def schedule_next_frame(self, callback: FrameCallback) -> None:
        """Request a single future invocation of callback"""
        ...


# ============================================================================
# Performance Timing Utilities
# ============================================================================

class RenderTimings:
    """Accumulates timing data for rendering operations"""
    def __init__(self):
        self.timings = {}
        self.counts = {}

    def record(self, operation: str, duration: float):
        """Record timing for an operation"""
        if operation not in self.timings:
            self.timings[operation] = 0.0
            self.counts[operation] = 0
        self.timings[operation] += duration
        self.counts[operation] += 1

    def get_summary(self) -> Dict[str, Dict[str, float]]:
        """Get timing summary with total, average, and count"""
        summary = {}
        for op, total in self.timings.items():
            count = self.counts[op]
            summary[op] = {
                'total_ms': total * 1000,
                'avg_ms': (total / count) * 1000 if count > 0 else 0,
                'count': count
            }
        return summary

    def print_summary(self, title: str = "Frame Timing Summary"):
        """Print formatted timing summary, slowest operation first"""
        summary = self.get_summary()
        if not summary:
            print(f"{title}: No timing data collected")
            return

        print(f"\n{'='*70}")
        print(f"{title}")
        print(f"{'='*70}")
        print(f"{'Operation':<35} {'Total (ms)':>12} {'Avg (ms)':>12} {'Count':>8}")
        print(f"{'-'*70}")

        sorted_ops = sorted(summary.items(), key=lambda x: x[1]['total_ms'], reverse=True)
        for op_name, stats in sorted_ops:
            print(f"{op_name:<35} {stats['total_ms']:>12.3f} {stats['avg_ms']:>12.4f} {stats['count']:>8}")

        print(f"{'='*70}\n")

    def reset(self):
        """Clear all timing data"""
        self.timings.clear()
        self.counts.clear()


@contextmanager
def time_operation(timings: Optional[RenderTimings], operation: str):
    """Context manager to time an operation

    Args:
        timings: RenderTimings instance to record to (or None to skip timing)
        operation: Name of the operation being timed
    """
    if timings is None:
        yield
        return

    start = time.perf_counter()
    try:
        yield
    finally:
        timings.record(operation, time.perf_counter() - start)


# ============================================================================
# CPU Surface (numpy canvas)
# ============================================================================

def _validate_size(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise ValueError(f"Surface size must be positive, got {width}x{height}")


class ImageSurface:
    """RGB canvas backed by a numpy array

    Rectangles are snapped to whole pixels and clipped to the canvas.
    Pillow handles conversion to images and saving.
    """

    def __init__(self, width: int = 800, height: int = 600):
        _validate_size(width, height)
        self.pixels = np.zeros((height, width, 3), dtype=np.uint8)
        self.closed = False

    def _ensure_open(self) -> None:
        if self.closed:
            raise SurfaceUnavailableError("Image surface has been closed")

    def get_size(self) -> Tuple[int, int]:
        self._ensure_open()
        height, width = self.pixels.shape[:2]
        return width, height

    def clear(self, color: Color) -> None:
        self._ensure_open()
        self.pixels[:] = color

    def fill_rect(self, x: float, y: float, width: float, height: float, color: Color) -> None:
        """Fill an axis-aligned rectangle given its top-left corner

        Edges are rounded to the nearest pixel boundary; rectangles that
        round to nothing draw nothing.
        """
        self._ensure_open()
        canvas_height, canvas_width = self.pixels.shape[:2]

        x0 = max(0, int(round(x)))
        y0 = max(0, int(round(y)))
        x1 = min(canvas_width, int(round(x + width)))
        y1 = min(canvas_height, int(round(y + height)))

        if x1 <= x0 or y1 <= y0:
            return

        self.pixels[y0:y1, x0:x1] = color

    def resize(self, width: int, height: int) -> None:
        """Reallocate the canvas; previous contents are discarded"""
        self._ensure_open()
        _validate_size(width, height)
        self.pixels = np.zeros((height, width, 3), dtype=np.uint8)

    def to_array(self) -> np.ndarray:
        """Copy of the canvas as an RGB (height, width, 3) uint8 array"""
        self._ensure_open()
        return self.pixels.copy()

    def to_image(self) -> Image.Image:
        """Canvas as a Pillow RGB image"""
        return Image.fromarray(self.to_array())

    def save(self, filepath: str) -> None:
        """Save canvas to an image file (format from extension)"""
        self.to_image().save(filepath)

    def close(self) -> None:
        self.closed = True


# ============================================================================
# GPU Surface (ModernGL)
# ============================================================================

RECT_VERTEX_SHADER = """
#version 330

in vec2 in_position;      // Vertex position (0-1 quad)
in vec3 in_color;         // Per-instance color
in vec4 in_rect;          // Per-instance: x, y, width, height (normalized coords)

out vec3 v_color;

void main() {
    // Transform unit quad (0-1) to rectangle position and size
    vec2 pos = in_rect.xy + in_position * in_rect.zw;
    gl_Position = vec4(pos, 0.0, 1.0);
    v_color = in_color;
}
"""

RECT_FRAGMENT_SHADER = """
#version 330

in vec3 v_color;
out vec4 f_color;

void main() {
    f_color = vec4(v_color, 1.0);
}
"""


class ModernGLSurface:
    """Offscreen GPU surface that batches rectangles into one instanced draw

    fill_rect() only queues rectangles; the batch is flushed to the
    framebuffer when pixels are read. clear() discards the queue and sets
    the background for the next flush.

    This is an imperative shell - handles GPU resources and side effects.
    """

    def __init__(self, width: int = 800, height: int = 600, ctx: Any = None):
        """Create GPU context, framebuffer and shader program

        Side effects:
        - Creates a standalone OpenGL context (unless ctx is given)
        - Allocates a framebuffer of width x height

        Raises:
            SurfaceUnavailableError: If no OpenGL context can be created
        """
        _validate_size(width, height)
        self.width = width
        self.height = height
        self.closed = False

        try:
            self.ctx = ctx if ctx is not None else moderngl.create_standalone_context()
            self.prog = self.ctx.program(
                vertex_shader=RECT_VERTEX_SHADER,
                fragment_shader=RECT_FRAGMENT_SHADER
            )
            quad_vertices = np.array([
                [0, 0],  # Bottom-left
                [1, 0],  # Bottom-right
                [0, 1],  # Top-left
                [1, 1],  # Top-right
            ], dtype='f4')
            self.quad_vbo = self.ctx.buffer(quad_vertices.tobytes())
            self.fbo = self.ctx.simple_framebuffer((width, height))
        except Exception as e:
            raise SurfaceUnavailableError(f"Failed to create OpenGL surface: {e}") from e

        self.clear_color: Color = (0, 0, 0)
        self.pending: List[Tuple[float, float, float, float]] = []
        self.pending_colors: List[Tuple[float, float, float]] = []

    def _ensure_open(self) -> None:
        if self.closed:
            raise SurfaceUnavailableError("OpenGL surface has been released")

    def get_size(self) -> Tuple[int, int]:
        self._ensure_open()
        return self.width, self.height

    def clear(self, color: Color) -> None:
        self._ensure_open()
        self.clear_color = color
        self.pending.clear()
        self.pending_colors.clear()

    def fill_rect(self, x: float, y: float, width: float, height: float, color: Color) -> None:
        self._ensure_open()
        if width <= 0 or height <= 0:
            return
        self.pending.append((x, y, width, height))
        self.pending_colors.append(tuple(c / 255.0 for c in color))

    def resize(self, width: int, height: int) -> None:
        """Reallocate the framebuffer at the new size

        Side effects:
        - Releases and recreates the GPU framebuffer
        """
        self._ensure_open()
        _validate_size(width, height)
        try:
            self.fbo.release()
            self.fbo = self.ctx.simple_framebuffer((width, height))
        except Exception as e:
            raise SurfaceUnavailableError(f"Failed to resize OpenGL surface: {e}") from e
        self.width = width
        self.height = height

    def flush(self) -> None:
        """Render queued rectangles to the framebuffer

        Side effects:
        - Uploads instance data to the GPU
        - Clears and draws into the framebuffer
        """
        self._ensure_open()
        clear_rgb = tuple(c / 255.0 for c in self.clear_color)

        try:
            self.fbo.use()
            self.ctx.clear(*clear_rgb)

            if not self.pending:
                return

            # Use functional core to prepare data (pure function)
            rects = batch_rectangle_data(self.pending, self.width, self.height)
            colors = np.array(self.pending_colors, dtype='f4')

            color_vbo = self.ctx.buffer(colors.tobytes())
            rect_vbo = self.ctx.buffer(rects.tobytes())
            vao = self.ctx.vertex_array(
                self.prog,
                [
                    (self.quad_vbo, '2f', 'in_position'),  # Per-vertex
                    (color_vbo, '3f/i', 'in_color'),       # Per-instance
                    (rect_vbo, '4f/i', 'in_rect'),         # Per-instance
                ]
            )
            vao.render(moderngl.TRIANGLE_STRIP, vertices=4, instances=len(self.pending))

            vao.release()
            color_vbo.release()
            rect_vbo.release()
        except moderngl.Error as e:
            raise SurfaceUnavailableError(f"GPU draw failed: {e}") from e

    def to_array(self) -> np.ndarray:
        """Flush and read the framebuffer as an RGB (height, width, 3) array

        Side effects:
        - Reads from GPU memory
        """
        self.flush()
        try:
            raw = self.fbo.read(components=3)
        except moderngl.Error as e:
            raise SurfaceUnavailableError(f"Framebuffer read failed: {e}") from e
        img = np.frombuffer(raw, dtype='u1').reshape((self.height, self.width, 3))

        # Flip vertically (OpenGL origin is bottom-left, images are top-left)
        return np.flip(img, axis=0).copy()

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.to_array())

    def save(self, filepath: str) -> None:
        self.to_image().save(filepath)

    def close(self) -> None:
        """Release GPU resources

        Side effects:
        - Frees the framebuffer, buffers and program
        - Destroys the OpenGL context
        """
        if self.closed:
            return
        self.quad_vbo.release()
        self.fbo.release()
        self.prog.release()
        self.ctx.release()
        self.closed = True

    def __enter__(self):
        """Context manager support"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager cleanup"""
        self.close()


def create_surface(backend: str, width: int, height: int):
    """Create a drawing surface for the named backend

    Args:
        backend: 'image' (numpy canvas) or 'moderngl' (offscreen GPU)
        width, height: Initial size in pixels

    Raises:
        ValueError: If the backend is unknown
    """
    if backend == 'image':
        return ImageSurface(width, height)
    if backend == 'moderngl':
        return ModernGLSurface(width, height)
    raise ValueError(f"Unknown backend '{backend}' (available: image, moderngl)")


# ============================================================================
# Animation Driver
# ============================================================================

class DriverStatus(Enum):
    IDLE = 'idle'
    RUNNING = 'running'
    STOPPED = 'stopped'


class AnimationDriver:
    """Owns the animation state and redraws the figure once per frame

    The driver holds the only mutable state of the animation. Every frame it
    reads the surface size, composes the figure from the current
    top_part_size, streams filled squares into the surface, advances the
    oscillation and asks the host for the next frame.

    A failing surface stops the loop: the error is raised to whoever invoked
    the frame callback and no further frame is scheduled.
    """

    def __init__(
        self,
        surface: Surface,
        host: FrameHost,
        config: FigureConfig = BORDERED_CONFIG,
        timings: Optional[RenderTimings] = None,
        verbose: bool = False
    ):
        self.surface = surface
        self.host = host
        self.config = config
        self.timings = timings
        self.verbose = verbose
        self.state = AnimationState()
        self.status = DriverStatus.IDLE
        self.last_cell_count = 0
        self.started = False

    @property
    def fps(self) -> float:
        """Frame rate derived from the most recent frame interval"""
        return frames_per_second(self.state.delta_time)

    def start(self) -> None:
        """Record the start time and schedule the first frame"""
        if self.status is DriverStatus.STOPPED:
            raise RuntimeError("Animation driver has been stopped")
        if self.started:
            raise RuntimeError("Animation driver is already started")
        self.started = True

        self.state.last_frame_time = self.host.now()
        if self.verbose:
            print(f"Starting '{self.config.name}' animation "
                  f"({self.config.rows_count} rows, cell size {self.config.square_size})")
        self.host.schedule_next_frame(self.draw_frame)

    def stop(self) -> None:
        """Stop scheduling frames; the frame in flight (if any) completes"""
        self.status = DriverStatus.STOPPED

    def _surface_call(self, operation: Callable[..., Any], *args) -> Any:
        try:
            return operation(*args)
        except SurfaceUnavailableError:
            raise
        except Exception as e:
            raise SurfaceUnavailableError(
                f"Drawing failed on frame {self.state.frame_count}: {e}"
            ) from e

    def draw_frame(self) -> None:
        """Frame callback: redraw the figure and schedule the next frame"""
        if self.status is DriverStatus.STOPPED:
            return
        self.status = DriverStatus.RUNNING

        try:
            self._draw()
        except Exception as e:
            self.status = DriverStatus.STOPPED
            if self.verbose:
                print(f"Animation stopped at frame {self.state.frame_count}: {e}")
            raise

        if self.status is DriverStatus.RUNNING:
            self.host.schedule_next_frame(self.draw_frame)

    def _draw(self) -> None:
        state = self.state
        config = self.config

        # 1. Frame timing
        now = self.host.now()
        state.delta_time = now - state.last_frame_time
        state.last_frame_time = now

        # 2. Background
        with time_operation(self.timings, 'clear'):
            self._surface_call(self.surface.clear, config.background_color)

        # 3. Surface size is re-read every frame to follow resizes
        width, height = self._surface_call(self.surface.get_size)

        # 4. Compose and render
        with time_operation(self.timings, 'compose'):
            layout = build_frame_layout(state.top_part_size, width, height, config)

        fill_rect = self.surface.fill_rect
        fill_color = config.fill_color

        def emit(x: float, y: float, size: float) -> None:
            self._surface_call(fill_rect, x, y, size, size, fill_color)

        with time_operation(self.timings, 'render'):
            self.last_cell_count = render_figure(
                layout, emit, use_bitwise=config.parity_optimization
            )

        # 5. Oscillation
        if config.oscillate:
            state.top_part_size = advance_top_part_size(state.top_part_size, state.delta_time)

        state.frame_count += 1
