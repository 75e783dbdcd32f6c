"""
Host Platforms - Imperative Shell

Frame hosts that drive an AnimationDriver: a deterministic offline clock
for exporting frames and an OpenCV window for live playback.

Both honor the host contract used by shell.AnimationDriver:
- now() returns milliseconds
- schedule_next_frame() is single-shot; at most one callback is pending
- on_resize() callbacks receive the new surface size
"""

import subprocess
import time
from pathlib import Path
from typing import Callable, List, Optional

import cv2  # type: ignore
import numpy as np
from PIL import Image

from .animation import frame_time_from_number
from .errors import SurfaceUnavailableError
from .figure_types import FigureConfig
from .shell import AnimationDriver, FrameCallback, RenderTimings, create_surface


ResizeCallback = Callable[[int, int], None]

ESCAPE_KEY = 27


class _ScheduledHost:
    """Single pending callback plus resize listeners, shared by all hosts"""

    def __init__(self):
        self.pending: Optional[FrameCallback] = None
        self.resize_callbacks: List[ResizeCallback] = []

    def schedule_next_frame(self, callback: FrameCallback) -> None:
        if self.pending is not None:
            raise RuntimeError("A frame callback is already scheduled")
        self.pending = callback

    def on_resize(self, callback: ResizeCallback) -> None:
        self.resize_callbacks.append(callback)

    def notify_resize(self, width: int, height: int) -> None:
        for callback in self.resize_callbacks:
            callback(width, height)

    def fire_pending(self) -> bool:
        """Invoke and clear the pending callback; False if none was scheduled"""
        callback, self.pending = self.pending, None
        if callback is None:
            return False
        callback()
        return True


# ============================================================================
# Offline Host (deterministic clock)
# ============================================================================

class OfflineFrameHost(_ScheduledHost):
    """Host with a simulated clock advancing a fixed interval per frame

    The clock is derived from the number of frames run rather than
    accumulated, so long exports do not drift.

    Used to export animations at a fixed frame rate and in tests.
    """

    def __init__(self, fps: float = 60.0, start_time: float = 0.0):
        super().__init__()
        if fps <= 0:
            raise ValueError(f"fps must be positive, got {fps}")
        self.fps = fps
        self.start_time = start_time
        self.frames_run = 0

    def now(self) -> float:
        return self.start_time + frame_time_from_number(self.frames_run, self.fps)

    def step(self) -> bool:
        """Advance the clock one interval and run the pending frame

        Returns:
            True if a frame callback ran
        """
        if self.pending is None:
            return False
        self.frames_run += 1
        return self.fire_pending()

    def run(self, frame_count: int, on_frame: Optional[Callable[[int], None]] = None) -> int:
        """Run up to frame_count frames

        Args:
            frame_count: Maximum number of frames
            on_frame: Called with the frame index after each frame

        Returns:
            Number of frames actually run (fewer if scheduling stopped)
        """
        completed = 0
        for frame_index in range(frame_count):
            if not self.step():
                break
            completed += 1
            if on_frame is not None:
                on_frame(frame_index)
        return completed


# ============================================================================
# OpenCV Window Host (live playback)
# ============================================================================

class OpenCVWindowHost(_ScheduledHost):
    """Shows a surface in a resizable OpenCV window

    The loop paces frames with cv2.waitKey, polls the window size once per
    iteration and forwards changes to the resize callbacks. Esc, 'q' or
    closing the window ends the loop.
    """

    def __init__(
        self,
        window_name: str = "Sierpinski",
        width: int = 800,
        height: int = 600,
        target_fps: float = 60.0
    ):
        super().__init__()
        self.window_name = window_name
        self.width = width
        self.height = height
        self.frame_interval = 1000.0 / target_fps

    def now(self) -> float:
        return time.perf_counter() * 1000.0

    def _poll_window_size(self) -> None:
        _, _, width, height = cv2.getWindowImageRect(self.window_name)
        if width > 0 and height > 0 and (width, height) != (self.width, self.height):
            self.width, self.height = width, height
            self.notify_resize(width, height)

    def _window_closed(self) -> bool:
        return cv2.getWindowProperty(self.window_name, cv2.WND_PROP_VISIBLE) < 1

    def run(self, surface, max_frames: Optional[int] = None) -> int:
        """Run the frame loop until the window closes or nothing is scheduled

        Side effects:
        - Opens and destroys an OpenCV window
        - Invokes frame callbacks and displays the surface after each

        Args:
            surface: Surface with to_array() returning RGB pixels
            max_frames: Optional frame limit

        Returns:
            Number of frames displayed

        Raises:
            SurfaceUnavailableError: If the window cannot display frames
        """
        cv2.namedWindow(self.window_name, cv2.WINDOW_NORMAL)
        cv2.resizeWindow(self.window_name, self.width, self.height)

        frames = 0
        try:
            while self.pending is not None:
                frame_start = self.now()
                self.fire_pending()
                frames += 1

                try:
                    bgr = cv2.cvtColor(surface.to_array(), cv2.COLOR_RGB2BGR)
                    cv2.imshow(self.window_name, bgr)
                except cv2.error as e:
                    raise SurfaceUnavailableError(f"Failed to display frame: {e}") from e

                elapsed = self.now() - frame_start
                key = cv2.waitKey(max(1, int(self.frame_interval - elapsed))) & 0xFF
                if key in (ESCAPE_KEY, ord('q')) or self._window_closed():
                    break
                if max_frames is not None and frames >= max_frames:
                    break

                self._poll_window_size()
        finally:
            cv2.destroyWindow(self.window_name)

        return frames


# ============================================================================
# Offline Export
# ============================================================================

def render_animation(
    config: FigureConfig,
    frame_count: int,
    on_frame: Callable[[int, np.ndarray], None],
    width: int = 800,
    height: int = 600,
    fps: float = 60.0,
    backend: str = 'image',
    timings: Optional[RenderTimings] = None,
    verbose: bool = False
) -> int:
    """Render frames one at a time and hand each to on_frame

    Frames are never accumulated here; on_frame decides what to keep.

    Side effects:
    - Creates (and releases) a drawing surface

    Args:
        config: Variant preset
        frame_count: Number of frames to render
        on_frame: Called with (frame_index, RGB array)
        width, height: Surface size
        fps: Simulated frame rate
        backend: Surface backend ('image' or 'moderngl')
        timings: Optional timing accumulator
        verbose: Print progress

    Returns:
        Number of frames rendered
    """
    surface = create_surface(backend, width, height)
    host = OfflineFrameHost(fps=fps)
    host.on_resize(surface.resize)
    driver = AnimationDriver(surface, host, config=config, timings=timings, verbose=verbose)

    def handle_frame(frame_index: int) -> None:
        on_frame(frame_index, surface.to_array())
        if verbose and (frame_index + 1) % 60 == 0:
            print(f"  Rendered frame {frame_index + 1}/{frame_count}")

    try:
        driver.start()
        return host.run(frame_count, on_frame=handle_frame)
    finally:
        driver.stop()
        surface.close()


def render_frames_to_array(
    config: FigureConfig,
    frame_count: int,
    width: int = 800,
    height: int = 600,
    fps: float = 60.0,
    backend: str = 'image'
) -> List[np.ndarray]:
    """Render frames into a list of RGB arrays"""
    frames: List[np.ndarray] = []
    render_animation(
        config, frame_count,
        on_frame=lambda _, pixels: frames.append(pixels),
        width=width, height=height, fps=fps, backend=backend
    )
    return frames


def save_frames_as_images(
    config: FigureConfig,
    frame_count: int,
    output_dir: str,
    width: int = 800,
    height: int = 600,
    fps: float = 60.0,
    backend: str = 'image',
    prefix: str = 'frame',
    timings: Optional[RenderTimings] = None,
    verbose: bool = False
) -> List[Path]:
    """Render frames and write each one as a PNG

    Side effects:
    - Creates output_dir if needed
    - Writes frame_count image files

    Returns:
        Paths of the written files, in frame order
    """
    directory = Path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []

    def write_frame(frame_index: int, pixels: np.ndarray) -> None:
        path = directory / f"{prefix}_{frame_index:05d}.png"
        try:
            Image.fromarray(pixels).save(path)
        except OSError as e:
            raise IOError(f"Failed to write frame {path}: {e}")
        written.append(path)

    render_animation(
        config, frame_count, on_frame=write_frame,
        width=width, height=height, fps=fps, backend=backend,
        timings=timings, verbose=verbose
    )
    return written


def ffmpeg_command(output_path: str, width: int, height: int, fps: float) -> List[str]:
    """FFmpeg arguments for encoding raw BGR frames from stdin to H.264"""
    return [
        'ffmpeg',
        '-y',  # Overwrite output
        '-loglevel', 'error',
        '-f', 'rawvideo',
        '-vcodec', 'rawvideo',
        '-s', f'{width}x{height}',
        '-pix_fmt', 'bgr24',
        '-r', str(fps),
        '-i', '-',  # Read video from stdin
        '-an',
        '-vcodec', 'libx264',
        '-preset', 'medium',
        '-crf', '23',
        '-pix_fmt', 'yuv420p',
        '-movflags', '+faststart',
        str(output_path),
    ]


def write_video(
    config: FigureConfig,
    frame_count: int,
    output_path: str,
    width: int = 800,
    height: int = 600,
    fps: float = 60.0,
    backend: str = 'image',
    timings: Optional[RenderTimings] = None,
    verbose: bool = False
) -> int:
    """Render frames straight into an MP4 file through an FFmpeg pipe

    H.264 with yuv420p needs even width and height.

    Side effects:
    - Starts an ffmpeg subprocess
    - Writes output_path

    Returns:
        Number of frames written

    Raises:
        IOError: If ffmpeg cannot be started or fails to encode
    """
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)

    try:
        ffmpeg_process = subprocess.Popen(
            ffmpeg_command(output_path, width, height, fps),
            stdin=subprocess.PIPE,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE
        )
    except OSError as e:
        raise IOError(f"Failed to start FFmpeg: {e}")

    def write_frame(_: int, pixels: np.ndarray) -> None:
        frame = cv2.cvtColor(pixels, cv2.COLOR_RGB2BGR)
        try:
            ffmpeg_process.stdin.write(frame.tobytes())
        except BrokenPipeError as e:
            raise IOError(f"FFmpeg pipe closed early: {e}")

    try:
        count = render_animation(
            config, frame_count, on_frame=write_frame,
            width=width, height=height, fps=fps, backend=backend,
            timings=timings, verbose=verbose
        )
    finally:
        try:
            ffmpeg_process.stdin.close()
        except BrokenPipeError:
            pass
        try:
            ffmpeg_process.wait(timeout=60)
        except subprocess.TimeoutExpired:
            ffmpeg_process.kill()
            ffmpeg_process.wait()

    stderr_output = ffmpeg_process.stderr.read().decode('utf-8', errors='replace')
    ffmpeg_process.stderr.close()
    if ffmpeg_process.returncode != 0:
        raise IOError(
            f"FFmpeg encoding failed with return code {ffmpeg_process.returncode}: "
            f"{stderr_output[-500:]}"
        )

    if verbose:
        print(f"Encoded {count} frames with H.264 to: {output_path}")
    return count
