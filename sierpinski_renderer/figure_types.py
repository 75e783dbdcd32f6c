"""
Figure Data Types - Shared Contract

Defines the data contract between the layout core, the animation math
and the drawing shells.

Type Hierarchy:
    TriangleSpec → one renderable parity triangle (immutable per draw)
    FigureLayout → translation + triangles making up one frame
    Rectangle → one filled cell in screen space
    FigureConfig → fixed preset for one of the animation variants
    AnimationState → per-frame mutable state owned by the driver
"""

from dataclasses import dataclass, field
from typing import Tuple, List, Dict


# ============================================================================
# Fixed Animation Constants
# ============================================================================

# Number of rows in each inner triangle of the bordered composition
DEFAULT_ROWS_COUNT = 64

# Side length of one cell in the bordered composition
DEFAULT_SQUARE_SIZE = 4

# Plain (non-animated) variant
PLAIN_ROWS_COUNT = 128
PLAIN_SQUARE_SIZE = 3

# Oscillation bounds for the top triangle share of the cell size
MIN_TOP_PART_SIZE = 0.5
MAX_TOP_PART_SIZE = 1.0

# Delta time clamp (milliseconds) and divisor for the oscillation step
MIN_DELTA_TIME_MS = 10
MAX_DELTA_TIME_MS = 50
OSCILLATION_DIVISOR = 500

BACKGROUND_COLOR: Tuple[int, int, int] = (0, 0, 0)
FILL_COLOR: Tuple[int, int, int] = (255, 255, 255)


# ============================================================================
# Geometry Types
# ============================================================================

@dataclass(frozen=True)
class TriangleSpec:
    """Everything needed to render one parity triangle

    Attributes:
        x: Anchor X (horizontal center of the apex row)
        y: Anchor Y (vertical center of the first rendered row)
        rows_count: Number of rows to render
        square_size: Side length of one cell
        starting_row: 1-based index of the first rendered row
    """
    x: float
    y: float
    rows_count: int
    square_size: float
    starting_row: int = 1

    @property
    def first_row_index(self) -> int:
        """Zero-based index of the first Pascal row rendered"""
        return self.starting_row - 1

    @property
    def last_row_index(self) -> int:
        """Zero-based index of the last Pascal row rendered (inclusive)"""
        return self.starting_row + self.rows_count - 2


@dataclass(frozen=True)
class FigureLayout:
    """Triangles for one frame, in figure-local coordinates

    Attributes:
        origin: Translation applied to every triangle (screen space)
        triangles: Triangles in draw order
    """
    origin: Tuple[float, float]
    triangles: Tuple[TriangleSpec, ...]


@dataclass(frozen=True)
class Rectangle:
    """One filled cell in screen space

    Attributes:
        x, y: Top-left corner
        size: Side length (cells are square)
    """
    x: float
    y: float
    size: float


# ============================================================================
# Configuration Presets
# ============================================================================

@dataclass(frozen=True)
class FigureConfig:
    """Fixed parameters of one animation variant

    Attributes:
        name: Variant name used for lookups
        rows_count: Rows per inner triangle
        square_size: Default cell size
        oscillate: Whether top_part_size advances every frame
        bordered: Whether the composed (top/left/right/border) figure is drawn
        parity_optimization: Compute parity with the bitwise test instead
            of exact coefficients
        background_color: RGB clear color (0-255)
        fill_color: RGB cell color (0-255)
    """
    name: str
    rows_count: int
    square_size: float
    oscillate: bool = True
    bordered: bool = True
    parity_optimization: bool = False
    background_color: Tuple[int, int, int] = BACKGROUND_COLOR
    fill_color: Tuple[int, int, int] = FILL_COLOR


BORDERED_CONFIG = FigureConfig(
    name='bordered',
    rows_count=DEFAULT_ROWS_COUNT,
    square_size=DEFAULT_SQUARE_SIZE,
)

PLAIN_CONFIG = FigureConfig(
    name='plain',
    rows_count=PLAIN_ROWS_COUNT,
    square_size=PLAIN_SQUARE_SIZE,
    oscillate=False,
    bordered=False,
)

PARITY_CONFIG = FigureConfig(
    name='parity',
    rows_count=DEFAULT_ROWS_COUNT,
    square_size=DEFAULT_SQUARE_SIZE,
    parity_optimization=True,
)

FIGURE_CONFIGS: Dict[str, FigureConfig] = {
    config.name: config
    for config in (BORDERED_CONFIG, PLAIN_CONFIG, PARITY_CONFIG)
}


def get_config(variant: str) -> FigureConfig:
    """Look up a variant preset by name

    Args:
        variant: One of 'bordered', 'plain', 'parity'

    Returns:
        Matching FigureConfig

    Raises:
        ValueError: If the variant is unknown
    """
    try:
        return FIGURE_CONFIGS[variant]
    except KeyError:
        available = ', '.join(sorted(FIGURE_CONFIGS))
        raise ValueError(f"Unknown variant '{variant}' (available: {available})")


def available_variants() -> List[str]:
    """Names of all variant presets, sorted"""
    return sorted(FIGURE_CONFIGS)


# ============================================================================
# Animation State
# ============================================================================

@dataclass
class AnimationState:
    """Per-frame state, mutated once per frame by the animation driver

    Attributes:
        last_frame_time: Timestamp of the previous frame (milliseconds)
        delta_time: Milliseconds between the two most recent frames
        top_part_size: Share of the default cell size used by the top
            triangle, kept in [0.5, 1.0]
        frame_count: Frames drawn so far
    """
    last_frame_time: float = 0.0
    delta_time: float = 0.0
    top_part_size: float = MAX_TOP_PART_SIZE
    frame_count: int = field(default=0)
