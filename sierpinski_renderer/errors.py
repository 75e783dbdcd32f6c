"""
Sierpinski Renderer - Error Types

Exceptions shared by the functional core and the imperative shell.

Taxonomy:
    ArithmeticPreconditionError → combination() called with bad arguments
    NonExactDivisionError → product/factorial division left a remainder
    SurfaceUnavailableError → a host drawing primitive failed
"""


class ArithmeticPreconditionError(ValueError):
    """Raised when combinatorics helpers get arguments outside their domain

    Programming error: callers must pass integers with 0 <= k <= n.
    Arguments are never clamped.
    """


class NonExactDivisionError(ArithmeticError):
    """Raised when a division expected to be exact leaves a remainder

    Indicates a defect in the arithmetic itself, never a recoverable state.
    """


class SurfaceUnavailableError(RuntimeError):
    """Raised when the drawing surface can no longer be drawn on

    Wraps the underlying host failure (closed window, released GPU context,
    invalid canvas). The animation driver stops scheduling frames once this
    is raised.
    """
