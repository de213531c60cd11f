"""
Exceptions raised by the fillet pipeline.

Only invalid caller input is raised. Degenerate geometry is handled locally
and kernel failures propagate from manifold3d unchanged.
"""


class InvalidParameterError(ValueError):
    """Raised when a fillet or tube parameter is out of range."""
