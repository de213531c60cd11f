"""
Fillet Module

Rounds selected edges of a solid using the wedge-minus-tube CSG approach:

1. Extract all manifold edges with dihedral angles
2. Select edges by point proximity or sharpness
3. Build one cutting tool per qualifying edge
4. Subtract the tools from the solid

Tools are subtracted one at a time by default. Unioning many tools first
and subtracting once can spike memory with manifold3d; the batched
strategy is still available for kernels that favor it.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Union

from .csg_kernel import get_kernel
from .edge_extraction import MeshEdge, extract_edges
from .edge_selection import EdgeSelection, select_edges, selection_from_dict
from .errors import InvalidParameterError
from .wedge_builder import create_fillet_cutting_tool

logger = logging.getLogger(__name__)

# Default circular segments for tube spheres
DEFAULT_SEGMENTS = 16

# Edges outside (FLAT_EDGE_MIN_ANGLE, FLAT_EDGE_MAX_ANGLE) are treated as
# triangulation artifacts on flat areas and never filleted
FLAT_EDGE_MIN_ANGLE = 5.0
FLAT_EDGE_MAX_ANGLE = 175.0


class SubtractionStrategy(Enum):
    """How cutting tools are removed from the solid."""
    SEQUENTIAL = "sequential"  # one subtraction per tool
    BATCHED = "batched"        # union all tools, subtract once


@dataclass
class FilletOptions:
    """Options for a fillet operation."""
    radius: float
    selection: EdgeSelection
    segments: int = DEFAULT_SEGMENTS
    strategy: SubtractionStrategy = SubtractionStrategy.SEQUENTIAL

    @classmethod
    def from_dict(cls, data: dict) -> 'FilletOptions':
        """Build options from a plain dictionary."""
        if 'radius' not in data:
            raise InvalidParameterError("Fillet options require a 'radius'")

        selection = data.get('selection')
        if isinstance(selection, dict):
            selection = selection_from_dict(selection)
        if selection is None:
            raise InvalidParameterError("Fillet options require a 'selection'")

        strategy = data.get('strategy', SubtractionStrategy.SEQUENTIAL)
        if not isinstance(strategy, SubtractionStrategy):
            try:
                strategy = SubtractionStrategy(strategy)
            except ValueError:
                raise InvalidParameterError(f"Unknown subtraction strategy: {strategy!r}") from None

        segments = data.get('segments')
        return cls(
            radius=float(data['radius']),
            selection=selection,
            segments=DEFAULT_SEGMENTS if segments is None else int(segments),
            strategy=strategy,
        )


@dataclass
class FilletResult:
    """Result of a fillet operation."""
    solid: object
    edges_found: int = 0
    edges_selected: int = 0
    edges_qualifying: int = 0
    tools_built: int = 0
    tools_skipped: int = 0
    strategy: str = SubtractionStrategy.SEQUENTIAL.value
    elapsed_ms: float = 0.0
    messages: List[str] = field(default_factory=list)

    @property
    def was_modified(self) -> bool:
        return self.tools_built > 0

    def to_dict(self) -> dict:
        return {
            'edges_found': self.edges_found,
            'edges_selected': self.edges_selected,
            'edges_qualifying': self.edges_qualifying,
            'tools_built': self.tools_built,
            'tools_skipped': self.tools_skipped,
            'strategy': self.strategy,
            'elapsed_ms': self.elapsed_ms,
            'was_modified': self.was_modified,
            'messages': self.messages,
        }


ProgressCallback = Callable[[int, int], None]


def is_fillet_candidate(edge: MeshEdge) -> bool:
    """True if an edge is a real corner rather than a flat-area artifact."""
    return FLAT_EDGE_MIN_ANGLE < edge.dihedral_angle < FLAT_EDGE_MAX_ANGLE


def build_cutting_tools(
    edges: List[MeshEdge],
    radius: float,
    segments: int = DEFAULT_SEGMENTS,
    kernel=None,
    progress_callback: Optional[ProgressCallback] = None
) -> List:
    """
    Build the cutting tools for a list of edges.

    One tool is attempted per edge; filter with is_fillet_candidate first.
    Tools that come out degenerate are skipped.

    Returns:
        Ordered list of non-degenerate tools
    """
    kernel = kernel or get_kernel()
    tools = []

    for i, edge in enumerate(edges):
        tool = create_fillet_cutting_tool(edge, radius, segments, kernel)
        if tool is not None:
            tools.append(tool)
        if progress_callback:
            progress_callback(i + 1, len(edges))

    return tools


def subtract_tools(
    solid,
    tools: List,
    strategy: SubtractionStrategy = SubtractionStrategy.SEQUENTIAL,
    kernel=None,
    progress_callback: Optional[ProgressCallback] = None
):
    """Remove cutting tools from a solid. The tools list is left unchanged."""
    kernel = kernel or get_kernel()
    total = len(tools)
    if total == 0:
        return solid

    if strategy == SubtractionStrategy.BATCHED:
        result = kernel.subtract(solid, kernel.union(tools))
        if progress_callback:
            progress_callback(total, total)
        return result

    result = solid
    for done, tool in enumerate(tools, start=1):
        result = kernel.subtract(result, tool)
        if progress_callback:
            progress_callback(done, total)

    return result


def fillet_with_report(
    solid,
    options: Union[FilletOptions, dict],
    kernel=None,
    progress_callback: Optional[ProgressCallback] = None
) -> FilletResult:
    """
    Apply fillet/round to selected edges of a solid and report what happened.

    Args:
        solid: The solid to fillet
        options: Fillet options (radius, selection, segments, strategy)
        kernel: CSG kernel (defaults to the shared manifold3d kernel)
        progress_callback: Called with (done, total) during tool building
            and again during subtraction

    Returns:
        FilletResult with the new solid and statistics

    Raises:
        InvalidParameterError: Non-positive radius or malformed options
    """
    if isinstance(options, dict):
        options = FilletOptions.from_dict(options)

    # Also rejects NaN
    if not options.radius > 0:
        raise InvalidParameterError('Fillet radius must be positive')

    kernel = kernel or get_kernel()
    start_time = time.perf_counter()
    result = FilletResult(solid=solid, strategy=options.strategy.value)

    def finish(message: Optional[str] = None) -> FilletResult:
        if message:
            logger.warning(f"fillet: {message}")
            result.messages.append(message)
        result.elapsed_ms = (time.perf_counter() - start_time) * 1000
        return result

    all_edges = extract_edges(solid, kernel)
    result.edges_found = len(all_edges)
    if not all_edges:
        return finish("No edges found in mesh")

    selected = select_edges(all_edges, options.selection)
    result.edges_selected = len(selected)
    if not selected:
        return finish("No edges matched selection criteria")

    logger.info(f"fillet: Found {len(selected)} edges to fillet (radius={options.radius})")

    qualifying = [edge for edge in selected if is_fillet_candidate(edge)]
    result.edges_qualifying = len(qualifying)

    tools = build_cutting_tools(
        qualifying, options.radius, options.segments, kernel, progress_callback
    )
    result.tools_built = len(tools)
    result.tools_skipped = len(qualifying) - len(tools)

    if not tools:
        return finish("No usable cutting tools were produced")

    logger.info(f"fillet: Subtracting {len(tools)} tools ({options.strategy.value})")
    result.solid = subtract_tools(
        solid, tools, options.strategy, kernel, progress_callback
    )

    finish()
    logger.info(f"fillet: Completed in {result.elapsed_ms:.0f}ms")
    return result


def fillet(solid, options: Union[FilletOptions, dict], kernel=None):
    """
    Apply fillet/round to selected edges of a solid.

    Args:
        solid: The solid to fillet
        options: Fillet options (radius, selection, segments, strategy)
        kernel: CSG kernel

    Returns:
        A new solid with filleted edges, or the input when nothing qualified
    """
    return fillet_with_report(solid, options, kernel).solid
