"""Shared dataclasses for cut order optimization."""
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


SHAPE_TYPES = ('line', 'arc', 'circle', 'polyline', 'spline', 'ellipse')
LEAD_TYPES = ('none', 'arc', 'line')
CUT_DIRECTIONS = ('clockwise', 'counterclockwise', 'none')


@dataclass(frozen=True)
class Point:
    """A 2D coordinate point."""
    x: float
    y: float


@dataclass
class Shape:
    """A geometric primitive within a chain.

    The geometry payload depends on shape_type:
    - line: start, end
    - arc: center, radius, start_angle, end_angle (radians), clockwise
    - circle: center, radius
    - polyline: points, closed
    - spline: control_points, fit_points (optional)
    - ellipse: center, major_axis_endpoint, minor_to_major_ratio,
      start_param / end_param (optional, omitted for a full ellipse)
    """
    id: str
    shape_type: str
    geometry: Dict[str, Any]


@dataclass
class Chain:
    """An ordered sequence of contiguous shapes forming one path."""
    id: str
    shapes: List[Shape]
    clockwise: Optional[bool] = None
    original_chain_id: Optional[str] = None


@dataclass
class KerfOffset:
    """Tool-compensated path that supersedes the raw chain for endpoints."""
    offset_shapes: List[Shape]
    original_shapes: List[Shape] = field(default_factory=list)
    direction: str = 'none'  # 'inset', 'outset', 'none'
    kerf_width: float = 0.0
    version: int = 1


@dataclass
class LeadConfig:
    """How the tool approaches or departs a cut."""
    lead_type: str = 'none'  # 'none', 'arc', 'line'
    length: float = 0.0
    flip_side: bool = False
    angle: Optional[float] = None  # degrees, rotates the lead away from the normal

    @property
    def is_active(self) -> bool:
        return self.lead_type != 'none' and self.length > 0


@dataclass(eq=False)
class Cut:
    """A unit of cutting work referencing one chain.

    Equality is identity: two cuts with the same fields are still
    different cuts.
    """
    id: str
    chain_id: str
    name: str = ''
    cut_direction: str = 'none'  # 'clockwise', 'counterclockwise', 'none'
    lead_in_config: Optional[LeadConfig] = None
    lead_out_config: Optional[LeadConfig] = None
    offset: Optional[KerfOffset] = None
    cut_chain: Optional[Chain] = None
    normal: Optional[Point] = None
    # CNC parameters, carried through unchanged
    feed_rate: Optional[float] = None
    pierce_height: Optional[float] = None
    pierce_delay: Optional[float] = None
    enabled: bool = True
    rapid_in: Optional['Rapid'] = None

    @property
    def has_offset(self) -> bool:
        return self.offset is not None and len(self.offset.offset_shapes) > 0


@dataclass
class PartHole:
    """A void inside a part."""
    id: str
    chain: Chain


@dataclass
class Part:
    """A detected part: one shell chain and the holes inside it."""
    id: str
    shell: Chain
    voids: List[PartHole] = field(default_factory=list)


@dataclass
class Rapid:
    """A non-cutting traversal between two points."""
    id: str
    start: Point
    end: Point
    kind: str = 'rapid'

    @property
    def length(self) -> float:
        return math.hypot(self.end.x - self.start.x, self.end.y - self.start.y)


@dataclass
class OptimizationResult:
    """Result of cut order optimization.

    ordered_cuts and rapids are parallel: rapids[i] leads into ordered_cuts[i].
    """
    ordered_cuts: List[Cut] = field(default_factory=list)
    rapids: List[Rapid] = field(default_factory=list)
    total_distance: float = 0.0
    dropped_cut_ids: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
