"""Lead-in / lead-out geometry for cuts.

Leads let a plasma or laser pierce away from the finished edge and blend
into the cut tangentially. Two lead shapes are supported:
- arc: quarter-circle arc tangent to the chain at the connection point
- line: straight segment along the chain tangent

The curve side follows the cut normal when one is stored on the cut.
Otherwise it is chosen from the part topology: leads for holes sit inside
the hole (scrap side), leads for shells sit outside the shell.

Lead angle convention:
- angle rotates the curve side away from the normal, in degrees,
  counter-clockwise positive
"""
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..models import LEAD_TYPES, Chain, Cut, LeadConfig, Part, Point
from .geometry import (
    calculate_arc_sweep,
    calculate_signed_area,
    get_chain_end_point,
    get_chain_start_point,
    get_chain_tangent,
    is_chain_closed,
    normalize_vector,
    offset_chain,
    tessellate_chain,
)

LEAD_ARC_SWEEP = math.pi / 2


class LeadCalculationError(ValueError):
    """Raised when lead geometry cannot be built from the given configuration."""
    pass


@dataclass
class Lead:
    """Lead geometry: either an arc or a straight line."""
    lead_type: str
    connection_point: Point
    center: Optional[Point] = None
    radius: float = 0.0
    start_angle: float = 0.0
    end_angle: float = 0.0
    clockwise: bool = False
    start: Optional[Point] = None
    end: Optional[Point] = None


@dataclass
class LeadResult:
    """Lead-in and lead-out geometry for one chain."""
    lead_in: Optional[Lead] = None
    lead_out: Optional[Lead] = None


@dataclass
class LeadPointResult:
    """Outcome of resolving a lead endpoint.

    Exactly one of three states:
    - point set: the lead produced an endpoint
    - error set: lead calculation failed
    - neither: no lead geometry was produced
    """
    point: Optional[Point] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.point is not None


def _rotate(vector: Point, angle: float) -> Point:
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return Point(vector.x * cos_a - vector.y * sin_a, vector.x * sin_a + vector.y * cos_a)


def _validate_config(config: LeadConfig, label: str) -> None:
    if config.lead_type not in LEAD_TYPES:
        raise LeadCalculationError(f"{label}: unknown lead type '{config.lead_type}'")
    if config.length < 0:
        raise LeadCalculationError(f"{label}: lead length must not be negative ({config.length})")


def _chain_role(chain: Chain, part: Optional[Part]) -> str:
    """Classify a chain as 'shell', 'hole' or 'none' within a part."""
    if part is None:
        return 'none'
    chain_id = chain.original_chain_id or chain.id
    if chain_id == part.shell.id:
        return 'shell'
    for hole in part.voids:
        if chain_id == hole.chain.id:
            return 'hole'
    return 'none'


def _default_curve_direction(chain: Chain, tangent: Point, part: Optional[Part]) -> Point:
    """
    Pick the side a lead curves toward when the cut has no stored normal.

    Args:
        chain: Chain the lead attaches to
        tangent: Unit tangent at the connection point
        part: Containing part, if any

    Returns:
        Unit vector perpendicular to the tangent
    """
    left = Point(-tangent.y, tangent.x)
    right = Point(tangent.y, -tangent.x)

    role = _chain_role(chain, part)
    if role == 'none' or not is_chain_closed(chain):
        return left

    # For CCW (positive area) paths the interior is on the LEFT
    ccw = calculate_signed_area(tessellate_chain(chain)) >= 0
    interior = left if ccw else right
    exterior = right if ccw else left
    return interior if role == 'hole' else exterior


def _curve_direction(
    chain: Chain,
    tangent: Point,
    config: LeadConfig,
    part: Optional[Part],
    normal: Optional[Point]
) -> Point:
    if normal is not None:
        direction = normalize_vector(normal.x, normal.y)
    else:
        direction = _default_curve_direction(chain, tangent, part)

    if config.flip_side:
        direction = Point(-direction.x, -direction.y)
    if config.angle:
        direction = _rotate(direction, math.radians(config.angle))
    return direction


def create_tangent_arc(
    connection_point: Point,
    tangent: Point,
    arc_length: float,
    curve_direction: Point,
    is_lead_in: bool
) -> Lead:
    """
    Create a quarter-circle lead arc tangent to the cut at connection_point.

    The arc length sets the radius: radius = arc_length / (π/2). The arc
    center sits perpendicular to the tangent on the side closest to
    curve_direction. The sweep direction makes the arc velocity at the
    connection point match the cut tangent.

    Args:
        connection_point: Where the lead meets the cut
        tangent: Unit cut tangent at connection_point
        arc_length: Length of the lead arc
        curve_direction: Requested side for the arc center
        is_lead_in: True if the arc ends at the connection point

    Returns:
        Arc lead geometry
    """
    radius = arc_length / LEAD_ARC_SWEEP

    left = Point(-tangent.y, tangent.x)
    right = Point(tangent.y, -tangent.x)
    left_dot = left.x * curve_direction.x + left.y * curve_direction.y
    right_dot = right.x * curve_direction.x + right.y * curve_direction.y
    # Center on the right means a CW arc carries the tool along the tangent
    clockwise = left_dot < right_dot
    center_offset = right if clockwise else left

    center = Point(
        connection_point.x + center_offset.x * radius,
        connection_point.y + center_offset.y * radius
    )
    connection_angle = math.atan2(connection_point.y - center.y, connection_point.x - center.x)

    if is_lead_in:
        end_angle = connection_angle
        start_angle = connection_angle + LEAD_ARC_SWEEP if clockwise else connection_angle - LEAD_ARC_SWEEP
    else:
        start_angle = connection_angle
        end_angle = connection_angle - LEAD_ARC_SWEEP if clockwise else connection_angle + LEAD_ARC_SWEEP

    return Lead(
        lead_type='arc',
        connection_point=connection_point,
        center=center,
        radius=radius,
        start_angle=start_angle,
        end_angle=end_angle,
        clockwise=clockwise
    )


def create_line_lead(
    connection_point: Point,
    tangent: Point,
    length: float,
    angle: Optional[float],
    is_lead_in: bool
) -> Lead:
    """
    Create a straight lead along the cut tangent.

    Lead-ins extend backward from the cut start; lead-outs extend forward
    from the cut end.
    """
    direction = _rotate(tangent, math.radians(angle)) if angle else tangent
    if is_lead_in:
        start = Point(connection_point.x - direction.x * length, connection_point.y - direction.y * length)
        end = connection_point
    else:
        start = connection_point
        end = Point(connection_point.x + direction.x * length, connection_point.y + direction.y * length)
    return Lead(lead_type='line', connection_point=connection_point, start=start, end=end)


def _calculate_lead(
    chain: Chain,
    point: Point,
    config: LeadConfig,
    is_lead_in: bool,
    part: Optional[Part],
    normal: Optional[Point]
) -> Optional[Lead]:
    tangent = get_chain_tangent(chain, at_start=is_lead_in)
    if config.lead_type == 'arc':
        curve = _curve_direction(chain, tangent, config, part, normal)
        return create_tangent_arc(point, tangent, config.length, curve, is_lead_in)
    if config.lead_type == 'line':
        return create_line_lead(point, tangent, config.length, config.angle, is_lead_in)
    return None


def calculate_leads(
    chain: Chain,
    lead_in_config: LeadConfig,
    lead_out_config: LeadConfig,
    cut_direction: str = 'none',
    part: Optional[Part] = None,
    normal: Optional[Point] = None
) -> LeadResult:
    """
    Calculate lead-in and lead-out geometry for a chain.

    The chain is expected to already be in cut order (direction applied),
    so cut_direction only appears in error messages.

    Args:
        chain: Chain the leads attach to
        lead_in_config: Lead-in configuration
        lead_out_config: Lead-out configuration
        cut_direction: 'clockwise', 'counterclockwise' or 'none'
        part: Containing part, used to pick the scrap side
        normal: Stored cut normal, overrides the automatic side

    Returns:
        LeadResult with lead_in / lead_out set for each active config

    Raises:
        LeadCalculationError: On invalid configuration or an empty chain
    """
    _validate_config(lead_in_config, 'Lead-in')
    _validate_config(lead_out_config, 'Lead-out')

    result = LeadResult()
    if not lead_in_config.is_active and not lead_out_config.is_active:
        return result

    if not chain.shapes:
        raise LeadCalculationError(f"Chain {chain.id} has no shapes")

    try:
        if lead_in_config.is_active:
            result.lead_in = _calculate_lead(
                chain, get_chain_start_point(chain), lead_in_config, True, part, normal
            )
        if lead_out_config.is_active:
            result.lead_out = _calculate_lead(
                chain, get_chain_end_point(chain), lead_out_config, False, part, normal
            )
    except ValueError as e:
        raise LeadCalculationError(f"Chain {chain.id} ({cut_direction}): {e}") from e

    return result


def convert_lead_geometry_to_points(lead: Optional[Lead], segments: int = 16) -> List[Point]:
    """
    Discretize lead geometry into points in travel order.

    Returns:
        Points from lead start to lead end, or an empty list
    """
    if lead is None:
        return []

    if lead.lead_type == 'line':
        if lead.start is None or lead.end is None:
            return []
        return [lead.start, lead.end]

    if lead.lead_type == 'arc':
        if lead.center is None or lead.radius <= 0:
            return []
        sweep = calculate_arc_sweep(lead.start_angle, lead.end_angle, lead.clockwise)
        return [
            Point(
                lead.center.x + lead.radius * math.cos(lead.start_angle + sweep * i / segments),
                lead.center.y + lead.radius * math.sin(lead.start_angle + sweep * i / segments)
            )
            for i in range(segments + 1)
        ]

    return []


def prepare_chains_and_lead_configs(cut: Cut, chain: Chain) -> Tuple[Chain, LeadConfig, LeadConfig]:
    """
    Pick the chain leads are computed against and normalize lead configs.

    Prefers the cut's direction-corrected chain, then the kerf offset chain,
    then the raw chain.

    Returns:
        (lead_calculation_chain, lead_in_config, lead_out_config)
    """
    if cut.cut_chain is not None:
        lead_chain = cut.cut_chain
    elif cut.has_offset:
        lead_chain = offset_chain(cut, chain)
    else:
        lead_chain = chain

    lead_in_config = cut.lead_in_config or LeadConfig()
    lead_out_config = cut.lead_out_config or LeadConfig()
    return lead_chain, lead_in_config, lead_out_config


def resolve_lead_point(cut: Cut, chain: Chain, part: Optional[Part], at_start: bool) -> LeadPointResult:
    """
    Resolve the outer endpoint of a cut's lead-in (at_start) or lead-out.

    Never raises: any failure in lead calculation is returned as an error.

    Returns:
        LeadPointResult with the first lead-in point or the last lead-out point
    """
    try:
        lead_chain, lead_in_config, lead_out_config = prepare_chains_and_lead_configs(cut, chain)
        result = calculate_leads(
            lead_chain,
            lead_in_config,
            lead_out_config,
            cut.cut_direction,
            part,
            cut.normal
        )
        lead = result.lead_in if at_start else result.lead_out
        points = convert_lead_geometry_to_points(lead)
    except Exception as e:
        return LeadPointResult(error=f"{type(e).__name__}: {e}")

    if not points:
        return LeadPointResult()
    return LeadPointResult(point=points[0] if at_start else points[-1])
