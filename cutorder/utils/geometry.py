"""Geometry accessors for shapes and chains.

Start/end conventions per shape type:
- line: start and end points
- arc: point at start_angle / end_angle (radians)
- circle: rightmost point (center.x + radius, center.y) for both
- polyline: first / last vertex; a closed polyline ends at its first vertex
- spline: first / last fit point when present, else first / last control point
- ellipse: point at start_param / end_param, or the major axis endpoint
  for a full ellipse
"""
import math
from typing import List, Optional

from ..models import Chain, Cut, Point, Shape


CHAIN_CLOSURE_TOLERANCE = 0.01


def calculate_distance(a: Point, b: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(b.x - a.x, b.y - a.y)


def normalize_vector(x: float, y: float) -> Point:
    """
    Scale a vector to unit length.

    Raises:
        ValueError: If the vector has zero length
    """
    length = math.hypot(x, y)
    if length < 1e-12:
        raise ValueError("Cannot normalize a zero-length vector")
    return Point(x / length, y / length)


def _arc_point(center: Point, radius: float, angle: float) -> Point:
    return Point(center.x + radius * math.cos(angle), center.y + radius * math.sin(angle))


def _ellipse_axes(geometry: dict):
    major = geometry['major_axis_endpoint']
    ratio = geometry.get('minor_to_major_ratio', 1.0)
    # Minor axis is the major axis rotated 90° CCW, scaled by the ratio
    minor = Point(-major.y * ratio, major.x * ratio)
    return major, minor


def _ellipse_point(geometry: dict, param: float) -> Point:
    center = geometry['center']
    major, minor = _ellipse_axes(geometry)
    return Point(
        center.x + major.x * math.cos(param) + minor.x * math.sin(param),
        center.y + major.y * math.cos(param) + minor.y * math.sin(param)
    )


def _spline_points(geometry: dict) -> List[Point]:
    fit_points = geometry.get('fit_points') or []
    if fit_points:
        return list(fit_points)
    return list(geometry.get('control_points') or [])


def _polyline_points(geometry: dict) -> List[Point]:
    points = list(geometry.get('points') or [])
    if geometry.get('closed') and points:
        points.append(points[0])
    return points


def get_shape_start_point(shape: Shape) -> Point:
    """Get the starting point of a shape."""
    g = shape.geometry
    if shape.shape_type == 'line':
        return g['start']
    if shape.shape_type == 'arc':
        return _arc_point(g['center'], g['radius'], g['start_angle'])
    if shape.shape_type == 'circle':
        return Point(g['center'].x + g['radius'], g['center'].y)
    if shape.shape_type == 'polyline':
        points = _polyline_points(g)
        if not points:
            raise ValueError(f"Polyline {shape.id} has no points")
        return points[0]
    if shape.shape_type == 'spline':
        points = _spline_points(g)
        if not points:
            raise ValueError(f"Spline {shape.id} has no points")
        return points[0]
    if shape.shape_type == 'ellipse':
        if g.get('start_param') is not None:
            return _ellipse_point(g, g['start_param'])
        return _ellipse_point(g, 0.0)
    raise ValueError(f"Unknown shape type: {shape.shape_type}")


def get_shape_end_point(shape: Shape) -> Point:
    """Get the ending point of a shape."""
    g = shape.geometry
    if shape.shape_type == 'line':
        return g['end']
    if shape.shape_type == 'arc':
        return _arc_point(g['center'], g['radius'], g['end_angle'])
    if shape.shape_type == 'circle':
        # Closed circles end where they start
        return Point(g['center'].x + g['radius'], g['center'].y)
    if shape.shape_type == 'polyline':
        points = _polyline_points(g)
        if not points:
            raise ValueError(f"Polyline {shape.id} has no points")
        return points[-1]
    if shape.shape_type == 'spline':
        points = _spline_points(g)
        if not points:
            raise ValueError(f"Spline {shape.id} has no points")
        return points[-1]
    if shape.shape_type == 'ellipse':
        if g.get('end_param') is not None:
            return _ellipse_point(g, g['end_param'])
        return _ellipse_point(g, 0.0)
    raise ValueError(f"Unknown shape type: {shape.shape_type}")


def get_chain_start_point(chain: Chain) -> Point:
    """Get the start point of a chain (start of its first shape)."""
    if not chain.shapes:
        raise ValueError('Chain has no shapes')
    return get_shape_start_point(chain.shapes[0])


def get_chain_end_point(chain: Chain) -> Point:
    """Get the end point of a chain (end of its last shape)."""
    if not chain.shapes:
        raise ValueError('Chain has no shapes')
    return get_shape_end_point(chain.shapes[-1])


def _segment_direction(points: List[Point], at_start: bool) -> Point:
    if len(points) < 2:
        raise ValueError("Need at least two points for a tangent")
    if at_start:
        a, b = points[0], points[1]
    else:
        a, b = points[-2], points[-1]
    return normalize_vector(b.x - a.x, b.y - a.y)


def get_shape_tangent(shape: Shape, at_start: bool) -> Point:
    """
    Get the unit tangent of a shape at its start or end, in the
    direction of travel.

    Args:
        shape: Shape to evaluate
        at_start: True for the start point, False for the end point

    Returns:
        Unit direction vector

    Raises:
        ValueError: For degenerate or unknown shapes
    """
    g = shape.geometry
    if shape.shape_type == 'line':
        return _segment_direction([g['start'], g['end']], True)
    if shape.shape_type == 'arc':
        angle = g['start_angle'] if at_start else g['end_angle']
        tx, ty = -math.sin(angle), math.cos(angle)
        if g.get('clockwise'):
            tx, ty = -tx, -ty
        return Point(tx, ty)
    if shape.shape_type == 'circle':
        # Circles are traversed counter-clockwise from the rightmost point
        return Point(0.0, 1.0)
    if shape.shape_type == 'polyline':
        return _segment_direction(_polyline_points(g), at_start)
    if shape.shape_type == 'spline':
        return _segment_direction(_spline_points(g), at_start)
    if shape.shape_type == 'ellipse':
        if at_start:
            param = g.get('start_param') or 0.0
        else:
            param = g['end_param'] if g.get('end_param') is not None else 0.0
        major, minor = _ellipse_axes(g)
        return normalize_vector(
            -major.x * math.sin(param) + minor.x * math.cos(param),
            -major.y * math.sin(param) + minor.y * math.cos(param)
        )
    raise ValueError(f"Unknown shape type: {shape.shape_type}")


def get_chain_tangent(chain: Chain, at_start: bool) -> Point:
    """Get the unit tangent at the start or end of a chain."""
    if not chain.shapes:
        raise ValueError('Chain has no shapes')
    shape = chain.shapes[0] if at_start else chain.shapes[-1]
    return get_shape_tangent(shape, at_start)


def reverse_shape(shape: Shape) -> Shape:
    """Return a copy of the shape traversed in the opposite direction."""
    g = dict(shape.geometry)
    if shape.shape_type == 'line':
        g['start'], g['end'] = shape.geometry['end'], shape.geometry['start']
    elif shape.shape_type == 'arc':
        g['start_angle'], g['end_angle'] = shape.geometry['end_angle'], shape.geometry['start_angle']
        g['clockwise'] = not shape.geometry.get('clockwise', False)
    elif shape.shape_type == 'polyline':
        g['points'] = list(reversed(shape.geometry.get('points') or []))
    elif shape.shape_type == 'spline':
        g['control_points'] = list(reversed(shape.geometry.get('control_points') or []))
        if shape.geometry.get('fit_points'):
            g['fit_points'] = list(reversed(shape.geometry['fit_points']))
    elif shape.shape_type == 'ellipse':
        if shape.geometry.get('start_param') is not None:
            g['start_param'], g['end_param'] = shape.geometry['end_param'], shape.geometry['start_param']
    return Shape(id=shape.id, shape_type=shape.shape_type, geometry=g)


def reverse_chain(chain: Chain) -> Chain:
    """Reverse a chain's direction: shape order and each shape's geometry."""
    clockwise = None if chain.clockwise is None else not chain.clockwise
    return Chain(
        id=chain.id,
        shapes=[reverse_shape(s) for s in reversed(chain.shapes)],
        clockwise=clockwise,
        original_chain_id=chain.original_chain_id
    )


def calculate_arc_sweep(start_angle: float, end_angle: float, clockwise: bool) -> float:
    """Signed sweep from start to end angle; negative for clockwise arcs."""
    if clockwise:
        sweep = (start_angle - end_angle) % (2 * math.pi)
        return -(sweep or 2 * math.pi)
    sweep = (end_angle - start_angle) % (2 * math.pi)
    return sweep or 2 * math.pi


def tessellate_shape(shape: Shape, segments: int = 32) -> List[Point]:
    """Approximate a shape as a list of points in travel order."""
    g = shape.geometry
    if shape.shape_type == 'line':
        return [g['start'], g['end']]
    if shape.shape_type == 'arc':
        sweep = calculate_arc_sweep(g['start_angle'], g['end_angle'], g.get('clockwise', False))
        return [
            _arc_point(g['center'], g['radius'], g['start_angle'] + sweep * i / segments)
            for i in range(segments + 1)
        ]
    if shape.shape_type == 'circle':
        return [
            _arc_point(g['center'], g['radius'], 2 * math.pi * i / segments)
            for i in range(segments + 1)
        ]
    if shape.shape_type == 'polyline':
        return _polyline_points(g)
    if shape.shape_type == 'spline':
        return _spline_points(g)
    if shape.shape_type == 'ellipse':
        start = g.get('start_param')
        end = g.get('end_param')
        if start is None or end is None:
            start, end = 0.0, 2 * math.pi
        elif end <= start:
            end += 2 * math.pi
        return [_ellipse_point(g, start + (end - start) * i / segments) for i in range(segments + 1)]
    raise ValueError(f"Unknown shape type: {shape.shape_type}")


def tessellate_chain(chain: Chain, segments: int = 32) -> List[Point]:
    """Approximate a whole chain as one point list, dropping duplicate joints."""
    points: List[Point] = []
    for shape in chain.shapes:
        for point in tessellate_shape(shape, segments):
            if points and calculate_distance(points[-1], point) < 1e-9:
                continue
            points.append(point)
    return points


def is_chain_closed(chain: Chain, tolerance: float = CHAIN_CLOSURE_TOLERANCE) -> bool:
    """Check if a chain ends where it starts."""
    if not chain.shapes:
        return False
    return calculate_distance(get_chain_start_point(chain), get_chain_end_point(chain)) < tolerance


def calculate_signed_area(points: List[Point]) -> float:
    """
    Signed area of a polygon using the shoelace formula.

    Positive = counter-clockwise, Negative = clockwise.
    """
    if len(points) < 3:
        return 0.0

    area = 0.0
    n = len(points)
    for i in range(n):
        j = (i + 1) % n
        area += points[i].x * points[j].y
        area -= points[j].x * points[i].y
    return area / 2.0


def point_in_polygon(point: Point, polygon: List[Point]) -> bool:
    """Even-odd ray casting test."""
    inside = False
    n = len(polygon)
    if n < 3:
        return False
    j = n - 1
    for i in range(n):
        pi, pj = polygon[i], polygon[j]
        if (pi.y > point.y) != (pj.y > point.y):
            x_cross = (pj.x - pi.x) * (point.y - pi.y) / (pj.y - pi.y) + pi.x
            if point.x < x_cross:
                inside = not inside
        j = i
    return inside


def offset_chain(cut: Cut, chain: Chain) -> Optional[Chain]:
    """
    Build the transient chain formed by a cut's kerf offset shapes.

    Returns:
        The offset chain, or None when the cut has no offset geometry
    """
    if not cut.has_offset:
        return None
    return Chain(
        id=chain.id + '_offset_temp',
        shapes=cut.offset.offset_shapes,
        clockwise=chain.clockwise,
        original_chain_id=chain.original_chain_id or chain.id
    )
