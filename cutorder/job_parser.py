"""Parse cut jobs from the JSON wire format.

A job document looks like:

    {
      "chains": [{"id": "c1", "clockwise": true,
                  "shapes": [{"id": "s1", "type": "line",
                              "geometry": {"start": {"x": 0, "y": 0},
                                           "end": {"x": 10, "y": 0}}}]}],
      "cuts": [{"id": "cut1", "chain_id": "c1",
                "lead_in": {"type": "arc", "length": 2.0}}],
      "parts": [{"id": "p1", "shell_chain_id": "c1", "hole_chain_ids": []}]
    }

Every problem found is collected and reported together in one ParseError.
"""
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .models import (
    CUT_DIRECTIONS,
    SHAPE_TYPES,
    Chain,
    Cut,
    KerfOffset,
    LeadConfig,
    Part,
    PartHole,
    Point,
    Shape,
)


class ParseError(Exception):
    """Custom exception for parsing errors."""
    pass


@dataclass
class Job:
    cuts: List[Cut] = field(default_factory=list)
    chains: Dict[str, Chain] = field(default_factory=dict)
    parts: List[Part] = field(default_factory=list)


# Geometry keys holding a single point / a list of points, per shape type
POINT_KEYS = {
    'line': ('start', 'end'),
    'arc': ('center',),
    'circle': ('center',),
    'polyline': (),
    'spline': (),
    'ellipse': ('center', 'major_axis_endpoint'),
}
POINT_LIST_KEYS = {
    'polyline': ('points',),
    'spline': ('control_points', 'fit_points'),
}
REQUIRED_KEYS = {
    'line': ('start', 'end'),
    'arc': ('center', 'radius', 'start_angle', 'end_angle'),
    'circle': ('center', 'radius'),
    'polyline': ('points',),
    'spline': ('control_points',),
    'ellipse': ('center', 'major_axis_endpoint'),
}
# Numeric geometry keys; optional ones may be absent or null
NUMBER_KEYS = {
    'arc': ('radius', 'start_angle', 'end_angle'),
    'circle': ('radius',),
}
OPTIONAL_NUMBER_KEYS = {
    'ellipse': ('minor_to_major_ratio', 'start_param', 'end_param'),
}
FLAG_KEYS = {
    'arc': ('clockwise',),
    'polyline': ('closed',),
}


def _parse_number(value: Any, context: str) -> float:
    if isinstance(value, bool):
        raise ParseError(f"{context}: invalid value {value!r} - must be a number")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ParseError(f"{context}: invalid value {value!r} - must be a number")


def _parse_point(value: Any, context: str) -> Point:
    if not isinstance(value, dict) or 'x' not in value or 'y' not in value:
        raise ParseError(f"{context}: expected a point like {{\"x\": 0, \"y\": 0}}, got {value!r}")
    try:
        return Point(float(value['x']), float(value['y']))
    except (TypeError, ValueError):
        raise ParseError(f"{context}: invalid coordinates {value!r} - must be numbers")


def _parse_shape(data: Any, context: str) -> Shape:
    if not isinstance(data, dict):
        raise ParseError(f"{context}: shape must be an object")

    shape_id = str(data.get('id', ''))
    shape_type = data.get('type')
    if shape_type not in SHAPE_TYPES:
        raise ParseError(
            f"{context}: unknown shape type {shape_type!r}. Expected one of: {', '.join(SHAPE_TYPES)}"
        )

    raw = data.get('geometry')
    if not isinstance(raw, dict):
        raise ParseError(f"{context}: missing geometry")

    missing = [key for key in REQUIRED_KEYS[shape_type] if key not in raw]
    if missing:
        raise ParseError(f"{context}: {shape_type} geometry missing {', '.join(missing)}")

    geometry: Dict[str, Any] = dict(raw)
    for key in POINT_KEYS[shape_type]:
        geometry[key] = _parse_point(raw[key], f"{context} {key}")
    for key in POINT_LIST_KEYS.get(shape_type, ()):
        if key in raw and raw[key] is not None:
            geometry[key] = [_parse_point(p, f"{context} {key}[{i}]") for i, p in enumerate(raw[key])]
    for key in NUMBER_KEYS.get(shape_type, ()):
        geometry[key] = _parse_number(raw[key], f"{context} {key}")
    for key in OPTIONAL_NUMBER_KEYS.get(shape_type, ()):
        if raw.get(key) is None:
            geometry.pop(key, None)
        else:
            geometry[key] = _parse_number(raw[key], f"{context} {key}")
    for key in FLAG_KEYS.get(shape_type, ()):
        if raw.get(key) is not None and not isinstance(raw[key], bool):
            raise ParseError(f"{context}: {key} must be true or false, got {raw[key]!r}")

    return Shape(id=shape_id, shape_type=shape_type, geometry=geometry)


def _parse_shapes(items: Any, context: str) -> List[Shape]:
    if not isinstance(items, list):
        raise ParseError(f"{context}: shapes must be a list")
    return [_parse_shape(item, f"{context} shape {i}") for i, item in enumerate(items)]


def _parse_chain(data: Any, context: str) -> Chain:
    if not isinstance(data, dict) or 'id' not in data:
        raise ParseError(f"{context}: chain must be an object with an id")
    chain_id = str(data['id'])
    return Chain(
        id=chain_id,
        shapes=_parse_shapes(data.get('shapes', []), f"Chain {chain_id}"),
        clockwise=data.get('clockwise'),
        original_chain_id=data.get('original_chain_id')
    )


def _parse_lead(data: Any, context: str) -> Optional[LeadConfig]:
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ParseError(f"{context}: lead config must be an object")
    try:
        length = float(data.get('length', 0.0))
        angle = data.get('angle')
        angle = float(angle) if angle is not None else None
    except (TypeError, ValueError):
        raise ParseError(f"{context}: lead length and angle must be numbers")
    # Lead type and sign are not checked here; validators report them
    return LeadConfig(
        lead_type=str(data.get('type', 'none')),
        length=length,
        flip_side=bool(data.get('flip_side', False)),
        angle=angle
    )


def _parse_offset(data: Any, context: str) -> Optional[KerfOffset]:
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ParseError(f"{context}: offset must be an object")
    kerf_width = _optional_float(data, 'kerf_width', f"{context} offset")
    return KerfOffset(
        offset_shapes=_parse_shapes(data.get('offset_shapes', []), f"{context} offset"),
        original_shapes=_parse_shapes(data.get('original_shapes', []), f"{context} offset original"),
        direction=str(data.get('direction', 'none')),
        kerf_width=kerf_width if kerf_width is not None else 0.0
    )


def _optional_float(data: Dict, key: str, context: str) -> Optional[float]:
    value = data.get(key)
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ParseError(f"{context}: {key} must be a number, got {value!r}")


def _parse_cut(data: Any, context: str) -> Cut:
    if not isinstance(data, dict):
        raise ParseError(f"{context}: cut must be an object")
    if 'id' not in data or 'chain_id' not in data:
        raise ParseError(f"{context}: cut requires id and chain_id")

    cut_id = str(data['id'])
    label = f"Cut {cut_id}"

    cut_direction = data.get('cut_direction', 'none')
    if cut_direction not in CUT_DIRECTIONS:
        raise ParseError(
            f"{label}: invalid cut_direction {cut_direction!r}. Expected one of: {', '.join(CUT_DIRECTIONS)}"
        )

    cut_chain = data.get('cut_chain')
    normal = data.get('normal')

    return Cut(
        id=cut_id,
        chain_id=str(data['chain_id']),
        name=str(data.get('name', '')),
        cut_direction=cut_direction,
        lead_in_config=_parse_lead(data.get('lead_in'), f"{label} lead_in"),
        lead_out_config=_parse_lead(data.get('lead_out'), f"{label} lead_out"),
        offset=_parse_offset(data.get('offset'), label),
        cut_chain=_parse_chain(cut_chain, f"{label} cut_chain") if cut_chain is not None else None,
        normal=_parse_point(normal, f"{label} normal") if normal is not None else None,
        feed_rate=_optional_float(data, 'feed_rate', label),
        pierce_height=_optional_float(data, 'pierce_height', label),
        pierce_delay=_optional_float(data, 'pierce_delay', label),
        enabled=bool(data.get('enabled', True))
    )


def _parse_part(data: Any, chains: Dict[str, Chain], context: str) -> Part:
    if not isinstance(data, dict) or 'id' not in data or 'shell_chain_id' not in data:
        raise ParseError(f"{context}: part requires id and shell_chain_id")

    part_id = str(data['id'])
    shell_id = str(data['shell_chain_id'])
    if shell_id not in chains:
        raise ParseError(f"Part {part_id}: shell references unknown chain {shell_id}")

    voids = []
    for hole_id in data.get('hole_chain_ids', []):
        hole_id = str(hole_id)
        if hole_id not in chains:
            raise ParseError(f"Part {part_id}: hole references unknown chain {hole_id}")
        voids.append(PartHole(id=f"{part_id}-{hole_id}", chain=chains[hole_id]))

    return Part(id=part_id, shell=chains[shell_id], voids=voids)


def parse_job_data(data: Any) -> Job:
    """
    Build a Job from a decoded JSON document.

    Cuts may reference chains that do not exist; the optimizer drops them.
    Parts must reference existing chains.

    Args:
        data: Decoded job document

    Returns:
        Parsed Job

    Raises:
        ParseError: Listing every problem found
    """
    if not isinstance(data, dict):
        raise ParseError("Job data must be a JSON object")

    errors = []
    job = Job()

    for i, item in enumerate(data.get('chains', [])):
        try:
            chain = _parse_chain(item, f"Chain {i}")
        except ParseError as e:
            errors.append(str(e))
            continue
        if chain.id in job.chains:
            errors.append(f"Duplicate chain id {chain.id}")
            continue
        job.chains[chain.id] = chain

    for i, item in enumerate(data.get('cuts', [])):
        try:
            job.cuts.append(_parse_cut(item, f"Cut {i}"))
        except ParseError as e:
            errors.append(str(e))

    for i, item in enumerate(data.get('parts', [])):
        try:
            job.parts.append(_parse_part(item, job.chains, f"Part {i}"))
        except ParseError as e:
            errors.append(str(e))

    if errors:
        error_msg = "Errors found in job data:\n" + "\n".join(f"- {error}" for error in errors)
        raise ParseError(error_msg)

    return job


def parse_job_file(file_path: str) -> Job:
    """Parse a job from a JSON file on disk."""
    try:
        with open(file_path, 'r') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ParseError(f"Job file not found: {file_path}")
    except json.JSONDecodeError as e:
        raise ParseError(f"Job file {file_path} is not valid JSON: {e}")
    except OSError as e:
        raise ParseError(f"Error reading file {file_path}: {str(e)}")

    return parse_job_data(data)
