"""Geometry, lead and validation helpers for cut order optimization."""

from .geometry import (
    calculate_distance,
    get_chain_start_point,
    get_chain_end_point,
    get_chain_tangent,
    reverse_chain,
    tessellate_chain,
    is_chain_closed,
    calculate_signed_area,
    point_in_polygon,
    offset_chain
)
from .lead_in import (
    LeadCalculationError,
    LeadPointResult,
    calculate_leads,
    convert_lead_geometry_to_points,
    prepare_chains_and_lead_configs,
    resolve_lead_point
)
from .validators import (
    validate_cut_references,
    validate_part_ownership,
    validate_lead_configs,
    validate_duplicate_cut_ids
)

__all__ = [
    # geometry
    'calculate_distance',
    'get_chain_start_point',
    'get_chain_end_point',
    'get_chain_tangent',
    'reverse_chain',
    'tessellate_chain',
    'is_chain_closed',
    'calculate_signed_area',
    'point_in_polygon',
    'offset_chain',
    # lead_in
    'LeadCalculationError',
    'LeadPointResult',
    'calculate_leads',
    'convert_lead_geometry_to_points',
    'prepare_chains_and_lead_configs',
    'resolve_lead_point',
    # validators
    'validate_cut_references',
    'validate_part_ownership',
    'validate_lead_configs',
    'validate_duplicate_cut_ids',
]
