"""Effective start/end points of cuts and the per-run endpoint cache.

A cut's effective start is where the tool pierces: the start of its
lead-in if it has one, else the start of its kerf offset path, else the
start of its chain. The effective end mirrors this with the lead-out.

Lead geometry is comparatively expensive (tangents, arc construction), and
nearest-neighbor sequencing compares every remaining cut at every step.
build_cut_points_cache resolves each endpoint exactly once per run so the
search loop only does dictionary lookups.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional

from .models import Chain, Cut, Part, Point
from .utils.geometry import get_chain_end_point, get_chain_start_point, offset_chain
from .utils.lead_in import resolve_lead_point

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CutPoints:
    """Cached effective endpoints of one cut."""
    start: Point
    end: Point


def _resolve_endpoint(cut: Cut, chain: Chain, part: Optional[Part], at_start: bool) -> Point:
    chain_to_use = cut.cut_chain or chain
    config = cut.lead_in_config if at_start else cut.lead_out_config

    if config is not None and config.is_active:
        result = resolve_lead_point(cut, chain, part, at_start)
        if result.ok:
            return result.point
        if result.error:
            logger.warning(
                "Failed to calculate %s for cut %s: %s",
                'lead-in' if at_start else 'lead-out',
                cut.name or cut.id,
                result.error
            )

    get_point = get_chain_start_point if at_start else get_chain_end_point

    if cut.has_offset:
        return get_point(offset_chain(cut, chain_to_use))

    return get_point(chain_to_use)


def get_cut_start_point(cut: Cut, chain: Chain, part: Optional[Part] = None) -> Point:
    """
    Get the effective start point of a cut.

    Args:
        cut: Cut to resolve
        chain: The cut's source chain
        part: Containing part, if any (used for lead placement)

    Returns:
        Lead-in start, offset chain start, or chain start, in that preference
    """
    return _resolve_endpoint(cut, chain, part, at_start=True)


def get_cut_end_point(cut: Cut, chain: Chain, part: Optional[Part] = None) -> Point:
    """
    Get the effective end point of a cut.

    Returns:
        Lead-out end, offset chain end, or chain end, in that preference
    """
    return _resolve_endpoint(cut, chain, part, at_start=False)


def build_cut_points_cache(
    cuts: List[Cut],
    chains: Mapping[str, Chain],
    find_part: Callable[[str], Optional[Part]]
) -> Dict[int, CutPoints]:
    """
    Pre-calculate effective start and end points for every cut.

    Cuts whose chain is missing or has no usable geometry are skipped,
    so they never become sequencing candidates.

    Args:
        cuts: Cut arena; cache keys are indices into this list
        chains: Chain lookup by id
        find_part: Chain id -> containing part lookup

    Returns:
        Dict of cut index -> CutPoints
    """
    cache: Dict[int, CutPoints] = {}

    for index, cut in enumerate(cuts):
        chain = chains.get(cut.chain_id)
        if chain is None:
            continue

        part = find_part(cut.chain_id)
        try:
            cache[index] = CutPoints(
                start=get_cut_start_point(cut, chain, part),
                end=get_cut_end_point(cut, chain, part)
            )
        except (ValueError, TypeError, KeyError) as e:
            # Empty or malformed chain: the cut cannot be positioned
            logger.warning("Skipping cut %s: %s", cut.name or cut.id, e)

    logger.debug("Cached endpoints for %d of %d cuts", len(cache), len(cuts))
    return cache
