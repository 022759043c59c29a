"""Cut order optimization entry points.

optimize_cut_order picks a sequence that keeps rapid travel short while
never cutting a part's shell before its holes. generate_rapids_from_cut_order
keeps a caller-supplied order (for example a manual reorder) and only
recomputes the rapids and travel distance for it.
"""
import logging
import uuid
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, List, Mapping

from .endpoints import build_cut_points_cache
from .models import Chain, Cut, OptimizationResult, Part, Point, Rapid
from .part_index import build_chain_to_part_index, partition_cuts
from .sequencer import NearestNeighborSequencer
from .utils.geometry import calculate_distance
from .utils.validators import (
    validate_cut_references,
    validate_duplicate_cut_ids,
    validate_lead_configs,
    validate_part_ownership,
)

if TYPE_CHECKING:
    from .job_parser import Job

logger = logging.getLogger(__name__)

ORIGIN = Point(0.0, 0.0)


@dataclass
class OptimizationSettings:
    """Runtime options for one optimization run."""
    origin_x: float = 0.0
    origin_y: float = 0.0
    cut_holes_first: bool = False
    preserve_order: bool = False

    @property
    def origin(self) -> Point:
        return Point(self.origin_x, self.origin_y)


def _collect_warnings(cuts: List[Cut], chains: Mapping[str, Chain], parts: List[Part]) -> List[str]:
    warnings: List[str] = []
    warnings.extend(validate_cut_references(cuts, chains))
    warnings.extend(validate_duplicate_cut_ids(cuts))
    warnings.extend(validate_lead_configs(cuts))
    warnings.extend(validate_part_ownership(parts))
    return warnings


def optimize_cut_order(
    cuts: List[Cut],
    chains: Mapping[str, Chain],
    parts: List[Part],
    origin: Point = ORIGIN,
    cut_holes_first: bool = False
) -> OptimizationResult:
    """
    Order cuts to minimize rapid travel, cutting holes before shells.

    Cuts outside any part are sequenced first by nearest neighbor. Parts
    then follow, either one at a time (holes then shell) or, with
    cut_holes_first, every hole before any shell.

    Args:
        cuts: Cuts to order
        chains: Chain lookup by id
        parts: Detected parts
        origin: Tool start position
        cut_holes_first: Cut all holes across all parts before any shell

    Returns:
        OptimizationResult; cuts that could not be placed are listed in
        dropped_cut_ids and left out of ordered_cuts
    """
    if not cuts:
        return OptimizationResult()

    result = OptimizationResult(warnings=_collect_warnings(cuts, chains, parts))

    if not any(cut.chain_id in chains for cut in cuts):
        result.dropped_cut_ids = [cut.id for cut in cuts]
        return result

    index = build_chain_to_part_index(parts)
    cache = build_cut_points_cache(cuts, chains, index.get)
    partition = partition_cuts(cuts, chains, index)

    sequencer = NearestNeighborSequencer(cuts, chains, parts, cache, partition, origin)
    outcome = sequencer.sequence(cut_holes_first=cut_holes_first)

    placed = set(outcome.ordered)
    result.ordered_cuts = [cuts[i] for i in outcome.ordered]
    result.rapids = outcome.rapids
    result.total_distance = outcome.total_distance
    result.dropped_cut_ids = [cut.id for i, cut in enumerate(cuts) if i not in placed]

    if result.dropped_cut_ids:
        logger.info("Dropped %d of %d cuts from the sequence", len(result.dropped_cut_ids), len(cuts))
    logger.debug(
        "Optimized %d cuts, rapid distance %.3f (holes first: %s)",
        len(result.ordered_cuts), result.total_distance, cut_holes_first
    )
    return result


def generate_rapids_from_cut_order(
    cuts: List[Cut],
    chains: Mapping[str, Chain],
    parts: List[Part],
    origin: Point = ORIGIN
) -> OptimizationResult:
    """
    Compute rapids for cuts in the order given, without reordering.

    Cuts that cannot be positioned (missing or empty chain) are skipped
    and listed in dropped_cut_ids.
    """
    if not cuts:
        return OptimizationResult()

    result = OptimizationResult(warnings=_collect_warnings(cuts, chains, parts))
    index = build_chain_to_part_index(parts)
    cache = build_cut_points_cache(cuts, chains, index.get)

    current = origin
    for i, cut in enumerate(cuts):
        points = cache.get(i)
        if points is None:
            result.dropped_cut_ids.append(cut.id)
            continue

        result.rapids.append(Rapid(id=str(uuid.uuid4()), start=current, end=points.start))
        result.ordered_cuts.append(cut)
        result.total_distance += calculate_distance(current, points.start)
        current = points.end

    return result


def run_optimization(job: 'Job', settings: OptimizationSettings) -> OptimizationResult:
    """
    Run the optimizer on a parsed job with the given settings.

    With preserve_order set, the job's cut order is kept and only rapids
    are computed.
    """
    if settings.preserve_order:
        return generate_rapids_from_cut_order(job.cuts, job.chains, job.parts, settings.origin)
    return optimize_cut_order(
        job.cuts,
        job.chains,
        job.parts,
        settings.origin,
        cut_holes_first=settings.cut_holes_first
    )


def attach_rapids(result: OptimizationResult) -> List[Cut]:
    """
    Copy the ordered cuts with each one's rapid_in set.

    The input cuts are not modified.
    """
    return [
        replace(cut, rapid_in=rapid)
        for cut, rapid in zip(result.ordered_cuts, result.rapids)
    ]
