"""Chain-to-part lookup and cut grouping by part."""
from dataclasses import dataclass, field
from typing import Dict, List, Mapping

from .models import Chain, Cut, Part


@dataclass
class CutPartition:
    """Cut indices split by part membership.

    Attributes:
        unassociated: Indices of cuts whose chain belongs to no part
        by_part: Part id -> indices of that part's cuts, in first-seen order
    """
    unassociated: List[int] = field(default_factory=list)
    by_part: Dict[str, List[int]] = field(default_factory=dict)


def _part_chain_ids(part: Part) -> List[str]:
    return [part.shell.id] + [hole.chain.id for hole in part.voids]


def build_chain_to_part_index(parts: List[Part]) -> Dict[str, Part]:
    """
    Map every shell and hole chain id to its part.

    When two parts claim the same chain, the first part in `parts` keeps it.

    Args:
        parts: Detected parts

    Returns:
        Dict of chain id -> Part
    """
    index: Dict[str, Part] = {}
    for part in parts:
        for chain_id in _part_chain_ids(part):
            index.setdefault(chain_id, part)
    return index


def find_shared_chains(parts: List[Part]) -> List[str]:
    """Chain ids claimed by more than one part, in first-seen order."""
    owners: Dict[str, str] = {}
    shared: List[str] = []
    for part in parts:
        for chain_id in _part_chain_ids(part):
            owner = owners.setdefault(chain_id, part.id)
            if owner != part.id and chain_id not in shared:
                shared.append(chain_id)
    return shared


def partition_cuts(
    cuts: List[Cut],
    chains: Mapping[str, Chain],
    index: Mapping[str, Part]
) -> CutPartition:
    """
    Split cuts into those outside any part and those grouped per part.

    Cuts referencing a missing chain are left out of both groups.

    Args:
        cuts: Cut arena
        chains: Chain lookup by id
        index: Chain id -> Part, from build_chain_to_part_index

    Returns:
        CutPartition of arena indices
    """
    partition = CutPartition()

    for i, cut in enumerate(cuts):
        if cut.chain_id not in chains:
            continue

        part = index.get(cut.chain_id)
        if part is None:
            partition.unassociated.append(i)
        else:
            partition.by_part.setdefault(part.id, []).append(i)

    return partition
