"""Job consistency checks.

Each validator returns a list of human-readable warnings (empty if the
input is consistent). None of these block optimization; the optimizer
reports them alongside its result.
"""
from typing import Dict, List, Mapping

from ..models import LEAD_TYPES, Chain, Cut, Part


def validate_cut_references(
    cuts: List[Cut],
    chains: Mapping[str, Chain]
) -> List[str]:
    """
    Check that every cut references an existing chain.

    Args:
        cuts: Cuts to check
        chains: Chain lookup by id

    Returns:
        One warning per cut with a missing chain
    """
    warnings = []
    for cut in cuts:
        if cut.chain_id not in chains:
            warnings.append(f"Cut {cut.id} references missing chain {cut.chain_id}")
    return warnings


def validate_part_ownership(parts: List[Part]) -> List[str]:
    """
    Check that no chain is claimed by more than one part.

    The first part listed keeps a shared chain during optimization.
    """
    owners: Dict[str, str] = {}
    warnings = []

    for part in parts:
        chain_ids = [part.shell.id] + [hole.chain.id for hole in part.voids]
        for chain_id in chain_ids:
            owner = owners.setdefault(chain_id, part.id)
            if owner != part.id:
                warnings.append(
                    f"Chain {chain_id} belongs to parts {owner} and {part.id}; using {owner}"
                )

    return warnings


def validate_lead_configs(cuts: List[Cut]) -> List[str]:
    """
    Check lead configurations for unknown types and negative lengths.

    Returns:
        List of warning messages (empty if all valid)
    """
    warnings = []
    for cut in cuts:
        for label, config in (('lead-in', cut.lead_in_config), ('lead-out', cut.lead_out_config)):
            if config is None:
                continue
            if config.lead_type not in LEAD_TYPES:
                warnings.append(f"Cut {cut.id} has unknown {label} type '{config.lead_type}'")
            if config.length < 0:
                warnings.append(f"Cut {cut.id} has negative {label} length ({config.length})")
    return warnings


def validate_duplicate_cut_ids(cuts: List[Cut]) -> List[str]:
    """Report cut ids used by more than one cut."""
    seen = set()
    reported = set()
    warnings = []
    for cut in cuts:
        if cut.id in seen and cut.id not in reported:
            warnings.append(f"Duplicate cut id {cut.id}")
            reported.add(cut.id)
        seen.add(cut.id)
    return warnings
