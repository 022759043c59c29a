"""Cut order optimization for CNC plasma and laser cutting."""

from .models import (
    Point,
    Shape,
    Chain,
    KerfOffset,
    LeadConfig,
    Cut,
    PartHole,
    Part,
    Rapid,
    OptimizationResult
)
from .optimizer import (
    OptimizationSettings,
    optimize_cut_order,
    generate_rapids_from_cut_order,
    run_optimization,
    attach_rapids
)
from .endpoints import (
    CutPoints,
    get_cut_start_point,
    get_cut_end_point,
    build_cut_points_cache
)
from .part_index import (
    CutPartition,
    build_chain_to_part_index,
    partition_cuts,
    find_shared_chains
)
from .sequencer import NearestNeighborSequencer, SequenceOutcome
from .job_parser import Job, ParseError, parse_job_data, parse_job_file

__all__ = [
    # Models
    'Point',
    'Shape',
    'Chain',
    'KerfOffset',
    'LeadConfig',
    'Cut',
    'PartHole',
    'Part',
    'Rapid',
    'OptimizationResult',
    # Optimizer
    'OptimizationSettings',
    'optimize_cut_order',
    'generate_rapids_from_cut_order',
    'run_optimization',
    'attach_rapids',
    # Endpoints
    'CutPoints',
    'get_cut_start_point',
    'get_cut_end_point',
    'build_cut_points_cache',
    # Part index
    'CutPartition',
    'build_chain_to_part_index',
    'partition_cuts',
    'find_shared_chains',
    # Sequencer
    'NearestNeighborSequencer',
    'SequenceOutcome',
    # Job input
    'Job',
    'ParseError',
    'parse_job_data',
    'parse_job_file',
]
