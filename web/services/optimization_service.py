"""Cut order optimization service."""
import logging
from typing import Dict, List, Optional

from cutorder.job_parser import ParseError, parse_job_data
from cutorder.models import OptimizationResult, Point
from cutorder.optimizer import attach_rapids, run_optimization
from cutorder.utils.validators import (
    validate_cut_references,
    validate_duplicate_cut_ids,
    validate_lead_configs,
    validate_part_ownership
)
from web.services.job_service import JobService
from web.services.preview_service import PreviewService
from web.services.settings_service import SettingsService

logger = logging.getLogger(__name__)


def _point_dict(point: Point) -> Dict:
    return {'x': point.x, 'y': point.y}


class OptimizationService:
    """Service for running the optimizer on job data and saved jobs."""

    @staticmethod
    def result_to_dict(result: OptimizationResult) -> Dict:
        """
        Serialize an optimization result for JSON.

        Each entry in 'cuts' carries the rapid that leads into it, so the
        list can be consumed without pairing it with 'rapids'.
        """
        cuts = []
        for order, cut in enumerate(attach_rapids(result), 1):
            cuts.append({
                'order': order,
                'id': cut.id,
                'chain_id': cut.chain_id,
                'name': cut.name,
                'rapid_in': {
                    'id': cut.rapid_in.id,
                    'start': _point_dict(cut.rapid_in.start),
                    'end': _point_dict(cut.rapid_in.end),
                    'type': cut.rapid_in.kind
                }
            })

        return {
            'ordered_cut_ids': [cut.id for cut in result.ordered_cuts],
            'cuts': cuts,
            'rapids': [
                {
                    'id': rapid.id,
                    'start': _point_dict(rapid.start),
                    'end': _point_dict(rapid.end),
                    'type': rapid.kind,
                    'length': rapid.length
                }
                for rapid in result.rapids
            ],
            'total_distance': result.total_distance,
            'dropped_cut_ids': list(result.dropped_cut_ids),
            'warnings': list(result.warnings)
        }

    @staticmethod
    def validate(data: Dict) -> List[str]:
        """
        Validate job data without optimizing it.

        Returns list of error and warning messages (empty if valid).
        """
        try:
            job = parse_job_data(data)
        except ParseError as e:
            return [line[2:] for line in str(e).splitlines() if line.startswith('- ')] or [str(e)]

        errors = []
        errors.extend(validate_cut_references(job.cuts, job.chains))
        errors.extend(validate_duplicate_cut_ids(job.cuts))
        errors.extend(validate_lead_configs(job.cuts))
        errors.extend(validate_part_ownership(job.parts))
        return errors

    @staticmethod
    def optimize(data: Dict, overrides: Optional[Dict] = None) -> Dict:
        """
        Parse job data and optimize its cut order.

        Args:
            data: Job in the JSON wire format
            overrides: Per-request settings taking precedence over stored ones

        Returns:
            Serialized result

        Raises:
            ParseError: If the job data is malformed
        """
        job = parse_job_data(data)
        settings = SettingsService.to_optimization_settings(overrides)
        result = run_optimization(job, settings)

        logger.info(
            "Optimized %d cuts (%d dropped), rapid distance %.3f",
            len(result.ordered_cuts), len(result.dropped_cut_ids), result.total_distance
        )
        return OptimizationService.result_to_dict(result)

    @staticmethod
    def optimize_job(job_id: str, overrides: Optional[Dict] = None) -> Optional[Dict]:
        """
        Optimize a saved job and store the result on it.

        Returns:
            Serialized result, or None if the job does not exist

        Raises:
            ParseError: If the saved job data is malformed
        """
        job = JobService.get(job_id)
        if not job:
            return None

        result = OptimizationService.optimize(job.data or {}, overrides)
        JobService.store_result(job_id, result)
        return result

    @staticmethod
    def preview(data: Dict, overrides: Optional[Dict] = None) -> str:
        """
        Optimize job data and render the result as SVG.

        Raises:
            ParseError: If the job data is malformed
        """
        job = parse_job_data(data)
        settings = SettingsService.to_optimization_settings(overrides)
        result = run_optimization(job, settings)
        return PreviewService.generate_svg(job, result, settings.origin)
