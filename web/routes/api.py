"""API routes - optimization endpoints."""
from flask import Blueprint, request

from cutorder.job_parser import ParseError
from web.services.job_service import JobService
from web.services.optimization_service import OptimizationService
from web.utils.responses import (
    error_response,
    job_not_found_response,
    optimization_error_response,
    success_response,
    validation_response,
)

api_bp = Blueprint('api', __name__)


def _request_object(required=True):
    """JSON object body of the request; None when it is missing or not an object."""
    data = request.get_json(silent=True)
    if data is None and not required:
        return {}
    return data if isinstance(data, dict) else None


def _job_payload(data):
    """Split a request body into job data and settings overrides.

    The body is either the job itself or {"job": {...}, "settings": {...}}.
    """
    if 'job' in data:
        return data['job'], data.get('settings')
    return data, data.get('settings')


@api_bp.route('/optimize', methods=['POST'])
def optimize():
    """Optimize the cut order of job data posted in the body."""
    data = _request_object()
    if not data:
        return error_response('No data provided')

    job_data, overrides = _job_payload(data)
    try:
        result = OptimizationService.optimize(job_data, overrides)
    except (ParseError, TypeError, ValueError) as e:
        return optimization_error_response(e)

    return success_response(data=result)


@api_bp.route('/validate', methods=['POST'])
def validate():
    """Validate job data without optimizing it."""
    data = _request_object()
    if not data:
        return error_response('No data provided')

    job_data, _ = _job_payload(data)
    return validation_response(OptimizationService.validate(job_data))


@api_bp.route('/jobs/<job_id>/optimize', methods=['POST'])
def optimize_job(job_id):
    """Optimize a saved job and store the result."""
    data = _request_object(required=False)
    if data is None:
        return error_response('No data provided')

    try:
        result = OptimizationService.optimize_job(job_id, data.get('settings'))
    except (ParseError, TypeError, ValueError) as e:
        return optimization_error_response(e)

    if result is None:
        return job_not_found_response()
    return success_response(data=result)


@api_bp.route('/jobs/<job_id>/preview', methods=['POST'])
def preview_job(job_id):
    """Generate SVG preview. Can preview unsaved changes by passing job data in body."""
    job = JobService.get(job_id)
    if not job:
        return job_not_found_response()

    data = _request_object(required=False)
    if data is None:
        return error_response('No data provided')
    job_data = data.get('job', job.data or {})

    try:
        svg = OptimizationService.preview(job_data, data.get('settings'))
    except (ParseError, TypeError, ValueError) as e:
        return optimization_error_response(e)

    return success_response(data={'svg': svg})
