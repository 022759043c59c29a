"""Job routes - CRUD operations."""
from flask import Blueprint, request

from web.services.job_service import JobService
from web.utils.responses import error_response, job_not_found_response, success_response

jobs_bp = Blueprint('jobs', __name__)


@jobs_bp.route('/', methods=['GET'])
def index():
    """List all jobs, most recently modified first."""
    jobs = JobService.get_all()
    return success_response(data=[JobService.to_dict(job, include_data=False) for job in jobs])


@jobs_bp.route('/', methods=['POST'])
def create():
    """Create a new job."""
    data = request.get_json(silent=True) or {}
    job = JobService.create(data)
    return success_response(data=JobService.to_dict(job))


@jobs_bp.route('/<job_id>', methods=['GET'])
def get(job_id):
    """Get a job with its data and last result."""
    job = JobService.get_as_dict(job_id)
    if not job:
        return job_not_found_response()
    return success_response(data=job)


@jobs_bp.route('/<job_id>', methods=['POST', 'PUT'])
def update(job_id):
    """Save job name and/or data."""
    data = request.get_json(silent=True)
    if not data:
        return error_response('No data provided')

    job = JobService.save(job_id, data)
    if not job:
        return job_not_found_response()
    return success_response(data={'modified_at': job.modified_at.isoformat()})


@jobs_bp.route('/<job_id>', methods=['DELETE'])
def delete(job_id):
    """Delete a job."""
    if not JobService.delete(job_id):
        return job_not_found_response()
    return success_response(message='Job deleted')


@jobs_bp.route('/<job_id>/duplicate', methods=['POST'])
def duplicate(job_id):
    """Duplicate a job."""
    data = request.get_json(silent=True) or {}
    new_job = JobService.duplicate(job_id, data.get('name'))
    if not new_job:
        return job_not_found_response()
    return success_response(data=JobService.to_dict(new_job))
