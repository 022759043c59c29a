"""Job management service."""
import copy
from datetime import datetime, UTC
from typing import Dict, List, Optional
import uuid

from web.extensions import db
from web.models import Job


# Empty job structure
EMPTY_JOB_DATA = {
    'chains': [],
    'cuts': [],
    'parts': []
}


class JobService:
    """Service for managing saved cut jobs."""

    @staticmethod
    def get_all() -> List[Job]:
        """Get all jobs, ordered by modified_at descending."""
        return Job.query.order_by(Job.modified_at.desc()).all()

    @staticmethod
    def get(job_id: str) -> Optional[Job]:
        """Get a single job by UUID."""
        return Job.query.get(job_id)

    @staticmethod
    def to_dict(job: Job, include_data: bool = True) -> Dict:
        """Serialize a job for JSON."""
        result = {
            'id': job.id,
            'name': job.name,
            'created_at': job.created_at.isoformat() if job.created_at else None,
            'modified_at': job.modified_at.isoformat() if job.modified_at else None,
            'has_result': job.last_result is not None
        }
        if include_data:
            result['data'] = job.data or copy.deepcopy(EMPTY_JOB_DATA)
            result['last_result'] = job.last_result
        return result

    @staticmethod
    def get_as_dict(job_id: str) -> Optional[Dict]:
        """Get a job as dict for JSON serialization."""
        job = JobService.get(job_id)
        if not job:
            return None
        return JobService.to_dict(job)

    @staticmethod
    def create(data: Dict) -> Job:
        """Create a new job, empty unless job data is supplied."""
        job = Job(
            id=str(uuid.uuid4()),
            name=data.get('name') or 'Untitled Job',
            data=data.get('data') or copy.deepcopy(EMPTY_JOB_DATA)
        )
        db.session.add(job)
        db.session.commit()
        return job

    @staticmethod
    def save(job_id: str, data: Dict) -> Optional[Job]:
        """Update a job's name and/or data. Changing data clears the last result."""
        job = Job.query.get(job_id)
        if not job:
            return None

        if 'name' in data:
            job.name = data['name']
        if 'data' in data:
            job.data = data['data']
            job.last_result = None

        job.modified_at = datetime.now(UTC)
        db.session.commit()
        return job

    @staticmethod
    def store_result(job_id: str, result: Dict) -> Optional[Job]:
        """Store the serialized result of an optimization run."""
        job = Job.query.get(job_id)
        if not job:
            return None

        job.last_result = result
        db.session.commit()
        return job

    @staticmethod
    def delete(job_id: str) -> bool:
        """Delete a job."""
        job = Job.query.get(job_id)
        if not job:
            return False

        db.session.delete(job)
        db.session.commit()
        return True

    @staticmethod
    def duplicate(job_id: str, new_name: Optional[str] = None) -> Optional[Job]:
        """Deep copy a job with a new UUID. The last result is not copied."""
        source = Job.query.get(job_id)
        if not source:
            return None

        name = new_name if new_name else f"{source.name} (Copy)"
        data_copy = copy.deepcopy(source.data) if source.data else copy.deepcopy(EMPTY_JOB_DATA)

        job = Job(
            id=str(uuid.uuid4()),
            name=name,
            data=data_copy
        )
        db.session.add(job)
        db.session.commit()
        return job
