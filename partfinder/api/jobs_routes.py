"""
Jobs API Routes - Poll background alternatives/comparison jobs
"""
from flask import Blueprint, jsonify

from partfinder.api import get_services

jobs_bp = Blueprint('jobs', __name__)


@jobs_bp.route('/jobs/<job_id>', methods=['GET'])
def get_job(job_id):
    """
    Get job status and, once finished, its result or error
    GET /api/jobs/<job_id>

    Response:
        {
            "id": "4f0c...",
            "kind": "alternatives",
            "status": "PENDING" | "RUNNING" | "COMPLETED" | "FAILED",
            "result": {...} | null,
            "error": "..." | null,
            "createdAt": "...",
            "updatedAt": "..."
        }
    """
    _, jobs = get_services()
    return jsonify(jobs.get(job_id).to_dict())
