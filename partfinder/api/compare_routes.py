"""
Compare API Routes - Side-by-side comparison of two part numbers
"""
from flask import Blueprint, jsonify

from partfinder.api import get_json_body, get_services
from partfinder.services.finder_service import require_part_number

compare_bp = Blueprint('compare', __name__)


@compare_bp.route('/compare', methods=['POST'])
def compare_parts():
    """
    Compare two parts
    POST /api/compare

    Request:
        {
            "partA": "LM317T",
            "partB": "LM1117T"
        }

    Response:
        {
            "html": "<table class=\"comparison-table\">...",
            "raw": "...",
            "partA": {"mpn": "...", "manufacturer": "...", "specs": [...], "datasheetUrl": "..."} | null,
            "partB": {...} | null,
            "similarities": [{"attribute": "...", "value": "..."}],
            "differences": [{"attribute": "...", "partA": "...", "partB": "..."}],
            "sources": {"partA": "parts-database", "partB": "web-search"},
            "context": {...}
        }
    """
    data = get_json_body()
    finder, _ = get_services()
    return jsonify(finder.compare(data.get('partA'), data.get('partB')))


@compare_bp.route('/compare/jobs', methods=['POST'])
def queue_compare():
    """
    Accept a comparison request and run it in the background
    POST /api/compare/jobs
    """
    data = get_json_body()
    finder, jobs = get_services()

    message = "Both partA and partB are required"
    part_a = require_part_number(data.get('partA'), message)
    part_b = require_part_number(data.get('partB'), message)
    finder.get_generator()

    job = jobs.submit('comparison', lambda: finder.compare(part_a, part_b))
    return jsonify({
        "jobId": job.id,
        "status": job.status.value,
        "statusUrl": f"/api/jobs/{job.id}",
    }), 202
