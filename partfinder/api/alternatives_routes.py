"""
Alternatives API Routes - Suggest alternative components for one part number
"""
from flask import Blueprint, jsonify

from partfinder.api import get_json_body, get_services
from partfinder.services.finder_service import require_part_number

alternatives_bp = Blueprint('alternatives', __name__)


@alternatives_bp.route('/alternatives', methods=['POST'])
def find_alternatives():
    """
    Find alternatives for a part
    POST /api/alternatives

    Request:
        {
            "partNumber": "LM317"
        }

    Response:
        {
            "alternatives": "<h1>...</h1>...",
            "raw": "# ...",
            "packageInfoList": [
                {"url": "https://www.digikey.com/...", "packageType": "TO-220-3", "fields": {...}}
            ],
            "searchResults": ["https://www.digikey.com/..."],
            "context": {...}
        }
    """
    data = get_json_body()
    finder, _ = get_services()
    return jsonify(finder.find_alternatives(data.get('partNumber')))


@alternatives_bp.route('/alternatives/jobs', methods=['POST'])
def queue_alternatives():
    """
    Accept an alternatives request and run it in the background
    POST /api/alternatives/jobs

    Request:
        {
            "partNumber": "LM317"
        }

    Response (202):
        {
            "jobId": "4f0c...",
            "status": "PENDING",
            "statusUrl": "/api/jobs/4f0c..."
        }
    """
    data = get_json_body()
    finder, jobs = get_services()

    part_number = require_part_number(data.get('partNumber'), "Part number is required")
    finder.get_generator()

    job = jobs.submit('alternatives', lambda: finder.find_alternatives(part_number))
    return jsonify({
        "jobId": job.id,
        "status": job.status.value,
        "statusUrl": f"/api/jobs/{job.id}",
    }), 202
