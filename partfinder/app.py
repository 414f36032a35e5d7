"""
Main Flask Application
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from partfinder.api.alternatives_routes import alternatives_bp
from partfinder.api.compare_routes import compare_bp
from partfinder.api.jobs_routes import jobs_bp
from partfinder.errors import PartFinderError
from partfinder.logging_config import configure_logging
from partfinder.services.context_service import ContextAggregator
from partfinder.services.datasheet_service import DatasheetExtractor
from partfinder.services.distributor_service import DistributorExtractor
from partfinder.services.finder_service import PartFinderService
from partfinder.services.job_service import JobManager
from partfinder.services.parts_db_service import PartsDatabaseService
from partfinder.services.search_service import SearchService
from partfinder.settings import Settings

logger = logging.getLogger(__name__)


def build_finder(settings: Settings) -> PartFinderService:
    """Wire the real adapters into a PartFinderService."""
    aggregator = ContextAggregator(
        settings,
        search=SearchService(settings),
        distributor=DistributorExtractor(settings),
        datasheet=DatasheetExtractor(settings),
        parts_db=PartsDatabaseService(settings) if settings.parts_db_configured else None,
    )
    return PartFinderService(settings, aggregator)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(PartFinderError)
    def handle_part_finder_error(error: PartFinderError):
        if error.status_code >= 500:
            logger.error("%s: %s", type(error).__name__, error.message)
        return jsonify({"error": error.message}), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        return jsonify({"error": error.description or error.name}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        logger.exception("Unhandled error")
        return jsonify({"error": "Server error"}), 500


def create_app(
    settings: Optional[Settings] = None,
    finder: Optional[PartFinderService] = None,
    jobs: Optional[JobManager] = None,
) -> Flask:
    """
    Create the Flask app.

    Args:
        settings: Defaults to Settings.from_env()
        finder: Pre-wired finder service (tests pass one with stub adapters)
        jobs: Background job manager

    Returns:
        Flask application
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    app = Flask(__name__)
    app.json.sort_keys = False
    CORS(app, methods=["GET", "POST", "OPTIONS"], allow_headers=["Content-Type"])

    app.extensions["partfinder"] = {
        "settings": settings,
        "finder": finder or build_finder(settings),
        "jobs": jobs or JobManager(),
    }

    app.register_blueprint(alternatives_bp, url_prefix='/api')
    app.register_blueprint(compare_bp, url_prefix='/api')
    app.register_blueprint(jobs_bp, url_prefix='/api')

    @app.route("/health")
    def health():
        return jsonify({"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()})

    register_error_handlers(app)

    logger.info(
        "Part finder ready (generation=%s, search=%s, parts database=%s)",
        "configured" if settings.generation_configured else "missing",
        "configured" if settings.search_configured else "missing",
        "configured" if settings.parts_db_configured else "missing",
    )
    return app
