import time
import uuid
import logging

from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from error_handler import ScrapeError, problem_response, PROBLEM_MIMETYPE
from log_events import http_request
from logging_setup import clear_request_ctx, set_request_ctx
from routes import transcript_routes
from scraper_config import ScraperConfig, get_scraper_config
from transcript_service import TranscriptService


def create_app(config: ScraperConfig = None, service: TranscriptService = None) -> Flask:
    """Build the Flask application around one TranscriptService."""
    app = Flask(__name__)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1)

    config = config or get_scraper_config()
    app.extensions["transcript_service"] = service or TranscriptService(config)

    app.register_blueprint(transcript_routes)

    @app.before_request
    def _start_request():
        g.start_time = time.time()
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        g.request_id = request_id
        clear_request_ctx()
        set_request_ctx(request_id=request_id)

    @app.after_request
    def _log_request(response):
        duration_ms = int((time.time() - g.get("start_time", time.time())) * 1000)
        http_request(request.method, request.path, response.status_code, duration_ms)
        response.headers["X-Request-ID"] = g.get("request_id", "")
        return response

    @app.teardown_request
    def _clear_context(_exc):
        clear_request_ctx()

    @app.errorhandler(ScrapeError)
    def _handle_scrape_error(error):
        return problem_response(error, request.path, request.method)

    @app.errorhandler(HTTPException)
    def _handle_http_exception(error):
        body = {
            "type": "about:blank",
            "title": error.name,
            "status": error.code,
            "detail": error.description,
            "instance": request.path,
        }
        response = jsonify(body)
        response.status_code = error.code
        response.mimetype = PROBLEM_MIMETYPE
        return response

    @app.errorhandler(Exception)
    def _handle_unexpected(error):
        return problem_response(error, request.path, request.method)

    @app.route('/health')
    @app.route('/healthz')
    def health_check():
        """Liveness plus browser session usage"""
        health_info = {'status': 'healthy', 'message': 'Transcript API is running'}
        health_info.update(app.extensions["transcript_service"].health())
        return health_info, 200

    logging.info("Transcript API initialized (method=%s, max_browser_sessions=%s)",
                 config.default_method, config.max_browser_sessions or "unlimited")
    return app


app = create_app()
