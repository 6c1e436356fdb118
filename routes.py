import logging

from flask import Blueprint, current_app, jsonify, request

from error_handler import ScrapeError
from security_manager import require_api_key
from video_id_utils import is_valid_video_id

transcript_routes = Blueprint("transcript_routes", __name__)


@transcript_routes.route("/transcript/<video_id>", methods=["GET"])
@require_api_key
def get_transcript(video_id):
    """Return {transcript, views} for one video"""
    if not video_id:
        raise ScrapeError.validation("Video ID is required")

    if not is_valid_video_id(video_id):
        raise ScrapeError.validation("Invalid video ID format")

    method = request.args.get("method") or None
    lang = request.args.get("lang") or None

    service = current_app.extensions["transcript_service"]
    result = service.get_transcript(video_id, method=method, lang=lang)

    logging.info(f"Transcript served for {video_id}: {len(result.transcript)} chars, {result.views} views")
    return jsonify(result.to_dict()), 200
