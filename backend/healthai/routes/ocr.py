"""
OCR route.
Accepts a base64-encoded image (raw or data URI) and returns the text
extracted by the configured OCR backend. Errors are plain text.
"""

import logging

from flask import Blueprint, request, jsonify

from healthai.container import get_services
from healthai.errors import HealthAIError, InputError

ocr_bp = Blueprint("ocr", __name__)

logger = logging.getLogger("healthai.routes.ocr")

_TEXT = {"Content-Type": "text/plain; charset=utf-8"}


@ocr_bp.route("", methods=["POST"])
def perform_ocr():
    """
    Body: { "base64Image": "data:image/png;base64,iVBORw0..." }
    Returns: { "extractedText": "..." }
    """
    data = request.get_json(silent=True) or {}
    base64_image = data.get("base64Image") if isinstance(data, dict) else None

    if not base64_image:
        logger.warning("Received OCR request with empty or missing image data.")
        return "Missing or empty 'base64Image' field in request.", 400, _TEXT

    try:
        text = get_services().ocr.extract_text(base64_image)
    except InputError as exc:
        return exc.public_message, 400, _TEXT
    except HealthAIError as exc:
        logger.error("Error processing OCR request: %s", exc.message)
        return "Failed to process image due to an internal error.", 500, _TEXT

    logger.info("Successfully processed OCR request.")
    return jsonify({"extractedText": text}), 200
