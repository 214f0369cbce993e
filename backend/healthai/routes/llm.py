"""
Raw LLM completion route – forwards a free-form prompt to Gemini and
returns the generated text. Used by the frontend chat assistant.
"""

from flask import Blueprint, request, jsonify

from healthai.container import get_services
from healthai.services.prescription_service import require_api_key

llm_bp = Blueprint("llm", __name__)


@llm_bp.route("/completion", methods=["POST"])
def completion():
    """Body: { "prompt": "..." } → { "response": "..." }"""
    data = request.get_json(silent=True) or {}
    prompt = (data.get("prompt") or "").strip() if isinstance(data, dict) else ""

    if not prompt:
        return jsonify({"error": "Prompt cannot be empty."}), 400

    services = get_services()
    api_key = require_api_key(services.gemini_api_key)
    text = services.gateway.complete_text(prompt, api_key)
    return jsonify({"response": text}), 200
